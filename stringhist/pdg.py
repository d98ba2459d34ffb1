"""PDG helpers backed by scikit-hep ``particle``.

``particle`` quotes masses in MeV; everything in stringhist is in GeV.
"""

from __future__ import annotations

from typing import Optional

from particle import Particle as _Particle
from particle import InvalidParticle, ParticleNotFound


def name(pdg_id: int) -> str:
    try:
        return _Particle.from_pdgid(pdg_id).name
    except (InvalidParticle, ParticleNotFound):
        return str(pdg_id)


def mass_gev(pdg_id: int) -> Optional[float]:
    """Rest mass in GeV, or None if the species or its mass is unknown."""
    try:
        p = _Particle.from_pdgid(pdg_id)
    except (InvalidParticle, ParticleNotFound):
        return None
    if p.mass is None:
        return None
    return float(p.mass) / 1000.0
