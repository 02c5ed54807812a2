"""
Differential cross section models for reskine.

Usage:
    from reskine.xsec import ToyResonanceModel
    from reskine.kinematics import KinePhaseSpace

    model = ToyResonanceModel()
    d2xsec = model.xsec(interaction, KinePhaseSpace.W_Q2)
"""
from .base import CrossSectionModel
from .flat import FlatXSecModel
from .toy_resonance import ToyResonanceModel

__all__ = [
    "CrossSectionModel",
    "FlatXSecModel",
    "ToyResonanceModel",
]
