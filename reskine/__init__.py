"""
reskine: Monte Carlo kinematics selection for resonance production.

Usage:
    import numpy as np
    from reskine import (
        EventRecord, Interaction, KinematicsConfig, Resonance,
        ResonanceKinematicsGenerator,
    )
    from reskine.xsec import ToyResonanceModel

    gen = ResonanceKinematicsGenerator(ToyResonanceModel(), KinematicsConfig(),
                                       rng=np.random.default_rng(42))
    event = EventRecord(Interaction.resonance(14, 2.0, Resonance.P33_1232))
    result = gen.process(event)
    if result.ok:
        print(result.kinematics.W, result.kinematics.Q2)
"""
from .config import KinematicsConfig
from .envelope import ImportanceEnvelope
from .event_record import EventFlags, EventRecord
from .interaction import Interaction, KineVar, KinematicsLockedError
from .kinematics import FourVector, KinematicRange, KinePhaseSpace
from .kinematics_generator import ResonanceKinematicsGenerator
from .max_xsec_cache import MaxXSecCache
from .ranges import RangeComputer
from .resonances import Resonance
from .selection import (
    Accepted,
    EnvelopeViolation,
    KinematicsExhausted,
    KinematicsSelectionError,
    NoPhaseSpace,
    SelectedKinematics,
)

__version__ = "0.1.0"
__all__ = [
    "KinematicsConfig",
    "ImportanceEnvelope",
    "EventFlags",
    "EventRecord",
    "Interaction",
    "KineVar",
    "KinematicsLockedError",
    "FourVector",
    "KinematicRange",
    "KinePhaseSpace",
    "ResonanceKinematicsGenerator",
    "MaxXSecCache",
    "RangeComputer",
    "Resonance",
    "Accepted",
    "EnvelopeViolation",
    "KinematicsExhausted",
    "KinematicsSelectionError",
    "NoPhaseSpace",
    "SelectedKinematics",
]
