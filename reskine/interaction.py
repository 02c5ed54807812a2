"""
Interaction description for kinematics selection.

An Interaction carries an immutable physics description (probe, target,
channel) plus scratch kinematics. Each kinematic variable is either
Proposed (a running trial value) or Final (locked after selection);
mutating a Final value raises KinematicsLockedError.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

from .constants import LEPTON_MASSES, NUCLEON_MASSES, PROTON_MASS
from .kinematics import FourVector
from .resonances import Resonance


class KineVar(Enum):
    W = "W"
    Q2 = "Q2"
    X = "x"
    Y = "y"


class Frame(Enum):
    LAB = "lab"
    STRUCK_NUCLEON_AT_REST = "struck nucleon at rest"


class KinematicsLockedError(RuntimeError):
    """Raised when a locked kinematic variable is modified."""


@dataclass(frozen=True)
class Proposed:
    value: float


@dataclass(frozen=True)
class Final:
    value: float


KineValue = Union[Proposed, Final]


class Kinematics:
    """Running and locked kinematic values of one interaction."""

    def __init__(self):
        self._values: Dict[KineVar, KineValue] = {}

    def set(self, var: KineVar, value: float) -> None:
        """Set a running (proposed) value."""
        if isinstance(self._values.get(var), Final):
            raise KinematicsLockedError(f"{var.value} is locked at {self._values[var].value}")
        self._values[var] = Proposed(float(value))

    def lock(self, var: KineVar, value: float) -> None:
        if isinstance(self._values.get(var), Final):
            raise KinematicsLockedError(f"{var.value} is already locked")
        self._values[var] = Final(float(value))

    def state(self, var: KineVar) -> Optional[KineValue]:
        return self._values.get(var)

    def get(self, var: KineVar, default: Optional[float] = None) -> Optional[float]:
        entry = self._values.get(var)
        return default if entry is None else entry.value

    def is_locked(self, var: KineVar) -> bool:
        return isinstance(self._values.get(var), Final)

    def clear_running_values(self) -> None:
        self._values = {k: v for k, v in self._values.items() if isinstance(v, Final)}

    @property
    def W(self) -> Optional[float]:
        return self.get(KineVar.W)

    @property
    def Q2(self) -> Optional[float]:
        return self.get(KineVar.Q2)

    @property
    def x(self) -> Optional[float]:
        return self.get(KineVar.X)

    @property
    def y(self) -> Optional[float]:
        return self.get(KineVar.Y)

    def __repr__(self) -> str:
        items = ", ".join(
            f"{k.value}={v.value:.5g}{'*' if isinstance(v, Final) else ''}"
            for k, v in self._values.items()
        )
        return f"Kinematics({items})"


@dataclass(frozen=True)
class Target:
    nucleus_pdg: int = 1000010010
    hit_nucleon_pdg: int = 2212
    struck_nucleon_p4: Optional[FourVector] = None

    @property
    def hit_nucleon_mass(self) -> float:
        """On-shell mass of the hit nucleon."""
        return NUCLEON_MASSES.get(abs(self.hit_nucleon_pdg), PROTON_MASS)

    @property
    def nucleon_p4(self) -> FourVector:
        """Struck nucleon four-momentum (on-shell, at rest, unless given)."""
        if self.struck_nucleon_p4 is not None:
            return self.struck_nucleon_p4
        return FourVector(self.hit_nucleon_mass, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class InitialState:
    probe_pdg: int
    probe_p4: FourVector
    target: Target = field(default_factory=Target)

    def probe_energy(self, frame: Frame = Frame.STRUCK_NUCLEON_AT_REST) -> float:
        if frame == Frame.LAB:
            return self.probe_p4.E
        beta = self.target.nucleon_p4.beta()
        return self.probe_p4.boost(-beta).E


@dataclass(frozen=True)
class Channel:
    """Process identity: weak current and (optionally) the produced resonance."""

    current: str = "CC"
    resonance: Optional[Resonance] = None

    @property
    def known_resonance(self) -> bool:
        return self.resonance is not None


class Interaction:
    """
    Physics description of one scattering plus its scratch kinematics.

    Owned by the event-generation pipeline; kinematics generators borrow it
    for one selection call.
    """

    def __init__(self, initial_state: InitialState, channel: Optional[Channel] = None):
        if channel is not None and channel.current not in ("CC", "NC", "EM"):
            raise ValueError(f"Unknown current '{channel.current}'")
        self.initial_state = initial_state
        self.channel = channel or Channel()
        self.kinematics = Kinematics()
        self.skip_process_check = False
        self.skip_kinematic_check = False
        self.is_valid = True

    @classmethod
    def resonance(cls,
                  probe_pdg: int,
                  energy: float,
                  resonance: Optional[Resonance] = None,
                  current: str = "CC",
                  hit_nucleon_pdg: int = 2212,
                  nucleus_pdg: int = 1000010010,
                  struck_nucleon_p4: Optional[FourVector] = None) -> "Interaction":
        """Resonance production by a probe moving along +z in the lab."""
        if energy <= 0:
            raise ValueError(f"Probe energy must be positive, got {energy}")
        init = InitialState(
            probe_pdg=probe_pdg,
            probe_p4=FourVector(energy, 0.0, 0.0, energy),
            target=Target(nucleus_pdg, hit_nucleon_pdg, struck_nucleon_p4),
        )
        return cls(init, Channel(current, resonance))

    @property
    def final_lepton_pdg(self) -> int:
        pdg = self.initial_state.probe_pdg
        if self.channel.current == "CC" and abs(pdg) in (12, 14, 16):
            return pdg - 1 if pdg > 0 else pdg + 1
        return pdg

    @property
    def final_lepton_mass(self) -> float:
        return LEPTON_MASSES.get(abs(self.final_lepton_pdg), 0.0)

    def fingerprint_key(self) -> tuple:
        """Identity of the process, without energy or kinematics."""
        res = self.channel.resonance.name if self.channel.resonance else "unknown"
        tgt = self.initial_state.target
        return (self.initial_state.probe_pdg, tgt.nucleus_pdg, tgt.hit_nucleon_pdg,
                self.channel.current, res)

    def invalidate(self) -> None:
        self.kinematics.clear_running_values()
        self.is_valid = False

    def as_string(self) -> str:
        probe, nucleus, nucleon, current, res = self.fingerprint_key()
        return (f"nu:{probe};tgt:{nucleus};N:{nucleon};proc:{current};res:{res};"
                f"E={self.initial_state.probe_energy(Frame.LAB):.4g}")

    def __repr__(self) -> str:
        return f"Interaction({self.as_string()}, {self.kinematics})"
