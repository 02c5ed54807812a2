"""
Outcomes of one kinematics selection call.

Recoverable outcomes are returned as values; the caller owns the retry
policy. An envelope violation is a modeling error and is raised.
"""
from dataclasses import dataclass
from typing import Union


class KinematicsSelectionError(RuntimeError):
    """Raised by `unwrap()` on a recoverable selection failure."""

    def __init__(self, result):
        super().__init__(result.reason)
        self.result = result


class EnvelopeViolation(RuntimeError):
    """The cross section exceeded the importance envelope beyond tolerance."""


@dataclass(frozen=True)
class SelectedKinematics:
    W: float
    Q2: float
    x: float
    y: float
    diff_xsec: float
    weight: float


@dataclass(frozen=True)
class Accepted:
    kinematics: SelectedKinematics
    iterations: int
    ok = True

    def unwrap(self) -> SelectedKinematics:
        return self.kinematics


@dataclass(frozen=True)
class NoPhaseSpace:
    reason: str = "No available phase space"
    ok = False

    def unwrap(self):
        raise KinematicsSelectionError(self)


@dataclass(frozen=True)
class KinematicsExhausted:
    iterations: int
    reason: str = "Couldn't select kinematics"
    ok = False

    def unwrap(self):
        raise KinematicsSelectionError(self)


SelectionResult = Union[Accepted, NoPhaseSpace, KinematicsExhausted]
