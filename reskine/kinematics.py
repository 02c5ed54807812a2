"""
Kinematics helpers for reskine.

Units: GeV (natural units c = 1).
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple
import numpy as np

from .constants import A_SMALL_NUM, MIN_Q2_LIMIT, MV2, NEUTRON_MASS, PION_MASS

# -----------------------------
# FourVector
# -----------------------------
@dataclass
class FourVector:
    E: float
    px: float
    py: float
    pz: float

    @property
    def p(self) -> np.ndarray:
        return np.array([self.px, self.py, self.pz], dtype=float)

    @property
    def magnitude(self) -> float:
        return float(np.linalg.norm(self.p))

    @property
    def mass(self) -> float:
        m2 = self.E * self.E - self.magnitude * self.magnitude
        return math.sqrt(max(m2, 0.0))

    def beta(self) -> np.ndarray:
        if self.E == 0.0:
            return np.zeros(3, dtype=float)
        return self.p / self.E

    def boost(self, beta: np.ndarray) -> "FourVector":
        p4 = np.array([self.E, self.px, self.py, self.pz], dtype=float)
        boosted = lorentz_boost_array(p4, np.asarray(beta, dtype=float))
        return FourVector(float(boosted[0]), float(boosted[1]), float(boosted[2]), float(boosted[3]))

    def __repr__(self) -> str:
        return f"FourVector(E={self.E:.6f}, px={self.px:.6f}, py={self.py:.6f}, pz={self.pz:.6f})"


# -----------------------------
# Lorentz boost
# -----------------------------
def lorentz_boost_array(p4: np.ndarray, beta: np.ndarray) -> np.ndarray:
    beta = np.asarray(beta, dtype=float)
    p4 = np.asarray(p4, dtype=float)
    beta2 = float(np.dot(beta, beta))
    if beta2 >= 1.0:
        raise ValueError("beta^2 < 1 required.")
    if beta2 <= 1e-18:
        return p4.copy()
    gamma = 1.0 / math.sqrt(1.0 - beta2)
    bp = float(np.dot(beta, p4[1:]))
    Eprime = gamma * (p4[0] + bp)
    factor = ((gamma - 1.0) * bp / beta2) + gamma * p4[0]
    pprime = p4[1:] + factor * beta
    return np.array([Eprime, pprime[0], pprime[1], pprime[2]], dtype=float)


# -----------------------------
# Ranges and phase spaces
# -----------------------------
@dataclass(frozen=True)
class KinematicRange:
    """Closed interval over one kinematic variable."""

    min: float
    max: float

    @property
    def is_empty(self) -> bool:
        return self.max <= 0.0 or self.min >= self.max

    @property
    def width(self) -> float:
        return 0.0 if self.is_empty else self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def intersect(self, lower: float, upper: float) -> "KinematicRange":
        """Narrow the range by cuts; never extends it."""
        return KinematicRange(max(self.min, lower), min(self.max, upper))

    def __repr__(self) -> str:
        return f"[{self.min:.6g}, {self.max:.6g}]"


class KinePhaseSpace(Enum):
    """Parametrizations in which a differential cross section can be evaluated."""

    W_Q2 = "d2xsec/dWdQ2"
    W_QD2 = "d2xsec/dWdQD2"


# -----------------------------
# Physical limits
# -----------------------------
def w_limits(Ev: float, M: float, ml: float) -> KinematicRange:
    """Inelastic W limits for probe energy Ev (struck nucleon at rest)."""
    s = M * M + 2.0 * M * Ev
    w_min = NEUTRON_MASS + PION_MASS
    w_max = math.sqrt(max(s, 0.0)) - ml
    return KinematicRange(w_min, w_max)


def q2_limits_at_w(Ev: float, M: float, ml: float, W: float) -> KinematicRange:
    """
    Q2 limits at fixed W.

    The lepton energy and momentum are taken in the CM frame; the limits
    correspond to forward and backward lepton emission.
    """
    M2 = M * M
    ml2 = ml * ml
    W2 = W * W
    s = M2 + 2.0 * M * Ev

    aux_c = 0.5 * (s - M2) / s
    aux1 = s + ml2 - W2
    aux2 = aux1 * aux1 - 4.0 * s * ml2
    aux2 = math.sqrt(aux2) if aux2 > 0.0 else 0.0

    q2_max = max(0.0, -ml2 + aux_c * (aux1 + aux2))
    q2_min = max(0.0, -ml2 + aux_c * (aux1 - aux2))

    if q2_min < MIN_Q2_LIMIT:
        q2_min = MIN_Q2_LIMIT
        if q2_max < q2_min:
            return KinematicRange(-1.0, -1.0)
    return KinematicRange(q2_min, q2_max)


# -----------------------------
# Variable transforms
# -----------------------------
def q2_to_qd2(Q2: float) -> float:
    """Q2 -> QD2, taking out the dipole falloff."""
    if Q2 <= 0.0:
        raise ValueError(f"Q2 must be positive, got {Q2}")
    return 1.0 / (1.0 + Q2 / MV2)


def qd2_to_q2(QD2: float) -> float:
    if QD2 <= 0.0:
        raise ValueError(f"QD2 must be positive, got {QD2}")
    return MV2 * (1.0 / QD2 - 1.0)


def jacobian(interaction, from_ps: KinePhaseSpace, to_ps: KinePhaseSpace) -> float:
    """
    Jacobian for transforming a differential cross section between
    phase-space parametrizations, evaluated at the interaction's current Q2.
    """
    if from_ps == to_ps:
        return 1.0

    Q2 = interaction.kinematics.Q2
    dq2_dqd2 = MV2 * (1.0 + Q2 / MV2) ** 2

    if (from_ps, to_ps) == (KinePhaseSpace.W_Q2, KinePhaseSpace.W_QD2):
        return dq2_dqd2
    if (from_ps, to_ps) == (KinePhaseSpace.W_QD2, KinePhaseSpace.W_Q2):
        return 1.0 / dq2_dqd2
    raise ValueError(f"No Jacobian for {from_ps.name} -> {to_ps.name}")


def wq2_to_xy(Ev: float, M: float, W: float, Q2: float) -> Tuple[float, float]:
    """Bjorken x and inelasticity y from (W, Q2). M may be off-shell."""
    nu = (W * W - M * M + Q2) / (2.0 * M)
    if nu <= 0.0:
        raise ValueError(f"Non-positive energy transfer for W={W}, Q2={Q2}")
    x = Q2 / (2.0 * M * nu)
    y = nu / Ev
    return x, y


def guarded(r: KinematicRange) -> Tuple[float, float]:
    """Shrink a range by the small-number guard on both sides."""
    return r.min + A_SMALL_NUM, r.max - A_SMALL_NUM
