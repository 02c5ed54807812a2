"""
Importance sampling envelope for resonance kinematics.

The envelope is a 2-D density over (QD2, W), flat in QD2 (the dipole
falloff is taken out by the Q2 -> QD2 transform) and resonance shaped
in W:

    Wmax > mR : steep low-W edge | plateau [mR - G/2, mR + 2G] | slow high-W edge
    Wmax <= mR: steep low-W edge | plateau [Wmax - 0.1, Wmax]

Edges are Lorentzian, 1 / (1 + a * ((W - W_edge) / G)^2), with a = 5 on
the low side and a = 1 on the high side. Each piece has an arctan CDF, so
points are drawn exactly by inverse transform.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .kinematics import KinematicRange

# Resonance parameters when the resonance is not known
DEFAULT_RESONANCE_MASS = 1.2
DEFAULT_RESONANCE_WIDTH = 0.6
# Nominal width used with a known resonance mass
KNOWN_RESONANCE_WIDTH = 0.220
# Headroom over the max xsec. The steep low-W edge falls faster than the
# resonance tail when the peak sits above the W range (mR > Wcut).
ENVELOPE_SCALE = 5.0

LOW_EDGE_STEEPNESS = 5.0
HIGH_EDGE_STEEPNESS = 1.0
PLATEAU_BELOW_WMAX = 0.1


@dataclass(frozen=True)
class _Segment:
    lo: float
    hi: float
    center: Optional[float] = None  # None for the plateau
    steepness: float = 0.0

    def profile(self, w: float, width: float) -> float:
        if self.center is None:
            return 1.0
        return 1.0 / (1.0 + self.steepness * ((w - self.center) / width) ** 2)

    def area(self, width: float) -> float:
        if self.center is None:
            return self.hi - self.lo
        k = math.sqrt(self.steepness) / width
        return (math.atan(k * (self.hi - self.center)) - math.atan(k * (self.lo - self.center))) / k

    def inverse_cdf(self, u: float, width: float) -> float:
        if self.center is None:
            return self.lo + u * (self.hi - self.lo)
        k = math.sqrt(self.steepness) / width
        a_lo = math.atan(k * (self.lo - self.center))
        a_hi = math.atan(k * (self.hi - self.center))
        w = self.center + math.tan(a_lo + u * (a_hi - a_lo)) / k
        return min(max(w, self.lo), self.hi)


@dataclass(frozen=True)
class EnvelopeState:
    resonance_mass: float
    resonance_width: float
    max_xsec: float
    w_max: float
    qd2_range: KinematicRange
    w_range: KinematicRange


class ImportanceEnvelope:
    """
    Envelope used as the proposal density of the rejection method.

    Built once per selection call with `init`, then sampled and evaluated
    for every trial of that call.
    """

    def __init__(self):
        self.state: Optional[EnvelopeState] = None
        self._segments: List[_Segment] = []
        self._cumulative: Optional[np.ndarray] = None

    @property
    def initialized(self) -> bool:
        return self.state is not None

    def init(self,
             w_range: KinematicRange,
             qd2_range: KinematicRange,
             resonance_mass: float,
             resonance_width: float,
             max_xsec: float) -> None:
        if w_range.min >= w_range.max or qd2_range.min >= qd2_range.max:
            raise ValueError(f"Degenerate envelope domain: W {w_range}, QD2 {qd2_range}")
        if resonance_width <= 0:
            raise ValueError(f"Resonance width must be positive, got {resonance_width}")

        self.state = EnvelopeState(
            resonance_mass=resonance_mass,
            resonance_width=resonance_width,
            max_xsec=max_xsec,
            w_max=w_range.max,
            qd2_range=qd2_range,
            w_range=w_range,
        )
        self._segments = self._build_segments()
        areas = np.array([s.area(resonance_width) for s in self._segments])
        self._cumulative = np.cumsum(areas) / areas.sum()

    def _build_segments(self) -> List[_Segment]:
        st = self.state
        w_lo, w_hi = st.w_range.min, st.w_range.max
        m, g = st.resonance_mass, st.resonance_width

        if st.w_max > m:
            low_edge = m - g / 2.0
            high_edge = m + 2.0 * g
            pieces = [
                _Segment(w_lo, min(low_edge, w_hi), low_edge, LOW_EDGE_STEEPNESS),
                _Segment(max(low_edge, w_lo), min(high_edge, w_hi)),
                _Segment(max(high_edge, w_lo), w_hi, high_edge, HIGH_EDGE_STEEPNESS),
            ]
        else:
            plateau_edge = st.w_max - PLATEAU_BELOW_WMAX
            pieces = [
                _Segment(w_lo, min(plateau_edge, w_hi), plateau_edge, LOW_EDGE_STEEPNESS),
                _Segment(max(plateau_edge, w_lo), w_hi),
            ]
        return [p for p in pieces if p.hi > p.lo]

    def _require_init(self):
        if self.state is None:
            raise RuntimeError("ImportanceEnvelope used before init()")

    def w_profile(self, w: float) -> float:
        """Envelope shape in W, 1 on the plateau."""
        self._require_init()
        for seg in self._segments:
            if seg.lo <= w <= seg.hi:
                return seg.profile(w, self.state.resonance_width)
        return 0.0

    def evaluate(self, qd2: float, w: float) -> float:
        self._require_init()
        if not self.state.qd2_range.contains(qd2):
            return 0.0
        return ENVELOPE_SCALE * self.state.max_xsec * self.w_profile(w)

    def sample(self, rng: np.random.Generator) -> Tuple[float, float]:
        """Draw (QD2, W) from the envelope density."""
        self._require_init()
        st = self.state
        idx = int(np.searchsorted(self._cumulative, rng.random(), side="right"))
        seg = self._segments[min(idx, len(self._segments) - 1)]
        w = seg.inverse_cdf(rng.random(), st.resonance_width)
        qd2 = st.qd2_range.min + (st.qd2_range.max - st.qd2_range.min) * rng.random()
        return qd2, w

