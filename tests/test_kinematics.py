"""
Kinematic limits, transforms and four-vector helpers.

Tests:
    1. Boost to the struck nucleon rest frame
    2. W and Q2 limits
    3. Q2 <-> QD2 transform and its Jacobian
    4. (W, Q2) -> (x, y)
"""
import math
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from reskine.constants import MIN_Q2_LIMIT, MUON_MASS, MV2, NEUTRON_MASS, PION_MASS, PROTON_MASS
from reskine.interaction import Interaction, KineVar
from reskine.kinematics import (
    FourVector,
    KinematicRange,
    KinePhaseSpace,
    jacobian,
    q2_limits_at_w,
    q2_to_qd2,
    qd2_to_q2,
    w_limits,
    wq2_to_xy,
)


def _assert_close(a, b, tol=1e-9, msg=""):
    assert abs(a - b) < tol, msg or f"Values differ: {a} vs {b} (tol={tol})"


# ------------------------------ FourVector --------------------------------
def test_boost_to_rest_frame_gives_mass():
    p4 = FourVector(math.sqrt(PROTON_MASS**2 + 0.25**2), 0.1, -0.2, 0.1)
    rest = p4.boost(-p4.beta())
    _assert_close(rest.E, p4.mass, 1e-9)
    _assert_close(rest.magnitude, 0.0, 1e-9)


def test_boost_superluminal_raises():
    with pytest.raises(ValueError):
        FourVector(1.0, 0, 0, 0).boost([0.0, 0.0, 1.0])


# ------------------------------ Limits ------------------------------------
def test_w_limits_formula():
    Ev = 2.0
    W = w_limits(Ev, PROTON_MASS, MUON_MASS)
    _assert_close(W.min, NEUTRON_MASS + PION_MASS)
    _assert_close(W.max, math.sqrt(PROTON_MASS**2 + 2 * PROTON_MASS * Ev) - MUON_MASS)


def test_w_limits_below_threshold_is_empty():
    assert w_limits(0.2, PROTON_MASS, MUON_MASS).is_empty


def test_q2_limits_ordered_and_bounded():
    Q2 = q2_limits_at_w(2.0, PROTON_MASS, MUON_MASS, 1.232)
    assert not Q2.is_empty
    assert Q2.min >= MIN_Q2_LIMIT
    # Q2 can never exceed 2 M Ev - (W^2 - M^2)
    assert Q2.max <= 2 * PROTON_MASS * 2.0 - (1.232**2 - PROTON_MASS**2) + 1e-9


def test_q2_limits_shrink_with_w():
    widths = [q2_limits_at_w(2.0, PROTON_MASS, MUON_MASS, w).width for w in (1.1, 1.3, 1.5, 1.7)]
    assert widths == sorted(widths, reverse=True)


def test_q2_limits_massless_lepton_raise_minimum():
    Q2 = q2_limits_at_w(1.0, PROTON_MASS, 0.0, 1.1)
    _assert_close(Q2.min, MIN_Q2_LIMIT)


def test_q2_limits_closed_at_w_endpoint():
    W = w_limits(2.0, PROTON_MASS, MUON_MASS)
    assert q2_limits_at_w(2.0, PROTON_MASS, MUON_MASS, W.max + 0.01).is_empty


# ------------------------------ Transforms --------------------------------
@pytest.mark.parametrize("Q2", [1e-4, 0.05, 0.3, 1.0, 4.0])
def test_qd2_round_trip(Q2):
    _assert_close(qd2_to_q2(q2_to_qd2(Q2)), Q2, 1e-12)


def test_qd2_is_decreasing_in_unit_interval():
    values = [q2_to_qd2(q) for q in (0.01, 0.1, 1.0, 10.0)]
    assert all(0.0 < v < 1.0 for v in values)
    assert values == sorted(values, reverse=True)


def test_q2_to_qd2_rejects_non_positive():
    with pytest.raises(ValueError):
        q2_to_qd2(0.0)
    with pytest.raises(ValueError):
        qd2_to_q2(-0.1)


def test_jacobian_matches_numerical_derivative():
    interaction = Interaction.resonance(14, 2.0)
    Q2 = 0.6
    interaction.kinematics.set(KineVar.Q2, Q2)
    h = 1e-6
    numeric = 2 * h / abs(q2_to_qd2(Q2 + h) - q2_to_qd2(Q2 - h))
    J = jacobian(interaction, KinePhaseSpace.W_Q2, KinePhaseSpace.W_QD2)
    _assert_close(J, numeric, 1e-5)
    _assert_close(J, MV2 * (1 + Q2 / MV2) ** 2)
    _assert_close(jacobian(interaction, KinePhaseSpace.W_QD2, KinePhaseSpace.W_Q2), 1 / J)
    assert jacobian(interaction, KinePhaseSpace.W_Q2, KinePhaseSpace.W_Q2) == 1.0


def test_wq2_to_xy():
    Ev, M, W, Q2 = 2.0, PROTON_MASS, 1.232, 0.5
    x, y = wq2_to_xy(Ev, M, W, Q2)
    nu = (W * W - M * M + Q2) / (2 * M)
    _assert_close(x, Q2 / (2 * M * nu))
    _assert_close(y, nu / Ev)
    # W^2 = M^2 + 2 M nu - Q2
    _assert_close(M * M + 2 * M * y * Ev - Q2, W * W, 1e-12)


# ------------------------------ Ranges ------------------------------------
def test_kinematic_range_emptiness():
    assert KinematicRange(1.0, 1.0).is_empty
    assert KinematicRange(2.0, 1.0).is_empty
    assert KinematicRange(-1.0, -0.5).is_empty
    assert not KinematicRange(0.1, 0.2).is_empty
    assert KinematicRange(2.0, 1.0).width == 0.0


def test_kinematic_range_intersect_never_extends():
    r = KinematicRange(1.0, 2.0)
    assert r.intersect(0.0, 5.0) == r
    assert r.intersect(1.2, 1.5) == KinematicRange(1.2, 1.5)
