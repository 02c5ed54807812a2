"""
MaxXSecCache: coarse Q2 scan, safety factors, reuse and persistence.
"""
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import math

import pytest

from reskine.cache_db import MaxXSecCacheDB
from reskine.config import KinematicsConfig
from reskine.constants import A_SMALL_NUM, LOW_ENERGY_SAFETY_FACTOR
from reskine.interaction import Interaction
from reskine.kinematics import KinePhaseSpace
from reskine.max_xsec_cache import N_Q2, N_Q2_BACKSTEP, MaxXSecCache
from reskine.ranges import RangeComputer
from reskine.resonances import Resonance
from reskine.xsec import CrossSectionModel, ToyResonanceModel


class CountingModel(CrossSectionModel):
    name = "counting"

    def __init__(self, fn):
        self.fn = fn
        self.calls = 0

    def xsec(self, interaction, phase_space=KinePhaseSpace.W_Q2):
        self.calls += 1
        return self.fn(interaction)


def _toy_counter():
    toy = ToyResonanceModel()
    return CountingModel(lambda i: toy.xsec(i))


def test_reuse_above_threshold():
    model = _toy_counter()
    cache = MaxXSecCache(model)
    first = cache.get_max(Interaction.resonance(14, 2.0, Resonance.P33_1232))
    calls = model.calls
    assert first > 0 and calls > 0

    second = cache.get_max(Interaction.resonance(14, 2.0, Resonance.P33_1232))
    assert second == first
    assert model.calls == calls
    print("✓ Cached max reused without calling the model")


def test_same_bucket_shares_entry():
    model = _toy_counter()
    cache = MaxXSecCache(model)
    cache.get_max(Interaction.resonance(14, 2.0, Resonance.P33_1232))
    calls = model.calls
    cache.get_max(Interaction.resonance(14, 2.01, Resonance.P33_1232))
    assert model.calls == calls
    cache.get_max(Interaction.resonance(14, 3.0, Resonance.P33_1232))
    assert model.calls > calls
    assert len(cache) == 2


def test_different_channel_is_separate_entry():
    model = _toy_counter()
    cache = MaxXSecCache(model)
    cache.get_max(Interaction.resonance(14, 2.0, Resonance.P33_1232))
    assert Interaction.resonance(14, 2.0, Resonance.S11_1535) not in cache
    assert Interaction.resonance(14, 2.0, Resonance.P33_1232) in cache


def test_below_min_energy_always_recomputed():
    model = _toy_counter()
    cache = MaxXSecCache(model, config=KinematicsConfig(min_energy_cached=1.0))
    cache.get_max(Interaction.resonance(14, 0.9, Resonance.P33_1232))
    calls = model.calls
    cache.get_max(Interaction.resonance(14, 0.9, Resonance.P33_1232))
    assert model.calls == 2 * calls


def test_safety_factors():
    model = CountingModel(lambda i: 3.0)
    cache = MaxXSecCache(model, config=KinematicsConfig(max_xsec_safety_factor=1.25))
    assert cache.recompute(Interaction.resonance(14, 2.0)) == pytest.approx(3.0 * 1.25)
    assert cache.recompute(Interaction.resonance(14, 0.75)) == pytest.approx(3.0 * LOW_ENERGY_SAFETY_FACTOR)


def test_scan_stops_after_backstep_when_falling():
    # Falling from the first point: 2 coarse points, then the backward refinement
    model = CountingModel(lambda i: 1.0 / i.kinematics.Q2)
    MaxXSecCache(model).recompute(Interaction.resonance(14, 2.0))
    assert model.calls == 2 + N_Q2_BACKSTEP


def test_scan_covers_grid_when_rising():
    model = CountingModel(lambda i: i.kinematics.Q2)
    MaxXSecCache(model).recompute(Interaction.resonance(14, 2.0))
    assert model.calls == N_Q2


def test_backstep_recovers_narrow_peak():
    # Peak a third of a log step above the 5th coarse point: the grid sees it
    # rise up to point 5, fall at point 6, and the refinement lands on it
    interaction = Interaction.resonance(14, 2.0, Resonance.P33_1232)
    rQ2 = RangeComputer().q2_range(interaction, Resonance.P33_1232.mass)
    log_min = math.log(rQ2.min + A_SMALL_NUM)
    dlog = (math.log(rQ2.max - A_SMALL_NUM) - log_min) / (N_Q2 - 1)
    log_peak = log_min + 4 * dlog + dlog / N_Q2_BACKSTEP

    def bump(i):
        return 1.0 / (1.0 + ((math.log(i.kinematics.Q2) - log_peak) / 0.05) ** 2)

    coarse_best = 1.0 / (1.0 + (dlog / N_Q2_BACKSTEP / 0.05) ** 2)
    refined = MaxXSecCache(CountingModel(bump)).scan_max_xsec(interaction) / 1.25
    assert refined > coarse_best
    assert refined == pytest.approx(1.0, rel=1e-6)


def test_no_q2_phase_space_returns_zero_without_scanning():
    model = _toy_counter()
    cache = MaxXSecCache(model, config=KinematicsConfig(q2_max=1e-5))
    assert cache.recompute(Interaction.resonance(14, 2.0)) == 0.0
    assert model.calls == 0
    assert len(cache) == 0


def test_put_seeds_entry():
    model = _toy_counter()
    cache = MaxXSecCache(model)
    interaction = Interaction.resonance(14, 2.0)
    cache.put(interaction, 42.0)
    assert cache.get_max(interaction) == 42.0
    assert model.calls == 0


def test_persistence_round_trip(tmp_path):
    db_path = tmp_path / "cache.db"
    model = _toy_counter()
    first = MaxXSecCache(model, db=MaxXSecCacheDB(db_path))
    value = first.get_max(Interaction.resonance(14, 2.0, Resonance.P33_1232))
    calls = model.calls

    second = MaxXSecCache(model, db=MaxXSecCacheDB(db_path))
    assert second.get_max(Interaction.resonance(14, 2.0, Resonance.P33_1232)) == value
    assert model.calls == calls

    db = MaxXSecCacheDB(db_path)
    assert len(db.list_entries()) == 1
    db.clear_entries()
    assert db.load_entries() == {}


def test_below_min_energy_not_stored(tmp_path):
    db = MaxXSecCacheDB(tmp_path / "cache.db")
    cache = MaxXSecCache(_toy_counter(), config=KinematicsConfig(min_energy_cached=1.0), db=db)
    low = Interaction.resonance(14, 0.9, Resonance.P33_1232)

    assert cache.get_max(low) > 0
    assert low not in cache
    assert db.load_entries() == {}

    cache.get_max(Interaction.resonance(14, 2.0, Resonance.P33_1232))
    assert len(db.load_entries()) == 1
