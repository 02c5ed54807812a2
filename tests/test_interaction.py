"""
Interaction description and tagged kinematics.

Tests:
    1. Proposed / Final state transitions
    2. Probe energy per frame
    3. Final lepton identity
    4. Resonance lookup by name
"""
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import math

import pytest

from reskine.constants import ELECTRON_MASS, MUON_MASS, PROTON_MASS
from reskine.interaction import (
    Channel,
    Final,
    Frame,
    Interaction,
    InitialState,
    KinematicsLockedError,
    KineVar,
    Proposed,
)
from reskine.kinematics import FourVector
from reskine.resonances import Resonance, resonance_from_name


def test_running_values_are_proposed():
    interaction = Interaction.resonance(14, 2.0)
    interaction.kinematics.set(KineVar.W, 1.3)
    interaction.kinematics.set(KineVar.W, 1.4)
    assert interaction.kinematics.state(KineVar.W) == Proposed(1.4)
    assert interaction.kinematics.W == 1.4


def test_locked_values_cannot_change():
    kine = Interaction.resonance(14, 2.0).kinematics
    kine.set(KineVar.Q2, 0.3)
    kine.lock(KineVar.Q2, 0.4)
    assert kine.state(KineVar.Q2) == Final(0.4)
    with pytest.raises(KinematicsLockedError):
        kine.set(KineVar.Q2, 0.5)
    with pytest.raises(KinematicsLockedError):
        kine.lock(KineVar.Q2, 0.5)
    assert kine.Q2 == 0.4


def test_clear_running_values_keeps_locked():
    kine = Interaction.resonance(14, 2.0).kinematics
    kine.set(KineVar.W, 1.3)
    kine.lock(KineVar.Q2, 0.4)
    kine.clear_running_values()
    assert kine.W is None
    assert kine.Q2 == 0.4
    assert kine.is_locked(KineVar.Q2)


def test_invalidate_marks_interaction():
    interaction = Interaction.resonance(14, 2.0)
    interaction.kinematics.set(KineVar.W, 1.3)
    interaction.invalidate()
    assert not interaction.is_valid
    assert interaction.kinematics.W is None


def test_probe_energy_frames():
    interaction = Interaction.resonance(14, 2.0)
    init = interaction.initial_state
    assert init.probe_energy(Frame.LAB) == 2.0
    assert math.isclose(init.probe_energy(Frame.STRUCK_NUCLEON_AT_REST), 2.0)


@pytest.mark.parametrize("pz,higher", [(-0.2, True), (0.2, False)])
def test_probe_energy_with_moving_nucleon(pz, higher):
    nucleon = FourVector(math.sqrt(PROTON_MASS**2 + pz**2), 0.0, 0.0, pz)
    interaction = Interaction.resonance(14, 2.0, struck_nucleon_p4=nucleon)
    E = interaction.initial_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
    assert (E > 2.0) == higher


@pytest.mark.parametrize(
    "probe,current,lepton,mass",
    [
        (14, "CC", 13, MUON_MASS),
        (-12, "CC", -11, ELECTRON_MASS),
        (14, "NC", 14, 0.0),
        (11, "EM", 11, ELECTRON_MASS),
    ],
)
def test_final_lepton(probe, current, lepton, mass):
    interaction = Interaction.resonance(probe, 2.0, current=current)
    assert interaction.final_lepton_pdg == lepton
    assert interaction.final_lepton_mass == mass


def test_invalid_inputs():
    with pytest.raises(ValueError):
        Interaction.resonance(14, -1.0)
    with pytest.raises(ValueError):
        Interaction(InitialState(14, FourVector(1, 0, 0, 1)), Channel(current="XX"))


def test_fingerprint_key_ignores_energy_and_kinematics():
    a = Interaction.resonance(14, 2.0, Resonance.P33_1232)
    b = Interaction.resonance(14, 3.0, Resonance.P33_1232)
    b.kinematics.set(KineVar.W, 1.2)
    assert a.fingerprint_key() == b.fingerprint_key()
    assert a.fingerprint_key() != Interaction.resonance(14, 2.0).fingerprint_key()


def test_resonance_lookup():
    assert resonance_from_name("P33_1232") is Resonance.P33_1232
    assert resonance_from_name("p33(1232)") is Resonance.P33_1232
    assert resonance_from_name("unknown") is None
    assert resonance_from_name(None) is None
    with pytest.raises(ValueError):
        resonance_from_name("X99_9999")
    assert Resonance.S11_1535.mass == 1.535
