"""
Toy resonance cross section: Breit-Wigner in W times a squared dipole form
factor in Q2.

    d2xsec/dWdQ2 = norm * BW(W; m, G) * (1 + Q2/Mv2)^-4

Not a physics model; it gives the sampler a peaked, dipole-falling surface
with known shape for drivers and validation.
"""
from ..interaction import Frame
from ..constants import MV2
from ..kinematics import KinePhaseSpace, jacobian, q2_limits_at_w, w_limits
from ..resonances import Resonance
from .base import CrossSectionModel


class ToyResonanceModel(CrossSectionModel):

    name = "Toy Breit-Wigner x dipole"
    description = "Non-relativistic Breit-Wigner in W with a dipole^2 falloff in Q2"

    def __init__(self, norm: float = 1.0, default_resonance: Resonance = Resonance.P33_1232):
        self.norm = norm
        self.default_resonance = default_resonance

    def breit_wigner(self, W: float, resonance: Resonance) -> float:
        """Peak-normalised Breit-Wigner (1 at the resonance mass)."""
        half = 0.5 * resonance.width
        return half * half / ((W - resonance.mass) ** 2 + half * half)

    def xsec(self, interaction, phase_space=KinePhaseSpace.W_Q2) -> float:
        kine = interaction.kinematics
        W, Q2 = kine.W, kine.Q2

        if not interaction.skip_kinematic_check:
            Ev = interaction.initial_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
            M = interaction.initial_state.target.hit_nucleon_mass
            ml = interaction.final_lepton_mass
            if not w_limits(Ev, M, ml).contains(W):
                return 0.0
            if not q2_limits_at_w(Ev, M, ml, W).contains(Q2):
                return 0.0

        resonance = interaction.channel.resonance or self.default_resonance
        dipole = (1.0 + Q2 / MV2) ** -2
        value = self.norm * self.breit_wigner(W, resonance) * dipole * dipole
        return value * jacobian(interaction, KinePhaseSpace.W_Q2, phase_space)
