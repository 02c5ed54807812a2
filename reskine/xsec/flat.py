from ..interaction import Frame
from ..kinematics import KinePhaseSpace, jacobian, q2_limits_at_w, w_limits
from .base import CrossSectionModel


class FlatXSecModel(CrossSectionModel):
    """
    Uniform over the allowed (W, Q2) phase space (no dynamics).

    Its Jacobian-corrected density grows with Q2, so it is meant for
    uniform-over-phase-space generation, not for importance sampling.
    """

    name = "Flat Phase Space"
    description = "Returns a constant d2xsec/dWdQ2 inside the allowed region"

    def __init__(self, value: float = 1.0):
        self.value = value

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
        return self.value * jacobian(interaction, KinePhaseSpace.W_Q2, phase_space)
