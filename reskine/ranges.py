import logging
from typing import Optional

import numpy as np

from .config import KinematicsConfig
from .interaction import Frame, Interaction, KineVar
from .kinematics import KinematicRange, q2_limits_at_w, w_limits

logger = logging.getLogger(__name__)


class RangeComputer:
    """
    Kinematically allowed W and Q2 ranges, narrowed by user cuts.

    User cuts are intersected with the physical range and can never extend
    it into an unphysical region. W is additionally clamped to Wcut.
    The returned range may be empty; callers check `is_empty`.
    """

    def __init__(self, config: Optional[KinematicsConfig] = None):
        self.config = config or KinematicsConfig()

    @staticmethod
    def _inputs(interaction: Interaction):
        Ev = interaction.initial_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
        M = interaction.initial_state.target.hit_nucleon_mass
        ml = interaction.final_lepton_mass
        return Ev, M, ml

    def physical_range(self, interaction: Interaction, var: KineVar,
                       w: Optional[float] = None) -> KinematicRange:
        Ev, M, ml = self._inputs(interaction)
        if var == KineVar.W:
            return w_limits(Ev, M, ml)
        if var == KineVar.Q2:
            W = interaction.kinematics.W if w is None else w
            if W is None:
                raise ValueError("Q2 range requires W (set it on the interaction or pass w)")
            return q2_limits_at_w(Ev, M, ml, W)
        raise ValueError(f"No range computation for {var.value}")

    def w_range(self, interaction: Interaction) -> KinematicRange:
        W = self.physical_range(interaction, KineVar.W)
        logger.debug(f"Physical W range: {W}")

        W = W.intersect(self.config.w_min, self.config.w_max)
        W = KinematicRange(W.min, min(self.config.wcut, W.max))

        logger.debug(f"W range (including cuts): {W}")
        return W

    def q2_range(self, interaction: Interaction, w: Optional[float] = None) -> KinematicRange:
        Q2 = self.physical_range(interaction, KineVar.Q2, w)
        logger.debug(f"Physical Q2 range: {Q2}")

        Q2 = Q2.intersect(self.config.q2_min, self.config.q2_max)

        logger.debug(f"Q2 range (including cuts): {Q2}")
        return Q2

    def compute_range(self, interaction: Interaction, var: KineVar) -> KinematicRange:
        if var == KineVar.W:
            return self.w_range(interaction)
        if var == KineVar.Q2:
            return self.q2_range(interaction)
        raise ValueError(f"No range computation for {var.value}")

    def phase_space_volume(self, interaction: Interaction, n_w: int = 100) -> float:
        """Area of the (W, Q2) region sampled in uniform mode."""
        W = self.w_range(interaction)
        if W.is_empty:
            return 0.0
        grid, dW = np.linspace(W.min, W.max, n_w, retstep=True)
        widths = [self.q2_range(interaction, w).width for w in grid]
        return float(np.sum(widths) * dW)
