"""
Resonance kinematics generator.

Selects (W, Q2) for a resonance-production interaction with the rejection
method, either

  * importance sampled: (QD2, W) drawn from an envelope built on the
    cached max cross section, accepted with probability J*xsec/envelope,
    giving unweighted events; or
  * uniform over the allowed phase space: any point with xsec > 0 is
    accepted and the event is weighted by volume * xsec / total xsec.
"""
import logging
from typing import Optional

import numpy as np

from .config import KinematicsConfig
from .constants import A_SMALL_NUM
from .envelope import (
    DEFAULT_RESONANCE_MASS,
    DEFAULT_RESONANCE_WIDTH,
    KNOWN_RESONANCE_WIDTH,
    ImportanceEnvelope,
)
from .event_record import EventFlags, EventRecord
from .interaction import Frame, Interaction, KineVar
from .kinematics import KinematicRange, KinePhaseSpace, guarded, jacobian, q2_to_qd2, qd2_to_q2, wq2_to_xy
from .max_xsec_cache import MaxXSecCache
from .ranges import RangeComputer
from .selection import (
    Accepted,
    EnvelopeViolation,
    KinematicsExhausted,
    NoPhaseSpace,
    SelectedKinematics,
    SelectionResult,
)
from .unweighting import UnweightingController
from .xsec.base import CrossSectionModel

logger = logging.getLogger(__name__)


class ResonanceKinematicsGenerator:
    """
    Rejection-method (W, Q2) selection for resonance production.

    Args:
        xsec_model: differential cross section evaluated at each trial
        config: cuts, safety factors and mode selection
        cache: shared max xsec cache (built for xsec_model if omitted)
        rng: random stream owned by this generator
    """

    def __init__(self,
                 xsec_model: CrossSectionModel,
                 config: Optional[KinematicsConfig] = None,
                 cache: Optional[MaxXSecCache] = None,
                 rng: Optional[np.random.Generator] = None):
        self.xsec_model = xsec_model
        self.config = config or KinematicsConfig()
        self.ranges = RangeComputer(self.config)
        self.cache = cache or MaxXSecCache(xsec_model, self.ranges, self.config)
        self.rng = rng or np.random.default_rng()
        self.controller = UnweightingController()

    @property
    def uniform(self) -> bool:
        return self.config.uniform_over_phase_space

    def process(self, event: EventRecord) -> SelectionResult:
        """Select kinematics for the event's interaction."""
        if self.uniform:
            logger.info("Generating kinematics uniformly over the allowed phase space")
            if event.xsec <= 0:
                raise ValueError("Uniform generation needs the event's total cross section (> 0)")

        interaction = event.interaction
        interaction.skip_process_check = True

        # W limits: the physically allowed W's, narrowed by cuts
        W = self.ranges.w_range(interaction)
        if W.is_empty:
            return self._fail(event, NoPhaseSpace(), EventFlags.NO_AVAILABLE_PHASE_SPACE)

        w_min, w_max = guarded(W)
        dW = w_max - w_min

        # Q2 is widest at the lowest W
        Q2_at_wmin = self.ranges.q2_range(interaction, w_min)
        if Q2_at_wmin.is_empty:
            return self._fail(event, NoPhaseSpace(), EventFlags.NO_AVAILABLE_PHASE_SPACE)

        # The max xsec is irrelevant when generating uniformly
        xsec_max = -1.0
        if not self.uniform:
            xsec_max = self.cache.get_max(interaction)
            if xsec_max <= 0:
                return self._fail(
                    event,
                    NoPhaseSpace("kinematics generation: max_xsec <= 0"),
                    EventFlags.KINE_GEN_ERR,
                )

        envelope = ImportanceEnvelope()
        iteration = 0
        while True:
            iteration += 1
            if iteration > self.config.max_iterations:
                logger.warning(
                    f"*** Could not select a valid (W,Q^2) pair after {self.config.max_iterations} iterations"
                )
                return self._fail(
                    event,
                    KinematicsExhausted(self.config.max_iterations),
                    EventFlags.NO_VALID_KINEMATICS,
                )

            gQD2 = None
            if self.uniform:
                # W uniform over its range, then Q2 uniform over the range at that W
                gW = w_min + dW * self.rng.random()
                Q2 = self.ranges.q2_range(interaction, gW)
                if Q2.is_empty:
                    continue
                gQ2 = Q2.min + (Q2.max - Q2.min) * self.rng.random()
                interaction.skip_kinematic_check = True
            else:
                if iteration == 1:
                    self._init_envelope(envelope, interaction, W, Q2_at_wmin, xsec_max)
                gQD2, gW = envelope.sample(self.rng)
                gQ2 = qd2_to_q2(gQD2)

            logger.debug(f"Trying: W = {gW}, Q2 = {gQ2}")

            interaction.kinematics.set(KineVar.W, gW)
            interaction.kinematics.set(KineVar.Q2, gQ2)

            xsec = self.xsec_model.xsec(interaction, KinePhaseSpace.W_Q2)

            if self.uniform:
                accept = self.controller.record(xsec > 0)
            else:
                env = envelope.evaluate(gQD2, gW)
                J = jacobian(interaction, KinePhaseSpace.W_Q2, KinePhaseSpace.W_QD2)
                self.assert_xsec_limits(interaction, J * xsec, env)
                logger.debug(f"xsec= {xsec}, J= {J}, envelope= {env}")
                accept = self.controller.accept(J * xsec, env, self.rng)

            if accept:
                return self._finalize(event, gW, gQ2, xsec, iteration)

    def _init_envelope(self,
                       envelope: ImportanceEnvelope,
                       interaction: Interaction,
                       W: KinematicRange,
                       Q2_at_wmin: KinematicRange,
                       xsec_max: float) -> None:
        w_min, w_max = guarded(W)
        q2_min = max(A_SMALL_NUM, self.config.q2_min)
        q2_max = Q2_at_wmin.max - A_SMALL_NUM

        # QD2 decreases with Q2
        qd2_range = KinematicRange(q2_to_qd2(q2_max), q2_to_qd2(q2_min))

        channel = interaction.channel
        if channel.known_resonance:
            mR, gR = channel.resonance.mass, KNOWN_RESONANCE_WIDTH
        else:
            mR, gR = DEFAULT_RESONANCE_MASS, DEFAULT_RESONANCE_WIDTH

        envelope.init(KinematicRange(w_min, w_max), qd2_range, mR, gR, xsec_max)
        logger.debug(
            f"Envelope: W {envelope.state.w_range}, QD2 {qd2_range}, "
            f"mR={mR}, gR={gR}, xsec_max={xsec_max:.6g}"
        )

    def assert_xsec_limits(self, interaction: Interaction, xsec: float, xsec_max: float) -> None:
        """
        Check a (Jacobian-corrected) cross section against the envelope.

        Overshooting by more than the configured fractional tolerance
        biases the selected distribution and raises EnvelopeViolation.
        """
        if xsec > xsec_max:
            tolerance = self.config.max_xsec_diff_tolerance
            if xsec > (1.0 + tolerance) * xsec_max:
                logger.error(
                    f"xsec: (curr) = {xsec} > (max) = {xsec_max} for {interaction!r}"
                )
                logger.error("*** Exceeding estimated maximum differential cross section")
                raise EnvelopeViolation(
                    f"d2xsec {xsec:.6g} exceeds envelope {xsec_max:.6g} "
                    f"beyond tolerance {tolerance} for {interaction.as_string()}"
                )
            logger.warning(
                f"xsec: (curr) = {xsec} > (max) = {xsec_max}; within allowed tolerance {tolerance}"
            )
        if xsec < 0:
            logger.error(f"Negative cross section for current kinematics: {interaction!r}")

    def _finalize(self, event: EventRecord, gW: float, gQ2: float,
                  xsec: float, iteration: int) -> Accepted:
        interaction = event.interaction
        logger.info(f"Selected: W = {gW}, Q2 = {gQ2}")

        interaction.skip_process_check = False
        interaction.skip_kinematic_check = False

        # The hit nucleon can be off the mass shell
        init_state = interaction.initial_state
        E = init_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
        M = init_state.target.nucleon_p4.mass
        gx, gy = wq2_to_xy(E, M, gW, gQ2)

        event.diff_xsec = xsec

        if self.uniform:
            vol = self.ranges.phase_space_volume(interaction)
            wght = (vol / event.xsec) * xsec
            logger.info(f"Kinematics wght = {wght}")
            wght *= event.weight
            logger.info(f"Current event wght = {wght}")
            event.weight = wght

        kine = interaction.kinematics
        kine.lock(KineVar.Q2, gQ2)
        kine.lock(KineVar.W, gW)
        kine.lock(KineVar.X, gx)
        kine.lock(KineVar.Y, gy)
        kine.clear_running_values()

        return Accepted(
            SelectedKinematics(W=gW, Q2=gQ2, x=gx, y=gy, diff_xsec=xsec, weight=event.weight),
            iterations=iteration,
        )

    def _fail(self, event: EventRecord, result, flag: EventFlags):
        logger.warning(f"{result.reason} for {event.interaction.as_string()}")
        event.set_flag(flag)
        event.interaction.skip_process_check = False
        event.interaction.skip_kinematic_check = False
        event.interaction.invalidate()
        self.controller.failed += 1
        return result
