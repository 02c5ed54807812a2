import logging
from typing import Callable, Dict, List, Optional

import numpy as np

from .event_record import EventRecord
from .interaction import Interaction, KineVar
from .kinematics import KinePhaseSpace
from .kinematics_generator import ResonanceKinematicsGenerator
from .ranges import RangeComputer
from .resonances import Resonance
from .xsec.base import CrossSectionModel

logger = logging.getLogger(__name__)

EventFactory = Callable[[], EventRecord]


def estimate_total_xsec(model: CrossSectionModel,
                        interaction: Interaction,
                        ranges: RangeComputer,
                        n_w: int = 60,
                        n_q2: int = 60) -> float:
    """
    Integrate d2xsec/dWdQ2 over the cut (W, Q2) region on a midpoint grid.

    Uses a scratch copy of the interaction so the caller's kinematics are
    left untouched.
    """
    scratch = Interaction(interaction.initial_state, interaction.channel)
    W = ranges.w_range(scratch)
    if W.is_empty:
        return 0.0

    dW = (W.max - W.min) / n_w
    total = 0.0
    for w in W.min + dW * (np.arange(n_w) + 0.5):
        Q2 = ranges.q2_range(scratch, w)
        if Q2.is_empty:
            continue
        dQ2 = (Q2.max - Q2.min) / n_q2
        scratch.kinematics.set(KineVar.W, w)
        for q2 in Q2.min + dQ2 * (np.arange(n_q2) + 0.5):
            scratch.kinematics.set(KineVar.Q2, q2)
            total += model.xsec(scratch, KinePhaseSpace.W_Q2) * dW * dQ2
    return total


def make_event_factory(probe_pdg: int,
                       energy: float,
                       resonance: Optional[Resonance] = None,
                       current: str = "CC",
                       hit_nucleon_pdg: int = 2212,
                       energy_spread: float = 0.0,
                       total_xsec: Optional[Callable[[Interaction], float]] = None,
                       rng: Optional[np.random.Generator] = None) -> EventFactory:
    """
    Build a factory of fresh events. With energy_spread > 0 the probe
    energy is drawn uniformly in E * [1 - spread, 1 + spread].
    """
    rng = rng or np.random.default_rng()

    def make_event() -> EventRecord:
        E = energy
        if energy_spread > 0:
            E = energy * (1.0 + energy_spread * rng.uniform(-1.0, 1.0))
        interaction = Interaction.resonance(
            probe_pdg, E, resonance=resonance, current=current, hit_nucleon_pdg=hit_nucleon_pdg
        )
        xsec = total_xsec(interaction) if total_xsec else 0.0
        return EventRecord(interaction, xsec=xsec)

    return make_event


def generate_event(make_event: EventFactory,
                   generator: ResonanceKinematicsGenerator,
                   max_attempts: int = 10) -> Optional[EventRecord]:
    """
    Select kinematics for one event, retrying from fresh initial
    conditions on recoverable failures.

    Returns:
        The event with locked kinematics, or None if every attempt failed
    """
    for attempt in range(1, max_attempts + 1):
        event = make_event()
        result = generator.process(event)
        if result.ok:
            return event
        logger.debug(f"Attempt {attempt}/{max_attempts} failed: {result.reason}")
    logger.warning(f"No kinematics selected after {max_attempts} attempts")
    return None


def simulate_batch(make_event: EventFactory,
                   generator: ResonanceKinematicsGenerator,
                   n: int = 10,
                   max_attempts: int = 10) -> Dict[str, object]:
    """
    Generate multiple events.

    Envelope violations are modeling errors and propagate to the caller.
    """
    events: List[EventRecord] = []
    failed = 0

    for i in range(n):
        event = generate_event(make_event, generator, max_attempts=max_attempts)
        if event is not None:
            events.append(event)
        else:
            failed += 1

    logger.info(f"✅ Batch complete: {len(events)}/{n} succeeded, {failed} failed")
    logger.info(f"Selection efficiency: {generator.controller.efficiency:.3f}")

    return {
        "events": events,
        "success": len(events),
        "failed": failed,
        "total": n,
        "efficiency": generator.controller.efficiency,
    }
