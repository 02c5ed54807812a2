"""
Cache of maximum differential cross sections for the rejection method.

The max is found with a coarse, fast scan and scaled up by a safety
factor; it does not need to be the exact maximum. Entries are keyed by a
fingerprint (cross section model, process identity, coarse log-energy
bucket) and reused for every interaction that maps to the same key.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from .cache_db import MaxXSecCacheDB
from .config import KinematicsConfig
from .constants import (
    A_SMALL_NUM,
    LOW_ENERGY_SAFETY_FACTOR,
    LOW_ENERGY_THRESHOLD,
    MIN_Q2_LIMIT,
)
from .interaction import Frame, Interaction, KineVar
from .kinematics import KinePhaseSpace
from .ranges import RangeComputer
from .xsec.base import CrossSectionModel

logger = logging.getLogger(__name__)

# W where d2xsec/dWdQ2 peaks when the resonance is not known
UNKNOWN_RESONANCE_PEAK_W = 1.23
# Coarse Q2 scan points, and refinement steps once the xsec stops increasing
N_Q2 = 15
N_Q2_BACKSTEP = 3


@dataclass
class MaxXSecCacheEntry:
    max_xsec: float
    energy: float


class MaxXSecCache:
    def __init__(self,
                 xsec_model: CrossSectionModel,
                 ranges: Optional[RangeComputer] = None,
                 config: Optional[KinematicsConfig] = None,
                 db: Optional[MaxXSecCacheDB] = None):
        self.xsec_model = xsec_model
        self.config = config or (ranges.config if ranges else KinematicsConfig())
        self.ranges = ranges or RangeComputer(self.config)
        self.db = db
        self._entries: Dict[str, MaxXSecCacheEntry] = {}

        if self.db is not None:
            for key, (value, energy) in self.db.load_entries().items():
                self._entries[key] = MaxXSecCacheEntry(value, energy)
            logger.info(f"Loaded {len(self._entries)} max xsec entries from {self.db.db_path}")

    def fingerprint(self, interaction: Interaction) -> str:
        E = interaction.initial_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
        bucket = math.floor(math.log10(E) * self.config.energy_buckets_per_decade)
        parts = [self.xsec_model.name, *map(str, interaction.fingerprint_key()), f"Eb{bucket}"]
        return ";".join(parts)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, interaction: Interaction) -> bool:
        return self.fingerprint(interaction) in self._entries

    def get_max(self, interaction: Interaction) -> float:
        """Cached max xsec, recomputed when absent or below the cacheable energy."""
        E = interaction.initial_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
        if E >= self.config.min_energy_cached:
            entry = self._entries.get(self.fingerprint(interaction))
            if entry is not None:
                return entry.max_xsec
        return self.recompute(interaction)

    def put(self, interaction: Interaction, max_xsec: float) -> None:
        """Store a (safety-scaled) max xsec for the interaction's fingerprint."""
        key = self.fingerprint(interaction)
        E = interaction.initial_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
        self._entries[key] = MaxXSecCacheEntry(max_xsec, E)
        if self.db is not None:
            self.db.store_entry(key, max_xsec, E)

    def recompute(self, interaction: Interaction) -> float:
        max_xsec = self.scan_max_xsec(interaction)
        # Below the cacheable energy the value is never read back
        E = interaction.initial_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
        if max_xsec > 0 and E >= self.config.min_energy_cached:
            self.put(interaction, max_xsec)
        return max_xsec

    def scan_max_xsec(self, interaction: Interaction) -> float:
        """
        Coarse scan for the max d2xsec/dWdQ2, with the safety factor applied.

        W is fixed near the resonance peak and Q2 is scanned log-uniformly.
        Once the cross section stops increasing, step back with a finer step
        so a narrow peak straddled by the coarse grid is not missed.
        Returns 0 if there is no Q2 phase space.
        """
        E = interaction.initial_state.probe_energy(Frame.STRUCK_NUCLEON_AT_REST)
        logger.debug(f"Scanning phase space for E= {E}")

        channel = interaction.channel
        md = channel.resonance.mass if channel.known_resonance else UNKNOWN_RESONANCE_PEAK_W

        rW = self.ranges.w_range(interaction)
        if rW.min < md < rW.max:
            W = md
        elif md >= rW.max:
            W = rW.max - A_SMALL_NUM
        else:
            W = rW.min + A_SMALL_NUM
        interaction.kinematics.set(KineVar.W, W)

        rQ2 = self.ranges.q2_range(interaction, W)
        if rQ2.max < MIN_Q2_LIMIT or rQ2.min <= 0:
            return 0.0

        log_q2_min = math.log(rQ2.min + A_SMALL_NUM)
        log_q2_max = math.log(rQ2.max - A_SMALL_NUM)
        dlog_q2 = (log_q2_max - log_q2_min) / (N_Q2 - 1)

        max_xsec = 0.0
        xsec_last = -1.0
        for iq2 in range(N_Q2):
            Q2 = math.exp(log_q2_min + iq2 * dlog_q2)
            xsec = self._xsec_at(interaction, W, Q2)
            max_xsec = max(xsec, max_xsec)
            increasing = xsec - xsec_last >= 0
            xsec_last = xsec

            if not increasing:
                dlog_q2 /= N_Q2_BACKSTEP
                for _ in range(N_Q2_BACKSTEP):
                    Q2 = math.exp(math.log(Q2) - dlog_q2)
                    if Q2 < rQ2.min:
                        continue
                    max_xsec = max(self._xsec_at(interaction, W, Q2), max_xsec)
                break

        # A cached value may be reused at a slightly different energy
        safety = LOW_ENERGY_SAFETY_FACTOR if E < LOW_ENERGY_THRESHOLD else self.config.max_xsec_safety_factor
        max_xsec *= safety

        logger.info(
            f"Max xsec in phase space = {max_xsec:.6g} for {interaction.as_string()} "
            f"(computed using {self.xsec_model.name})"
        )
        return max_xsec

    def _xsec_at(self, interaction: Interaction, W: float, Q2: float) -> float:
        interaction.kinematics.set(KineVar.Q2, Q2)
        xsec = self.xsec_model.xsec(interaction, KinePhaseSpace.W_Q2)
        logger.debug(f"xsec(W= {W}, Q2= {Q2}) = {xsec}")
        return xsec
