import numpy as np


class UnweightingController:
    """Accept-reject bookkeeping across kinematics selection calls."""

    def __init__(self):
        self.accepted = 0
        self.rejected = 0
        self.failed = 0

    def accept(self, weight: float, w_max: float, rng: np.random.Generator) -> bool:
        """Accept with probability weight / w_max."""
        r = w_max * rng.random()
        return self.record(r < weight)

    def record(self, accepted: bool) -> bool:
        if accepted:
            self.accepted += 1
        else:
            self.rejected += 1
        return accepted

    @property
    def trials(self) -> int:
        return self.accepted + self.rejected

    @property
    def efficiency(self) -> float:
        total = self.trials
        return self.accepted / total if total > 0 else 0.0
