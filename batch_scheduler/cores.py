from __future__ import annotations

from typing import List, Tuple

# Tolerance for "is this core free yet" comparisons. Free times are built by
# repeated float additions, so exact equality with the clock is unreliable.
TIME_EPSILON = 1e-9


class CoreTracker:
    """
    Next-free time of each of ``count`` identical cores.

    A core's free time only ever moves forward.
    """

    def __init__(self, count: int, epsilon: float = TIME_EPSILON) -> None:
        if count < 1:
            raise ValueError(f"Core count must be at least 1 (got {count})")
        self.epsilon = epsilon
        self.free_at: List[float] = [0.0] * count

    def __len__(self) -> int:
        return len(self.free_at)

    def earliest(self) -> Tuple[int, float]:
        """
        Index and free time of the core that frees up first (lowest index wins ties).
        """
        idx = min(range(len(self.free_at)), key=lambda i: self.free_at[i])
        return idx, self.free_at[idx]

    def next_free_time(self) -> float:
        return min(self.free_at)

    def is_free(self, index: int, now: float) -> bool:
        return self.free_at[index] <= now + self.epsilon

    def free_cores(self, now: float) -> List[int]:
        return [i for i in range(len(self.free_at)) if self.is_free(i, now)]

    def occupy(self, index: int, until: float) -> None:
        self.free_at[index] = max(self.free_at[index], until)
