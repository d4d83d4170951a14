# robo_judge/motion_engine/processing/temporal_smoother.py
from collections import deque
from typing import Iterable, Tuple

class History:
    """A bounded FIFO of scalar samples with a moving average."""

    def __init__(self, max_len: int):
        if max_len < 1:
            raise ValueError(f"History length must be >= 1, got {max_len}")
        self.max_len = max_len
        self._values = deque()

    def push(self, value: float):
        self._values.append(float(value))
        # A shrunk bound only takes effect here, on the next push.
        while len(self._values) > self.max_len:
            self._values.popleft()

    def average(self) -> float:
        return sum(self._values) / max(1, len(self._values))

    def resize(self, max_len: int):
        if max_len < 1:
            raise ValueError(f"History length must be >= 1, got {max_len}")
        self.max_len = max_len

    def clear(self):
        self._values.clear()

    def values(self) -> Iterable[float]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

class TemporalSmoother:
    """
    Moving-average smoothing of the hip and knee height signals.
    Frames without a usable skeleton must not be pushed, so the histories
    always describe the last N frames in which the subject was seen.
    """

    def __init__(self, window: int = 5):
        self.hip = History(window)
        self.knee = History(window)

    @property
    def window(self) -> int:
        return self.hip.max_len

    def set_window(self, window: int):
        self.hip.resize(window)
        self.knee.resize(window)

    def push(self, hip_y: float, knee_y: float) -> Tuple[float, float]:
        self.hip.push(hip_y)
        self.knee.push(knee_y)
        return self.averages()

    def averages(self) -> Tuple[float, float]:
        return self.hip.average(), self.knee.average()

    def is_empty(self) -> bool:
        return len(self.hip) == 0

    def reset(self):
        self.hip.clear()
        self.knee.clear()
