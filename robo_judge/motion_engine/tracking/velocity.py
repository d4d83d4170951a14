# robo_judge/motion_engine/tracking/velocity.py
import math
import logging
from typing import Optional
from ..common.models import VelocitySample

logger = logging.getLogger(__name__)

PEAK_RESET_THRESHOLD = 0.05

class VelocityEstimator:
    """
    Finite-difference vertical velocity of the tracked object, upward positive.

    The peak follows the concentric (upward) phase and is cleared on the first
    downward sample after a peak above `peak_reset_threshold`, which also counts
    one repetition. There is no debouncing: a single jittery sample can end a rep.
    """

    def __init__(self, peak_reset_threshold: float = PEAK_RESET_THRESHOLD):
        self.peak_reset_threshold = peak_reset_threshold
        self.last_y: Optional[float] = None
        self.last_t: Optional[float] = None
        self.last_velocity = 0.0
        self.peak = 0.0
        self.rep_count = 0

    def sample(self, y_px: float, timestamp: float, cm_per_pixel: float) -> VelocitySample:
        if self.last_y is None or self.last_t is None:
            self.last_y, self.last_t = y_px, timestamp
            self.last_velocity = 0.0
            return VelocitySample(instantaneous=0.0, peak=self.peak)

        dt = timestamp - self.last_t
        if dt <= 0:
            logger.debug("Velocity sample suppressed: non-positive dt %.6f", dt)
            return VelocitySample(instantaneous=0.0, peak=self.peak)

        v = (self.last_y - y_px) * cm_per_pixel / dt / 100.0
        if not math.isfinite(v):
            logger.debug("Velocity sample suppressed: non-finite value")
            return VelocitySample(instantaneous=0.0, peak=self.peak)

        self.last_y, self.last_t = y_px, timestamp
        self.last_velocity = v

        if v > 0:
            self.peak = max(self.peak, v)
        elif v < 0 and self.peak > self.peak_reset_threshold:
            self.rep_count += 1
            logger.info("Concentric phase ended, peak %.2f m/s (rep %d).", self.peak, self.rep_count)
            self.peak = 0.0

        return VelocitySample(instantaneous=v, peak=self.peak)

    def restart(self):
        """Forget the last position so the next sample seeds again. The peak is kept."""
        self.last_y = None
        self.last_t = None
        self.last_velocity = 0.0

    def reset(self):
        self.restart()
        self.peak = 0.0
        self.rep_count = 0
