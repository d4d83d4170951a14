# robo_judge/motion_engine/processing/calibration.py
import math
import logging
from typing import Optional
from ..common.enums import Joint
from ..common.models import Skeleton, Position

logger = logging.getLogger(__name__)

TIBIA_LENGTH_CM = 38.5
DEFAULT_CM_PER_PIXEL = 0.2

class CalibrationEstimator:
    """
    Derives a centimeters-per-pixel scale from the subject's own lower legs.
    The knee-ankle segment is treated as a tibia of known average length, so no
    camera calibration or markers are needed. Assumes a near-orthogonal view.
    """

    def __init__(self, tibia_length_cm: float = TIBIA_LENGTH_CM, default_cm_per_pixel: float = DEFAULT_CM_PER_PIXEL):
        self.tibia_length_cm = tibia_length_cm
        self.default_cm_per_pixel = default_cm_per_pixel
        self.cm_per_pixel = default_cm_per_pixel

    @staticmethod
    def _segment_px(a: Position, b: Position, frame_width: int, frame_height: int) -> float:
        return math.hypot((a.x - b.x) * frame_width, (a.y - b.y) * frame_height)

    def update(self, skeleton: Optional[Skeleton], frame_width: int, frame_height: int) -> float:
        """Recomputes the scale when both lower legs are visible, otherwise keeps the last one."""
        if skeleton is None:
            return self.cm_per_pixel

        lk, la = skeleton.get(Joint.LEFT_KNEE), skeleton.get(Joint.LEFT_ANKLE)
        rk, ra = skeleton.get(Joint.RIGHT_KNEE), skeleton.get(Joint.RIGHT_ANKLE)
        if lk is None or la is None or rk is None or ra is None:
            return self.cm_per_pixel

        left = self._segment_px(lk, la, frame_width, frame_height)
        right = self._segment_px(rk, ra, frame_width, frame_height)
        lower_leg_px = (left + right) / 2

        # max(.., 1) keeps the scale finite and positive for collapsed segments
        self.cm_per_pixel = self.tibia_length_cm / max(lower_leg_px, 1.0)
        return self.cm_per_pixel

    def reset(self):
        self.cm_per_pixel = self.default_cm_per_pixel
