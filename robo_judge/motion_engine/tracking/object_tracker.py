# robo_judge/motion_engine/tracking/object_tracker.py
import logging
import numpy as np
from pydantic import BaseModel
from typing import Literal, Optional, Tuple, Union
from ..common.enums import TrackerStatus

logger = logging.getLogger(__name__)

class Uninitialized(BaseModel):
    """No template captured yet; nothing is tracked."""
    status: Literal[TrackerStatus.UNINITIALIZED] = TrackerStatus.UNINITIALIZED

class Tracking(BaseModel):
    """
    A template captured once at initialization plus the last matched location.
    Positions are patch centres in pixel coordinates.
    """
    status: Literal[TrackerStatus.TRACKING] = TrackerStatus.TRACKING
    template_patch: np.ndarray
    template_position: Tuple[int, int]
    position: Tuple[int, int]
    patch_size: int

    class Config:
        arbitrary_types_allowed = True

TrackerState = Union[Uninitialized, Tracking]

def scaled_size(frame_width: int, fraction: float, minimum: int) -> int:
    return max(minimum, int(round(fraction * frame_width)))

def patch_origin(cx: int, cy: int, patch_size: int) -> Tuple[int, int]:
    half = patch_size // 2
    return cx - half, cy - half

def extract_patch(frame: np.ndarray, left: int, top: int, patch_size: int) -> Optional[np.ndarray]:
    """Returns a view of the square patch at (left, top), or None if it leaves the frame."""
    height, width = frame.shape[:2]
    if left < 0 or top < 0 or left + patch_size > width or top + patch_size > height:
        return None
    return frame[top:top + patch_size, left:left + patch_size]

def match_score(candidate: np.ndarray, template: np.ndarray, stride: int) -> int:
    """Sum of inverted absolute differences over all channels, sampled every `stride` pixels."""
    a = candidate[::stride, ::stride].astype(np.int32)
    b = template[::stride, ::stride].astype(np.int32)
    return int(np.sum(255 - np.abs(a - b)))

def initialize(state: TrackerState, frame: np.ndarray, x: int, y: int, patch_size: int) -> Tuple[TrackerState, bool]:
    """
    Transition Uninitialized/Tracking -> Tracking on a target at pixel (x, y).
    Fails without changing state when the patch would not fit in the frame.
    """
    left, top = patch_origin(x, y, patch_size)
    patch = extract_patch(frame, left, top, patch_size)
    if patch is None:
        return state, False

    tracking = Tracking(
        template_patch=patch.copy(),
        template_position=(x, y),
        position=(x, y),
        patch_size=patch_size,
    )
    return tracking, True

def locate(state: Tracking, frame: np.ndarray, search_radius: int, stride: int) -> Tuple[int, int]:
    """
    Best match of the template within a square window around the last position.

    Only even offsets are scanned, row by row. The first candidate with the
    highest score wins. When no candidate fits in the frame the last position
    is returned unchanged.
    """
    cx, cy = state.position
    left0, top0 = patch_origin(cx, cy, state.patch_size)
    start = -(search_radius // 2) * 2
    offsets = range(start, search_radius + 1, 2)

    best_score = None
    best_offset = None
    for dy in offsets:
        for dx in offsets:
            candidate = extract_patch(frame, left0 + dx, top0 + dy, state.patch_size)
            if candidate is None:
                continue
            score = match_score(candidate, state.template_patch, stride)
            if best_score is None or score > best_score:
                best_score = score
                best_offset = (dx, dy)

    if best_offset is None:
        return state.position
    return cx + best_offset[0], cy + best_offset[1]

class ObjectTracker:
    """Windowed template-matching tracker driven by the engine once per frame."""

    def __init__(self, patch_fraction: float = 0.06, min_patch_size: int = 16,
                 search_fraction: float = 0.05, min_search_radius: int = 8, sample_stride: int = 3):
        self.patch_fraction = patch_fraction
        self.min_patch_size = min_patch_size
        self.search_fraction = search_fraction
        self.min_search_radius = min_search_radius
        self.sample_stride = sample_stride
        self.state: TrackerState = Uninitialized()

    @property
    def status(self) -> TrackerStatus:
        return self.state.status

    @property
    def is_tracking(self) -> bool:
        return isinstance(self.state, Tracking)

    @property
    def position(self) -> Optional[Tuple[int, int]]:
        return self.state.position if isinstance(self.state, Tracking) else None

    def initialize(self, frame: np.ndarray, x: int, y: int) -> bool:
        patch_size = scaled_size(frame.shape[1], self.patch_fraction, self.min_patch_size)
        self.state, ok = initialize(self.state, frame, int(x), int(y), patch_size)
        if ok:
            logger.info("Tracker initialized at (%d, %d) with a %dpx patch.", x, y, patch_size)
        else:
            logger.warning("Tracker target (%d, %d) rejected: %dpx patch would leave the frame.", x, y, patch_size)
        return ok

    def update(self, frame: np.ndarray) -> Optional[Tuple[int, int]]:
        if not isinstance(self.state, Tracking):
            return None
        radius = scaled_size(frame.shape[1], self.search_fraction, self.min_search_radius)
        self.state.position = locate(self.state, frame, radius, self.sample_stride)
        return self.state.position

    def disable(self):
        if isinstance(self.state, Tracking):
            logger.info("Tracker disabled.")
        self.state = Uninitialized()
