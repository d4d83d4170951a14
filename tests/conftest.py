import numpy as np
import pytest

from motion_engine.common.enums import Joint
from motion_engine.common.models import FrameMetadata, Skeleton

# Side view of a standing lifter in a square frame.
STANDING = {
    Joint.LEFT_SHOULDER: (0.50, 0.20),
    Joint.RIGHT_SHOULDER: (0.52, 0.20),
    Joint.LEFT_HIP: (0.50, 0.45),
    Joint.RIGHT_HIP: (0.52, 0.46),
    Joint.LEFT_KNEE: (0.50, 0.65),
    Joint.RIGHT_KNEE: (0.52, 0.66),
    Joint.LEFT_ANKLE: (0.50, 0.85),
    Joint.RIGHT_ANKLE: (0.52, 0.86),
}

@pytest.fixture
def make_skeleton():
    def _make(overrides=None, drop=()):
        points = dict(STANDING)
        points.update(overrides or {})
        for joint in drop:
            points.pop(joint, None)
        return Skeleton.from_points(points)
    return _make

@pytest.fixture
def make_metadata():
    def _make(frame_id=1, timestamp=0.0, resolution=(200, 200)):
        return FrameMetadata(frame_id=frame_id, timestamp=timestamp, source_resolution=resolution)
    return _make

@pytest.fixture
def blank_frame():
    return np.zeros((200, 200, 3), dtype=np.uint8)

def textured_frame(height=200, width=200, seed=7):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)

@pytest.fixture
def textured():
    return textured_frame
