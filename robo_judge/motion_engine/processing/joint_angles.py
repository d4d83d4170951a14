# robo_judge/motion_engine/processing/joint_angles.py
import numpy as np
from typing import Optional
from ..common.enums import Joint
from ..common.models import Skeleton, Position, JointAngles

def angle_at(proximal: Optional[Position], vertex: Optional[Position], distal: Optional[Position],
             frame_width: int = 1, frame_height: int = 1) -> Optional[int]:
    """
    Angle at `vertex` in whole degrees, measured in pixel space.
    Returns None for missing points or coincident (zero-length) segments.
    """
    if proximal is None or vertex is None or distal is None:
        return None

    scale = np.array([frame_width, frame_height], dtype=float)
    v = np.array([vertex.x, vertex.y]) * scale
    ba = np.array([proximal.x, proximal.y]) * scale - v
    bc = np.array([distal.x, distal.y]) * scale - v

    norm_ba = np.linalg.norm(ba)
    norm_bc = np.linalg.norm(bc)
    if norm_ba == 0.0 or norm_bc == 0.0:
        return None

    cosang = float(np.clip(np.dot(ba / norm_ba, bc / norm_bc), -1.0, 1.0))
    return int(np.floor(np.degrees(np.arccos(cosang)) + 0.5))

def compute_joint_angles(skeleton: Optional[Skeleton], frame_width: int, frame_height: int) -> Optional[JointAngles]:
    """Knee (hip-knee-ankle) and hip (shoulder-hip-knee) angles for each side, unsmoothed."""
    if skeleton is None:
        return None

    get = skeleton.get
    return JointAngles(
        left_knee=angle_at(get(Joint.LEFT_HIP), get(Joint.LEFT_KNEE), get(Joint.LEFT_ANKLE), frame_width, frame_height),
        right_knee=angle_at(get(Joint.RIGHT_HIP), get(Joint.RIGHT_KNEE), get(Joint.RIGHT_ANKLE), frame_width, frame_height),
        left_hip=angle_at(get(Joint.LEFT_SHOULDER), get(Joint.LEFT_HIP), get(Joint.LEFT_KNEE), frame_width, frame_height),
        right_hip=angle_at(get(Joint.RIGHT_SHOULDER), get(Joint.RIGHT_HIP), get(Joint.RIGHT_KNEE), frame_width, frame_height),
    )
