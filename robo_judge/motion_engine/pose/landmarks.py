# robo_judge/motion_engine/pose/landmarks.py
from typing import Any, Dict, Optional, Sequence
from ..common.enums import Joint
from ..common.models import Position, Skeleton

# Indices of the MediaPipe Pose (BlazePose, 33 landmarks) topology.
MEDIAPIPE_INDEX: Dict[Joint, int] = {
    Joint.NOSE: 0,
    Joint.LEFT_SHOULDER: 11,
    Joint.RIGHT_SHOULDER: 12,
    Joint.LEFT_ELBOW: 13,
    Joint.RIGHT_ELBOW: 14,
    Joint.LEFT_WRIST: 15,
    Joint.RIGHT_WRIST: 16,
    Joint.LEFT_HIP: 23,
    Joint.RIGHT_HIP: 24,
    Joint.LEFT_KNEE: 25,
    Joint.RIGHT_KNEE: 26,
    Joint.LEFT_ANKLE: 27,
    Joint.RIGHT_ANKLE: 28,
    Joint.LEFT_HEEL: 29,
    Joint.RIGHT_HEEL: 30,
    Joint.LEFT_FOOT_INDEX: 31,
    Joint.RIGHT_FOOT_INDEX: 32,
}

# Segments drawn by the visualizer: arms, legs, shoulder and hip girdles, torso sides.
SKELETON_SEGMENTS = (
    (Joint.LEFT_SHOULDER, Joint.LEFT_ELBOW), (Joint.LEFT_ELBOW, Joint.LEFT_WRIST),
    (Joint.RIGHT_SHOULDER, Joint.RIGHT_ELBOW), (Joint.RIGHT_ELBOW, Joint.RIGHT_WRIST),
    (Joint.LEFT_HIP, Joint.LEFT_KNEE), (Joint.LEFT_KNEE, Joint.LEFT_ANKLE),
    (Joint.RIGHT_HIP, Joint.RIGHT_KNEE), (Joint.RIGHT_KNEE, Joint.RIGHT_ANKLE),
    (Joint.LEFT_SHOULDER, Joint.RIGHT_SHOULDER), (Joint.LEFT_HIP, Joint.RIGHT_HIP),
    (Joint.LEFT_SHOULDER, Joint.LEFT_HIP), (Joint.RIGHT_SHOULDER, Joint.RIGHT_HIP),
)

def landmarks_to_skeleton(landmarks: Optional[Sequence[Any]], min_visibility: float = 0.5) -> Optional[Skeleton]:
    """
    Converts normalized landmarks (objects with x, y and optional visibility) into a Skeleton.
    Landmarks that are barely visible or fall outside the image are treated as not observed.
    """
    if not landmarks:
        return None

    joints = {}
    for joint, idx in MEDIAPIPE_INDEX.items():
        if idx >= len(landmarks):
            continue
        lm = landmarks[idx]
        if lm is None:
            continue
        if getattr(lm, 'visibility', 1.0) < min_visibility:
            continue
        if not (0.0 <= lm.x <= 1.0 and 0.0 <= lm.y <= 1.0):
            continue
        joints[joint] = Position(x=lm.x, y=lm.y)

    return Skeleton(joints=joints)
