# robo_judge/motion_engine/processing/depth_judge.py
from typing import Optional, Tuple
from ..common.enums import Joint
from ..common.models import Skeleton, DepthVerdict

DEPTH_REFERENCE_CM = 4.0
MAX_DEPTH_PCT = 1.2

def hip_knee_signals(skeleton: Optional[Skeleton], require_bilateral: bool = False) -> Optional[Tuple[float, float]]:
    """
    Extracts the raw (hip_y, knee_y) pair used for depth judging.

    The hip signal is the smaller of the hip y-values and the knee signal the larger
    of the knee y-values, so the call is made against the less favourable side.
    With `require_bilateral` both sides must be
    visible; otherwise the rule is applied over whichever sides were observed.
    Returns None when no pair can be formed.
    """
    if skeleton is None:
        return None

    hips = [p.y for p in (skeleton.get(Joint.LEFT_HIP), skeleton.get(Joint.RIGHT_HIP)) if p is not None]
    knees = [p.y for p in (skeleton.get(Joint.LEFT_KNEE), skeleton.get(Joint.RIGHT_KNEE)) if p is not None]

    if require_bilateral and (len(hips) < 2 or len(knees) < 2):
        return None
    if not hips or not knees:
        return None

    return min(hips), max(knees)

def judge_depth(hip_y: float, knee_y: float, tolerance: float, cm_per_pixel: float, frame_height: int,
                depth_reference_cm: float = DEPTH_REFERENCE_CM, max_depth_pct: float = MAX_DEPTH_PCT) -> DepthVerdict:
    """
    Judges smoothed hip and knee heights (normalized, y down).

    Pass/fail depends on the tolerance alone. `depth_pct` only scales the margin
    against a display reference and is clamped to [0, max_depth_pct].
    """
    is_good = hip_y <= knee_y + tolerance

    margin_norm = knee_y - hip_y
    margin_px = margin_norm * frame_height
    margin_cm = margin_px * cm_per_pixel
    depth_pct = max(0.0, min(max_depth_pct, margin_cm / depth_reference_cm))

    return DepthVerdict(is_good=is_good, margin_cm=margin_cm, depth_pct=depth_pct)
