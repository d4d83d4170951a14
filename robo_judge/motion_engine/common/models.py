# robo_judge/motion_engine/common/models.py
from pydantic import BaseModel, Field
from typing import Optional, Tuple, Dict, Mapping
from .enums import Joint, SessionState

class Position(BaseModel):
    """A point in normalized image coordinates, origin top-left, y pointing down."""
    x: float = Field(ge=0.0, le=1.0)
    y: float = Field(ge=0.0, le=1.0)

    class Config:
        frozen = True

class Skeleton(BaseModel):
    """Joint positions observed for one subject in one frame. Absent joints are simply not in the mapping."""
    joints: Dict[Joint, Position] = Field(default_factory=dict)

    class Config:
        frozen = True

    @classmethod
    def from_points(cls, points: Mapping[Joint, Optional[Tuple[float, float]]]) -> "Skeleton":
        return cls(joints={
            joint: Position(x=xy[0], y=xy[1]) for joint, xy in points.items() if xy is not None
        })

    def get(self, joint: Joint) -> Optional[Position]:
        return self.joints.get(joint)

    def __contains__(self, joint: Joint) -> bool:
        return joint in self.joints

class FrameMetadata(BaseModel):
    """Metadata associated with a single camera frame."""
    frame_id: int
    timestamp: float
    source_resolution: Tuple[int, int]

class DepthVerdict(BaseModel):
    is_good: bool
    margin_cm: float
    depth_pct: float = Field(ge=0.0)

class JointAngles(BaseModel):
    """Per-side knee and hip angles in whole degrees. None when the limb was not fully visible."""
    left_knee: Optional[int] = None
    right_knee: Optional[int] = None
    left_hip: Optional[int] = None
    right_hip: Optional[int] = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.left_knee, self.right_knee, self.left_hip, self.right_hip))

class VelocitySample(BaseModel):
    """Vertical bar velocity in m/s, upward positive."""
    instantaneous: float
    peak: float

class EngineParams(BaseModel):
    """Tunable parameters of the motion analysis engine. Validated on every update."""
    tolerance: float = Field(default=0.0, ge=0.0, le=0.2)
    smoothing_window: int = Field(default=5, ge=1)
    tibia_length_cm: float = Field(default=38.5, gt=0.0)
    default_cm_per_pixel: float = Field(default=0.2, gt=0.0)
    require_bilateral: bool = False
    depth_reference_cm: float = Field(default=4.0, gt=0.0)
    max_depth_pct: float = Field(default=1.2, gt=0.0)
    patch_fraction: float = Field(default=0.06, gt=0.0, le=1.0)
    min_patch_size: int = Field(default=16, ge=2)
    search_fraction: float = Field(default=0.05, gt=0.0, le=1.0)
    min_search_radius: int = Field(default=8, ge=2)
    sample_stride: int = Field(default=3, ge=1)
    peak_reset_threshold: float = Field(default=0.05, ge=0.0)

    class Config:
        extra = "forbid"
        validate_assignment = True

class AnalysisResult(BaseModel):
    """Encapsulates everything the engine derived from a single frame."""
    timestamp: float
    frame_id: int
    processing_time_ms: float
    status: SessionState
    cm_per_pixel: float
    frame_count: int
    no_pose_frames: int = 0
    verdict: Optional[DepthVerdict] = None
    angles: Optional[JointAngles] = None
    tracked_position: Optional[Tuple[int, int]] = None
    velocity: Optional[VelocitySample] = None
