# robo_judge/motion_engine/processing/motion_engine.py
import time
import logging
import threading
import numpy as np
from typing import Optional, Union
from ..common.enums import SessionState
from ..common.models import AnalysisResult, EngineParams, FrameMetadata, Skeleton
from ..tracking.object_tracker import ObjectTracker
from ..tracking.velocity import VelocityEstimator
from .calibration import CalibrationEstimator
from .temporal_smoother import TemporalSmoother
from .depth_judge import hip_knee_signals, judge_depth
from .joint_angles import compute_joint_angles

logger = logging.getLogger(__name__)

class MotionAnalysisEngine:
    """
    Owns all per-session state and turns one frame's skeleton and pixels into
    a depth verdict, joint angles, a tracked bar position and its velocity.

    `advance` is the only per-frame entry point. Tracker initialization, parameter
    updates and `reset` may be called from another thread between frames; they are
    serialised with `advance` so no frame sees a half-applied change.
    """

    def __init__(self, params: Union[EngineParams, dict, None] = None):
        if params is None:
            params = EngineParams()
        elif isinstance(params, dict):
            params = EngineParams(**params)
        self.params = params

        self._lock = threading.Lock()
        self.calibration = CalibrationEstimator(params.tibia_length_cm, params.default_cm_per_pixel)
        self.smoother = TemporalSmoother(params.smoothing_window)
        self.tracker = ObjectTracker(
            patch_fraction=params.patch_fraction,
            min_patch_size=params.min_patch_size,
            search_fraction=params.search_fraction,
            min_search_radius=params.min_search_radius,
            sample_stride=params.sample_stride,
        )
        self.velocity = VelocityEstimator(params.peak_reset_threshold)
        self.state = SessionState.SEARCHING
        self.frame_count = 0
        self.no_pose_frames = 0

    def advance(self, frame: np.ndarray, metadata: FrameMetadata, skeleton: Optional[Skeleton]) -> AnalysisResult:
        """Processes a single frame. Missing input yields None fields, never an exception."""
        with self._lock:
            return self._advance(frame, metadata, skeleton)

    def _advance(self, frame: np.ndarray, metadata: FrameMetadata, skeleton: Optional[Skeleton]) -> AnalysisResult:
        start_time = time.perf_counter()
        height, width = frame.shape[:2]
        params = self.params
        self.frame_count += 1

        verdict = None
        angles = None
        if skeleton is None:
            self.state = SessionState.SEARCHING
            self.no_pose_frames += 1
        else:
            self.no_pose_frames = 0
            cm_per_pixel = self.calibration.update(skeleton, width, height)

            signals = hip_knee_signals(skeleton, params.require_bilateral)
            if signals is not None:
                hip_y, knee_y = self.smoother.push(*signals)
                verdict = judge_depth(
                    hip_y, knee_y, params.tolerance, cm_per_pixel, height,
                    params.depth_reference_cm, params.max_depth_pct,
                )
            angles = compute_joint_angles(skeleton, width, height)
            self.state = SessionState.JUDGING if verdict is not None else SessionState.PARTIAL

        tracked_position = None
        velocity = None
        if self.tracker.is_tracking:
            tracked_position = self.tracker.update(frame)
            velocity = self.velocity.sample(float(tracked_position[1]), metadata.timestamp, self.calibration.cm_per_pixel)

        processing_time_ms = (time.perf_counter() - start_time) * 1000
        logger.debug("Frame %d processed in %.2f ms (%s)", metadata.frame_id, processing_time_ms, self.state.value)

        return AnalysisResult(
            timestamp=metadata.timestamp,
            frame_id=metadata.frame_id,
            processing_time_ms=processing_time_ms,
            status=self.state,
            cm_per_pixel=self.calibration.cm_per_pixel,
            frame_count=self.frame_count,
            no_pose_frames=self.no_pose_frames,
            verdict=verdict,
            angles=angles,
            tracked_position=tracked_position,
            velocity=velocity,
        )

    def set_tracker_target(self, frame: np.ndarray, x: int, y: int) -> bool:
        """Captures the tracking template around pixel (x, y). Returns False if it does not fit."""
        with self._lock:
            ok = self.tracker.initialize(frame, x, y)
            if ok:
                self.velocity.restart()
            return ok

    def disable_tracker(self):
        with self._lock:
            self.tracker.disable()
            self.velocity.restart()

    def update_params(self, **changes) -> EngineParams:
        """
        Validates and applies live parameter changes; they take effect on the next frame.
        Raises ValueError (pydantic ValidationError) and keeps the old parameters on bad input.
        """
        params = EngineParams(**{**self.params.model_dump(), **changes})
        with self._lock:
            self.params = params
            self.smoother.set_window(params.smoothing_window)
            self.calibration.tibia_length_cm = params.tibia_length_cm
            self.calibration.default_cm_per_pixel = params.default_cm_per_pixel
            self.tracker.patch_fraction = params.patch_fraction
            self.tracker.min_patch_size = params.min_patch_size
            self.tracker.search_fraction = params.search_fraction
            self.tracker.min_search_radius = params.min_search_radius
            self.tracker.sample_stride = params.sample_stride
            self.velocity.peak_reset_threshold = params.peak_reset_threshold
        logger.info("Engine parameters updated: %s", changes)
        return params

    def reset(self):
        """Clears all session state: histories, calibration, tracker, velocity and counters."""
        with self._lock:
            self.smoother.reset()
            self.calibration.reset()
            self.tracker.disable()
            self.velocity.reset()
            self.state = SessionState.SEARCHING
            self.frame_count = 0
            self.no_pose_frames = 0
        logger.info("Engine reset.")
