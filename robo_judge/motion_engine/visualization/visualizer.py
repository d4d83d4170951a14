# robo_judge/motion_engine/visualization/visualizer.py
import cv2
import numpy as np
from typing import Optional
from ..common.enums import SessionState
from ..common.models import AnalysisResult, Skeleton
from ..pose.landmarks import SKELETON_SEGMENTS

GOOD_COLOR = (80, 200, 80)
FAIL_COLOR = (60, 60, 230)
NEUTRAL_COLOR = (240, 240, 240)
SEGMENT_COLOR = (255, 180, 120)
TRACKER_COLOR = (0, 220, 255)

class Visualizer:
    """Draws the skeleton, depth call, angles and bar tracking onto a copy of the frame."""

    def __init__(self, config: dict):
        self.config = config
        self.font = cv2.FONT_HERSHEY_SIMPLEX

    def render(self, frame: np.ndarray, result: AnalysisResult, skeleton: Optional[Skeleton],
               current_fps: float = 0.0, patch_size: Optional[int] = None) -> np.ndarray:
        output_frame = frame.copy()

        if skeleton is not None and self.config.get('draw_landmarks', True):
            self._draw_skeleton(output_frame, skeleton)

        if result.tracked_position is not None and self.config.get('draw_tracker', True):
            self._draw_tracker(output_frame, result, patch_size or 16)

        if self.config.get('draw_hud', True):
            self._draw_hud(output_frame, result, current_fps)

        return output_frame

    def _draw_skeleton(self, frame: np.ndarray, skeleton: Skeleton):
        h, w = frame.shape[:2]
        for a, b in SKELETON_SEGMENTS:
            pa, pb = skeleton.get(a), skeleton.get(b)
            if pa is None or pb is None:
                continue
            cv2.line(frame, (int(pa.x * w), int(pa.y * h)), (int(pb.x * w), int(pb.y * h)), SEGMENT_COLOR, 2, cv2.LINE_AA)
        for p in skeleton.joints.values():
            cv2.circle(frame, (int(p.x * w), int(p.y * h)), 3, NEUTRAL_COLOR, -1, cv2.LINE_AA)

    def _draw_tracker(self, frame: np.ndarray, result: AnalysisResult, patch_size: int):
        x, y = result.tracked_position
        half = patch_size // 2
        cv2.rectangle(frame, (x - half, y - half), (x - half + patch_size, y - half + patch_size), TRACKER_COLOR, 2)

    def _hud_lines(self, result: AnalysisResult, fps: float):
        """Builds the (text, color) HUD lines for a result."""
        if result.status == SessionState.SEARCHING:
            lines = [("No pose detected - include hips & knees", NEUTRAL_COLOR),
                     ("Hip-Knee: -- cm", NEUTRAL_COLOR), ("Depth: -- %", NEUTRAL_COLOR)]
        elif result.verdict is None:
            lines = [("Hips or knees not visible", NEUTRAL_COLOR)]
        else:
            v = result.verdict
            lines = [
                ("GOOD DEPTH" if v.is_good else "NO LIFT", GOOD_COLOR if v.is_good else FAIL_COLOR),
                (f"Hip-Knee: {v.margin_cm:.1f} cm", NEUTRAL_COLOR),
                (f"Depth: {v.depth_pct * 100:.0f} %", NEUTRAL_COLOR),
            ]

        if result.angles is not None and not result.angles.is_empty():
            a = result.angles
            fmt = lambda d: "--" if d is None else f"{d}"
            lines.append((f"Knee L/R: {fmt(a.left_knee)}/{fmt(a.right_knee)}  Hip L/R: {fmt(a.left_hip)}/{fmt(a.right_hip)}", NEUTRAL_COLOR))

        if result.velocity is not None:
            lines.append((f"Bar: {result.velocity.instantaneous:+.2f} m/s  Peak: {result.velocity.peak:.2f} m/s", TRACKER_COLOR))

        debug = f"Frames: {result.frame_count}"
        if result.no_pose_frames:
            debug += f"  NoPose: {result.no_pose_frames}"
        lines.append((f"{debug}  FPS: {fps:.1f}", NEUTRAL_COLOR))
        return lines

    def _draw_hud(self, frame: np.ndarray, result: AnalysisResult, fps: float):
        for i, (text, color) in enumerate(self._hud_lines(result, fps)):
            cv2.putText(frame, text, (10, 30 + i * 30), self.font, 0.7, color, 2, cv2.LINE_AA)
