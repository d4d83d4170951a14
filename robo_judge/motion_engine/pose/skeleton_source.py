# robo_judge/motion_engine/pose/skeleton_source.py
import cv2
import logging
import numpy as np
import mediapipe as mp
from typing import Optional
from ..common.models import Skeleton
from .landmarks import landmarks_to_skeleton

logger = logging.getLogger(__name__)

class SkeletonSource:
    """Runs MediaPipe Pose on BGR frames and hands the engine a Skeleton, or None when nobody is found."""

    def __init__(self, config: dict):
        self.config = config
        self.min_visibility = config.get('min_visibility', 0.5)

        self.mp_pose = mp.solutions.pose
        self.pose = self.mp_pose.Pose(
            static_image_mode=False,
            model_complexity=config['model_complexity'], # 1 fast, 2 accurate
            smooth_landmarks=config.get('smooth_landmarks', True),
            enable_segmentation=False,
            min_detection_confidence=config['min_detection_confidence'],
            min_tracking_confidence=config['min_tracking_confidence']
        )
        logger.info("MediaPipe Pose ready (model_complexity=%s).", config['model_complexity'])

    def detect(self, frame: np.ndarray) -> Optional[Skeleton]:
        frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        frame_rgb.flags.writeable = False
        results = self.pose.process(frame_rgb)
        frame_rgb.flags.writeable = True

        if not results.pose_landmarks:
            return None
        return landmarks_to_skeleton(results.pose_landmarks.landmark, self.min_visibility)

    def close(self):
        self.pose.close()
