# robo_judge/motion_engine/camera/camera_manager.py
import os
import cv2
import time
import logging
import threading
import numpy as np
from collections import deque
from typing import Tuple, Optional, Union
from ..common.models import FrameMetadata

logger = logging.getLogger(__name__)

def is_file_source(source: Union[int, str]) -> bool:
    return isinstance(source, str) and not source.isdigit()

class CameraManager:
    """
    Supplies frames to the analysis loop from a camera or a video file.

    Cameras are grabbed on a background thread and only the latest frame is
    served. Video files are decoded on demand so every frame is analysed, with
    timestamps taken from the container position.
    """

    def __init__(self, config: dict):
        self.config = config
        source = config['source']
        self._file_mode = is_file_source(source)
        self._source = source if self._file_mode else int(source)
        if self._file_mode and not os.path.isfile(self._source):
            raise IOError(f"Cannot open video file: {self._source}")

        self._cap = cv2.VideoCapture(self._source)
        if not self._cap.isOpened():
            raise IOError(f"Cannot open camera source: {self._source}")

        self._target_fps = config.get('target_fps', 30)
        if not self._file_mode:
            resolution = tuple(config['resolution'])
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, resolution[0])
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, resolution[1])
            self._cap.set(cv2.CAP_PROP_FPS, self._target_fps)

        self._buffer = deque(maxlen=config.get('buffer_size', 5))
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._update, daemon=True)
        self._running = False
        self._frame_id = 0
        self._last_served_id = 0
        self._dropped_frames = 0

    @property
    def is_file(self) -> bool:
        return self._file_mode

    def _update(self):
        """The camera frame-grabbing loop running in a dedicated thread."""
        while self._running:
            grabbed = self._cap.grab()
            if not grabbed:
                self._dropped_frames += 1
                time.sleep(0.01)
                continue

            ret, frame = self._cap.retrieve()
            if ret:
                timestamp = time.perf_counter()
                with self._lock:
                    self._frame_id += 1
                    self._buffer.append((frame, self._frame_id, timestamp))
            else:
                self._dropped_frames += 1

    def _read_file_frame(self) -> Tuple[Optional[np.ndarray], Optional[FrameMetadata]]:
        ret, frame = self._cap.read()
        if not ret:
            logger.info("End of video file reached after %d frames.", self._frame_id)
            self._running = False
            return None, None
        self._frame_id += 1
        timestamp = self._cap.get(cv2.CAP_PROP_POS_MSEC) / 1000.0
        metadata = FrameMetadata(
            frame_id=self._frame_id,
            timestamp=timestamp,
            source_resolution=(frame.shape[1], frame.shape[0])
        )
        return frame, metadata

    def get_frame(self) -> Tuple[Optional[np.ndarray], Optional[FrameMetadata]]:
        """Returns the next unseen frame and its metadata, or (None, None) when none is ready."""
        if self._file_mode:
            return self._read_file_frame()

        with self._lock:
            if not self._buffer:
                return None, None
            frame, frame_id, timestamp = self._buffer[-1]
            if frame_id == self._last_served_id:
                return None, None
            self._last_served_id = frame_id

        metadata = FrameMetadata(
            frame_id=frame_id,
            timestamp=timestamp,
            source_resolution=(frame.shape[1], frame.shape[0])
        )
        return frame.copy(), metadata

    def get_stats(self) -> dict:
        return {
            "is_running": self.is_running(),
            "is_file": self._file_mode,
            "frames": self._frame_id,
            "dropped_frames": self._dropped_frames,
            "target_fps": self._target_fps,
            "actual_resolution": (self._cap.get(cv2.CAP_PROP_FRAME_WIDTH), self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        }

    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self._running = True
        if not self._file_mode:
            self._thread.start()
        logger.info("CameraManager started (%s).", "file" if self._file_mode else f"camera {self._source}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._running = False
        if self._thread.is_alive():
            self._thread.join()
        self._cap.release()
        logger.info("CameraManager stopped and resources released.")
