# robo_judge/main.py
import os
import sys
import cv2
import time
import yaml
import logging
import numpy as np
from collections import deque

from motion_engine.camera.camera_manager import CameraManager
from motion_engine.common.logging_setup import configure_logging
from motion_engine.pose.skeleton_source import SkeletonSource
from motion_engine.processing.motion_engine import MotionAnalysisEngine
from motion_engine.visualization.visualizer import Visualizer

logger = logging.getLogger("robo_judge")

WINDOW_NAME = 'Robo Judge'
TOLERANCE_STEP = 0.005

def load_config(path: str) -> dict:
    with open(path, 'r') as f:
        return yaml.safe_load(f)

def handle_key(key: int, engine: MotionAnalysisEngine) -> bool:
    """Applies a keyboard command to the engine. Returns False when the user asked to quit."""
    params = engine.params
    if key == ord('q'):
        logger.info("Shutdown signal received.")
        return False
    if key == ord('r'):
        engine.reset()
    elif key == ord('d'):
        engine.disable_tracker()
    elif key in (ord('+'), ord('=')):
        engine.update_params(tolerance=min(0.05, params.tolerance + TOLERANCE_STEP))
    elif key == ord('-'):
        engine.update_params(tolerance=max(0.0, params.tolerance - TOLERANCE_STEP))
    elif key == ord(']'):
        engine.update_params(smoothing_window=min(15, params.smoothing_window + 1))
    elif key == ord('['):
        engine.update_params(smoothing_window=max(1, params.smoothing_window - 1))
    return True

def main():
    """
    Reference harness: reads frames, detects the pose, advances the engine and
    draws the result. Click on the bar to start tracking it.
    """
    script_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = sys.argv[1] if len(sys.argv) > 1 else os.path.join(script_dir, 'config.yaml')

    try:
        config = load_config(config_path)
    except FileNotFoundError:
        print(f"ERROR: Configuration file '{config_path}' not found.")
        return
    except yaml.YAMLError as e:
        print(f"ERROR: Failed to parse configuration file '{config_path}'. {e}")
        return

    configure_logging(config.get('logging', {}))

    fps_history = deque(maxlen=100)
    skeleton_source = None
    latest = {'frame': None}

    try:
        engine = MotionAnalysisEngine(config.get('engine', {}))
        visualizer = Visualizer(config['visualization'])

        def on_mouse(event, x, y, flags, param):
            if event == cv2.EVENT_LBUTTONDOWN and latest['frame'] is not None:
                if not engine.set_tracker_target(latest['frame'], x, y):
                    logger.warning("Pick a target further from the frame edge.")

        cv2.namedWindow(WINDOW_NAME)
        cv2.setMouseCallback(WINDOW_NAME, on_mouse)

        with CameraManager(config['camera']) as camera:
            skeleton_source = SkeletonSource(config['pose'])

            while camera.is_running():
                frame_start_time = time.perf_counter()

                frame, metadata = camera.get_frame()
                if frame is None:
                    time.sleep(0.001)
                    continue
                latest['frame'] = frame

                skeleton = skeleton_source.detect(frame)
                result = engine.advance(frame, metadata, skeleton)

                latency = time.perf_counter() - frame_start_time
                fps_history.append(1.0 / latency if latency > 0 else 0)
                avg_fps = np.mean(fps_history)

                patch_size = engine.tracker.state.patch_size if engine.tracker.is_tracking else None
                output_frame = visualizer.render(frame, result, skeleton, avg_fps, patch_size)
                cv2.imshow(WINDOW_NAME, output_frame)

                if not handle_key(cv2.waitKey(1) & 0xFF, engine):
                    break

    except (IOError, yaml.YAMLError) as e:
        logger.error("Failed to initialize. %s", e)
    except (KeyError, ValueError) as e:
        logger.error("Invalid configuration in '%s': %s", config_path, e)
    finally:
        if skeleton_source is not None:
            skeleton_source.close()
        cv2.destroyAllWindows()
        logger.info("Application terminated.")

if __name__ == "__main__":
    main()
