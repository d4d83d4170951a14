import numpy as np
import pytest

from motion_engine.common.enums import Joint, SessionState
from motion_engine.common.models import EngineParams
from motion_engine.processing.motion_engine import MotionAnalysisEngine

DEEP = {
    Joint.LEFT_HIP: (0.50, 0.66),
    Joint.RIGHT_HIP: (0.52, 0.67),
}

def test_frame_without_skeleton(blank_frame, make_metadata):
    engine = MotionAnalysisEngine()
    result = engine.advance(blank_frame, make_metadata(), None)
    assert result.status == SessionState.SEARCHING
    assert result.verdict is None
    assert result.angles is None
    assert result.tracked_position is None
    assert result.velocity is None
    assert result.cm_per_pixel == pytest.approx(0.2)
    assert result.no_pose_frames == 1

def test_frame_with_full_skeleton(blank_frame, make_metadata, make_skeleton):
    engine = MotionAnalysisEngine()
    result = engine.advance(blank_frame, make_metadata(), make_skeleton())
    assert result.status == SessionState.JUDGING
    assert result.verdict.is_good
    # hips well above the knee line: large positive margin, display value saturates
    assert result.verdict.depth_pct == pytest.approx(1.2)
    assert result.angles.left_knee == 180
    assert result.cm_per_pixel == pytest.approx(38.5 / 40.0)

def test_hip_below_knee_fails(blank_frame, make_metadata, make_skeleton):
    engine = MotionAnalysisEngine({'smoothing_window': 1})
    sk = make_skeleton({Joint.LEFT_HIP: (0.50, 0.70), Joint.RIGHT_HIP: (0.52, 0.71)})
    result = engine.advance(blank_frame, make_metadata(), sk)
    assert not result.verdict.is_good
    assert result.verdict.margin_cm < 0
    assert result.verdict.depth_pct == 0.0

def test_missing_frames_do_not_touch_history_or_calibration(blank_frame, make_metadata, make_skeleton):
    engine = MotionAnalysisEngine({'smoothing_window': 3})
    engine.advance(blank_frame, make_metadata(1, 0.0), make_skeleton())
    cm = engine.calibration.cm_per_pixel
    for i in range(2, 5):
        result = engine.advance(blank_frame, make_metadata(i, i * 0.03), None)
    assert result.no_pose_frames == 3
    assert len(engine.smoother.hip) == 1
    assert engine.calibration.cm_per_pixel == cm

    result = engine.advance(blank_frame, make_metadata(5, 0.15), make_skeleton())
    assert result.no_pose_frames == 0
    assert result.frame_count == 5
    assert len(engine.smoother.hip) == 2

def test_missing_right_knee_policy(blank_frame, make_metadata, make_skeleton):
    sk = make_skeleton(drop=[Joint.RIGHT_KNEE])

    lenient = MotionAnalysisEngine()
    result = lenient.advance(blank_frame, make_metadata(), sk)
    assert result.status == SessionState.JUDGING
    assert result.verdict is not None
    assert result.angles.right_knee is None
    assert result.angles.left_knee == 180

    strict = MotionAnalysisEngine({'require_bilateral': True})
    result = strict.advance(blank_frame, make_metadata(), sk)
    assert result.status == SessionState.PARTIAL
    assert result.verdict is None
    assert result.angles.left_knee == 180

def test_smoothing_averages_recent_frames(blank_frame, make_metadata, make_skeleton):
    engine = MotionAnalysisEngine({'smoothing_window': 2})
    engine.advance(blank_frame, make_metadata(1, 0.0), make_skeleton())
    engine.advance(blank_frame, make_metadata(2, 0.03), make_skeleton(DEEP))
    hip_avg, knee_avg = engine.smoother.averages()
    assert hip_avg == pytest.approx((0.45 + 0.66) / 2)
    assert knee_avg == pytest.approx(0.66)

def test_parameter_updates_apply_next_frame(blank_frame, make_metadata, make_skeleton):
    engine = MotionAnalysisEngine({'smoothing_window': 1})
    sk = make_skeleton({Joint.LEFT_HIP: (0.50, 0.68), Joint.RIGHT_HIP: (0.52, 0.68)})
    assert not engine.advance(blank_frame, make_metadata(), sk).verdict.is_good
    engine.update_params(tolerance=0.03)
    assert engine.advance(blank_frame, make_metadata(2, 0.03), sk).verdict.is_good

def test_invalid_parameter_update_is_rejected():
    engine = MotionAnalysisEngine()
    with pytest.raises(ValueError):
        engine.update_params(smoothing_window=0)
    with pytest.raises(ValueError):
        engine.update_params(unknown_knob=1)
    assert engine.params == EngineParams()

def test_tracking_and_velocity(textured, make_metadata):
    frame = textured()
    engine = MotionAnalysisEngine()
    assert not engine.set_tracker_target(frame, 3, 3)
    assert engine.set_tracker_target(frame, 100, 100)

    first = engine.advance(frame, make_metadata(1, 0.0), None)
    assert first.tracked_position == (100, 100)
    assert first.velocity.instantaneous == 0.0

    lifted = np.roll(frame, shift=-10, axis=0)
    second = engine.advance(lifted, make_metadata(2, 0.1), None)
    assert second.tracked_position == (100, 90)
    # default scale 0.2 cm/px: 10px in 0.1s
    assert second.velocity.instantaneous == pytest.approx(0.2)

def test_reset_clears_session(textured, make_metadata, make_skeleton):
    frame = textured()
    engine = MotionAnalysisEngine()
    engine.advance(frame, make_metadata(), make_skeleton())
    engine.set_tracker_target(frame, 100, 100)
    engine.advance(frame, make_metadata(2, 0.03), None)

    engine.reset()
    assert engine.frame_count == 0
    assert engine.smoother.is_empty()
    assert engine.calibration.cm_per_pixel == pytest.approx(0.2)
    assert not engine.tracker.is_tracking
    result = engine.advance(frame, make_metadata(3, 0.06), None)
    assert result.tracked_position is None
    assert result.velocity is None
