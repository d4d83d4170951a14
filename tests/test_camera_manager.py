import pytest

from motion_engine.camera.camera_manager import CameraManager, is_file_source

def test_source_kind():
    assert not is_file_source(0)
    assert not is_file_source("1")
    assert is_file_source("squat.mp4")

def test_missing_video_file_raises(tmp_path):
    with pytest.raises(IOError):
        CameraManager({'source': str(tmp_path / "missing.mp4")})
