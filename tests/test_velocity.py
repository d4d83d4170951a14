import pytest

from motion_engine.tracking.velocity import VelocityEstimator

def test_first_sample_seeds_with_zero():
    est = VelocityEstimator()
    s = est.sample(100.0, 0.0, 0.2)
    assert s.instantaneous == 0.0
    assert s.peak == 0.0

def test_upward_motion_is_positive():
    est = VelocityEstimator()
    est.sample(100.0, 0.0, 0.2)
    s = est.sample(90.0, 0.1, 0.2)
    assert s.instantaneous == pytest.approx(0.2)
    assert s.peak == pytest.approx(0.2)

def test_no_motion_is_exactly_zero():
    est = VelocityEstimator()
    est.sample(100.0, 0.0, 0.2)
    s = est.sample(100.0, 0.1, 0.2)
    assert s.instantaneous == 0.0

def test_zero_dt_is_suppressed():
    est = VelocityEstimator()
    est.sample(100.0, 0.0, 0.2)
    est.sample(90.0, 0.1, 0.2)
    s = est.sample(50.0, 0.1, 0.2)
    assert s.instantaneous == 0.0
    assert s.peak == pytest.approx(0.2)
    assert est.last_y == 90.0

def test_peak_resets_after_concentric_phase():
    est = VelocityEstimator(peak_reset_threshold=0.05)
    est.sample(100.0, 0.0, 0.2)
    est.sample(90.0, 0.1, 0.2)
    est.sample(70.0, 0.2, 0.2)
    assert est.peak == pytest.approx(0.4)
    s = est.sample(75.0, 0.3, 0.2)
    assert s.instantaneous < 0
    assert s.peak == 0.0
    assert est.rep_count == 1

def test_small_peak_does_not_end_a_rep():
    est = VelocityEstimator(peak_reset_threshold=0.5)
    est.sample(100.0, 0.0, 0.2)
    est.sample(90.0, 0.1, 0.2)
    s = est.sample(95.0, 0.2, 0.2)
    assert s.peak == pytest.approx(0.2)
    assert est.rep_count == 0

def test_restart_keeps_peak_and_reset_clears_it():
    est = VelocityEstimator()
    est.sample(100.0, 0.0, 0.2)
    est.sample(90.0, 0.1, 0.2)
    est.restart()
    s = est.sample(10.0, 5.0, 0.2)
    assert s.instantaneous == 0.0
    assert s.peak == pytest.approx(0.2)
    est.reset()
    assert est.peak == 0.0
    assert est.last_y is None
