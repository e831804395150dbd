import math

import pytest

from light_alchemy.smoothing import AELock, ExposureSmoother


class TestExposureSmoother:

    def test_starts_unset(self):
        smoother = ExposureSmoother()
        assert not smoother.is_set
        assert smoother.value is None

    def test_first_sample_initialises(self):
        smoother = ExposureSmoother(0.2)
        assert smoother.update(9.4) == 9.4

    def test_exponential_moving_average(self):
        smoother = ExposureSmoother(0.3)
        smoother.update(10.0)
        assert smoother.update(20.0) == pytest.approx(13.0)
        assert smoother.update(20.0) == pytest.approx(15.1)

    @pytest.mark.parametrize("alpha", [0.01, 0.1, 0.3, 0.5, 0.99])
    def test_converges_on_constant_input(self, alpha):
        smoother = ExposureSmoother(alpha)
        for _ in range(50):
            value = smoother.update(11.3)
        assert value == pytest.approx(11.3, abs=1e-6)

    def test_converges_from_a_distant_state(self):
        smoother = ExposureSmoother(0.5)
        smoother.update(0.0)
        for _ in range(60):
            value = smoother.update(12.0)
        assert abs(value - 12.0) < 1e-6

    def test_alpha_can_change_per_update(self):
        smoother = ExposureSmoother(0.3)
        smoother.update(0.0)
        assert smoother.update(10.0, alpha=0.5) == pytest.approx(5.0)
        assert smoother.alpha == 0.5

    def test_non_finite_samples_are_ignored(self):
        smoother = ExposureSmoother()
        assert smoother.update(-math.inf) is None
        smoother.update(8.0)
        assert smoother.update(-math.inf) == 8.0

    def test_reset(self):
        smoother = ExposureSmoother()
        smoother.update(5.0)
        smoother.reset()
        assert smoother.update(7.0) == 7.0

    @pytest.mark.parametrize("alpha", [0, 1, -0.1, 1.5])
    def test_rejects_invalid_alpha(self, alpha):
        with pytest.raises(ValueError):
            ExposureSmoother(alpha)


class TestAELock:

    def test_unlocked_passes_values_through(self):
        lock = AELock()
        assert lock.apply(7.5, 7.2) == (7.5, 7.2)

    def test_locked_values_stay_pinned(self):
        smoother = ExposureSmoother(0.3)
        lock = AELock()
        smoothed = smoother.update(10.0)
        lock.engage(10.0, smoothed)

        for ev in [3.0, 4.5, 6.1, 8.8, 12.0, 13.3, 14.0, 9.9, 2.2, 15.5]:
            live = smoother.update(ev)
            assert lock.apply(ev, live) == (10.0, 10.0)

        # 底层平滑器一直在跟踪
        assert smoother.value != 10.0

    def test_unlock_resumes_tracking(self):
        smoother = ExposureSmoother(0.3)
        lock = AELock()
        lock.engage(10.0, smoother.update(10.0))
        lock.apply(12.0, smoother.update(12.0))

        lock.release()
        live = smoother.update(12.0)
        assert lock.apply(12.0, live) == (12.0, live)

    def test_engage_without_values_captures_next_sample(self):
        lock = AELock()
        lock.engage()
        assert lock.captured is None
        assert lock.apply(8.0, 7.9) == (8.0, 7.9)
        assert lock.apply(11.0, 10.0) == (8.0, 7.9)

    def test_engage_twice_keeps_first_capture(self):
        lock = AELock()
        lock.engage(5.0, 5.0)
        lock.engage(9.0, 9.0)
        assert lock.captured == (5.0, 5.0)

    def test_release_when_unlocked_is_noop(self):
        lock = AELock()
        lock.release()
        assert not lock.engaged
        assert lock.apply(6.0, 6.0) == (6.0, 6.0)

    def test_toggle(self):
        lock = AELock()
        assert lock.toggle(7.0, 7.0) is True
        assert lock.toggle() is False
        assert lock.captured is None
