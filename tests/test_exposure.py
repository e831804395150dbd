import math

import pytest

from light_alchemy import config
from light_alchemy.exposure import (
    CandidateTable, calculate_effective_ev, calculate_profile_ev, describe_scene, resolve_exposure,
)
from light_alchemy.models import AxisMissError, CalibrationProfile
from light_alchemy.utils import format_aperture, format_shutter


class TestEffectiveEV:

    def test_reference_point(self):
        assert calculate_effective_ev(128, 100, 0, 1.0, reference_gray=128, reference_ev=7) == 7.0

    def test_default_reference_gray(self):
        assert calculate_effective_ev(118, 100, 0) == pytest.approx(12.7)

    @pytest.mark.parametrize("brightness", [0, -1, -0.001])
    def test_cannot_meter_without_light(self, brightness):
        assert calculate_effective_ev(brightness, 400, 1, 1.2) == -math.inf

    def test_strictly_increasing_in_brightness(self):
        evs = [calculate_effective_ev(b, 100, 0) for b in range(1, 256)]
        assert all(a < b for a, b in zip(evs, evs[1:]))

    def test_strictly_increasing_in_iso(self):
        evs = [calculate_effective_ev(100, iso, 0) for iso in config.ISO_OPTIONS]
        assert all(a < b for a, b in zip(evs, evs[1:]))

    def test_iso_doubling_adds_one_stop(self):
        assert calculate_effective_ev(100, 200, 0) - calculate_effective_ev(100, 100, 0) == pytest.approx(1.0)

    @pytest.mark.parametrize("factor", [0.5, 1.0, 1.5])
    def test_linear_in_compensation(self, factor):
        base = calculate_effective_ev(90, 400, 0, factor)
        for c in config.COMPENSATION_STEPS:
            assert calculate_effective_ev(90, 400, c, factor) - base == pytest.approx(c)

    def test_profile_constants_are_used(self, unit_profile):
        assert calculate_profile_ev(64, 100, 0, unit_profile) == pytest.approx(6.0)


class TestCandidateTable:

    def test_full_cartesian_product(self):
        table = CandidateTable()
        assert len(table) == 99
        shutters = {c.shutter for c in table}
        apertures = {c.aperture for c in table}
        assert shutters == set(config.SHUTTER_SPEEDS)
        assert apertures == set(config.APERTURES)

    def test_candidate_ev(self):
        table = CandidateTable()
        for c in table:
            assert c.ev == pytest.approx(math.log2(c.aperture ** 2 / c.shutter))

    def test_candidates_are_immutable(self):
        candidate = CandidateTable().candidates[0]
        with pytest.raises(AttributeError):
            candidate.ev = 0

    def test_unknown_priority(self):
        with pytest.raises(ValueError):
            CandidateTable().along_axis('program', 2.8)


class TestResolver:

    table = CandidateTable()

    @pytest.mark.parametrize("ev", [-3.0, 0.0, 4.2, 7.0, 11.5, 15.0, 22.0])
    def test_aperture_priority_keeps_aperture(self, ev):
        result = resolve_exposure(ev, self.table, 'aperture', 2.8)
        assert result.aperture == 2.8
        assert result.shutter in config.SHUTTER_SPEEDS

    @pytest.mark.parametrize("ev", [-3.0, 7.0, 15.0])
    def test_shutter_priority_keeps_shutter(self, ev):
        result = resolve_exposure(ev, self.table, 'shutter', 1 / 125)
        assert result.shutter == 1 / 125
        assert result.aperture in config.APERTURES

    def test_picks_closest_shutter_at_ev_7(self):
        expected = min(config.SHUTTER_SPEEDS, key=lambda s: abs(math.log2(5.6 ** 2 / s) - 7.0))
        result = resolve_exposure(7.0, self.table, 'aperture', 5.6)
        assert result.shutter == expected == 1 / 4
        assert result.ev_difference == pytest.approx(math.log2(5.6 ** 2 / expected) - 7.0)

    def test_ev_difference_sign(self):
        # f/2 @ 1/8 = EV 5，目标 4.8 -> 候选高 0.2
        result = resolve_exposure(4.8, self.table, 'aperture', 2)
        assert result.shutter == 1 / 8
        assert result.ev_difference == pytest.approx(0.2)

    def test_tie_prefers_smaller_opposite_value(self):
        # f/2: 1 s -> EV 2, 1/2 s -> EV 3，目标 2.5 距离相等
        result = resolve_exposure(2.5, self.table, 'aperture', 2)
        assert result.shutter == 1 / 2

    def test_deterministic(self):
        first = resolve_exposure(9.3, self.table, 'shutter', 1 / 60)
        assert all(resolve_exposure(9.3, self.table, 'shutter', 1 / 60) == first for _ in range(5))

    def test_axis_miss_degrades_to_null(self):
        result = resolve_exposure(7.0, self.table, 'aperture', 3.5)
        assert result.candidate is None
        assert (result.shutter, result.aperture, result.ev_difference) == (0.0, 0.0, 0.0)

    def test_axis_miss_strict(self):
        with pytest.raises(AxisMissError):
            resolve_exposure(7.0, self.table, 'shutter', 1 / 100, strict=True)

    def test_unmeterable_ev_keeps_fixed_axis(self):
        result = resolve_exposure(-math.inf, self.table, 'shutter', 1 / 125)
        assert result.candidate is None
        assert result.shutter == 1 / 125
        assert result.aperture == 0.0
        assert result.ev_difference == 0.0

    def test_end_to_end_from_brightness(self):
        profile = CalibrationProfile(reference_gray=128, reference_ev=7)
        ev = calculate_profile_ev(128, 100, 0, profile)
        assert ev == 7.0
        assert resolve_exposure(ev, self.table, 'aperture', 5.6).shutter == 1 / 4


class TestDisplayHelpers:

    @pytest.mark.parametrize("ev, text", [
        (16, 'Bright outdoor (Sunny)'),
        (12, 'Outdoor overcast / bright indoor'),
        (9.5, 'Indoor (normal lighting)'),
        (7, 'Dim indoor / night street'),
        (3, 'Very low light'),
        (-math.inf, 'Very low light'),
    ])
    def test_describe_scene(self, ev, text):
        assert describe_scene(ev) == text

    @pytest.mark.parametrize("seconds, text", [
        (1 / 1000, '1/1000 sec'),
        (1 / 125, '1/125 sec'),
        (1 / 60, '1/60 sec'),
        (1, '1 sec'),
        (2.5, '2.5 sec'),
        (0, '--'),
    ])
    def test_format_shutter(self, seconds, text):
        assert format_shutter(seconds) == text

    @pytest.mark.parametrize("f_number, text", [(2.8, 'f/2.8'), (8, 'f/8'), (2, 'f/2'), (0, '--')])
    def test_format_aperture(self, f_number, text):
        assert format_aperture(f_number) == text
