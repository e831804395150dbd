import numpy as np
import pytest

from light_alchemy.histogram import (
    BIN_NEUTRAL, BIN_OVER, BIN_UNDER, compute_histogram, tag_bins, zone_markers,
)
from light_alchemy.models import CalibrationProfile, Frame

from conftest import make_frame


class TestCombinedHistogram:

    def test_bin_count_conservation(self, random_frame):
        frame = random_frame(width=53, height=37)
        result = compute_histogram(frame)
        # 1961 个像素，每隔一个采样
        assert result.sample_count == 981
        assert result.counts.shape == (256,)
        assert int(result.counts.sum()) == result.sample_count == result.total

    @pytest.mark.parametrize("compensation", [-3, -1, 0, 2, 3])
    def test_conservation_with_gain(self, random_frame, compensation):
        result = compute_histogram(random_frame(), compensation=compensation)
        assert int(result.counts.sum()) == result.sample_count

    def test_gray_lands_in_its_own_bin(self):
        result = compute_histogram(make_frame(100))
        assert result.counts[100] == result.sample_count

    @pytest.mark.parametrize("compensation, expected_bin", [(-1, 50), (1, 200), (2, 255), (-3, 13)])
    def test_compensation_gain(self, compensation, expected_bin):
        result = compute_histogram(make_frame(100), compensation=compensation)
        assert result.counts[expected_bin] == result.sample_count

    def test_bt601_luma(self):
        # 0.299 * 200 = 59.8 -> 59
        result = compute_histogram(make_frame((200, 0, 0)))
        assert result.counts[59] == result.sample_count

    def test_rgba_frame(self):
        result = compute_histogram(make_frame(30, channels=4))
        assert result.counts[30] == result.sample_count

    def test_large_frame_uses_working_size(self):
        result = compute_histogram(make_frame(10, width=1280, height=960))
        assert result.sample_count == 640 * 480 // 2

    def test_not_ready_frame_is_empty(self):
        result = compute_histogram(Frame.blank())
        assert result.sample_count == 0
        assert result.counts.sum() == 0

    def test_bin_tags_follow_profile_thresholds(self):
        result = compute_histogram(make_frame(100))
        assert result.bin_tags[246] == BIN_OVER
        assert result.bin_tags[245] == BIN_NEUTRAL
        assert result.bin_tags[15] == BIN_NEUTRAL
        assert result.bin_tags[14] == BIN_UNDER


class TestSeparateHistogram:

    def test_channels_are_independent(self):
        result = compute_histogram(make_frame((10, 20, 30)), color_channel_mode='separate')
        assert result.counts is None
        assert result.channels.shape == (3, 256)
        assert result.channels[0, 10] == result.sample_count
        assert result.channels[1, 20] == result.sample_count
        assert result.channels[2, 30] == result.sample_count

    def test_bin_count_conservation(self, random_frame):
        result = compute_histogram(random_frame(), color_channel_mode='separate')
        for channel in result.channels:
            assert int(channel.sum()) == result.sample_count
        assert result.total == result.sample_count

    def test_compensation_is_not_applied(self, random_frame):
        frame = random_frame()
        plain = compute_histogram(frame, compensation=0, color_channel_mode='separate')
        boosted = compute_histogram(frame, compensation=3, color_channel_mode='separate')
        np.testing.assert_array_equal(plain.channels, boosted.channels)

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            compute_histogram(make_frame(10), color_channel_mode='luma')


class TestZoneMarkers:

    def test_zone_brightness(self):
        markers = {m.zone: m for m in zone_markers(128)}
        assert markers[5].brightness == 128
        assert markers[3].brightness == 32
        assert not markers[5].clipped
        assert markers[7].brightness == 512
        assert markers[7].clipped
        assert markers[7].position == 255

    def test_clipped_flag(self):
        result = compute_histogram(make_frame(100), profile=CalibrationProfile(reference_gray=128))
        assert result.clipped
        assert not result.clipped_low

    def test_no_clipping_for_dark_reference(self):
        result = compute_histogram(make_frame(100), profile=CalibrationProfile(reference_gray=60))
        assert max(m.brightness for m in result.markers) == 240
        assert not result.clipped

    def test_shadow_tail_clipping(self):
        result = compute_histogram(make_frame(100), profile=CalibrationProfile(reference_gray=4))
        assert result.clipped_low

    def test_default_zones(self):
        assert [m.zone for m in zone_markers(118)] == [2, 3, 4, 5, 6, 7]


def test_tag_bins_covers_every_bin():
    tags = tag_bins(15, 245)
    assert len(tags) == 256
    assert tags.count(BIN_UNDER) == 15
    assert tags.count(BIN_OVER) == 10
