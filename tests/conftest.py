import numpy as np
import pytest

from light_alchemy.models import CalibrationProfile, ExposureConfig, Frame


def make_frame(value, width=64, height=48, channels=3):
    """纯色帧；value 为标量或 (r, g, b)"""
    pixels = np.empty((height, width, channels), dtype=np.uint8)
    pixels[...] = 255
    pixels[..., :3] = value
    return Frame(pixels)


@pytest.fixture
def random_frame():
    rng = np.random.default_rng(1234)

    def _make(width=53, height=37, channels=3):
        pixels = rng.integers(0, 256, size=(height, width, channels), dtype=np.uint8)
        return Frame(pixels)

    return _make


@pytest.fixture
def unit_profile():
    """灰卡值 128、基准 EV 7 的校准档案，便于手算"""
    return CalibrationProfile(reference_gray=128, reference_ev=7)


@pytest.fixture
def aperture_config():
    return ExposureConfig(priority_mode='aperture', chosen_aperture=5.6)
