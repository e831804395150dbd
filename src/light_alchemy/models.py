"""
数据模型
帧、测光区域、校准档案、曝光配置以及每次测光输出的记录类型
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, Optional

import numpy as np

from . import config

if TYPE_CHECKING:
    from .histogram import HistogramResult


class ConfigurationError(ValueError):
    """配置值不在允许的选项表或范围内"""


class AxisMissError(LookupError):
    """固定轴的取值在候选表中不存在（配置契约被破坏）"""


# ==========================================
#              帧与区域
# ==========================================

@dataclass(frozen=True)
class Frame:
    """
    一帧已解码的 8-bit 图像

    Args:
        pixels: (H, W, 3) RGB 或 (H, W, 4) RGBA 的 uint8 数组
        ready: 帧是否可用（未解码/暂停的视频帧为 False）
    """
    pixels: np.ndarray
    ready: bool = True

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] not in (3, 4):
            raise ValueError(f"Frame must be HxWx3 or HxWx4, got shape {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Frame must be uint8, got {self.pixels.dtype}")

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def is_ready(self) -> bool:
        return self.ready and self.width > 0 and self.height > 0

    @classmethod
    def blank(cls) -> "Frame":
        """未就绪的空帧"""
        return cls(np.zeros((0, 0, 4), dtype=np.uint8), ready=False)


@dataclass(frozen=True)
class MeteringRegion:
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def centered(cls, frame_width: int, frame_height: int, fraction: float) -> "MeteringRegion":
        """居中的测光区域，小于 1 像素时向上取整为 1x1"""
        width = max(1, int(round(frame_width * fraction)))
        height = max(1, int(round(frame_height * fraction)))
        width = min(width, max(frame_width, 1))
        height = min(height, max(frame_height, 1))
        x = (frame_width - width) // 2
        y = (frame_height - height) // 2
        return cls(max(x, 0), max(y, 0), width, height)

    def crop(self, img: np.ndarray) -> np.ndarray:
        return img[self.y:self.y + self.height, self.x:self.x + self.width]


# ==========================================
#              配置记录
# ==========================================

def _require(condition: bool, message: str):
    if not condition:
        raise ConfigurationError(message)


@dataclass(frozen=True)
class CalibrationProfile:
    """
    校准档案

    reference_gray 是 18% 灰卡的数字值，属于档案常量，不对用户开放。
    """
    calibration_factor: float = config.DEFAULT_CALIBRATION_FACTOR
    reference_gray: float = config.DEFAULT_REFERENCE_GRAY
    reference_ev: float = config.DEFAULT_REFERENCE_EV
    over_exposure_threshold: int = config.DEFAULT_OVER_EXPOSURE_THRESHOLD
    under_exposure_threshold: int = config.DEFAULT_UNDER_EXPOSURE_THRESHOLD
    transfer_function: str = 'gamma-2.2'
    sampler_luma: str = config.SAMPLER_LUMA_STANDARD
    histogram_luma: str = config.HISTOGRAM_LUMA_STANDARD

    def __post_init__(self):
        _require(
            config.CALIBRATION_FACTOR_MIN <= self.calibration_factor <= config.CALIBRATION_FACTOR_MAX,
            f"calibration_factor must be within "
            f"[{config.CALIBRATION_FACTOR_MIN}, {config.CALIBRATION_FACTOR_MAX}], got {self.calibration_factor}",
        )
        _require(0 < self.reference_gray <= 255, f"reference_gray must be in (0, 255], got {self.reference_gray}")
        _require(math.isfinite(self.reference_ev), f"reference_ev must be finite, got {self.reference_ev}")
        for name in ('over_exposure_threshold', 'under_exposure_threshold'):
            value = getattr(self, name)
            _require(0 <= value <= 255, f"{name} must be in [0, 255], got {value}")
        _require(
            self.under_exposure_threshold < self.over_exposure_threshold,
            "under_exposure_threshold must be below over_exposure_threshold",
        )
        _require(
            self.transfer_function in config.TRANSFER_FUNCTIONS,
            f"Unknown transfer function: {self.transfer_function}",
        )
        for name in ('sampler_luma', 'histogram_luma'):
            value = getattr(self, name)
            _require(value in config.LUMA_STANDARDS, f"Unknown {name} standard: {value}")


@dataclass(frozen=True)
class ExposureConfig:
    """用户曝光设置，由主机持有并在每个测光周期传入"""
    iso: int = config.DEFAULT_ISO
    compensation: float = config.DEFAULT_COMPENSATION
    priority_mode: str = config.DEFAULT_PRIORITY_MODE
    chosen_shutter: float = config.DEFAULT_SHUTTER
    chosen_aperture: float = config.DEFAULT_APERTURE
    metering_mode: str = config.DEFAULT_METERING_MODE
    smoothing_factor: float = config.DEFAULT_SMOOTHING_FACTOR
    color_channel_mode: str = config.DEFAULT_COLOR_CHANNEL_MODE

    def __post_init__(self):
        _require(self.iso in config.ISO_OPTIONS, f"Unsupported ISO: {self.iso}")
        _require(
            self.compensation in config.COMPENSATION_STEPS,
            f"Unsupported compensation: {self.compensation}",
        )
        _require(self.priority_mode in config.PRIORITY_MODES, f"Unknown priority mode: {self.priority_mode}")
        _require(self.chosen_shutter in config.SHUTTER_SPEEDS, f"Unsupported shutter: {self.chosen_shutter}")
        _require(self.chosen_aperture in config.APERTURES, f"Unsupported aperture: {self.chosen_aperture}")
        _require(self.metering_mode in config.METERING_MODES, f"Unknown metering mode: {self.metering_mode}")
        _require(
            0.0 < self.smoothing_factor < 1.0,
            f"smoothing_factor must be in (0, 1), got {self.smoothing_factor}",
        )
        _require(
            self.color_channel_mode in config.COLOR_CHANNEL_MODES,
            f"Unknown color channel mode: {self.color_channel_mode}",
        )

    @property
    def fixed_axis_value(self) -> float:
        if self.priority_mode == 'shutter':
            return self.chosen_shutter
        return self.chosen_aperture


# ==========================================
#              测光输出
# ==========================================

class Candidate(NamedTuple):
    shutter: float
    aperture: float
    ev: float


@dataclass(frozen=True)
class ExposureReading:
    shutter: float
    aperture: float
    effective_ev: float
    smoothed_ev: float
    ev_difference: float
    locked: bool = False


class Severity(Enum):
    SEVERE_UNDER = 'severe underexposure'
    MODERATE_UNDER = 'moderate underexposure'
    SLIGHT_UNDER = 'slight underexposure'
    NONE = 'none'
    SLIGHT_OVER = 'slight overexposure'
    MODERATE_OVER = 'moderate overexposure'
    SEVERE_OVER = 'severe overexposure'


@dataclass(frozen=True)
class Classification:
    severity: Severity
    advisory: str

    @property
    def label(self) -> str:
        return self.severity.value


class DriftLevel(Enum):
    STABLE = 'stable'
    SETTLING = 'settling'
    UNSTABLE = 'unstable'


class SceneCondition(Enum):
    TOO_DARK = 'Scene too dark: Use manual adjustments or increase ISO.'
    TOO_BRIGHT = 'Scene too bright: Consider reducing ISO or adjusting aperture.'

    @property
    def message(self) -> str:
        return self.value


class TickStatus(Enum):
    METERED = 'metered'
    OUT_OF_RANGE = 'out-of-range'
    NOT_READY = 'not-ready'


@dataclass(frozen=True)
class TickResult:
    status: TickStatus
    brightness: float = 0.0
    reading: Optional[ExposureReading] = None
    classification: Optional[Classification] = None
    scene_condition: Optional[SceneCondition] = None
    histogram: Optional["HistogramResult"] = None
    drift: Optional[DriftLevel] = None
    scene_description: Optional[str] = None
