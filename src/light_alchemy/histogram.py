"""
直方图模块
对同一帧做步长采样，生成合成亮度直方图或 RGB 分通道直方图，并计算 Zone System 标注
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from . import config, utils
from .models import CalibrationProfile, Frame

BIN_UNDER = 'under'
BIN_NEUTRAL = 'neutral'
BIN_OVER = 'over'


@dataclass(frozen=True)
class ZoneMarker:
    zone: int
    brightness: float
    # 标注在 0-255 轴上的位置，超出范围时钳位到 255
    position: float
    clipped: bool


@dataclass(frozen=True)
class HistogramResult:
    mode: str
    sample_count: int
    counts: Optional[np.ndarray]
    channels: Optional[np.ndarray]
    bin_tags: Optional[Tuple[str, ...]]
    markers: Tuple[ZoneMarker, ...]
    clipped: bool
    clipped_low: bool

    @property
    def total(self) -> int:
        """合成模式为全部 bin 之和；分通道模式为单个通道之和"""
        if self.counts is not None:
            return int(self.counts.sum())
        return int(self.channels[0].sum())


def tag_bins(under_threshold: int, over_threshold: int) -> Tuple[str, ...]:
    """按阈值给每个 bin 上色：高于过曝阈值为 over，低于欠曝阈值为 under"""
    tags = []
    for i in range(config.HISTOGRAM_BINS):
        if i > over_threshold:
            tags.append(BIN_OVER)
        elif i < under_threshold:
            tags.append(BIN_UNDER)
        else:
            tags.append(BIN_NEUTRAL)
    return tuple(tags)


def zone_markers(reference_gray: float, zones: Sequence[int] = config.ZONE_MARKERS) -> Tuple[ZoneMarker, ...]:
    """Zone N 对应亮度 = referenceGray * 2^(N - 5)"""
    markers = []
    for zone in zones:
        brightness = reference_gray * 2.0 ** (zone - 5)
        markers.append(ZoneMarker(
            zone=zone,
            brightness=brightness,
            position=min(brightness, 255.0),
            clipped=brightness > 255,
        ))
    return tuple(markers)


def _flatten(frame: Frame) -> np.ndarray:
    working = utils.get_working_view(frame.pixels)
    if not working.flags['C_CONTIGUOUS']:
        working = np.ascontiguousarray(working)
    return working.reshape(-1, working.shape[2])


def compute_histogram(
    frame: Frame,
    compensation: float = config.DEFAULT_COMPENSATION,
    profile: Optional[CalibrationProfile] = None,
    color_channel_mode: str = config.DEFAULT_COLOR_CHANNEL_MODE,
    stride: int = config.HISTOGRAM_STRIDE,
) -> HistogramResult:
    """
    计算显示用直方图

    Args:
        frame: 当前帧
        compensation: 曝光补偿 (EV)，合成模式下以 2^compensation 作为增益
        profile: 校准档案（阈值、灰卡值、亮度系数）
        color_channel_mode: 'combined' 或 'separate'
        stride: 采样步长，默认每隔一个像素

    Returns:
        HistogramResult: 直方图计数、Zone 标注与裁切标记
    """
    profile = profile or CalibrationProfile()
    if color_channel_mode not in config.COLOR_CHANNEL_MODES:
        raise ValueError(f"Unknown color channel mode: {color_channel_mode}")

    markers = zone_markers(profile.reference_gray)
    clipped = any(m.clipped for m in markers)
    clipped_low = any(m.brightness < 1 for m in markers)

    if not frame.is_ready:
        flat = np.zeros((0, 3), dtype=np.uint8)
    else:
        flat = _flatten(frame)
    sample_count = (flat.shape[0] + stride - 1) // stride

    if color_channel_mode == 'separate':
        channels = utils.channel_histograms(flat, stride)
        return HistogramResult(
            mode=color_channel_mode,
            sample_count=sample_count,
            counts=None,
            channels=channels,
            bin_tags=None,
            markers=markers,
            clipped=clipped,
            clipped_low=clipped_low,
        )

    weights = utils.get_luminance_weights_permille(profile.histogram_luma)
    gain = 2.0 ** compensation
    counts = utils.luma_histogram(flat, weights, gain, stride)
    return HistogramResult(
        mode=color_channel_mode,
        sample_count=sample_count,
        counts=counts,
        channels=None,
        bin_tags=tag_bins(profile.under_exposure_threshold, profile.over_exposure_threshold),
        markers=markers,
        clipped=clipped,
        clipped_low=clipped_low,
    )
