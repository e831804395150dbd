"""
曝光计算模块
EV 计算、快门/光圈候选表以及沿固定轴的最近候选解析
"""
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from . import config
from .logger import Logger
from .models import AxisMissError, CalibrationProfile, Candidate


# ==========================================
#              EV 计算
# ==========================================

def calculate_effective_ev(
    brightness: float,
    iso: int,
    compensation: float,
    calibration_factor: float = config.DEFAULT_CALIBRATION_FACTOR,
    reference_gray: float = config.DEFAULT_REFERENCE_GRAY,
    reference_ev: float = config.DEFAULT_REFERENCE_EV,
) -> float:
    """
    计算有效 EV

    公式: EV = referenceEV + log2((brightness * calibrationFactor) / referenceGray)
              + log2(ISO / 100) + compensation

    Returns:
        float: 有效 EV；brightness <= 0 时返回 -inf（无法测光）
    """
    if brightness <= 0:
        return -math.inf
    measured_ev = (
        reference_ev
        + math.log2((brightness * calibration_factor) / reference_gray)
        + math.log2(iso / 100)
    )
    return measured_ev + compensation


def calculate_profile_ev(brightness: float, iso: int, compensation: float, profile: CalibrationProfile) -> float:
    """使用校准档案中的常量计算有效 EV"""
    return calculate_effective_ev(
        brightness,
        iso,
        compensation,
        calibration_factor=profile.calibration_factor,
        reference_gray=profile.reference_gray,
        reference_ev=profile.reference_ev,
    )


def describe_scene(ev: float) -> str:
    """根据 EV 值返回场景描述"""
    if ev >= 15:
        return 'Bright outdoor (Sunny)'
    elif ev >= 12:
        return 'Outdoor overcast / bright indoor'
    elif ev >= 9:
        return 'Indoor (normal lighting)'
    elif ev >= 7:
        return 'Dim indoor / night street'
    return 'Very low light'


# ==========================================
#              候选表
# ==========================================

class CandidateTable:
    """
    快门 x 光圈 的全部组合 (默认 11 x 9 = 99)

    EV = log2(aperture^2 / shutter)。构建后只读，可在各测光周期间共享。
    """

    def __init__(
        self,
        shutter_speeds: Sequence[float] = config.SHUTTER_SPEEDS,
        apertures: Sequence[float] = config.APERTURES,
    ):
        self.candidates = tuple(
            Candidate(s, a, math.log2((a * a) / s))
            for s in shutter_speeds
            for a in apertures
        )
        self._shutters = np.array([c.shutter for c in self.candidates], dtype=np.float64)
        self._apertures = np.array([c.aperture for c in self.candidates], dtype=np.float64)
        self._evs = np.array([c.ev for c in self.candidates], dtype=np.float64)
        for arr in (self._shutters, self._apertures, self._evs):
            arr.flags.writeable = False

    def __len__(self):
        return len(self.candidates)

    def __iter__(self):
        return iter(self.candidates)

    def along_axis(self, priority_mode: str, value: float) -> np.ndarray:
        """
        固定轴上的候选下标，按另一轴的取值升序排列

        快门优先时固定快门、按光圈排序；光圈优先时固定光圈、按快门排序。
        """
        if priority_mode == 'shutter':
            fixed, opposite = self._shutters, self._apertures
        elif priority_mode == 'aperture':
            fixed, opposite = self._apertures, self._shutters
        else:
            raise ValueError(f"Unknown priority mode: {priority_mode}")

        # 两边的值来自同一张字面量表，直接比较相等即可
        indices = np.flatnonzero(fixed == value)
        return indices[np.argsort(opposite[indices], kind='stable')]

    def evs(self, indices: np.ndarray) -> np.ndarray:
        return self._evs[indices]


@dataclass(frozen=True)
class ExposureResolution:
    candidate: Optional[Candidate]
    shutter: float
    aperture: float
    ev_difference: float


def resolve_exposure(
    effective_ev: float,
    table: CandidateTable,
    priority_mode: str,
    fixed_value: float,
    strict: bool = False,
    logger: Optional[Logger] = None,
) -> ExposureResolution:
    """
    在固定轴上选择 EV 最接近的候选组合

    距离相同时取另一轴取值较小者（候选已按升序排列，argmin 取第一个最小值）。

    Args:
        effective_ev: 目标 EV
        table: 候选表
        priority_mode: 'shutter' 或 'aperture'
        fixed_value: 用户选择的快门（秒）或光圈（f 值）
        strict: 固定值不在表中时是否抛出异常
        logger: 日志处理器

    Returns:
        ExposureResolution: 解析结果；ev_difference = 候选 EV - 目标 EV

    Raises:
        AxisMissError: strict 模式下固定值不在候选表中
    """
    indices = table.along_axis(priority_mode, fixed_value)

    if indices.size == 0:
        message = f"{priority_mode} value {fixed_value} is not in the candidate table"
        if strict:
            raise AxisMissError(message)
        if logger:
            logger.error(f"  ❌ [Resolver] {message}")
        return ExposureResolution(None, 0.0, 0.0, 0.0)

    if not math.isfinite(effective_ev):
        # 无法测光：只保留用户固定的一轴
        if priority_mode == 'shutter':
            return ExposureResolution(None, fixed_value, 0.0, 0.0)
        return ExposureResolution(None, 0.0, fixed_value, 0.0)

    distances = np.abs(table.evs(indices) - effective_ev)
    best = table.candidates[int(indices[int(np.argmin(distances))])]

    return ExposureResolution(
        candidate=best,
        shutter=best.shutter,
        aperture=best.aperture,
        ev_difference=best.ev - effective_ev,
    )
