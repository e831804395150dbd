# __init__.py
"""
Light Alchemy - 胶片相机测光工具包
"""

from .config import METERING_MODES, SHUTTER_SPEEDS, APERTURES, ISO_OPTIONS
from .logger import Logger, create_logger
from .models import (
    Frame, MeteringRegion, CalibrationProfile, ExposureConfig, Candidate,
    ExposureReading, TickResult, TickStatus, SceneCondition, Severity,
    ConfigurationError, AxisMissError,
)
from .metering import get_metering_strategy, compute_brightness
from .exposure import CandidateTable, calculate_effective_ev, resolve_exposure, describe_scene
from .smoothing import ExposureSmoother, AELock
from .classifier import classify_deviation, classify_drift
from .histogram import compute_histogram, HistogramResult
from .engine import MeteringEngine

__all__ = [
    # 配置
    'METERING_MODES',
    'SHUTTER_SPEEDS',
    'APERTURES',
    'ISO_OPTIONS',
    # 日志
    'Logger',
    'create_logger',
    # 数据模型
    'Frame',
    'MeteringRegion',
    'CalibrationProfile',
    'ExposureConfig',
    'Candidate',
    'ExposureReading',
    'TickResult',
    'TickStatus',
    'SceneCondition',
    'Severity',
    'ConfigurationError',
    'AxisMissError',
    # 测光
    'get_metering_strategy',
    'compute_brightness',
    # 曝光计算
    'CandidateTable',
    'calculate_effective_ev',
    'resolve_exposure',
    'describe_scene',
    # 平滑与锁定
    'ExposureSmoother',
    'AELock',
    # 分级
    'classify_deviation',
    'classify_drift',
    # 直方图
    'compute_histogram',
    'HistogramResult',
    # 引擎
    'MeteringEngine',
]
