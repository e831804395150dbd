"""
曝光偏差分级
"""
import math

from . import config
from .models import Classification, DriftLevel, Severity

SLIGHT, MODERATE, SEVERE = config.DEVIATION_BANDS

ADVISORIES = {
    Severity.SEVERE_UNDER: 'Exposure out of range! Consider adjusting aperture or ISO.',
    Severity.MODERATE_UNDER: 'Underexposed by more than half a stop. Open up or raise ISO.',
    Severity.SLIGHT_UNDER: 'Slightly underexposed.',
    Severity.NONE: 'Exposure balanced.',
    Severity.SLIGHT_OVER: 'Slightly overexposed.',
    Severity.MODERATE_OVER: 'Overexposed by more than half a stop. Stop down or lower ISO.',
    Severity.SEVERE_OVER: 'Exposure out of range! Consider adjusting aperture or ISO.',
}


def classify_deviation(ev_difference: float) -> Classification:
    """
    按有符号 EV 偏差分级 (候选 EV - 目标 EV)

    欠曝侧包含上边界 (-0.6 属于中等欠曝)，过曝侧包含下边界 (0.6 属于中等过曝)。
    """
    d = ev_difference
    if math.isnan(d):
        raise ValueError("ev_difference must not be NaN")

    if d <= -SEVERE:
        severity = Severity.SEVERE_UNDER
    elif d <= -MODERATE:
        severity = Severity.MODERATE_UNDER
    elif d <= -SLIGHT:
        severity = Severity.SLIGHT_UNDER
    elif d < SLIGHT:
        severity = Severity.NONE
    elif d < MODERATE:
        severity = Severity.SLIGHT_OVER
    elif d < SEVERE:
        severity = Severity.MODERATE_OVER
    else:
        severity = Severity.SEVERE_OVER

    return Classification(severity, ADVISORIES[severity])


def classify_drift(smoothed_ev: float, effective_ev: float) -> DriftLevel:
    """平滑 EV 与实时 EV 的差值：< 1 EV 稳定，>= 1 EV 收敛中，>= 2 EV 不稳定"""
    drift = abs(smoothed_ev - effective_ev)
    if drift >= config.DRIFT_UNSTABLE:
        return DriftLevel.UNSTABLE
    elif drift >= config.DRIFT_SETTLING:
        return DriftLevel.SETTLING
    return DriftLevel.STABLE
