"""
EV 平滑与 AE 锁定
两者是测光引擎中仅有的跨周期状态，由引擎实例持有
"""
import math
from typing import Optional, Tuple

from . import config


class ExposureSmoother:
    """
    指数移动平均 (单极点 IIR 低通)

    首个样本直接作为初值，此后 s = s * (1 - alpha) + ev * alpha。
    平滑结果仅用于显示。
    """

    def __init__(self, alpha: float = config.DEFAULT_SMOOTHING_FACTOR):
        if not 0.0 < alpha < 1.0:
            raise ValueError(f"alpha must be in (0, 1), got {alpha}")
        self.alpha = alpha
        self.value: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.value is not None

    def update(self, ev: float, alpha: Optional[float] = None) -> Optional[float]:
        # 非有限值 (-inf) 不进入滤波器，否则状态无法恢复
        if not math.isfinite(ev):
            return self.value
        if alpha is not None:
            self.alpha = alpha

        if self.value is None:
            self.value = ev
        else:
            self.value = self.value * (1 - self.alpha) + ev * self.alpha
        return self.value

    def reset(self):
        self.value = None


class AELock:
    """
    AE 锁定：显式的两态开关，无超时

    锁定时捕获一次 (有效 EV, 平滑 EV)，之后显示值与解析目标都固定在捕获值上；
    底层的实时 EV 和平滑器照常运行，解锁后下一周期即恢复跟踪。
    """

    def __init__(self):
        self.engaged = False
        self._captured: Optional[Tuple[float, float]] = None

    @property
    def captured(self) -> Optional[Tuple[float, float]]:
        return self._captured

    def engage(self, effective_ev: Optional[float] = None, smoothed_ev: Optional[float] = None):
        """锁定；未提供数值时在下一次 apply 时捕获"""
        if self.engaged:
            return
        self.engaged = True
        if effective_ev is not None and smoothed_ev is not None:
            self._captured = (effective_ev, smoothed_ev)

    def release(self):
        """解锁；未锁定时无操作"""
        self.engaged = False
        self._captured = None

    def toggle(self, effective_ev: Optional[float] = None, smoothed_ev: Optional[float] = None) -> bool:
        if self.engaged:
            self.release()
        else:
            self.engage(effective_ev, smoothed_ev)
        return self.engaged

    def apply(self, effective_ev: float, smoothed_ev: float) -> Tuple[float, float]:
        """
        返回本周期用于解析与显示的 (目标 EV, 显示 EV)

        未锁定时原样返回实时值。
        """
        if not self.engaged:
            return effective_ev, smoothed_ev
        if self._captured is None:
            self._captured = (effective_ev, smoothed_ev)
        return self._captured
