"""
测光策略模块
使用策略模式实现中央重点与点测光，输出 0-255 的编码亮度
"""
from typing import Protocol, Optional

import numpy as np

from . import config, utils
from .logger import Logger
from .models import CalibrationProfile, Frame, MeteringRegion


class MeteringStrategy(Protocol):
    """测光策略接口"""

    region_fraction: float

    def measure(
        self,
        frame: Frame,
        profile: CalibrationProfile,
        logger: Optional[Logger] = None
    ) -> float:
        """
        测量画面亮度

        Args:
            frame: 当前帧
            profile: 校准档案（传递函数与亮度系数）
            logger: 日志处理器

        Returns:
            float: 0-255 的编码亮度；帧未就绪时返回 0
        """
        ...


def _prepare_region(frame: Frame, fraction: float):
    """降采样到工作尺寸并裁出居中的测光区域"""
    working = utils.get_working_view(frame.pixels)
    h, w = working.shape[0], working.shape[1]
    region = MeteringRegion.centered(w, h, fraction)
    return region, region.crop(working)


def _measure_region(block: np.ndarray, profile: CalibrationProfile, sigma: float) -> float:
    decode_lut = utils.get_decode_lut(profile.transfer_function)
    coeffs = utils.get_luminance_coeffs(profile.sampler_luma)
    avg_linear = utils.region_mean_luminance(block, decode_lut, coeffs, float(sigma))
    return utils.encode_brightness(avg_linear, profile.transfer_function)


class CenterWeightedMeteringStrategy:
    """中央重点测光策略：中央 20% 区域，高斯加权 (sigma = 区域宽度 / 4)"""

    region_fraction = config.METERING_REGION_FRACTIONS['center']

    def measure(
        self,
        frame: Frame,
        profile: CalibrationProfile,
        logger: Optional[Logger] = None
    ) -> float:
        if not frame.is_ready:
            return 0.0

        region, block = _prepare_region(frame, self.region_fraction)
        brightness = _measure_region(block, profile, region.width / 4)

        if logger:
            logger.debug(f"  🎯 [Metering] Center-Weighted {region.width}x{region.height}: {brightness:.2f}")

        return brightness


class SpotMeteringStrategy:
    """点测光策略：中央 5% 区域，均匀采样"""

    region_fraction = config.METERING_REGION_FRACTIONS['spot']

    def measure(
        self,
        frame: Frame,
        profile: CalibrationProfile,
        logger: Optional[Logger] = None
    ) -> float:
        if not frame.is_ready:
            return 0.0

        region, block = _prepare_region(frame, self.region_fraction)
        brightness = _measure_region(block, profile, 0.0)

        if logger:
            logger.debug(f"  🔘 [Metering] Spot {region.width}x{region.height}: {brightness:.2f}")

        return brightness


# 策略注册表
METERING_STRATEGIES = {
    'center': CenterWeightedMeteringStrategy(),
    'spot': SpotMeteringStrategy(),
}


def get_metering_strategy(mode: str) -> MeteringStrategy:
    """
    获取测光策略

    Args:
        mode: 测光模式名称

    Returns:
        MeteringStrategy: 对应的测光策略实例

    Raises:
        ValueError: 如果模式不存在
    """
    strategy = METERING_STRATEGIES.get(mode)
    if strategy is None:
        raise ValueError(f"Unknown metering mode: {mode}")
    return strategy


def compute_brightness(
    frame: Frame,
    metering_mode: str = config.DEFAULT_METERING_MODE,
    profile: Optional[CalibrationProfile] = None,
    logger: Optional[Logger] = None
) -> float:
    """
    按测光模式计算画面亮度

    Args:
        frame: 当前帧
        metering_mode: 测光模式
        profile: 校准档案，None 时使用默认档案
        logger: 日志处理器

    Returns:
        float: 0-255 的编码亮度
    """
    strategy = get_metering_strategy(metering_mode)
    return strategy.measure(frame, profile or CalibrationProfile(), logger)
