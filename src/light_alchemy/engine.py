from typing import Optional

from . import config
from .classifier import classify_deviation, classify_drift
from .exposure import CandidateTable, calculate_profile_ev, describe_scene, resolve_exposure
from .histogram import compute_histogram
from .logger import Logger
from .metering import get_metering_strategy
from .models import (
    CalibrationProfile, ExposureConfig, ExposureReading, Frame,
    SceneCondition, TickResult, TickStatus,
)
from .smoothing import AELock, ExposureSmoother
from .utils import format_aperture, format_shutter


def check_scene_range(
    brightness: float,
    min_brightness: float = config.SCENE_MIN_BRIGHTNESS,
    max_brightness: float = config.SCENE_MAX_BRIGHTNESS,
) -> Optional[SceneCondition]:
    """亮度超出可测光范围时返回对应的场景状态"""
    if brightness < min_brightness:
        return SceneCondition.TOO_DARK
    if brightness > max_brightness:
        return SceneCondition.TOO_BRIGHT
    return None


class MeteringEngine:
    """
    测光引擎

    每次 tick 完整执行：测光 -> EV 计算 -> 候选解析 -> 平滑 -> 偏差分级，
    直方图在同一 tick 内对同一帧独立计算。只有平滑器与 AE 锁定跨 tick 保存状态，
    调用方需保证 tick 串行执行。
    """

    def __init__(
        self,
        profile: Optional[CalibrationProfile] = None,
        candidates: Optional[CandidateTable] = None,
        logger: Optional[Logger] = None,
        strict: bool = False,
        min_brightness: float = config.SCENE_MIN_BRIGHTNESS,
        max_brightness: float = config.SCENE_MAX_BRIGHTNESS,
    ):
        self.profile = profile or CalibrationProfile()
        self.candidates = candidates or CandidateTable()
        self.logger = logger
        self.strict = strict
        self.min_brightness = min_brightness
        self.max_brightness = max_brightness

        self.smoother = ExposureSmoother()
        self.ae_lock = AELock()
        self.last_reading: Optional[ExposureReading] = None

    # --- 主机控制 ---

    def set_profile(self, profile: CalibrationProfile):
        self.profile = profile

    @property
    def is_locked(self) -> bool:
        return self.ae_lock.engaged

    def lock(self):
        """锁定当前曝光；尚无读数时在下一次成功测光时捕获"""
        if self.last_reading is not None:
            self.ae_lock.engage(self.last_reading.effective_ev, self.last_reading.smoothed_ev)
        else:
            self.ae_lock.engage()
        if self.logger:
            self.logger.info("  🔒 [AE Lock] Engaged")

    def unlock(self):
        if not self.ae_lock.engaged:
            return
        self.ae_lock.release()
        if self.logger:
            self.logger.info("  🔓 [AE Lock] Released")

    def toggle_lock(self) -> bool:
        if self.ae_lock.engaged:
            self.unlock()
        else:
            self.lock()
        return self.ae_lock.engaged

    def reset(self):
        """清空跨周期状态 (例如重新进入测光模式时)"""
        self.smoother.reset()
        self.ae_lock.release()
        self.last_reading = None

    # --- 测光周期 ---

    def tick(self, frame: Frame, exposure_config: ExposureConfig) -> TickResult:
        """
        执行一次完整的测光周期

        Args:
            frame: 当前帧快照
            exposure_config: 本周期的曝光配置快照

        Returns:
            TickResult: 读数、分级、直方图；场景超出范围时 reading 为 None
        """
        logger = self.logger
        profile = self.profile

        if not frame.is_ready:
            if logger:
                logger.debug("  ⏳ [Tick] Frame not ready, skipped.")
            return TickResult(status=TickStatus.NOT_READY)

        # --- Step 1: 测光 ---
        strategy = get_metering_strategy(exposure_config.metering_mode)
        brightness = strategy.measure(frame, profile, logger)

        # --- Step 2: 直方图 (独立于曝光计算) ---
        histogram = compute_histogram(
            frame,
            compensation=exposure_config.compensation,
            profile=profile,
            color_channel_mode=exposure_config.color_channel_mode,
        )

        # --- Step 3: 场景范围检查 ---
        condition = check_scene_range(brightness, self.min_brightness, self.max_brightness)
        if condition is not None:
            if logger:
                logger.warning(f"  ⚠️  [Tick] {condition.message} (brightness {brightness:.1f})")
            return TickResult(
                status=TickStatus.OUT_OF_RANGE,
                brightness=brightness,
                scene_condition=condition,
                histogram=histogram,
            )

        # --- Step 4: EV 计算与平滑 ---
        effective_ev = calculate_profile_ev(
            brightness, exposure_config.iso, exposure_config.compensation, profile
        )
        smoothed_ev = self.smoother.update(effective_ev, exposure_config.smoothing_factor)
        if smoothed_ev is None:
            # 平滑器尚未收到有限样本 (亮度为 0)
            smoothed_ev = effective_ev
        target_ev, display_ev = self.ae_lock.apply(effective_ev, smoothed_ev)

        # --- Step 5: 候选解析 ---
        resolution = resolve_exposure(
            target_ev,
            self.candidates,
            exposure_config.priority_mode,
            exposure_config.fixed_axis_value,
            strict=self.strict,
            logger=logger,
        )

        reading = ExposureReading(
            shutter=resolution.shutter,
            aperture=resolution.aperture,
            effective_ev=effective_ev,
            smoothed_ev=display_ev,
            ev_difference=resolution.ev_difference,
            locked=self.ae_lock.engaged,
        )
        self.last_reading = reading

        # --- Step 6: 分级 ---
        classification = classify_deviation(reading.ev_difference)

        if logger:
            logger.info(
                f"  📷 [Tick] {format_shutter(reading.shutter)} @ {format_aperture(reading.aperture)} "
                f"| EV {display_ev:.1f} (raw {effective_ev:.2f}) | {classification.label}"
                + (" | 🔒" if reading.locked else "")
            )

        return TickResult(
            status=TickStatus.METERED,
            brightness=brightness,
            reading=reading,
            classification=classification,
            histogram=histogram,
            drift=classify_drift(display_ev, effective_ev),
            scene_description=describe_scene(display_ev),
        )
