import os
import threading
import time
from typing import Callable, List, Optional

import numpy as np
from matplotlib import image as mpimg

from . import config
from .engine import MeteringEngine
from .logger import create_logger
from .models import CalibrationProfile, ExposureConfig, Frame, TickResult, TickStatus
from .render import render_histogram
from .utils import format_aperture, format_shutter


def load_frame(path: str) -> Frame:
    """
    读取图像文件为 8-bit 帧。
    PNG 由 matplotlib 读成 0-1 浮点，其它格式 (经 Pillow) 为 uint8；灰度图扩展为 RGB。
    """
    img = mpimg.imread(path)
    if img.dtype != np.uint8:
        img = (np.clip(img, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
    if img.ndim == 2:
        img = np.stack([img, img, img], axis=-1)
    elif img.shape[2] == 2:
        # 灰度 + Alpha
        img = np.stack([img[..., 0]] * 3 + [img[..., 1]], axis=-1)
    return Frame(np.ascontiguousarray(img))


def list_frames(input_path: str) -> List[str]:
    """目录中的图像按文件名排序，视为连续的测光周期"""
    if not os.path.isdir(input_path):
        return [input_path]
    return sorted(
        os.path.join(input_path, f)
        for f in os.listdir(input_path)
        if os.path.splitext(f)[1].lower() in config.SUPPORTED_IMAGE_EXTENSIONS
    )


def summarize(result: TickResult) -> str:
    """单个测光周期的文字摘要"""
    if result.status is TickStatus.NOT_READY:
        return "⏳ Frame not ready"
    if result.status is TickStatus.OUT_OF_RANGE:
        return f"⚠️ {result.scene_condition.message}"
    reading = result.reading
    lock_flag = " 🔒" if reading.locked else ""
    return (
        f"📷 {format_shutter(reading.shutter)} @ {format_aperture(reading.aperture)} | "
        f"EV {reading.smoothed_ev:.1f} | diff {abs(reading.ev_difference):.1f} EV | "
        f"{result.classification.label} | {result.scene_description}{lock_flag}"
    )


def process_path(
    input_path,
    exposure_config: ExposureConfig,
    profile: Optional[CalibrationProfile] = None,
    histogram_dir: Optional[str] = None,
    lock_after: Optional[int] = None,
    logger_func=None,  # 日志输出，例如 print、click.echo 或队列
    verbose: bool = False,
    strict: bool = False,
) -> List[TickResult]:
    """
    对单个图像或目录中的图像序列逐帧测光。
    每个文件是一个测光周期，平滑与 AE 锁定状态在周期之间延续。
    strict 为 True 时首个失败的帧 (读取失败、AxisMissError 等) 会中止整个批处理。
    """
    logger = create_logger(logger_func, verbose=verbose)
    engine = MeteringEngine(profile=profile, logger=None, strict=strict)

    frame_paths = list_frames(input_path)
    if not frame_paths:
        logger.warning("⚠️ No supported image files found in the input directory.")
        raise ValueError("No image files found.")

    if histogram_dir:
        os.makedirs(histogram_dir, exist_ok=True)

    logger.info(f"🔍 Metering {len(frame_paths)} frame(s) "
                f"({exposure_config.metering_mode}, ISO {exposure_config.iso}, "
                f"{exposure_config.compensation:+.0f} EV, {exposure_config.priority_mode} priority)")

    results = []
    for index, frame_path in enumerate(frame_paths):
        filename = os.path.basename(frame_path)
        frame_logger = logger.bind(filename)
        engine.logger = frame_logger

        if lock_after is not None and index == lock_after:
            engine.lock()

        try:
            frame = load_frame(frame_path)
            result = engine.tick(frame, exposure_config)
        except Exception as exc:
            frame_logger.error(f"❌ Generated an exception: {exc}")
            if strict:
                raise
            # 非 strict 模式下单帧失败不影响后续帧
            continue

        results.append(result)
        frame_logger.info(summarize(result))

        if histogram_dir and result.histogram is not None:
            out_path = os.path.join(histogram_dir, f"{os.path.splitext(filename)[0]}_histogram.png")
            render_histogram(result.histogram, out_path, title=filename)
            frame_logger.debug(f"💾 Histogram saved to {os.path.basename(out_path)}")

    logger.success(f"\n🎉 Metering complete. {len(results)}/{len(frame_paths)} frame(s) processed.")
    return results


class MeterLoop:
    """
    周期性测光调度器 (主机侧)

    按固定间隔从 frame_source 取帧并调用 engine.tick，结果交给 on_result。
    tick 在同一线程内串行执行；stop() 是唯一的取消方式。
    """

    def __init__(
        self,
        engine: MeteringEngine,
        frame_source: Callable[[], Frame],
        config_source: Callable[[], ExposureConfig],
        on_result: Callable[[TickResult], None],
        interval: float = config.DEFAULT_TICK_INTERVAL,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.engine = engine
        self.frame_source = frame_source
        self.config_source = config_source
        self.on_result = on_result
        self.interval = interval
        self._stop_event = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self):
        self._stop_event.set()

    def run_once(self) -> TickResult:
        # 配置在 tick 开始时取一次快照
        exposure_config = self.config_source()
        result = self.engine.tick(self.frame_source(), exposure_config)
        self.on_result(result)
        return result

    def run(self, max_ticks: Optional[int] = None):
        """阻塞运行，直到 stop() 或达到 max_ticks (失败的周期也计入)"""
        ticks = 0
        while not self._stop_event.is_set():
            started = time.monotonic()
            try:
                self.run_once()
            except Exception as exc:
                # 单次失败只影响本周期，下一周期照常测光
                if self.engine.logger:
                    self.engine.logger.error(f"❌ Generated an exception: {exc}")
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            remaining = self.interval - (time.monotonic() - started)
            if remaining > 0:
                self._stop_event.wait(remaining)

    def start(self) -> threading.Thread:
        """在后台线程中运行"""
        self._stop_event.clear()
        thread = threading.Thread(target=self.run, daemon=True)
        thread.start()
        return thread
