import math
from functools import lru_cache

import colour
import numpy as np
from numba import njit

from . import config


# =========================================================
# Numba 加速核函数 (逐像素循环)
# =========================================================

@njit(cache=True, fastmath=True)
def region_mean_luminance(region, decode_lut, coeffs, sigma):
    """
    测光区域的线性亮度均值

    sigma > 0 时使用以区域中心为原点的高斯权重，否则为普通平均。
    解码查表只读取 RGB 三个通道，RGBA 的 Alpha 通道被忽略。
    """
    h = region.shape[0]
    w = region.shape[1]
    center_y = (h - 1) / 2.0
    center_x = (w - 1) / 2.0
    two_sigma_sq = 2.0 * sigma * sigma

    c_r = coeffs[0]
    c_g = coeffs[1]
    c_b = coeffs[2]

    total = 0.0
    count = 0.0
    for y in range(h):
        for x in range(w):
            r = decode_lut[region[y, x, 0]]
            g = decode_lut[region[y, x, 1]]
            b = decode_lut[region[y, x, 2]]
            luminance = c_r * r + c_g * g + c_b * b

            if sigma > 0.0:
                dx = x - center_x
                dy = y - center_y
                weight = math.exp(-(dx * dx + dy * dy) / two_sigma_sq)
            else:
                weight = 1.0

            total += luminance * weight
            count += weight

    if count == 0.0:
        return 0.0
    return total / count


@njit(cache=True)
def luma_histogram(flat_img, weights_permille, gain, stride):
    """
    合成亮度直方图 (256 bins)

    亮度使用千分比整数权重计算并向下取整，再乘以补偿增益，
    四舍五入 (0.5 进位) 后钳位到 [0, 255]。
    """
    counts = np.zeros(256, dtype=np.int64)
    n_pixels = flat_img.shape[0]

    w_r = weights_permille[0]
    w_g = weights_permille[1]
    w_b = weights_permille[2]

    for i in range(0, n_pixels, stride):
        luma = (w_r * flat_img[i, 0] + w_g * flat_img[i, 1] + w_b * flat_img[i, 2]) // 1000
        adjusted = int(math.floor(luma * gain + 0.5))
        if adjusted > 255:
            adjusted = 255
        elif adjusted < 0:
            adjusted = 0
        counts[adjusted] += 1

    return counts


@njit(cache=True)
def channel_histograms(flat_img, stride):
    """R/G/B 三通道独立直方图，使用未经调整的原始通道值"""
    counts = np.zeros((3, 256), dtype=np.int64)
    n_pixels = flat_img.shape[0]

    for i in range(0, n_pixels, stride):
        counts[0, flat_img[i, 0]] += 1
        counts[1, flat_img[i, 1]] += 1
        counts[2, flat_img[i, 2]] += 1

    return counts


# =========================================================
# 辅助计算函数
# =========================================================

def get_luminance_coeffs(standard: str) -> np.ndarray:
    """
    从 colour 的 YCbCr 权重表中取出 RGB -> Y 的亮度系数

    WEIGHTS_YCBCR 只给出 Kr 与 Kb，Kg = 1 - Kr - Kb。
    """
    if standard not in colour.WEIGHTS_YCBCR:
        raise ValueError(f"Unknown luma standard: {standard}")
    kr, kb = colour.WEIGHTS_YCBCR[standard]
    return np.array([kr, 1.0 - kr - kb, kb], dtype=np.float64)


def get_luminance_weights_permille(standard: str) -> np.ndarray:
    """整数 (千分比) 亮度权重，例如 BT.601 -> [299, 587, 114]"""
    return np.round(get_luminance_coeffs(standard) * 1000).astype(np.int64)


def _decode(values, transfer_function):
    if transfer_function == 'sRGB':
        return colour.cctf_decoding(values, function='sRGB')
    return colour.models.gamma_function(values, 2.2)


def _encode(values, transfer_function):
    if transfer_function == 'sRGB':
        return colour.cctf_encoding(values, function='sRGB')
    return colour.models.gamma_function(values, 1 / 2.2)


@lru_cache(maxsize=None)
def get_decode_lut(transfer_function: str = 'gamma-2.2') -> np.ndarray:
    """8-bit 编码值 -> 线性强度 (0-1) 的查找表，每种传递函数只构建一次"""
    values = np.arange(256, dtype=np.float64) / 255.0
    lut = np.asarray(_decode(values, transfer_function), dtype=np.float64)
    lut.flags.writeable = False
    return lut


def encode_brightness(linear: float, transfer_function: str = 'gamma-2.2') -> float:
    """线性均值重新编码到 0-255 的亮度值"""
    if linear <= 0.0:
        return 0.0
    encoded = float(_encode(min(linear, 1.0), transfer_function))
    return encoded * 255.0


def get_working_view(img: np.ndarray,
                     max_width: int = config.WORKING_MAX_WIDTH,
                     max_height: int = config.WORKING_MAX_HEIGHT) -> np.ndarray:
    """
    获取限定尺寸的工作缓冲区。
    保持宽高比，长宽不超过 max_width x max_height；使用最近邻索引重采样。
    """
    h, w = img.shape[0], img.shape[1]
    scale = min(1.0, max_width / w, max_height / h)
    if scale >= 1.0:
        return img

    out_w = max(1, int(round(w * scale)))
    out_h = max(1, int(round(h * scale)))
    rows = (np.arange(out_h) * h) // out_h
    cols = (np.arange(out_w) * w) // out_w
    return img[np.ix_(rows, cols)]


# =========================================================
# 显示格式化
# =========================================================

def format_shutter(seconds: float) -> str:
    """快门速度显示文本: 1/125 sec, 1 sec；无效值显示 --"""
    if not seconds or seconds <= 0:
        return '--'
    if seconds < 1:
        return f"1/{round(1 / seconds)} sec"
    return f"{seconds:.1f}".removesuffix('.0') + " sec"


def format_aperture(f_number: float) -> str:
    """光圈显示文本: f/2.8, f/8；无效值显示 --"""
    if not f_number or f_number <= 0:
        return '--'
    if f_number % 1 == 0:
        return f"f/{f_number:.0f}"
    return f"f/{f_number:.1f}"
