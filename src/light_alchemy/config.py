"""
Light Alchemy 配置文件
包含曝光参数选项表、测光区域定义、直方图参数和主机默认值
"""

# ==========================================
#           曝光参数选项表
# ==========================================

# 快门速度上限为 1/1000 秒，符合机械快门胶片相机（如徕卡 M6）的实际情况
SHUTTER_SPEEDS = (
    1 / 1000,
    1 / 500,
    1 / 250,
    1 / 125,
    1 / 60,
    1 / 30,
    1 / 15,
    1 / 8,
    1 / 4,
    1 / 2,
    1,
)

APERTURES = (1.4, 2, 2.8, 4, 5.6, 8, 11, 16, 22)

ISO_OPTIONS = (64, 100, 125, 160, 200, 250, 320, 400, 500, 800, 1000, 1600, 3200)

# 曝光补偿档位 (EV)
COMPENSATION_STEPS = (-3.0, -2.0, -1.0, 0.0, 1.0, 2.0, 3.0)

PRIORITY_MODES = ['shutter', 'aperture']

# 测光模式选项
METERING_MODES = [
    'center',  # 中央重点 (中央 20%，高斯加权)
    'spot',    # 点测光 (中央 5%，均匀采样)
]

COLOR_CHANNEL_MODES = ['combined', 'separate']

TRANSFER_FUNCTIONS = ['gamma-2.2', 'sRGB']

# ==========================================
#           测光配置
# ==========================================

# 测光区域占画面尺寸的比例
METERING_REGION_FRACTIONS = {
    'center': 0.20,
    'spot': 0.05,
}

# 工作缓冲区上限 (降采样，限制计算量)
WORKING_MAX_WIDTH = 640
WORKING_MAX_HEIGHT = 480

# 亮度系数标准：测光用 BT.709，直方图显示用 BT.601
SAMPLER_LUMA_STANDARD = 'ITU-R BT.709'
HISTOGRAM_LUMA_STANDARD = 'ITU-R BT.601'
# colour.WEIGHTS_YCBCR 中可用的亮度标准
LUMA_STANDARDS = ['ITU-R BT.601', 'ITU-R BT.709', 'ITU-R BT.2020']

# 可测光的亮度范围 (0-255)，超出即视为场景过暗/过亮
SCENE_MIN_BRIGHTNESS = 5
SCENE_MAX_BRIGHTNESS = 250

# ==========================================
#           校准默认值
# ==========================================

# 18% 灰卡对应的数字值（ANSI 标准）及其基准 EV
DEFAULT_REFERENCE_GRAY = 118
DEFAULT_REFERENCE_EV = 12.7
DEFAULT_CALIBRATION_FACTOR = 1.0
CALIBRATION_FACTOR_MIN = 0.5
CALIBRATION_FACTOR_MAX = 1.5

DEFAULT_OVER_EXPOSURE_THRESHOLD = 245
DEFAULT_UNDER_EXPOSURE_THRESHOLD = 15

# ==========================================
#           直方图配置
# ==========================================

HISTOGRAM_BINS = 256
# 每隔一个像素采样
HISTOGRAM_STRIDE = 2
# Zone System 标注范围
ZONE_MARKERS = (2, 3, 4, 5, 6, 7)

# ==========================================
#           分级与主机默认值
# ==========================================

# 偏差分级阈值 (EV): 轻微 / 中等 / 严重
DEVIATION_BANDS = (0.3, 0.6, 1.0)

# 平滑 EV 与实时 EV 的差值分级 (EV)
DRIFT_SETTLING = 1.0
DRIFT_UNSTABLE = 2.0

DEFAULT_ISO = 100
DEFAULT_COMPENSATION = 0.0
DEFAULT_PRIORITY_MODE = 'shutter'
DEFAULT_SHUTTER = 1 / 125
DEFAULT_APERTURE = 2.8
DEFAULT_METERING_MODE = 'center'
DEFAULT_SMOOTHING_FACTOR = 0.3
DEFAULT_COLOR_CHANNEL_MODE = 'combined'

# 主机测光周期（秒）
DEFAULT_TICK_INTERVAL = 0.5

# 批处理支持的图像扩展名 (小写)
SUPPORTED_IMAGE_EXTENSIONS = ['.png', '.jpg', '.jpeg', '.tif', '.tiff', '.bmp']
