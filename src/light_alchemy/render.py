"""
直方图渲染
把 HistogramResult 绘制成 matplotlib Figure（Agg 画布，无需图形界面）
"""
from typing import Optional

import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from .histogram import BIN_OVER, BIN_UNDER, HistogramResult

BIN_COLORS = {
    BIN_OVER: 'red',
    BIN_UNDER: 'blue',
}
NEUTRAL_COLOR = 'green'
CHANNEL_COLORS = ['red', 'green', 'blue']


def _y_limit(hists) -> float:
    """
    计算 Y 轴上限时忽略纯黑和纯白的统计尖峰，
    但至少保证最高峰能显示出 10%
    """
    valid_counts = np.concatenate([h[1:-1] for h in hists])
    absolute_max = max(int(h.max()) for h in hists)
    if valid_counts.size > 0 and valid_counts.max() > 0:
        limit = np.percentile(valid_counts, 98) * 1.5
        return float(max(limit, absolute_max * 0.1, 1))
    return float(max(absolute_max, 1))


def render_histogram(result: HistogramResult, path: Optional[str] = None, title: Optional[str] = None) -> Figure:
    """
    绘制直方图

    Args:
        result: 直方图结果
        path: 保存路径，None 时不保存
        title: 图表标题

    Returns:
        Figure: matplotlib 图形
    """
    fig = Figure(figsize=(3.2, 1.5), dpi=100)
    FigureCanvasAgg(fig)
    ax = fig.add_subplot(111)
    ax.set_facecolor('#2b2b2b')
    ax.set_xlim(0, 256)
    x = np.arange(256)

    if result.counts is not None:
        # 合成模式：按阈值着色的柱状图
        colors = [BIN_COLORS.get(tag, NEUTRAL_COLOR) for tag in result.bin_tags]
        ax.bar(x, result.counts, width=1.0, align='edge', color=colors, linewidth=0)
        ax.set_ylim(0, _y_limit([result.counts]))
    else:
        # 分通道模式：RGB 三条填充曲线
        for hist, color in zip(result.channels, CHANNEL_COLORS):
            ax.plot(x, hist, color=color, linewidth=1, alpha=0.9)
            ax.fill_between(x, 0, hist, color=color, alpha=0.2)
        ax.set_ylim(0, _y_limit(list(result.channels)))

    # Zone System 标注
    for marker in result.markers:
        ax.axvline(marker.position, color='black', linewidth=1)
        label_x = marker.position + 2
        ha = 'left'
        if label_x > 240:
            label_x = marker.position - 2
            ha = 'right'
        ax.text(label_x, 0.95, f"Z{marker.zone}", transform=ax.get_xaxis_transform(),
                ha=ha, va='top', fontsize=7, color='white')

    if title:
        ax.set_title(title, fontsize=8)
    ax.tick_params(left=False, bottom=False, labelleft=False, labelbottom=False)
    fig.tight_layout(pad=0.2)

    if path:
        fig.savefig(path)
    return fig
