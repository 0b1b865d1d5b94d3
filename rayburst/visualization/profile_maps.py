"""
把场景与探测器分布画成 matplotlib 图层。

- 射线：爆发源 → 截止端点的红色线段，爆发源中心画黄点
- 探测器：竖直细条(普通为青色，复合为橙色，透明度取 bin_opacity)，
  中心画删除点，右侧 MOVE_HANDLE_OFFSET 处画拖动手柄
- 分布：每个非空 bin 在探测线右侧画一根水平柱，柱宽取 IntensityProfile.bar_widths，
  颜色按 BandTier 映射

它不负责任何计算，只消费 Scene / IntensityProfile 的结果。
画布坐标 y 轴向下，绘图时会反转 y 轴。
"""
from __future__ import annotations
from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
from matplotlib.patches import Circle, Rectangle

from rayburst.algorithms.rays import probe_endpoint
from rayburst.config import (
    CENTROID_RADIUS,
    DELETE_DOT_RADIUS,
    DETECTOR_WIDTH,
    MOVE_HANDLE_OFFSET,
    MOVE_HANDLE_RADIUS,
)
from rayburst.data_struct.data_structs import BandTier, Detector, IntensityProfile

# RGBA(0-1)
BAND_COLORS = {
    BandTier.POC:   (1.0, 1.0, 0.0, 1.0),            # 黄
    BandTier.NEAR:  (0.0, 1.0, 0.0, 1.0),            # 浅绿
    BandTier.MID:   (0.0, 128 / 255, 0.0, 1.0),      # 绿
    BandTier.FAR:   (1.0, 165 / 255, 0.0, 1.0),      # 橙
    BandTier.EDGE:  (1.0, 0.0, 0.0, 1.0),            # 红
    BandTier.OUTER: (0.0, 0.0, 1.0, 1.0),            # 蓝
}

DETECTOR_COLORS = {
    False: (0.0, 1.0, 1.0),           # 普通：青
    True:  (1.0, 165 / 255, 0.0),     # 复合：橙
}


def tier_color(tier: BandTier):
    return BAND_COLORS[tier]


def draw_rays(ax, emitters, alpha: float = 1.0):
    segments = []
    for emitter in emitters:
        for probe in emitter.probes:
            segments.append([emitter.origin, probe_endpoint(emitter.origin, probe)])
    if segments:
        ax.add_collection(LineCollection(segments, colors=[(1.0, 0.0, 0.0, alpha)], linewidths=1.0))
    for emitter in emitters:
        ax.add_patch(Circle(emitter.origin, CENTROID_RADIUS, color=(1.0, 1.0, 0.0, alpha), zorder=3))
    return ax


def draw_detector(ax, detector: Detector, profile: IntensityProfile, bin_opacity: float = 50):
    """画单个探测器：竖直细条 + 各非空 bin 的水平柱 + 删除点与拖动手柄"""
    num_slices = profile.num_slices
    bin_size = detector.height / num_slices
    top = detector.center_y - detector.height / 2
    line_color = DETECTOR_COLORS[bool(detector.is_composite)] + (bin_opacity / 100,)

    ax.add_patch(Rectangle((detector.x - DETECTOR_WIDTH / 2, top),
                           DETECTOR_WIDTH, detector.height, color=line_color))

    for i in range(num_slices):
        if profile.bins[i] <= 0:
            continue
        ax.add_patch(Rectangle((detector.x + DETECTOR_WIDTH / 2, top + i * bin_size),
                               float(profile.bar_widths[i]), bin_size,
                               color=tier_color(profile.tiers[i])))

    # 中心的删除点(黄) + 右侧的拖动手柄(白)
    ax.add_patch(Circle((detector.x, detector.center_y), DELETE_DOT_RADIUS,
                        color="yellow", zorder=3))
    ax.add_patch(Circle((detector.x + MOVE_HANDLE_OFFSET, detector.center_y),
                        MOVE_HANDLE_RADIUS, color="white", zorder=3))
    return ax


def draw_scene(scene, ax=None, *, show_rays: bool = True,
               show_detectors: bool = True, show_composites: bool = True):
    """把整个场景画到 ax(缺省时新建)，返回 ax"""
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 6))
    s = scene.settings

    if show_rays:
        draw_rays(ax, scene.emitters)
    for i, detector in enumerate(scene.detectors):
        if detector.is_composite and not show_composites:
            continue
        if not detector.is_composite and not show_detectors:
            continue
        draw_detector(ax, detector, scene.profile(i), bin_opacity=s.bin_opacity)

    ax.set_xlim(0, s.bounds_width)
    ax.set_ylim(s.bounds_height, 0)   # y 轴向下
    ax.set_aspect("equal")
    ax.set_facecolor("black")
    return ax


def plot_profile(profile: IntensityProfile, ax=None, title: Optional[str] = None):
    """单个探测器分布的水平柱状图，bin 0 在上"""
    if ax is None:
        _, ax = plt.subplots(figsize=(4, 6))
    colors = [tier_color(t) for t in profile.tiers]
    ax.barh(range(profile.num_slices), profile.bar_widths, height=1.0, color=colors)
    ax.invert_yaxis()
    ax.set_xlabel("Bar width")
    ax.set_ylabel("Bin")
    if profile.poc_index is not None:
        ax.axhline(profile.poc_index, color="k", linewidth=0.5, linestyle="--")
    if title:
        ax.set_title(title)
    return ax
