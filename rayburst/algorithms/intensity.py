"""
intensity.py

由 bin 数组(直接计算或复合汇总得到)推导展示用的数值：
Point of Control、每个 bin 的柱宽、按离 PoC 距离的分档。
无状态，bins 或参数变化时整体重新计算；不涉及颜色，颜色映射见 visualization。
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence

import numpy as np

from rayburst.data_struct.data_structs import BandTier, IntensityProfile

# 近似正态累积分位，按 color_band_range 缩放
BAND_THRESHOLDS = (0.3413, 0.4772, 0.6131, 0.6345)


def max_intensity(bins: Sequence[int]) -> int:
    """最大计数，下限为 1"""
    values = np.asarray(bins)
    if values.size == 0:
        return 1
    return max(int(values.max()), 1)


def point_of_control(bins: Sequence[int]) -> Optional[int]:
    """第一个等于 max_intensity 的 bin 序号(并列取最小序号)；全空时返回 None"""
    values = np.asarray(bins)
    hits = np.flatnonzero(values == max_intensity(values))
    return int(hits[0]) if hits.size else None


def bar_widths(bins: Sequence[int], amplification: float, max_bar_width: float):
    """
    返回 (effective_max_width, widths)。
    effective_max_width = min(max_bar_width, max_intensity * amplification)
    """
    values = np.asarray(bins, dtype=np.float64)
    peak = max_intensity(values)
    effective = min(max_bar_width, peak * amplification)
    widths = np.where(values > 0, values / peak * effective, 0.0)
    return effective, widths


def color_bands(color_band_range: float) -> Dict[str, float]:
    b1, b2, b3, b4 = BAND_THRESHOLDS
    return {
        "band1": b1 * color_band_range,
        "band2": b2 * color_band_range,
        "band3": b3 * color_band_range,
        "band4": b4 * color_band_range,
    }


def classify_bin(distance_fraction: float, is_poc: bool, bands: Dict[str, float]) -> BandTier:
    if is_poc:
        return BandTier.POC
    if distance_fraction <= bands["band1"]:
        return BandTier.NEAR
    if distance_fraction <= bands["band2"]:
        return BandTier.MID
    if distance_fraction <= bands["band3"]:
        return BandTier.FAR
    if distance_fraction <= bands["band4"]:
        return BandTier.EDGE
    return BandTier.OUTER


def distance_fractions(num_slices: int, poc_index: Optional[int],
                       color_band_range: float) -> np.ndarray:
    """|i - poc| / (num_slices/2 * color_band_range)；无 PoC 或分母为 0 时非 PoC 项为 inf"""
    fractions = np.full(num_slices, np.inf)
    if poc_index is None:
        return fractions
    denom = (num_slices / 2) * color_band_range
    offsets = np.abs(np.arange(num_slices) - poc_index).astype(np.float64)
    if denom > 0:
        fractions = offsets / denom
    fractions[poc_index] = 0.0
    return fractions


def compute_intensity_profile(bins: Sequence[int],
                              amplification: float,
                              max_bar_width: float,
                              color_band_range: float) -> IntensityProfile:
    """
    一次性完成 PoC、柱宽与分档。

    参数:
      bins            : 直接或汇总得到的计数数组
      amplification   : 柱宽放大系数
      max_bar_width   : 柱宽上限
      color_band_range: 色带范围系数

    返回:
      IntensityProfile
    """
    values = np.asarray(bins, dtype=np.int64)
    peak = max_intensity(values)
    poc = point_of_control(values)
    effective, widths = bar_widths(values, amplification, max_bar_width)
    fractions = distance_fractions(len(values), poc, color_band_range)
    bands = color_bands(color_band_range)
    tiers: List[BandTier] = [
        classify_bin(float(frac), i == poc, bands) for i, frac in enumerate(fractions)
    ]
    return IntensityProfile(
        bins=values,
        max_intensity=peak,
        poc_index=poc,
        effective_max_width=effective,
        bar_widths=widths,
        distance_fractions=fractions,
        tiers=tiers,
    )
