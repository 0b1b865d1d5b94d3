from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple, Optional
from enum import Enum, auto
import math

import numpy as np

Vec2 = Tuple[float, float]	# (x,y)，画布坐标，y 轴向下


def _empty_bins() -> np.ndarray:
    return np.zeros(0, dtype=np.int64)

# ----------------------------------------
# 数据结构
# ----------------------------------------

@dataclass(frozen=True)
class Probe:
    """爆发源发出的一条射线：方向角(弧度) + 最大行进长度"""
    angle: float
    length: float


@dataclass
class Emitter:
    x: float
    y: float
    probes: List[Probe] = field(default_factory=list)  # 射线数量全局统一，修改时整体重建

    @property
    def origin(self) -> Vec2:
        return (self.x, self.y)


@dataclass(eq=False)   # bins 为 ndarray，不参与逐字段比较
class Detector:
    """
    竖直探测线。bins[i] 对应区间 [top + i*bin_size, top + (i+1)*bin_size)。
    复合探测器(is_composite)自身的 bins 不具权威性，显示时总是由左侧探测器汇总得到。
    """
    x: float                 # 固定横坐标
    center_y: float          # 竖直中心，可拖动
    height: float            # 竖直跨度，目前总是等于全局 max_detector_height
    bins: np.ndarray = field(default_factory=_empty_bins)   # 命中计数，int64
    is_composite: bool = False

    @property
    def top(self) -> float:
        return self.center_y - self.height / 2

    def bin_size(self, num_slices: int) -> float:
        return self.height / num_slices

    # 将命中点 y 映射到 bin 索引，落在跨度外返回 None；height 缺省取自身跨度
    def coord_to_index(self, y: float, num_slices: int,
                       height: Optional[float] = None) -> Optional[int]:
        span = self.height if height is None else height
        top = self.center_y - span / 2
        i = math.floor((y - top) / span * num_slices)
        return i if 0 <= i < num_slices else None

    # bin 索引 → 该 bin 中心的世界坐标 y
    def index_to_center(self, i: int, num_slices: int) -> float:
        if not 0 <= i < num_slices:
            raise IndexError(f"Detector bin index out of range: {i}")
        return self.top + (i + 0.5) * self.bin_size(num_slices)

    def reset_bins(self, num_slices: int) -> None:
        """整体替换为长度 num_slices 的全零数组（不原地修改旧数组）"""
        self.bins = np.zeros(num_slices, dtype=np.int64)


class BandTier(Enum):
    """按离 PoC 的距离分档，由内到外"""
    POC   = auto()
    NEAR  = auto()
    MID   = auto()
    FAR   = auto()
    EDGE  = auto()
    OUTER = auto()


@dataclass
class IntensityProfile:
    bins: np.ndarray
    max_intensity: int                 # 下限为 1，避免全空时除零
    poc_index: Optional[int]           # Point of Control；全空时为 None
    effective_max_width: float
    bar_widths: np.ndarray             # 每个 bin 的柱宽
    distance_fractions: np.ndarray     # |i - poc| / (half_bins * color_band_range)
    tiers: List[BandTier] = field(default_factory=list)

    @property
    def num_slices(self) -> int:
        return int(len(self.bins))

    @property
    def total_hits(self) -> int:
        return int(self.bins.sum())
