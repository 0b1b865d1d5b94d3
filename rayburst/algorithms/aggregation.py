"""
aggregation.py

复合探测器的分布：把左侧各探测器的 bins 重新投影到复合探测器自己的坐标系后相加。

各探测器的 center_y 可以不同，同一个 bin 序号在不同探测器上对应不同的世界坐标区间，
所以不能按序号直接相加：先取源 bin 中心的世界坐标 y，再换算到目标探测器的 bin。
"""
from __future__ import annotations
from typing import Iterable, List

import numpy as np

from rayburst.data_struct.data_structs import Detector


def qualifying_sources(target: Detector, detectors: Iterable[Detector]) -> List[Detector]:
    """目标左侧(x 严格更小)的非复合探测器；复合探测器之间不级联"""
    return [d for d in detectors
            if d is not target and d.x < target.x and not d.is_composite]


def aggregate_bins(target: Detector,
                   sources: Iterable[Detector],
                   num_slices: int,
                   detector_height: float) -> np.ndarray:
    """
    计算复合探测器 target 要显示的 bin 数组。

    对每个合格源探测器的每个非零 bin j:
        source_y     = source_top + (j + 0.5) * bin_size      # bin 中心的世界坐标
        relative_y   = source_y - composite_top
        target_index = floor(relative_y / detector_height * num_slices)
    落在范围内则累加计数，否则丢弃。多个源 bin 落到同一目标 bin 时直接相加。

    纯函数：不修改任何源探测器的 bins，可以每次显示时重复调用。
    要求调用时所有探测器共用同一个 num_slices。
    """
    combined = np.zeros(num_slices, dtype=np.int64)
    composite_top = target.center_y - detector_height / 2
    bin_size = detector_height / num_slices

    for source in qualifying_sources(target, sources):
        values = np.asarray(source.bins, dtype=np.int64)
        nonzero = np.flatnonzero(values)      # 空 bin 不贡献
        if nonzero.size == 0:
            continue

        source_top = source.center_y - detector_height / 2
        source_y = source_top + (nonzero + 0.5) * bin_size
        relative_y = source_y - composite_top
        target_index = np.floor(relative_y / detector_height * num_slices).astype(np.int64)

        in_range = (target_index >= 0) & (target_index < num_slices)
        np.add.at(combined, target_index[in_range], values[nonzero][in_range])

    return combined
