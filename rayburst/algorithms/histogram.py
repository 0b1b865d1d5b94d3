"""
histogram.py

把所有爆发源的射线与探测线求交，按命中点的纵坐标落入固定宽度的 bin 计数。
每次重算都从零开始整体重建，不做增量更新。
"""
from __future__ import annotations
import logging
from typing import Iterable, Sequence

import numpy as np

from rayburst.algorithms.rays import intersect_vertical_line
from rayburst.data_struct.data_structs import Detector, Emitter

logger = logging.getLogger(__name__)


def compute_bins(detector: Detector,
                 emitters: Iterable[Emitter],
                 num_slices: int,
                 detector_height: float) -> np.ndarray:
    """
    计算单个探测器的 bin 数组(长度 num_slices，int64)。

    - 只读 detector 的 x / center_y，不修改 detector
    - 命中点落在探测器跨度外时静默丢弃
    - num_slices 必须 >= 1，由调用方保证，这里不再校验

    返回:
      np.ndarray: 新的计数数组
    """
    bins = np.zeros(num_slices, dtype=np.int64)

    for emitter in emitters:
        for probe in emitter.probes:
            hit_y = intersect_vertical_line(emitter.origin, probe.angle, probe.length, detector.x)
            if hit_y is None:
                continue
            bin_index = detector.coord_to_index(hit_y, num_slices, detector_height)
            if bin_index is not None:
                bins[bin_index] += 1

    return bins


def update_detector_bins(detectors: Sequence[Detector],
                         emitters: Sequence[Emitter],
                         num_slices: int,
                         detector_height: float) -> int:
    """
    重算扫描：为每个非复合探测器写入新 bins(整体替换)。
    复合探测器的 bins 只被替换成全零数组，其显示结果由 aggregation 按需计算。

    返回本次登记的命中总数。
    """
    total_hits = 0
    for detector in detectors:
        if detector.is_composite:
            detector.reset_bins(num_slices)
            continue
        detector.bins = compute_bins(detector, emitters, num_slices, detector_height)
        total_hits += int(detector.bins.sum())

    logger.debug("重算 %d 个探测器，命中 %d 次", len(detectors), total_hits)
    return total_hits
