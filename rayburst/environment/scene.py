"""
scene.py

场景会话：持有爆发源、探测器和当前 Settings，负责放置 / 删除 / 拖动，
并在每次变化后同步地整体重算所有非复合探测器的 bins。

复合探测器的分布在显示时按需汇总，并按场景 revision 做缓存：
任何修改都会使 revision + 1 并清空缓存，不改变可观察的结果。
"""
from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional

import numpy as np

from rayburst.algorithms.aggregation import aggregate_bins
from rayburst.algorithms.histogram import update_detector_bins
from rayburst.algorithms.intensity import compute_intensity_profile
from rayburst.algorithms.rays import generate_probes, point_in_circle
from rayburst.config import (
    CENTROID_RADIUS,
    HOVER_DETECTION_RADIUS_SQUARED,
    MOVE_HANDLE_OFFSET,
    MOVE_HANDLE_RADIUS,
    Settings,
)
from rayburst.data_struct.data_structs import Detector, Emitter, IntensityProfile

logger = logging.getLogger(__name__)


class Scene:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings: Settings = (settings or Settings()).validate()
        self.emitters: List[Emitter] = []
        self.detectors: List[Detector] = []
        self.revision = 0
        self._composite_cache: Dict[int, np.ndarray] = {}

    # ---- 内部 ---- #
    def _touch(self) -> None:
        self.revision += 1
        self._composite_cache.clear()

    def _make_emitter(self, x: float, y: float) -> Emitter:
        s = self.settings
        return Emitter(x=x, y=y,
                       probes=generate_probes((x, y), s.num_rays, s.bounds_width, s.bounds_height))

    def recompute(self) -> int:
        """整体重算所有非复合探测器的 bins，返回命中总数"""
        self._touch()
        return update_detector_bins(self.detectors, self.emitters,
                                    self.settings.num_slices,
                                    self.settings.max_detector_height)

    # ---- 爆发源 ---- #
    def add_emitter(self, x: float, y: float) -> Emitter:
        emitter = self._make_emitter(x, y)
        self.emitters.append(emitter)
        self.recompute()
        return emitter

    def remove_emitter(self, index: int) -> Emitter:
        emitter = self.emitters.pop(index)
        self.recompute()
        return emitter

    def clear_emitters(self) -> None:
        self.emitters.clear()
        self.recompute()

    def find_emitter_at(self, x: float, y: float) -> int:
        """点击位置落在某个爆发源中心圆内时返回其序号，否则 -1"""
        for i, emitter in enumerate(self.emitters):
            if point_in_circle(x, y, emitter.x, emitter.y, CENTROID_RADIUS):
                return i
        return -1

    # ---- 探测器 ---- #
    def add_detector(self, x: float, center_y: float, composite: bool = False) -> Detector:
        detector = Detector(x=x, center_y=center_y,
                            height=self.settings.max_detector_height,
                            is_composite=composite)
        detector.reset_bins(self.settings.num_slices)
        self.detectors.append(detector)
        self.recompute()
        return detector

    def remove_detector(self, index: int) -> Detector:
        detector = self.detectors.pop(index)
        self.recompute()
        return detector

    def move_detector(self, index: int, center_y: float) -> Detector:
        """竖直拖动，只改 center_y"""
        detector = self.detectors[index]
        detector.center_y = center_y
        self.recompute()
        return detector

    def clear_detectors(self) -> None:
        self.detectors.clear()
        self.recompute()

    def find_detector_at(self, x: float, y: float) -> int:
        for i, detector in enumerate(self.detectors):
            dx = x - detector.x
            dy = y - detector.center_y
            if dx * dx + dy * dy <= HOVER_DETECTION_RADIUS_SQUARED:
                return i
        return -1

    def find_detector_handle_at(self, x: float, y: float) -> int:
        """拖动手柄位于中心右侧 MOVE_HANDLE_OFFSET 处"""
        for i, detector in enumerate(self.detectors):
            if point_in_circle(x, y, detector.x + MOVE_HANDLE_OFFSET, detector.center_y,
                               MOVE_HANDLE_RADIUS):
                return i
        return -1

    # ---- 参数 ---- #
    def apply_settings(self, **changes) -> Settings:
        """
        生成新的 Settings 并同步应用：
          - num_slices 变化 → 所有探测器 bins 重置为新长度的全零数组
          - max_detector_height 变化 → 所有探测器 height 同步
          - num_rays / 边界变化 → 所有爆发源重建射线
        最后整体重算。新记录校验失败时场景保持原样。
        """
        old = self.settings
        new = old.with_changes(**changes)

        # 先按新参数准备好全部状态，再一次性替换
        new_bins = None
        if new.num_slices != old.num_slices:
            new_bins = [np.zeros(new.num_slices, dtype=np.int64) for _ in self.detectors]
        new_emitters = None
        if (new.num_rays, new.bounds_width, new.bounds_height) != \
                (old.num_rays, old.bounds_width, old.bounds_height):
            new_emitters = [
                Emitter(x=e.x, y=e.y,
                        probes=generate_probes(e.origin, new.num_rays,
                                               new.bounds_width, new.bounds_height))
                for e in self.emitters
            ]

        self.settings = new
        if new_bins is not None:
            for detector, bins in zip(self.detectors, new_bins):
                detector.bins = bins
        if new.max_detector_height != old.max_detector_height:
            for detector in self.detectors:
                detector.height = new.max_detector_height
        if new_emitters is not None:
            self.emitters = new_emitters

        logger.info("参数更新 v%d: %s", new.version, changes)
        self.recompute()
        return new

    def set_num_rays(self, num_rays: int) -> Settings:
        return self.apply_settings(num_rays=num_rays)

    # ---- 结果查询 ---- #
    def resolved_bins(self, index: int) -> np.ndarray:
        """普通探测器直接返回 bins；复合探测器返回对左侧探测器的汇总"""
        detector = self.detectors[index]
        if not detector.is_composite:
            return detector.bins

        cached = self._composite_cache.get(index)
        if cached is not None:
            return cached

        num_slices = self.settings.num_slices
        stale = [i for i, d in enumerate(self.detectors)
                 if not d.is_composite and len(d.bins) != num_slices]
        if stale:
            raise RuntimeError(
                f"探测器 {stale} 的 bins 长度与 num_slices={num_slices} 不一致，需先 recompute()")

        bins = aggregate_bins(detector, self.detectors, num_slices,
                              self.settings.max_detector_height)
        # 缓存结果只读，调用方原地修改会直接报错
        bins.flags.writeable = False
        self._composite_cache[index] = bins
        return bins

    def profile(self, index: int) -> IntensityProfile:
        s = self.settings
        return compute_intensity_profile(self.resolved_bins(index),
                                         s.amplification, s.max_bar_width, s.color_band_range)

    def profiles(self) -> List[IntensityProfile]:
        return [self.profile(i) for i in range(len(self.detectors))]


def build_scene(settings: Optional[Settings] = None,
                emitters: Iterable[tuple] = (),
                detectors: Iterable[tuple] = ()) -> Scene:
    """
    由坐标列表直接构建场景，返回已重算的 Scene。

    emitters : [(x, y), ...]
    detectors: [(x, center_y) 或 (x, center_y, is_composite), ...]
    """
    scene = Scene(settings)
    for x, y in emitters:
        scene.emitters.append(scene._make_emitter(x, y))
    for item in detectors:
        x, center_y, *rest = item
        detector = Detector(x=x, center_y=center_y,
                            height=scene.settings.max_detector_height,
                            is_composite=bool(rest[0]) if rest else False)
        scene.detectors.append(detector)
    scene.recompute()
    logger.debug("场景构建完成：%d 个爆发源，%d 个探测器",
                 len(scene.emitters), len(scene.detectors))
    return scene
