"""
config.py

全局默认参数与 Settings 记录。

所有重算(探测器分箱 / 复合汇总 / 强度缩放)都只读同一个 Settings 实例；
任何修改都会生成带新 version 的新实例，由 Scene 负责同步地重置各探测器的 bins。
参数文件为 YAML，示例见仓库根目录 config.yml。
"""
from __future__ import annotations
import numbers
import warnings
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

# ----------------------------------------
# 默认参数
# ----------------------------------------
NUM_RAYS            = 36        # 每个爆发源的射线条数
NUM_SLICES          = 14000     # 每个探测器的 bin 数
MAX_DETECTOR_HEIGHT = 288000.0  # 探测器竖直跨度
AMPLIFICATION       = 10.0      # 柱宽放大系数
MAX_BAR_WIDTH       = 300.0     # 柱宽上限
COLOR_BAND_RANGE    = 0.09      # 色带范围系数 (0,1]
BIN_OPACITY         = 50        # 探测线透明度 0-100，仅用于绘图
BOUNDS_WIDTH        = 1920.0    # 射线截止矩形 [0,W]×[0,H]
BOUNDS_HEIGHT       = 1080.0

# 交互拾取用常量
CENTROID_RADIUS                = 5
DETECTOR_WIDTH                 = 4
DELETE_DOT_RADIUS              = 6    # 探测器中心的删除点
MOVE_HANDLE_RADIUS             = 5
MOVE_HANDLE_OFFSET             = 15
HOVER_DETECTION_RADIUS_SQUARED = 36   # 6px 半径的平方


def _is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class Settings:
    num_rays: int = NUM_RAYS
    num_slices: int = NUM_SLICES
    max_detector_height: float = MAX_DETECTOR_HEIGHT
    amplification: float = AMPLIFICATION
    max_bar_width: float = MAX_BAR_WIDTH
    color_band_range: float = COLOR_BAND_RANGE
    bin_opacity: float = BIN_OPACITY
    bounds_width: float = BOUNDS_WIDTH
    bounds_height: float = BOUNDS_HEIGHT
    version: int = 0

    @property
    def bin_size(self) -> float:
        return self.max_detector_height / self.num_slices

    def validate(self) -> "Settings":
        """检查边界输入，非法时抛 ValueError；核心计算本身不再校验"""
        for name in ("num_slices", "num_rays"):
            value = getattr(self, name)
            # 20.0 这类浮点数同样拒绝，bins 长度只接受真正的整数
            if not _is_integer(value) or value < 1:
                raise ValueError(f"{name} 必须为 >=1 的整数，实际: {value!r}")
        for name in ("max_detector_height", "amplification", "max_bar_width",
                     "bounds_width", "bounds_height"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} 必须为正数，实际: {value}")
        if not self.color_band_range > 0:
            raise ValueError(f"color_band_range 必须为正数，实际: {self.color_band_range}")
        if not 0 <= self.bin_opacity <= 100:
            raise ValueError(f"bin_opacity 必须在 0-100 之间，实际: {self.bin_opacity}")
        return self

    def with_changes(self, **changes: Any) -> "Settings":
        """返回修改后的新记录(version + 1)，并校验"""
        return replace(self, version=self.version + 1, **changes).validate()


def load_settings(path: str | Path) -> Settings:
    """从 YAML 文件读取 Settings。

    文件格式::

        settings:
          num_rays: 36
          num_slices: 200
          ...

    未知键会被忽略并给出 warning；缺省键使用模块默认值。
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        raw: Mapping[str, Any] = yaml.safe_load(handle) or {}

    section = raw.get("settings", {}) or {}
    known = {f.name for f in fields(Settings)} - {"version"}
    kwargs = {}
    for key, value in section.items():
        if key not in known:
            warnings.warn(f"未知配置项 {key!r}，已忽略", RuntimeWarning)
            continue
        # 整数项原样交给 validate，12.7 之类的值会被拒绝而不是截断
        kwargs[key] = value if key in ("num_rays", "num_slices") else float(value)
    return Settings(**kwargs).validate()
