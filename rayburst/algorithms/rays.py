# rayburst/algorithms/rays.py
"""
射线几何：截止长度、与竖直探测线的交点、爆发源的射线生成。
全部为纯函数，不持有状态。坐标为画布坐标(y 轴向下)，无物理单位。
"""
from __future__ import annotations
import math
from typing import List, Optional

from rayburst.data_struct.data_structs import Probe, Vec2

EPS = 1e-10  # 方向分量接近 0 时跳过对应轴，防止除零


def bounding_ray_length(origin: Vec2, angle: float,
                        bounds_width: float, bounds_height: float) -> float:
    """
    从 origin 沿 angle 方向出发，射线离开矩形 [0,W]×[0,H] 前能走的最大距离。

    先取一个足够大的候选值 2*max(W,H)，再依次用左右边界(除以 cos)
    和上下边界(除以 sin)的正距离把它缩小。
    """
    x, y = origin
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)

    length = max(bounds_width, bounds_height) * 2

    if abs(cos_a) >= EPS:
        right_dist = (bounds_width - x) / cos_a
        left_dist = (0 - x) / cos_a
        if 0 < right_dist < length:
            length = right_dist
        if 0 < left_dist < length:
            length = left_dist

    if abs(sin_a) >= EPS:
        bottom_dist = (bounds_height - y) / sin_a
        top_dist = (0 - y) / sin_a
        if 0 < bottom_dist < length:
            length = bottom_dist
        if 0 < top_dist < length:
            length = top_dist

    return length


def intersect_vertical_line(origin: Vec2, angle: float,
                            probe_length: float, line_x: float) -> Optional[float]:
    """
    射线与 x = line_x 竖直线的交点纵坐标；不相交返回 None。

    只统计向右传播(dx > 0)、且探测线严格位于爆发源右侧的射线：
    探测器只接收来自左侧的射线。射线长度有界，超出 probe_length 不算命中。
    """
    ox, oy = origin
    dx = math.cos(angle)
    dy = math.sin(angle)

    # 与探测线平行
    if abs(dx) < EPS:
        return None
    if dx <= 0:
        return None
    if line_x <= ox:
        return None

    t = (line_x - ox) / dx
    # 在起点之后、长度之内
    if t < 0 or t > probe_length:
        return None

    return oy + dy * t


def generate_probes(origin: Vec2, num_rays: int,
                    bounds_width: float, bounds_height: float) -> List[Probe]:
    """
    生成 num_rays 条等角间隔(2πi/n)的射线，每条长度截到边界矩形。
    """
    step = (math.pi * 2) / num_rays
    probes = []
    for i in range(num_rays):
        angle = step * i
        length = bounding_ray_length(origin, angle, bounds_width, bounds_height)
        probes.append(Probe(angle=angle, length=length))
    return probes


def probe_endpoint(origin: Vec2, probe: Probe) -> Vec2:
    x, y = origin
    return (x + math.cos(probe.angle) * probe.length,
            y + math.sin(probe.angle) * probe.length)


def point_in_circle(px: float, py: float, cx: float, cy: float, radius: float) -> bool:
    dx = px - cx
    dy = py - cy
    return dx * dx + dy * dy <= radius * radius
