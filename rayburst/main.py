from __future__ import annotations
import argparse
import logging
from typing import List, Optional

import matplotlib.pyplot as plt

from rayburst.config import Settings, load_settings
from rayburst.environment.scene import Scene, build_scene
from rayburst.logging_config import setup_logging
from rayburst.utils.export import export_detector_bins_csv, export_detector_summary_csv
from rayburst.visualization.profile_maps import draw_scene, plot_profile

logger = logging.getLogger("rayburst.main")

# ----------------------------------------
# 示例场景参数
# ----------------------------------------
DEMO_SETTINGS = Settings(
    num_rays=180,
    num_slices=60,
    max_detector_height=600.0,
    amplification=10.0,
    max_bar_width=120.0,
    color_band_range=0.5,
    bounds_width=1200.0,
    bounds_height=800.0,
)
DEMO_EMITTERS  = [(150.0, 250.0), (200.0, 550.0), (420.0, 400.0)]   # 爆发源 (x, y)
DEMO_DETECTORS = [                                                  # (x, center_y, 复合?)
    (600.0, 380.0, False),
    (800.0, 460.0, False),
    (1050.0, 400.0, True),
]


def run_demo(settings: Optional[Settings] = None) -> Scene:
    scene = build_scene(settings or DEMO_SETTINGS, DEMO_EMITTERS, DEMO_DETECTORS)
    for i, det in enumerate(scene.detectors):
        prof = scene.profile(i)
        kind = "复合" if det.is_composite else "普通"
        logger.info("探测器 #%d (%s, x=%.1f, center_y=%.1f): 命中 %d, PoC=%s, 最大计数=%d",
                    i, kind, det.x, det.center_y, prof.total_hits, prof.poc_index, prof.max_intensity)
    return scene


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Ray burst detector profile demo")
    parser.add_argument("--config", help="YAML 参数文件，缺省使用内置示例参数")
    parser.add_argument("--export", metavar="PREFIX", help="导出 <PREFIX>_bins.csv / <PREFIX>_summary.csv")
    parser.add_argument("--plot", action="store_true", help="绘制场景与复合探测器分布")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    settings = load_settings(args.config) if args.config else None
    scene = run_demo(settings)

    if args.export:
        rows = export_detector_bins_csv(scene, f"{args.export}_bins.csv")
        export_detector_summary_csv(scene, f"{args.export}_summary.csv")
        logger.info("已导出 %s_bins.csv (%d 行) / %s_summary.csv", args.export, rows, args.export)

    if args.plot:
        draw_scene(scene)
        last = len(scene.detectors) - 1
        plot_profile(scene.profile(last), title=f"Detector #{last}")
        plt.show()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
