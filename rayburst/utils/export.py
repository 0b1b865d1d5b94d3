# rayburst/utils/export.py
from __future__ import annotations
import csv, json, datetime as _dt

from rayburst.environment.scene import Scene


def _build_scene_meta(scene: Scene, *, format_name: str, extra: dict | None = None) -> dict:
    """把 Settings 与当前场景摘要打包成 JSON 友好的元数据字典。"""
    s = scene.settings
    meta = {
        "format": format_name,              # 'detector_bins' 或 'detector_summary'
        "version": "1.0",
        "exported_at": _dt.datetime.now().isoformat(timespec="seconds"),
        "settings": {
            "num_rays": int(s.num_rays), "num_slices": int(s.num_slices),
            "max_detector_height": float(s.max_detector_height),
            "amplification": float(s.amplification), "max_bar_width": float(s.max_bar_width),
            "color_band_range": float(s.color_band_range),
            "bounds": [float(s.bounds_width), float(s.bounds_height)],
            "settings_version": int(s.version),
        },
        "summary": {
            "emitters": len(scene.emitters),
            "detectors": len(scene.detectors),
            "composite_detectors": sum(1 for d in scene.detectors if d.is_composite),
            "scene_revision": int(scene.revision),
        }
    }
    if extra: meta["context"] = extra
    return meta

def export_detector_bins_csv(scene: Scene, path: str, *, run_meta: dict | None = None) -> int:
    """逐 bin 导出(只写非空 bin)，CSV 头加 JSON 元数据注释。返回写出的行数。"""
    fields = ["detector","x","center_y","is_composite","bin","y_top","y_bottom",
              "hits","bar_width","tier"]
    meta = _build_scene_meta(scene, format_name="detector_bins", extra=run_meta)
    bin_size = scene.settings.bin_size
    rows = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write("# meta=" + json.dumps(meta, ensure_ascii=False) + "\n")
        f.write("# columns=" + ",".join(fields) + "\n")
        w = csv.writer(f); w.writerow(fields)
        for k, (det, prof) in enumerate(zip(scene.detectors, scene.profiles())):
            top = det.center_y - det.height / 2
            for i, hits in enumerate(prof.bins):
                if hits <= 0: continue
                w.writerow([
                    k, det.x, det.center_y, int(det.is_composite), i,
                    top + i * bin_size, top + (i + 1) * bin_size,
                    int(hits), float(prof.bar_widths[i]), prof.tiers[i].name,
                ])
                rows += 1
    return rows

def export_detector_summary_csv(scene: Scene, path: str, *, run_meta: dict | None = None) -> None:
    """每个探测器一行(命中总数 / PoC 序号与其中心 y / 最大计数)。"""
    fields = ["detector","x","center_y","is_composite","total_hits","poc_index","poc_y","max_intensity"]
    meta = _build_scene_meta(scene, format_name="detector_summary", extra=run_meta)
    meta["aggregation"] = {
        "total_hits":    "sum over bins (composite: after remapping left detectors)",
        "poc_index":     "first bin with the highest count, empty if no hits",
        "max_intensity": "max over bins, floored at 1",
    }
    num_slices = scene.settings.num_slices
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write("# meta=" + json.dumps(meta, ensure_ascii=False) + "\n")
        f.write("# columns=" + ",".join(fields) + "\n")
        w = csv.writer(f); w.writerow(fields)
        for k, (det, prof) in enumerate(zip(scene.detectors, scene.profiles())):
            poc = prof.poc_index
            poc_y = det.index_to_center(poc, num_slices) if poc is not None else ""
            w.writerow([k, det.x, det.center_y, int(det.is_composite), prof.total_hits,
                        "" if poc is None else poc, poc_y, prof.max_intensity])
