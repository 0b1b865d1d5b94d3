import matplotlib.pyplot as plt
from rayburst.config import Settings
from rayburst.environment.scene import build_scene
from rayburst.visualization.profile_maps import plot_profile
# ── 1. 基本输入 ───────────────────────────────────────
settings = Settings(num_rays=360, num_slices=40, max_detector_height=400.0,
                    amplification=5, max_bar_width=100, color_band_range=0.5,
                    bounds_width=800, bounds_height=600)
emitters  = [(100, 200), (120, 420)]                       # 两个爆发源
detectors = [(400, 260), (500, 340), (700, 300, True)]     # 两个普通 + 一个复合
# ── 2. 重算与汇总 ─────────────────────────────────────
scene = build_scene(settings, emitters, detectors)
for i, det in enumerate(scene.detectors):
    prof = scene.profile(i)
    print(f"#{i} x={det.x:.0f} composite={det.is_composite}  hits={prof.total_hits}  PoC={prof.poc_index}")
# ── 3. 拖动一个探测器，复合分布随之变化 ──────────────────
scene.move_detector(1, 200)
print(f"拖动后复合探测器命中 = {scene.profile(2).total_hits}")
# ── 4. 绘图 ────────────────────────────────────────────
fig, axes = plt.subplots(1, 3, figsize=(10, 5), sharey=True)
for i, ax in enumerate(axes):
    plot_profile(scene.profile(i), ax=ax, title=f"Detector #{i}")
plt.tight_layout()
plt.show()
