import numpy as np
import pytest

from rayburst.algorithms.aggregation import aggregate_bins, qualifying_sources
from rayburst.data_struct.data_structs import Detector

N = 10
H = 100.0


def _detector(x, center_y, hits=(), composite=False):
    bins = np.zeros(N, dtype=np.int64)
    for i, v in hits:
        bins[i] = v
    return Detector(x=x, center_y=center_y, height=H, bins=bins, is_composite=composite)


# ✅ 按世界坐标重投影，而不是按序号直接相加
def test_remap_is_coordinate_aware():
    shifted = _detector(10.0, 10.0, hits=[(4, 1)])   # 比复合探测器低一个 bin_size
    aligned = _detector(20.0, 0.0, hits=[(4, 1)])
    composite = _detector(30.0, 0.0, composite=True)

    combined = aggregate_bins(composite, [shifted, aligned, composite], N, H)

    assert combined[4] == 1
    assert combined[5] == 1
    assert combined.sum() == 2


def test_no_sources_to_the_left():
    composite = _detector(0.0, 0.0, composite=True)
    right = _detector(50.0, 0.0, hits=[(3, 7)])
    combined = aggregate_bins(composite, [right], N, H)
    assert combined.tolist() == [0] * N


def test_same_frame_sums_by_index():
    a = _detector(10.0, 0.0, hits=[(0, 2), (3, 1), (9, 4)])
    b = _detector(20.0, 0.0, hits=[(3, 5), (6, 1)])
    composite = _detector(30.0, 0.0, composite=True)
    combined = aggregate_bins(composite, [a, b], N, H)
    assert combined.tolist() == (a.bins + b.bins).tolist()


# ✅ 守恒：没有命中被重复或丢失，除非落在目标跨度外
@pytest.mark.parametrize("shift, lost_bins", [
    (0.0, []),
    (20.0, [0, 1]),        # 目标下移两个 bin：源的前两个 bin 落到目标顶边之上
    (-30.0, [7, 8, 9]),
])
def test_conservation_under_shift(shift, lost_bins):
    rng = np.random.default_rng(7)
    sources = []
    for x in (5.0, 10.0, 15.0):
        d = _detector(x, 0.0)
        d.bins = rng.integers(0, 5, size=N).astype(np.int64)
        sources.append(d)
    composite = _detector(40.0, shift, composite=True)

    combined = aggregate_bins(composite, sources, N, H)
    expected = sum(int(s.bins.sum()) - int(s.bins[lost_bins].sum()) for s in sources)
    assert combined.sum() == expected


def test_shifted_far_away_loses_everything():
    source = _detector(10.0, 0.0, hits=[(2, 3), (5, 4)])
    composite = _detector(30.0, 1000.0, composite=True)
    assert aggregate_bins(composite, [source], N, H).sum() == 0


def test_composites_never_feed_composites():
    source = _detector(10.0, 0.0, hits=[(4, 2)])
    inner = _detector(20.0, 0.0, hits=[(1, 99)], composite=True)
    outer = _detector(30.0, 0.0, composite=True)
    combined = aggregate_bins(outer, [source, inner], N, H)
    assert combined.sum() == 2
    assert qualifying_sources(outer, [source, inner, outer]) == [source]


def test_sources_at_same_x_are_excluded():
    twin = _detector(30.0, 0.0, hits=[(4, 2)])
    composite = _detector(30.0, 0.0, composite=True)
    assert aggregate_bins(composite, [twin], N, H).sum() == 0


def test_aggregation_is_pure_and_repeatable():
    a = _detector(10.0, 5.0, hits=[(1, 3), (8, 2)])
    b = _detector(20.0, -15.0, hits=[(4, 6)])
    composite = _detector(30.0, 0.0, composite=True)
    a_before, b_before = a.bins.copy(), b.bins.copy()

    first = aggregate_bins(composite, [a, b], N, H)
    second = aggregate_bins(composite, [a, b], N, H)

    assert np.array_equal(first, second)
    assert np.array_equal(a.bins, a_before)
    assert np.array_equal(b.bins, b_before)
    assert composite.bins.sum() == 0
