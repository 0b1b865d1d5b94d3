import math

import numpy as np
import pytest

from rayburst.algorithms.intensity import (
    bar_widths,
    classify_bin,
    color_bands,
    compute_intensity_profile,
    distance_fractions,
    max_intensity,
    point_of_control,
)
from rayburst.data_struct.data_structs import BandTier


def test_poc_first_occurrence_tie_break():
    assert point_of_control([2, 5, 5, 1]) == 1


def test_max_intensity_floor():
    assert max_intensity([0, 0, 0]) == 1
    assert max_intensity([]) == 1
    assert max_intensity([0, 7, 3]) == 7


def test_bar_widths_capped_by_max_bar_width():
    # max_intensity * amplification = 4 * 25 = 100，正好等于上限
    effective, widths = bar_widths([1, 3, 2, 4, 1], amplification=25, max_bar_width=100)
    assert effective == 100
    assert widths.tolist() == pytest.approx([25, 75, 50, 100, 25])


def test_bar_widths_limited_by_amplification():
    # amplification=1 时有效最大宽度为 min(100, 4*1) = 4
    effective, widths = bar_widths([1, 3, 2, 4, 1], amplification=1, max_bar_width=100)
    assert effective == 4
    assert widths.tolist() == pytest.approx([1, 3, 2, 4, 1])


def test_empty_bins_have_zero_width():
    effective, widths = bar_widths([0, 2, 0], amplification=10, max_bar_width=300)
    assert effective == 20
    assert widths.tolist() == [0.0, 20.0, 0.0]


def test_color_bands_scale_with_range():
    bands = color_bands(0.5)
    assert bands == pytest.approx({
        "band1": 0.17065, "band2": 0.2386, "band3": 0.30655, "band4": 0.31725})


@pytest.mark.parametrize("fraction, tier", [
    (0.0, BandTier.NEAR),
    (0.3413, BandTier.NEAR),     # 阈值本身归入内侧档
    (0.35, BandTier.MID),
    (0.4772, BandTier.MID),
    (0.5, BandTier.FAR),
    (0.62, BandTier.EDGE),
    (0.6345, BandTier.EDGE),
    (0.7, BandTier.OUTER),
    (math.inf, BandTier.OUTER),
])
def test_classify_bin(fraction, tier):
    assert classify_bin(fraction, False, color_bands(1.0)) is tier


def test_classify_poc_wins():
    assert classify_bin(5.0, True, color_bands(1.0)) is BandTier.POC


def test_profile_tiers_around_poc():
    bins = [0, 1, 2, 3, 4, 9, 4, 3, 0, 1]
    profile = compute_intensity_profile(bins, amplification=10, max_bar_width=300,
                                        color_band_range=1.0)
    # half_bins = 5：距离 1 → 0.2, 2 → 0.4, 3 → 0.6, 4 → 0.8
    assert profile.poc_index == 5
    assert profile.max_intensity == 9
    assert profile.tiers[5] is BandTier.POC
    assert profile.tiers[4] is BandTier.NEAR and profile.tiers[6] is BandTier.NEAR
    assert profile.tiers[3] is BandTier.MID and profile.tiers[7] is BandTier.MID
    assert profile.tiers[2] is BandTier.FAR and profile.tiers[8] is BandTier.FAR
    assert profile.tiers[1] is BandTier.OUTER
    assert profile.distance_fractions[1] == pytest.approx(0.8)
    assert profile.effective_max_width == 90
    assert profile.bar_widths[5] == pytest.approx(90)
    assert profile.total_hits == sum(bins)


def test_profile_edge_tier():
    bins = np.zeros(100, dtype=np.int64)
    bins[50] = 3
    profile = compute_intensity_profile(bins, 10, 300, 1.0)
    # 31 / 50 = 0.62，落在 (0.6131, 0.6345]
    assert profile.tiers[50 - 31] is BandTier.EDGE
    assert profile.tiers[50 + 31] is BandTier.EDGE


def test_profile_of_empty_bins():
    profile = compute_intensity_profile([0] * 6, 10, 300, 0.09)
    assert profile.max_intensity == 1
    assert profile.poc_index is None
    assert profile.bar_widths.tolist() == [0.0] * 6
    assert all(t is BandTier.OUTER for t in profile.tiers)


def test_distance_fractions_zero_range():
    fractions = distance_fractions(4, 1, 0.0)
    assert fractions[1] == 0.0
    assert np.isinf(fractions[[0, 2, 3]]).all()


def test_profile_is_stateless():
    bins = np.array([1, 5, 2])
    first = compute_intensity_profile(bins, 2, 50, 0.5)
    second = compute_intensity_profile(bins, 2, 50, 0.5)
    assert first.tiers == second.tiers
    assert np.array_equal(first.bar_widths, second.bar_widths)
    assert bins.tolist() == [1, 5, 2]
