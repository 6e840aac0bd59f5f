import pytest

from vodpulse.histogram import Histogram, bin_count_for_width, build_histogram


@pytest.mark.parametrize("width, expected", [(0, 0), (1, 1), (2, 1), (3, 2), (640, 320), (641.5, 321)])
def test_bin_count_is_one_per_two_units_of_width(width, expected):
    assert bin_count_for_width(width) == expected


def test_build_histogram_counts_offsets_per_bin():
    histogram = build_histogram([0, 1, 9.99, 10, 25, 39.9], duration=40, display_width=8)

    assert histogram.bin_count == 4
    assert histogram.bin_width == 10
    assert histogram.counts == [3, 1, 1, 1]


def test_build_histogram_drops_offsets_at_or_past_duration():
    timestamps = [10, 20, 100, 100.5]

    histogram = build_histogram(timestamps, duration=100, display_width=10)

    assert sum(histogram.counts) == 2
    assert sum(histogram.counts) <= len(timestamps)


@pytest.mark.parametrize("width", [2, 7, 300, 1920])
def test_build_histogram_conserves_in_range_offsets(width):
    timestamps = [i * 0.37 for i in range(5000)]
    duration = 1850.0

    histogram = build_histogram(timestamps, duration, width)

    assert sum(histogram.counts) == len([t for t in timestamps if t < duration])


def test_build_histogram_with_zero_width_has_no_bins():
    assert build_histogram([1, 2, 3], duration=10, display_width=0) == Histogram(0, 0.0, [])


def test_build_histogram_rejects_non_positive_duration():
    with pytest.raises(ValueError, match="Duration must be positive"):
        build_histogram([], duration=0, display_width=100)


def test_bar_height_uses_squared_ratio_to_peak():
    histogram = Histogram(3, 1.0, [2, 4, 0])

    assert histogram.max_count == 4
    assert histogram.bar_height(4, 100) == 100
    assert histogram.bar_height(2, 100) == 25
    assert histogram.bar_height(0, 100) == 0


def test_max_count_is_floored_at_one_for_empty_histogram():
    histogram = Histogram(2, 5.0, [0, 0])

    assert histogram.max_count == 1
    assert histogram.bar_height(0, 50) == 0
    assert histogram.peak_bin() == -1


def test_peak_bin_returns_first_busiest_bin():
    assert Histogram(4, 1.0, [1, 5, 5, 2]).peak_bin() == 1


def test_peak_bin_handles_missing_bins_and_last_bin_peak():
    assert Histogram(0, 0.0, []).peak_bin() == -1
    assert Histogram(3, 1.0, [0, 1, 7]).peak_bin() == 2
