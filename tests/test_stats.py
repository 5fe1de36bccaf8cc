"""Tests for duration statistics and formatting helpers."""

import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstats.models import TimeMetrics
from prstats.stats import calculate_median, compute_time_metrics, format_duration, format_time_metrics

MINUTE = 60 * 1000
HOUR = 60 * MINUTE
DAY = 24 * HOUR


def test_calculate_median_even_count_averages_middle_values():
    """Verify even-length input uses the mean of the two middle values."""
    assert calculate_median([10, 20, 30, 40]) == 25


def test_calculate_median_odd_count_returns_middle_value():
    """Verify odd-length input returns the middle value."""
    assert calculate_median([10, 20, 30]) == 20


def test_compute_time_metrics_returns_none_for_empty_input():
    """Verify an empty sample produces no metrics rather than zeros."""
    assert compute_time_metrics([]) is None


def test_compute_time_metrics_is_order_independent():
    """Verify metrics are computed from the multiset, not input order."""
    expected = TimeMetrics(average=25, min=10, max=40, median=25)

    assert compute_time_metrics([40, 10, 30, 20]) == expected
    assert compute_time_metrics([10, 20, 30, 40]) == expected


def test_compute_time_metrics_keeps_unrounded_average():
    """Verify the mean is not rounded."""
    metrics = compute_time_metrics([1, 2])

    assert metrics.average == 1.5
    assert metrics.median == 1.5


def test_format_duration_none_is_not_available():
    """Verify missing durations render as N/A."""
    assert format_duration(None) == "N/A"


def test_format_duration_uses_two_largest_units():
    """Verify durations render with the largest unit and its remainder."""
    assert format_duration(2 * DAY + 3 * HOUR) == "2d 3h"
    assert format_duration(2 * DAY) == "2d"
    assert format_duration(4 * HOUR + 30 * MINUTE) == "4h 30m"
    assert format_duration(4 * HOUR) == "4h"
    assert format_duration(45 * MINUTE) == "45m"
    assert format_duration(12_500) == "12s"
    assert format_duration(0) == "0s"


def test_format_time_metrics_joins_all_four_values():
    """Verify metrics render as avg / min / max / median."""
    metrics = TimeMetrics(average=1.5 * HOUR, min=HOUR, max=2 * HOUR, median=1.5 * HOUR)

    assert format_time_metrics(metrics) == "1h 30m / 1h / 2h / 1h 30m"
    assert format_time_metrics(None) == "N/A"
