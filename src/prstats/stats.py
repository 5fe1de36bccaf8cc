"""Statistics and duration helpers for PR review reporting.

This module provides utilities for:
- Reducing millisecond duration samples to average/min/max/median.
- Formatting millisecond durations as compact ``1d 4h`` style strings.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .models import TimeMetrics

_MS_PER_SECOND = 1000


def calculate_median(sorted_values: Sequence[int]) -> float:
    """Return the median of a non-empty, ascending sequence.

    For an even count this is the arithmetic mean of the two middle values.
    """
    count = len(sorted_values)
    middle = count // 2
    if count % 2 == 0:
        return (sorted_values[middle - 1] + sorted_values[middle]) / 2
    return sorted_values[middle]


def compute_time_metrics(durations: Sequence[int]) -> Optional[TimeMetrics]:
    """Reduce millisecond durations to a ``TimeMetrics`` summary.

    The result depends only on the multiset of values, not their order.

    Args:
        durations: Non-negative elapsed times in milliseconds.

    Returns:
        ``TimeMetrics`` with the unrounded mean, or ``None`` when ``durations``
        is empty. Callers must not treat ``None`` as a zero duration.
    """
    if not durations:
        return None

    sorted_values = sorted(durations)
    return TimeMetrics(
        average=sum(sorted_values) / len(sorted_values),
        min=sorted_values[0],
        max=sorted_values[-1],
        median=calculate_median(sorted_values),
    )


def format_duration(milliseconds: Optional[float]) -> str:
    """Format milliseconds as the largest two units, e.g. ``2d 3h`` or ``45m``.

    Args:
        milliseconds: Duration in milliseconds.

    Returns:
        ``"N/A"`` when ``milliseconds`` is ``None``; otherwise a compact string
        truncated to whole seconds.
    """
    if milliseconds is None:
        return "N/A"

    seconds = int(milliseconds // _MS_PER_SECOND)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        remaining_hours = hours % 24
        return f"{days}d {remaining_hours}h" if remaining_hours > 0 else f"{days}d"
    if hours > 0:
        remaining_minutes = minutes % 60
        return f"{hours}h {remaining_minutes}m" if remaining_minutes > 0 else f"{hours}h"
    if minutes > 0:
        return f"{minutes}m"
    return f"{seconds}s"


def format_time_metrics(metrics: Optional[TimeMetrics]) -> str:
    """Format metrics as ``avg / min / max / median``."""
    if metrics is None:
        return "N/A"

    return " / ".join(
        format_duration(value)
        for value in (metrics.average, metrics.min, metrics.max, metrics.median)
    )
