"""R-multiple histogram."""

from __future__ import annotations

from typing import Any


def bin_r_values(r_values: list[float], bin_count: int = 10) -> list[dict[str, Any]]:
    """Equal-width histogram of R values.

    Bins are half-open except the last, which also takes the maximum.
    """
    if not r_values or bin_count <= 0:
        return []

    lo, hi = min(r_values), max(r_values)
    width = (hi - lo) / bin_count

    bins = []
    for i in range(bin_count):
        b_lo = lo + i * width
        b_hi = lo + (i + 1) * width
        last = i == bin_count - 1
        if last:
            b_hi = hi
        count = sum(1 for r in r_values if b_lo <= r and (r <= b_hi if last else r < b_hi))
        bins.append({
            "bin": f"{b_lo:.1f} to {b_hi:.1f}",
            "count": count,
            "min_value": b_lo,
            "max_value": b_hi,
        })
    return bins
