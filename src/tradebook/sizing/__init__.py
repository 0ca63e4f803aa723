"""Risk-based position sizing."""

from .position_sizer import (
    PositionSizer,
    SizingResult,
    calculate_position_size,
    round_size,
    split_evenly,
)

__all__ = [
    "PositionSizer",
    "SizingResult",
    "calculate_position_size",
    "round_size",
    "split_evenly",
]
