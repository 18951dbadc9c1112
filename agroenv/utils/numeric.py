"""
Numeric helpers shared by the domain services.
"""
import math


def round_2dp(value: float) -> float:
    """Round to 2 decimal places, ties up (20.125 -> 20.13, -0.125 -> -0.12)."""
    return math.floor(value * 100 + 0.5) / 100
