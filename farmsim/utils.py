"""Numeric helpers shared by the plot model, metrics and engines."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
	"""Round halves upwards (``2.5 -> 3``, ``-2.5 -> -2``) instead of to even."""
	return math.floor(value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
	return max(low, min(high, value))


def format_currency(amount: float) -> str:
	sign = "-" if amount < 0 else ""
	return f"{sign}${abs(round_half_up(amount)):,}"
