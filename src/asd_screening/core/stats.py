from __future__ import annotations

import math
from typing import Iterable


def finite_or_zero(value: float) -> float:
    v = float(value)
    if math.isnan(v) or math.isinf(v):
        return 0.0
    return v


def safe_ratio(numerator: float, denominator: float) -> float:
    """Division that resolves a zero or non-finite result to 0.0."""
    if not denominator:
        return 0.0
    return finite_or_zero(float(numerator) / float(denominator))


def mean(values: Iterable[float]) -> float:
    items = [float(v) for v in values]
    return safe_ratio(math.fsum(items), len(items))
