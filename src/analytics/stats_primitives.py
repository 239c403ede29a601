"""
Statistics primitives for the insight analyzers.

Pure numeric helpers: Pearson correlation, Cohen's d, sample standard
deviation and a two-sample p-value.  Degenerate inputs (short series,
zero variance, constant cohorts) return safe defaults instead of NaN.

p-value note: the t-test path uses scipy's Student two-sample test.  When
it cannot produce a finite value the heuristic below is used instead and
tagged ``"heuristic"``; that figure is a rough separation score on the
0-10 rating scale, not a hypothesis-test result.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import NamedTuple, Optional, Sequence

import numpy as np
from scipy import stats as sp_stats

from constants import MAX_SCORE_DIFF

CONSTANT_GROUPS_DIFFER_P = 0.0001


class CorrelationStrength(str, Enum):
    INSUFFICIENT_DATA = "insufficient data"
    NEGLIGIBLE = "negligible"
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very strong"


# Ordered upper bounds on |r|
STRENGTH_BANDS = (
    (0.1, CorrelationStrength.NEGLIGIBLE),
    (0.3, CorrelationStrength.WEAK),
    (0.5, CorrelationStrength.MODERATE),
    (0.7, CorrelationStrength.STRONG),
)


class PValue(NamedTuple):
    value: float
    method: str  # "t-test" | "heuristic"


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(list(values), dtype=np.float64)


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson product-moment correlation, clamped to [-1, 1].

    Returns 0 for fewer than 2 points, a zero-variance series, or a NaN
    result.
    """
    xa, ya = _as_array(x), _as_array(y)
    if len(xa) != len(ya):
        raise ValueError(f"Series lengths differ: {len(xa)} != {len(ya)}")
    if len(xa) < 2:
        return 0.0

    dx = xa - xa.mean()
    dy = ya - ya.mean()
    sxx = float(np.dot(dx, dx))
    syy = float(np.dot(dy, dy))
    if sxx == 0 or syy == 0:
        return 0.0

    r = float(np.dot(dx, dy)) / math.sqrt(sxx * syy)
    if math.isnan(r):
        return 0.0
    return max(-1.0, min(1.0, r))


def correlation_strength(r: float) -> CorrelationStrength:
    magnitude = abs(r) if r is not None and not math.isnan(r) else 0.0
    for bound, label in STRENGTH_BANDS:
        if magnitude < bound:
            return label
    return CorrelationStrength.VERY_STRONG


def mean(values: Sequence[float]) -> Optional[float]:
    arr = _as_array(values)
    if len(arr) == 0:
        return None
    return float(arr.mean())


def standard_deviation(values: Sequence[float]) -> Optional[float]:
    """Sample standard deviation (n-1); None for fewer than 2 values."""
    arr = _as_array(values)
    if len(arr) < 2:
        return None
    return float(arr.std(ddof=1))


def pooled_standard_deviation(group1: Sequence[float], group2: Sequence[float]) -> Optional[float]:
    n1, n2 = len(group1), len(group2)
    sd1, sd2 = standard_deviation(group1), standard_deviation(group2)
    if sd1 is None or sd2 is None:
        return None
    return math.sqrt(((n1 - 1) * sd1 ** 2 + (n2 - 1) * sd2 ** 2) / (n1 + n2 - 2))


def effect_size(group1: Sequence[float], group2: Sequence[float]) -> Optional[float]:
    """Cohen's d; None when a group has <2 points or the pooled SD is 0."""
    pooled = pooled_standard_deviation(group1, group2)
    if pooled is None or pooled == 0:
        return None
    return abs(mean(group1) - mean(group2)) / pooled


def _is_constant(arr: np.ndarray) -> bool:
    return len(arr) > 0 and bool(np.all(arr == arr[0]))


def p_value(group1: Sequence[float], group2: Sequence[float],
            max_diff: float = MAX_SCORE_DIFF) -> Optional[PValue]:
    """Two-sample p-value with a heuristic fallback for degenerate input.

    Returns None when either group is empty.
    """
    a, b = _as_array(group1), _as_array(group2)
    if len(a) == 0 or len(b) == 0:
        return None

    if len(a) >= 2 and len(b) >= 2 and not (_is_constant(a) and _is_constant(b)):
        result = sp_stats.ttest_ind(a, b, equal_var=True)
        p = float(result.pvalue)
        if math.isfinite(p):
            return PValue(p, "t-test")

    if _is_constant(a) and _is_constant(b):
        p = 1.0 if a[0] == b[0] else CONSTANT_GROUPS_DIFFER_P
        return PValue(p, "heuristic")

    diff = abs(float(a.mean()) - float(b.mean()))
    return PValue(1.0 - min(1.0, diff / max_diff), "heuristic")
