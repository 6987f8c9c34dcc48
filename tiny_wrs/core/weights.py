"""
Weight validation and priority keys for weighted reservoir sampling.

Every fed item is turned into a single priority key derived from its weight
and one uniform draw (Efraimidis-Spirakis, computed in the log domain).
Keeping the items with the largest keys reproduces weighted sampling
without replacement.

References:
    - Efraimidis, P. S., & Spirakis, P. G. (2006). Weighted random sampling with a reservoir.
      Information Processing Letters, 97(5), 181-185.
    - Müller, K. (2016). Accelerating weighted random sampling without replacement.
      Arbeitsberichte Verkehrs- und Raumplanung, 1141.
"""

import enum
import math
from typing import Any

NEG_INF = float("-inf")


class InvalidWeightKind(enum.Enum):
    """Reason a weight was rejected."""

    NAN = "NaN"
    INFINITE = "infinite"
    NEGATIVE = "negative"


class InvalidWeightError(ValueError):
    """
    Raised when a weight is NaN, infinite or negative.

    Attributes:
        kind: The InvalidWeightKind describing the rejection.
        weight: The offending weight value.
    """

    def __init__(self, kind: InvalidWeightKind, weight: Any = None):
        super().__init__(f"Cannot sample over values with {kind.value} weights.")
        self.kind = kind
        self.weight = weight


def _is_nan(weight: Any) -> bool:
    # Decimal has its own check, which also covers signaling NaNs
    is_nan = getattr(weight, "is_nan", None)
    if is_nan is not None:
        return bool(is_nan())
    return weight != weight


def _is_infinite(weight: Any) -> bool:
    is_infinite = getattr(weight, "is_infinite", None)
    if is_infinite is not None:
        return bool(is_infinite())
    return weight == math.inf or weight == -math.inf


def check_weight(weight: Any) -> None:
    """
    Validate a weight before it is used to compute a key.

    NaN is checked first, then infinity (either sign), then negativity.
    Zero (including -0.0) is a valid weight. The weight is classified in its
    own type, so finite ints, Fractions and Decimals beyond the float range
    are accepted.

    Args:
        weight: Any real number (int, float, Fraction, Decimal).

    Raises:
        InvalidWeightError: If the weight is NaN, infinite or negative.
    """
    if _is_nan(weight):
        raise InvalidWeightError(InvalidWeightKind.NAN, weight)
    if _is_infinite(weight):
        raise InvalidWeightError(InvalidWeightKind.INFINITE, weight)
    if weight < 0:
        raise InvalidWeightError(InvalidWeightKind.NEGATIVE, weight)


def weight_as_float(weight: Any) -> float:
    """
    Convert a validated weight to float.

    Finite weights too large for a float map to inf and weights too small
    map to 0.0.
    """
    try:
        return float(weight)
    except OverflowError:
        return math.inf


def priority_key(weight: Any, u: float) -> float:
    """
    Compute the priority key ln(u) / weight for a validated weight.

    Larger weights push the (negative) key towards zero, so heavier items
    win more often. Zero weight, or a draw of exactly 0.0, yields -inf,
    the lowest possible priority. A weight beyond the float range yields
    the limiting key -0.0.

    Args:
        weight: A validated, non-negative, finite weight.
        u: A uniform draw in [0, 1).

    Returns:
        The priority key. Never NaN.
    """
    w = weight_as_float(weight)
    if w == 0.0 or u == 0.0:
        return NEG_INF
    if w == math.inf:
        return -0.0
    return math.log(u) / w
