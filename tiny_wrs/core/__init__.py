"""
Core functionality for tiny-wrs.
"""

from tiny_wrs.core.base import SequenceUniformSource, StreamSampler, UniformSource
from tiny_wrs.core.weights import (
    InvalidWeightError,
    InvalidWeightKind,
    check_weight,
    priority_key,
)

__all__ = [
    # Base classes
    "StreamSampler",
    "UniformSource",
    "SequenceUniformSource",
    # Weight handling
    "InvalidWeightError",
    "InvalidWeightKind",
    "check_weight",
    "priority_key",
]
