"""
tiny-wrs - Lightweight Weighted Reservoir Sampling

tiny-wrs is a Python library for drawing weighted random samples without
replacement from data streams in a single pass with bounded memory.
"""

__version__ = "0.1.0"

# Import main classes to make them available at the top level
from tiny_wrs.algorithms.reservoir import (
    KeyedReservoir,
    SingleWeightedSampling,
    WeightedReservoirSampling,
    weighted_sample,
)
from tiny_wrs.core.base import SequenceUniformSource, StreamSampler, UniformSource
from tiny_wrs.core.weights import InvalidWeightError, InvalidWeightKind

__all__ = [
    # Core interfaces
    "StreamSampler",
    "UniformSource",
    "SequenceUniformSource",
    "InvalidWeightError",
    "InvalidWeightKind",
    # Algorithm implementations
    "KeyedReservoir",
    "WeightedReservoirSampling",
    "SingleWeightedSampling",
    "weighted_sample",
]
