"""
Algorithm implementations for tiny-wrs.
"""

from tiny_wrs.algorithms.reservoir import (
    KeyedReservoir,
    SingleWeightedSampling,
    WeightedReservoirSampling,
    weighted_sample,
)

__all__ = [
    "KeyedReservoir",
    "WeightedReservoirSampling",
    "SingleWeightedSampling",
    "weighted_sample",
]
