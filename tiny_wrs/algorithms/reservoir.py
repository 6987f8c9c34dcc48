# tiny_wrs/algorithms/reservoir.py

"""
Weighted Reservoir Sampling implementation for tiny-wrs.

This module provides a one-pass weighted random sampler without replacement
(A-ES with log-domain keys), its capacity-1 specialization, and a one-shot
helper. Each item gets a key ln(u) / weight from a single uniform draw and the
sampler keeps the items with the largest keys, so every item's inclusion
probability follows its weight relative to everything fed so far.

Guarantees:
1. Space Complexity: O(k) where k is the sample size
2. Update Time: O(log k) per item (O(1) for the single-item sampler)
3. The first k items are always retained, so the sample holds min(n, k) items

References:
    - Efraimidis, P. S., & Spirakis, P. G. (2006). Weighted random sampling with a reservoir.
      Information Processing Letters, 97(5), 181-185.
    - Müller, K. (2016). Accelerating weighted random sampling without replacement.
      Arbeitsberichte Verkehrs- und Raumplanung, 1141.
"""

import heapq
import logging
import sys
from typing import Any, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from tiny_wrs.core.base import StreamSampler, UniformSource

T = TypeVar("T")  # Type for the items being sampled

logger = logging.getLogger(__name__)


class ReservoirEntry(Generic[T]):
    """
    An entry in the keyed reservoir.

    Entries are ordered by key; the arrival sequence number breaks ties so
    that the items themselves are never compared.
    """

    __slots__ = ["key", "seq", "weight", "item"]

    def __init__(self, key: float, seq: int, weight: float, item: T):
        self.key = key
        self.seq = seq
        self.weight = weight
        self.item = item

    def __lt__(self, other: "ReservoirEntry[T]") -> bool:
        """
        Compare entries for use in a min-heap.

        Args:
            other: Another ReservoirEntry to compare with.

        Returns:
            True if this entry has the smaller key, or the same key and
            arrived earlier.
        """
        if self.key != other.key:
            return self.key < other.key
        return self.seq < other.seq

    def __repr__(self) -> str:
        return (
            f"ReservoirEntry(key={self.key}, weight={self.weight}, item={self.item!r})"
        )


class KeyedReservoir(Generic[T]):
    """
    Bounded min-heap of keyed items.

    Holds at most ``capacity`` entries. While it is filling, every entry is
    admitted; once full, a new entry is admitted only if its key is strictly
    greater than the smallest retained key, which it then evicts.
    """

    def __init__(self, capacity: int):
        """
        Initialize an empty reservoir.

        Args:
            capacity: Maximum number of entries retained.

        Raises:
            ValueError: If capacity is less than 1.
        """
        if capacity < 1:
            raise ValueError("Reservoir size must be at least 1")

        self._capacity = capacity
        self._heap: List[ReservoirEntry[T]] = []
        self._seq = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._heap)

    def is_full(self) -> bool:
        return len(self._heap) >= self._capacity

    def admit(self, key: float, item: T, weight: float = 1.0) -> bool:
        """
        Offer an item with its priority key.

        Args:
            key: The item's priority key.
            item: The item.
            weight: The weight the key was derived from, kept for statistics.

        Returns:
            True if the item was admitted, False if it was rejected.
        """
        if len(self._heap) < self._capacity:
            heapq.heappush(
                self._heap, ReservoirEntry(key, self._next_seq(), weight, item)
            )
            return True

        # Ties with the threshold are rejected
        if key > self._heap[0].key:
            heapq.heapreplace(
                self._heap, ReservoirEntry(key, self._next_seq(), weight, item)
            )
            return True

        return False

    def _next_seq(self) -> int:
        seq = self._seq
        self._seq += 1
        return seq

    def peek_threshold(self) -> Optional[float]:
        """
        Get the eviction threshold.

        Returns:
            The smallest retained key if the reservoir is full, else None.
        """
        if not self.is_full():
            return None
        return self._heap[0].key

    def drain(self) -> List[T]:
        """
        Remove and return every retained item, in heap storage order.

        Returns:
            The retained items. The reservoir is empty afterwards.
        """
        heap, self._heap = self._heap, []
        return [entry.item for entry in heap]

    def __iter__(self) -> Iterator[T]:
        return (entry.item for entry in self._heap)

    def entries(self) -> Iterator[Tuple[float, float, T]]:
        """Iterate over retained (key, weight, item) triples in storage order."""
        return ((entry.key, entry.weight, entry.item) for entry in self._heap)

    def estimate_size(self) -> int:
        """
        Estimate the memory used by the reservoir and its entries in bytes.

        Returns:
            Estimated memory usage in bytes.
        """
        size = sys.getsizeof(self) + sys.getsizeof(self._heap)

        # Entries use __slots__, so their attribute values are counted separately
        for entry in self._heap:
            size += sys.getsizeof(entry)
            size += sys.getsizeof(entry.key) + sys.getsizeof(entry.weight)
            size += sys.getsizeof(entry.item)

        return size


class WeightedReservoirSampling(StreamSampler[T]):
    """
    One-pass weighted random sampling without replacement (A-ES).

    Maintains up to ``size`` items from a stream of weighted items; the
    retained set is distributed as weighted sampling without replacement
    over everything fed so far. Uses O(size) memory and O(log size) time per
    item. Zero-weight items get the lowest possible key: they fill empty
    slots but never displace a positively weighted item.

    The uniform source is passed to every feed call, so a seeded
    ``random.Random`` (or a ``SequenceUniformSource``) makes a run fully
    reproducible.
    """

    def __init__(self, size: int, memory_limit_bytes: Optional[int] = None):
        """
        Initialize a new weighted reservoir sampler.

        Args:
            size: The number of items to sample.
            memory_limit_bytes: Optional maximum memory usage in bytes.

        Raises:
            ValueError: If size is less than 1.
        """
        super().__init__(memory_limit_bytes)
        self._reservoir: KeyedReservoir[T] = KeyedReservoir(size)
        logger.debug("Created %s with size=%d", self.__class__.__name__, size)

    @property
    def capacity(self) -> int:
        return self._reservoir.capacity

    def __len__(self) -> int:
        return len(self._reservoir)

    def _offer(self, key: float, item: T, weight: float) -> bool:
        return self._reservoir.admit(key, item, weight)

    def _entries(self) -> Iterator[Tuple[float, float, T]]:
        return self._reservoir.entries()

    def peek_threshold(self) -> Optional[float]:
        return self._reservoir.peek_threshold()

    def take(self) -> List[T]:
        """
        Consume the sampler and return the sampled items.

        The order of the returned items reflects internal storage, not rank.
        The sampler cannot be used afterwards.

        Returns:
            The sampled items: min(items_processed, size) of them.

        Raises:
            RuntimeError: If the sampler has already been consumed.
        """
        self._consume()
        return self._reservoir.drain()

    def estimate_size(self) -> int:
        """
        Estimate the current memory usage of this sampler in bytes.

        Returns:
            Estimated memory usage in bytes.
        """
        return super().estimate_size() + self._reservoir.estimate_size()


class SingleWeightedSampling(StreamSampler[T]):
    """
    Weighted sampling of exactly one item from a stream.

    Equivalent to ``WeightedReservoirSampling(1)`` for the same feeds and
    draws, but keeps a single (key, item) slot instead of a heap, making each
    feed O(1).
    """

    def __init__(self, memory_limit_bytes: Optional[int] = None):
        super().__init__(memory_limit_bytes)
        self._filled = False
        self._key = 0.0
        self._weight = 0.0
        self._value: Optional[T] = None

    @property
    def capacity(self) -> int:
        return 1

    def __len__(self) -> int:
        return 1 if self._filled else 0

    def _offer(self, key: float, item: T, weight: float) -> bool:
        if self._filled and key <= self._key:
            return False

        self._filled = True
        self._key = key
        self._weight = weight
        self._value = item
        return True

    def _entries(self) -> Iterator[Tuple[float, float, T]]:
        if self._filled:
            yield (self._key, self._weight, self._value)

    def peek_threshold(self) -> Optional[float]:
        return self._key if self._filled else None

    def get(self) -> Optional[T]:
        """
        Get the currently selected item without consuming the sampler.

        Returns:
            The selected item, or None if nothing has been fed.
        """
        self._check_not_consumed()
        return self._value

    def take(self) -> Optional[T]:
        """
        Consume the sampler and return the selected item.

        Returns:
            The selected item, or None if nothing has been fed.

        Raises:
            RuntimeError: If the sampler has already been consumed.
        """
        self._consume()
        value, self._value = self._value, None
        self._filled = False
        return value

    def estimate_size(self) -> int:
        size = super().estimate_size()
        if self._filled:
            size += sys.getsizeof(self._value)
        return size


def weighted_sample(
    pairs: Iterable[Tuple[Any, T]], rng: UniformSource, k: int
) -> List[T]:
    """
    Draw a weighted sample of ``k`` items without replacement in one pass.

    Args:
        pairs: Iterable of (weight, item) tuples.
        rng: Source of uniform draws in [0, 1).
        k: Number of items to sample.

    Returns:
        The sampled items, in no particular order.

    Raises:
        InvalidWeightError: On the first invalid weight; the iterable is not
            consumed past it.
        ValueError: If k is less than 1.
    """
    sampler: WeightedReservoirSampling[T] = WeightedReservoirSampling(k)
    sampler.feed_sequence(pairs, rng)
    return sampler.take()
