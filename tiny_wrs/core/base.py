"""
Base classes and interfaces for tiny-wrs samplers.

This module defines the uniform-source protocol consumed by every sampler and
the abstract base class that runs the shared feed pipeline
(validate -> draw -> key -> offer). It includes benchmarking hooks for
measuring update cost and helpers for describing the current sample.
"""

import abc
import logging
import math
import sys
import time
from collections import deque
from typing import (
    Any,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Tuple,
    TypeVar,
    Union,
)

from tiny_wrs.core.weights import (
    InvalidWeightError,
    check_weight,
    priority_key,
    weight_as_float,
)

T = TypeVar("T")  # Type for the items being sampled

logger = logging.getLogger(__name__)


class UniformSource(Protocol):
    """Protocol for a source of uniform draws in [0, 1).

    ``random.Random`` instances satisfy it.
    """

    def random(self) -> float:
        ...


class SequenceUniformSource:
    """
    Uniform source that replays a fixed sequence of draws.

    Useful for deterministic replay of a sampling run and for tests.
    """

    def __init__(self, draws: Iterable[float]):
        """
        Initialize the source.

        Args:
            draws: Values to hand out, in order. Each must lie in [0, 1).

        Raises:
            ValueError: If a draw is outside [0, 1).
        """
        self._draws = [float(u) for u in draws]
        for u in self._draws:
            if not 0.0 <= u < 1.0:
                raise ValueError(f"Uniform draw must lie in [0, 1), got {u}")
        self._position = 0

    def random(self) -> float:
        if self._position >= len(self._draws):
            raise IndexError(
                f"Uniform source exhausted after {len(self._draws)} draws"
            )
        u = self._draws[self._position]
        self._position += 1
        return u

    @property
    def draws_consumed(self) -> int:
        """Number of draws handed out so far."""
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._draws) - self._position


class StreamSampler(Generic[T], abc.ABC):
    """
    Abstract base class for weighted stream samplers.

    Subclasses decide how a keyed item is retained (``_offer``) and how the
    retained entries are exposed (``_entries``). The base class owns weight
    validation, key generation, counters, benchmarking hooks and statistics.
    """

    def __init__(self, memory_limit_bytes: Optional[int] = None):
        """
        Initialize a new sampler.

        Args:
            memory_limit_bytes: Optional maximum memory usage in bytes.
                                None means no explicit limit.
        """
        self._memory_limit_bytes = memory_limit_bytes
        self._items_processed = 0
        # Total weight of all items *fed* to the sampler
        self._total_stream_weight = 0.0
        self._consumed = False

        # Performance tracking attributes
        self._last_update_time: float = 0.0
        self._total_update_time: float = 0.0
        self._update_count: int = 0

        # Feed timing is off until enable_performance_tracking()
        self._track_performance: bool = False
        self._track_recent_updates: bool = False
        self._recent_update_times: Optional[deque] = None
        self._max_update_history: int = 100

    @property
    @abc.abstractmethod
    def capacity(self) -> int:
        """Maximum number of items retained."""

    @abc.abstractmethod
    def _offer(self, key: float, item: T, weight: float) -> bool:
        """
        Offer a keyed item for retention.

        Returns:
            True if the item was retained, False if it was rejected.
        """

    @abc.abstractmethod
    def _entries(self) -> Iterator[Tuple[float, float, T]]:
        """Iterate over retained (key, weight, item) triples."""

    @abc.abstractmethod
    def __len__(self) -> int:
        pass

    @abc.abstractmethod
    def peek_threshold(self) -> Optional[float]:
        """
        Get the key a new item has to beat to be retained.

        Returns:
            The minimum retained key once the sampler is full, else None.
        """

    def feed(self, item: T, weight: Any, rng: UniformSource) -> None:
        """
        Feed one item from the stream.

        The weight is validated before anything else happens; an invalid
        weight leaves the sampler untouched and no draw is taken from ``rng``.
        Otherwise exactly one draw is taken and the item is offered to the
        reservoir. Whether it was retained is not reported.

        Args:
            item: The item to sample.
            weight: Its non-negative, finite weight.
            rng: Source of uniform draws in [0, 1).

        Raises:
            InvalidWeightError: If the weight is NaN, infinite or negative.
            RuntimeError: If the sampler has already been consumed by take().
        """
        self._check_not_consumed()
        try:
            check_weight(weight)
        except InvalidWeightError as exc:
            logger.debug(
                "%s rejected weight %r after %d items: %s",
                self.__class__.__name__,
                weight,
                self._items_processed,
                exc.kind.name,
            )
            raise

        start_time = time.perf_counter() if self._track_performance else None

        weight = weight_as_float(weight)
        key = priority_key(weight, rng.random())
        self._offer(key, item, weight)

        self._items_processed += 1
        self._total_stream_weight += weight

        if start_time is not None:
            self._record_update_time(time.perf_counter() - start_time)

    def feed_sequence(
        self, pairs: Iterable[Tuple[Any, T]], rng: UniformSource
    ) -> None:
        """
        Feed (weight, item) pairs in order.

        Stops at the first invalid weight and re-raises it. Items fed before
        the failing pair stay in effect, and pairs after it are not pulled
        from the iterable.

        Args:
            pairs: Iterable of (weight, item) tuples.
            rng: Source of uniform draws in [0, 1).

        Raises:
            InvalidWeightError: On the first invalid weight.
        """
        for weight, item in pairs:
            self.feed(item, weight, rng)

    def __iter__(self) -> Iterator[T]:
        """Iterate over the retained items without consuming the sampler."""
        self._check_not_consumed()
        return (item for _, _, item in self._entries())

    def get_sample(self) -> List[T]:
        """
        Get the current sample without consuming the sampler.

        Returns:
            A list containing the retained items in storage order.
        """
        return list(self)

    def get_weighted_sample(self) -> List[Tuple[T, float]]:
        """
        Get the current sample together with the weights the items were fed with.

        Returns:
            A list of (item, weight) tuples.
        """
        self._check_not_consumed()
        return [(item, weight) for _, weight, item in self._entries()]

    @property
    def items_processed(self) -> int:
        """Number of items successfully fed."""
        return self._items_processed

    @property
    def total_stream_weight(self) -> float:
        return self._total_stream_weight

    @property
    def consumed(self) -> bool:
        """Whether take() has been called."""
        return self._consumed

    def _check_not_consumed(self) -> None:
        if self._consumed:
            raise RuntimeError(
                f"{self.__class__.__name__} has already been consumed by take()"
            )

    def _consume(self) -> None:
        """Mark the sampler as consumed; subclasses call this from take()."""
        self._check_not_consumed()
        self._consumed = True
        logger.debug(
            "%s consumed after %d items (%d retained)",
            self.__class__.__name__,
            self._items_processed,
            len(self),
        )

    def _record_update_time(self, elapsed: float) -> None:
        self._last_update_time = elapsed
        self._total_update_time += elapsed
        self._update_count += 1
        if self._recent_update_times is not None:
            self._recent_update_times.append(elapsed)

    def estimate_size(self) -> int:
        """Rough size in bytes of the bookkeeping; subclasses add their entries."""
        size = sys.getsizeof(self) + sys.getsizeof(self.__dict__)
        if self._recent_update_times is not None:
            size += sys.getsizeof(self._recent_update_times)
            size += len(self._recent_update_times) * sys.getsizeof(0.0)
        return size

    def check_memory_limit(self) -> bool:
        """
        Report whether estimate_size() is within memory_limit_bytes.

        The limit is only reported here and in get_stats(); feeding never
        checks it.
        """
        if self._memory_limit_bytes is None:
            return True
        return self.estimate_size() <= self._memory_limit_bytes

    def enable_performance_tracking(
        self, track_recent_updates: bool = True, max_history: int = 100
    ) -> None:
        """
        Time every valid feed with time.perf_counter.

        Args:
            track_recent_updates: Also keep the last ``max_history`` timings.
                When False, only the running average and the last timing
                are kept.
            max_history: Number of recent timings kept.
        """
        self._track_performance = True
        self._track_recent_updates = track_recent_updates
        self._max_update_history = max(1, max_history)

        if not track_recent_updates:
            self._recent_update_times = None
        elif (
            self._recent_update_times is None
            or self._recent_update_times.maxlen != self._max_update_history
        ):
            self._recent_update_times = deque(
                self._recent_update_times or (), maxlen=self._max_update_history
            )

    def disable_performance_tracking(self) -> None:
        """Stop timing feeds and drop the recent history; averages are kept."""
        self._track_performance = False
        self._track_recent_updates = False
        self._recent_update_times = None

    def get_performance_stats(self) -> Dict[str, Any]:
        """Items processed, memory estimate and feed timings in nanoseconds."""
        stats: Dict[str, Any] = {
            "items_processed": self._items_processed,
            "memory_bytes": self.estimate_size(),
        }

        if self._update_count > 0:
            stats["avg_update_time_ns"] = (
                self._total_update_time / self._update_count
            ) * 1e9
            stats["last_update_time_ns"] = self._last_update_time * 1e9

        if self._recent_update_times:
            recent_times_ns = [t * 1e9 for t in self._recent_update_times]
            stats["recent_update_times_ns"] = recent_times_ns
            stats["min_update_time_ns"] = min(recent_times_ns)
            stats["max_update_time_ns"] = max(recent_times_ns)

        return stats

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the sampler.

        Includes sample size and fullness, stream and sample weights, key
        statistics (useful for diagnosing sampling issues) and any recorded
        performance figures.

        Returns:
            A dictionary containing various statistics about the sampler state.
        """
        stats = self.get_performance_stats()
        stats["type"] = self.__class__.__name__

        if self._memory_limit_bytes is not None:
            stats["memory_limit_bytes"] = self._memory_limit_bytes
            stats["memory_usage_pct"] = (
                stats["memory_bytes"] / self._memory_limit_bytes
            ) * 100

        current_size = len(self)
        max_size = self.capacity
        stats.update(
            {
                "sample_size": current_size,
                "max_sample_size": max_size,
                "sample_fullness_pct": (current_size / max_size) * 100,
                "total_stream_weight": self._total_stream_weight,
                "consumed": self._consumed,
            }
        )

        if current_size > 0 and not self._consumed:
            entries = list(self._entries())
            weights_in_sample = [w for _, w, _ in entries]
            total_weight_in_sample = sum(weights_in_sample)
            stats["total_weight_in_sample"] = total_weight_in_sample
            stats["min_weight_in_sample"] = min(weights_in_sample)
            stats["max_weight_in_sample"] = max(weights_in_sample)
            stats["avg_weight_in_sample"] = total_weight_in_sample / current_size

            keys_in_sample = [k for k, _, _ in entries]
            stats["min_key_in_sample"] = min(keys_in_sample)
            stats["max_key_in_sample"] = max(keys_in_sample)

        threshold = None if self._consumed else self.peek_threshold()
        if threshold is not None:
            stats["threshold_key"] = threshold

        stats.update(self.error_bounds())
        return stats

    def error_bounds(self) -> Dict[str, Union[str, float]]:
        """
        Describe the theoretical properties of the sampling process.

        Returns:
            A dictionary describing the sampling characteristics.
        """
        return {
            "sampling_type": "Weighted Reservoir (A-ES, log-domain keys)",
            "property": "Inclusion probability is proportional to item weight.",
            "zero_weight_policy": (
                "Zero-weight items are kept only while the sample is not full."
            ),
        }

    def assess_representativeness(self) -> Dict[str, Any]:
        """
        Provides basic statistics about the weighted sample itself.

        Assessing true representativeness requires comparing the sample's
        properties (considering weights) to the full stream's properties.
        This method provides statistics *about the current sample* and its weights.

        Returns:
            A dictionary containing statistics about the sample and weight distribution.
        """
        self._check_not_consumed()
        entries = list(self._entries())
        current_size = len(entries)

        stats: Dict[str, Any] = {
            "assessment_type": "Weighted Sample Internal Statistics",
            "limitation": "Does not compare sample to full stream distribution.",
            "sample_size": current_size,
            "max_sample_size": self.capacity,
        }

        if current_size == 0:
            stats["message"] = "Sample is empty."
            return stats

        weights_in_sample = [w for _, w, _ in entries]
        total_weight_in_sample = sum(weights_in_sample)
        avg_w = total_weight_in_sample / current_size
        stats["total_weight_in_sample"] = total_weight_in_sample
        stats["min_weight_in_sample"] = min(weights_in_sample)
        stats["max_weight_in_sample"] = max(weights_in_sample)
        stats["avg_weight_in_sample"] = avg_w
        if current_size > 1:
            weight_variance = sum((w - avg_w) ** 2 for w in weights_in_sample) / (
                current_size - 1
            )
            stats["stdev_weight_in_sample"] = math.sqrt(weight_variance)
        else:
            stats["stdev_weight_in_sample"] = 0.0

        # Crude check for bias
        if self._total_stream_weight > 0:
            stats["sample_weight_fraction"] = (
                total_weight_in_sample / self._total_stream_weight
            )
        if self._items_processed > 0:
            stats["sample_count_fraction"] = current_size / self._items_processed

        try:
            values = [float(item) for _, _, item in entries]
            is_numeric = True
        except (ValueError, TypeError):
            is_numeric = False

        if is_numeric:
            stats["sample_min_value"] = min(values)
            stats["sample_max_value"] = max(values)
            stats["sample_mean_value"] = sum(values) / current_size
            weighted_sum = sum(v * w for v, w in zip(values, weights_in_sample))
            stats["sample_weighted_mean_value"] = (
                weighted_sum / total_weight_in_sample
                if total_weight_in_sample > 0
                else 0.0
            )
            stats["data_type_assessed"] = "numeric"
        else:
            try:
                unique_items_in_sample = len(set(item for _, _, item in entries))
                stats["unique_items_in_sample"] = unique_items_in_sample
                stats["sample_diversity_ratio"] = unique_items_in_sample / current_size
                stats["data_type_assessed"] = "hashable"
            except TypeError:
                stats["message"] = "Sample contains non-hashable, non-numeric items."
                stats["data_type_assessed"] = "mixed/unhashable"

        return stats
