"""
Basic example of using tiny-wrs for stream processing.

This example demonstrates how to draw a weighted sample without replacement
from a simulated data stream, and how to pick a single weighted winner.
"""

import logging
import random
from collections import Counter

from tiny_wrs import (
    InvalidWeightError,
    SingleWeightedSampling,
    WeightedReservoirSampling,
    weighted_sample,
)


def demonstrate_weighted_reservoir():
    """Demonstrate weighted reservoir sampling with per-category weights."""
    print("\n=== Weighted Reservoir Sampling Demo ===")

    rng = random.Random(42)
    reservoir = WeightedReservoirSampling(size=20)

    categories = {
        "A": 10.0,  # High weight (10x more likely than C)
        "B": 5.0,  # Medium weight (5x more likely than C)
        "C": 1.0,  # Low weight
    }

    print("Processing 1000 weighted items...")
    for i in range(1000):
        category = rng.choice(list(categories.keys()))
        reservoir.feed(f"{category}-{i}", categories[category], rng)

        if i % 200 == 0:
            print(f"  Processed {i} items")

    # Look at the sample without consuming it
    category_counts = Counter(item.split("-")[0] for item in reservoir)
    print("\nCategory distribution in sample:")
    for category, count in sorted(category_counts.items()):
        print(f"  {category}: {count} items (weight {categories[category]})")

    stats = reservoir.get_stats()
    print(f"\nTotal items processed: {stats['items_processed']}")
    print(f"Eviction threshold key: {stats['threshold_key']:.6f}")
    print(f"Approximate memory usage: {stats['memory_bytes']} bytes")

    sample = reservoir.take()
    print(f"\nFinal sample (size {len(sample)}):")
    print(sample)


def demonstrate_single_pick():
    """Pick one winner per round and compare frequencies with the weights."""
    print("\n=== Single Weighted Pick Demo ===")

    rng = random.Random(7)
    weights = {"A": 1.0, "B": 3.0, "C": 2.0}
    rounds = 6000
    wins = Counter()

    for _ in range(rounds):
        picker = SingleWeightedSampling()
        picker.feed_sequence(((w, item) for item, w in weights.items()), rng)
        wins[picker.take()] += 1

    total = sum(weights.values())
    for item, weight in weights.items():
        print(
            f"  {item}: observed {wins[item] / rounds:.3f}, expected {weight / total:.3f}"
        )


def demonstrate_invalid_weights():
    """Show how invalid weights are reported."""
    print("\n=== Invalid Weights Demo ===")

    stream = [(1.0, "ok-1"), (2.0, "ok-2"), (float("nan"), "broken"), (3.0, "never")]
    try:
        weighted_sample(stream, random.Random(0), 2)
    except InvalidWeightError as exc:
        print(f"  Sampling stopped: {exc} (kind={exc.kind.name})")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    demonstrate_weighted_reservoir()
    demonstrate_single_pick()
    demonstrate_invalid_weights()
