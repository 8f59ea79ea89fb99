#!/usr/bin/env python3
"""swipe-beat benchmark: classification, engine and projection latency.

Measures per-call cost on the current hardware with synthetic drags and a
generated beatmap. No audio or touch input required.

Usage:
    python examples/benchmark.py
    python examples/benchmark.py --iterations 50000 --sequences 2000
"""

from __future__ import annotations

import argparse
import gc
import os
import random
import sys
import time
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from swipe_beat.beatmap import Beatmap
from swipe_beat.cards import CardGenerator
from swipe_beat.classifier import SwipeClassifier
from swipe_beat.engine import Phase, SequenceEngine
from swipe_beat.progress import project


def latency_stats(times: list[float]) -> dict:
    times_ms = np.array(times) * 1000
    return {
        "mean_ms": float(np.mean(times_ms)),
        "p95_ms": float(np.percentile(times_ms, 95)),
        "p99_ms": float(np.percentile(times_ms, 99)),
        "throughput": 1000.0 / float(np.mean(times_ms)),
    }


def benchmark_classify(classifier: SwipeClassifier, samples: np.ndarray) -> dict:
    for row in samples[:100]:
        classifier.classify(*row)

    gc.collect()
    times = []
    for dx, dy, vx, vy in samples:
        t0 = time.perf_counter()
        classifier.classify(dx, dy, vx, vy)
        times.append(time.perf_counter() - t0)
    return latency_stats(times)


def benchmark_paths(classifier: SwipeClassifier, n: int, rng: np.random.Generator) -> dict:
    """Classify raw 20-point drag paths."""
    paths = np.cumsum(rng.normal(0, 12, size=(n, 20, 2)), axis=1)
    timestamps = np.linspace(0.0, 0.25, 20)

    gc.collect()
    times = []
    for path in paths:
        t0 = time.perf_counter()
        classifier.classify_path(path, timestamps)
        times.append(time.perf_counter() - t0)
    return latency_stats(times)


def benchmark_engine(beatmap: Beatmap) -> dict:
    """Play a beatmap perfectly, timing every tick and swipe."""
    engine = SequenceEngine(beatmap)
    tick_times, swipe_times = [], []
    clock = 0.0

    gc.collect()
    while engine.phase != Phase.COMPLETED:
        clock += 0.05
        t0 = time.perf_counter()
        engine.tick(clock)
        tick_times.append(time.perf_counter() - t0)

        seq = engine.active_sequence
        while seq is not None and engine.active_sequence is seq:
            card = engine.active_cards[engine.active_card_cursor]
            t0 = time.perf_counter()
            engine.apply_swipe(card.target_direction, seq.beat_match.beat_time * 1000)
            swipe_times.append(time.perf_counter() - t0)

    return {
        "tick": latency_stats(tick_times),
        "swipe": latency_stats(swipe_times),
        "hits": engine.score.hits,
    }


def benchmark_projection(n: int) -> dict:
    cards = CardGenerator(random.Random(0)).cards(200)

    gc.collect()
    times = []
    for i in range(n):
        t0 = time.perf_counter()
        project(cards, i % len(cards), 6)
        times.append(time.perf_counter() - t0)
    return latency_stats(times)


def print_table(title: str, rows: list[tuple[str, str]]):
    """Print a formatted table."""
    max_key = max(len(r[0]) for r in rows)
    max_val = max(len(r[1]) for r in rows)
    width = max_key + max_val + 7

    print()
    print(f"  ╭{'─' * width}╮")
    print(f"  │ {title:<{width-2}} │")
    print(f"  ├{'─' * width}┤")
    for key, val in rows:
        print(f"  │ {key:<{max_key}}   {val:>{max_val}} │")
    print(f"  ╰{'─' * width}╯")


def latency_rows(stats: dict, unit: str) -> list[tuple[str, str]]:
    return [
        ("Mean latency", f"{stats['mean_ms'] * 1000:.2f} µs"),
        ("P95 latency", f"{stats['p95_ms'] * 1000:.2f} µs"),
        ("P99 latency", f"{stats['p99_ms'] * 1000:.2f} µs"),
        ("Throughput", f"{stats['throughput']:.0f} {unit}/sec"),
    ]


def main():
    parser = argparse.ArgumentParser(description="swipe-beat benchmark")
    parser.add_argument("-n", "--iterations", type=int, default=20000, help="Classifications to time")
    parser.add_argument("--sequences", type=int, default=500, help="Sequences in the generated beatmap")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    n = args.iterations

    print()
    print("  ┌─────────────────────────────────────┐")
    print("  │   swipe-beat Benchmark Suite 🎵      │")
    print("  └─────────────────────────────────────┘")
    print()

    classifier = SwipeClassifier()
    samples = rng.uniform(-600, 600, size=(n, 4))
    beatmap = Beatmap.generate(bpm=160, start_offset=0.5, count=args.sequences,
                               rng=random.Random(args.seed))

    print(f"  Classifying {n} synthetic drags...")
    classify_results = benchmark_classify(classifier, samples)

    print(f"  Classifying {n // 10} drag paths...")
    path_results = benchmark_paths(classifier, max(1, n // 10), rng)

    print(f"  Playing {len(beatmap)} sequences ({beatmap.total_cards} cards)...")
    engine_results = benchmark_engine(beatmap)

    print("  Projecting progress windows...")
    projection_results = benchmark_projection(n)

    print_table("Swipe Classification", latency_rows(classify_results, "swipes"))
    print_table("Path Classification (20 points)", latency_rows(path_results, "paths"))
    print_table("Engine Tick", latency_rows(engine_results["tick"], "ticks"))
    print_table("Engine Swipe", latency_rows(engine_results["swipe"], "swipes"))
    print_table("Progress Projection", latency_rows(projection_results, "windows"))

    print_table("System", [
        ("Iterations", f"{n:,}"),
        ("Beat-match hits", f"{engine_results['hits']} / {len(beatmap)}"),
        ("Platform", f"{sys.platform} / {os.uname().machine}"),
        ("Python", f"{sys.version.split()[0]}"),
        ("NumPy", f"{np.__version__}"),
    ])

    print()
    print(f"  ⚡ Per-frame budget used at 60 FPS: "
          f"{(engine_results['tick']['mean_ms'] + classify_results['mean_ms']) / 16.67 * 100:.3f}%")
    print()


if __name__ == "__main__":
    main()
