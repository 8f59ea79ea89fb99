"""swipe-beat CLI.

Usage:
    swipe-beat classify DX DY VX VY   Classify one terminal drag sample
    swipe-beat validate BEATMAP       Check a beatmap file for schedule errors
    swipe-beat generate OUTPUT        Write an on-beat generated beatmap
    swipe-beat simulate [BEATMAP]     Autoplay a rhythm session and print the result
    swipe-beat simulate-simple        Autoplay a simple-mode session
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Optional

import typer

from swipe_beat.autoplay import AutoPlayer
from swipe_beat.beatmap import Beatmap, BeatmapError
from swipe_beat.classifier import SwipeClassifier
from swipe_beat.clock import ManualClock
from swipe_beat.config import ConfigError, GameConfig, load_config
from swipe_beat.metrics import MetricsCollector
from swipe_beat.plugins import PluginManager
from swipe_beat.session import RhythmSession, SimpleSession
from swipe_beat.summary import SessionSummary

app = typer.Typer(
    name="swipe-beat",
    help="🎵 Swipe cards to the beat.",
    add_completion=False,
)


@app.callback()
def main_options(
    log_level: str = typer.Option("warning", help="Log level"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _load_config(path: Optional[str]) -> GameConfig:
    try:
        return load_config(path)
    except (ConfigError, OSError) as e:
        typer.echo(f"❌ Invalid config: {e}", err=True)
        raise typer.Exit(1)


def _print_summary(summary: Optional[SessionSummary], as_json: bool):
    if summary is None:
        typer.echo("❌ Session did not complete.", err=True)
        raise typer.Exit(1)
    if as_json:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return
    typer.echo("\n🏁 Game complete!")
    typer.echo(f"   Duration: {summary.duration_seconds:.1f}s")
    typer.echo(f"   Success:  {summary.success_count}")
    typer.echo(f"   Failed:   {summary.failed_count}")
    typer.echo(f"   Total:    {summary.total_cards}")
    typer.echo(f"   Accuracy: {summary.accuracy:.1f}%")


@app.command()
def classify(
    dx: float = typer.Argument(..., help="Horizontal translation (px)"),
    dy: float = typer.Argument(..., help="Vertical translation (px, down is positive)"),
    vx: float = typer.Argument(0.0, help="Horizontal release velocity (px/s)"),
    vy: float = typer.Argument(0.0, help="Vertical release velocity (px/s)"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config YAML"),
):
    """Classify one terminal drag sample."""
    cfg = _load_config(config)
    classifier = SwipeClassifier(cfg.swipe_threshold, cfg.velocity_threshold)
    result = classifier.classify(dx, dy, vx, vy)
    typer.echo(result.direction.value if result.swiped else "none")


@app.command()
def validate(
    beatmap: str = typer.Argument(..., help="Beatmap YAML/JSON file"),
):
    """Check a beatmap for schedule errors."""
    path = Path(beatmap)
    if not path.exists():
        typer.echo(f"❌ Beatmap not found: {beatmap}", err=True)
        raise typer.Exit(1)

    try:
        bm = Beatmap.load(path)
    except BeatmapError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✅ {path.name}: {len(bm)} sequences, {bm.total_cards} cards")
    typer.echo(f"   bpm={bm.bpm:g} start_offset={bm.start_offset:g}s last beat={bm.duration:.2f}s")


@app.command()
def generate(
    output: str = typer.Argument(..., help="Output .yml or .json path"),
    bpm: float = typer.Option(120.0, help="Tempo"),
    count: int = typer.Option(8, help="Number of sequences"),
    start_offset: float = typer.Option(4.0, help="Intro length in seconds"),
    pattern_length: int = typer.Option(4, help="Pattern cards per sequence"),
    song: str = typer.Option("", help="Song reference stored in the beatmap"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
):
    """Write a generated on-beat beatmap."""
    try:
        bm = Beatmap.generate(
            bpm=bpm,
            start_offset=start_offset,
            count=count,
            pattern_length=pattern_length,
            song_ref=song,
            rng=random.Random(seed),
        )
    except BeatmapError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    bm.save(output)
    typer.echo(f"💾 Wrote {len(bm)} sequences to {output}")


@app.command()
def simulate(
    beatmap: Optional[str] = typer.Argument(None, help="Beatmap file (default: built-in demo)"),
    accuracy: float = typer.Option(1.0, help="Probability of swiping the right way"),
    jitter: float = typer.Option(0.0, help="Beat-match timing jitter in seconds"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config YAML"),
    plugins_dir: Optional[str] = typer.Option(None, "--plugins", help="Plugin directory"),
    show_metrics: bool = typer.Option(False, "--metrics", help="Print Prometheus metrics"),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
):
    """Autoplay a rhythm session and print the result."""
    cfg = _load_config(config)
    try:
        bm = Beatmap.load(beatmap) if beatmap else Beatmap.with_defaults()
    except BeatmapError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    plugins = PluginManager()
    if plugins_dir:
        plugins.load_directory(plugins_dir)

    metrics = MetricsCollector()
    clock = ManualClock()
    session = RhythmSession(bm, config=cfg, clock=clock, metrics=metrics, plugins=plugins)
    player = AutoPlayer(accuracy=accuracy, timing_jitter=jitter, rng=random.Random(seed))

    with session:
        summary = player.play_rhythm(session, clock)

    _print_summary(summary, as_json)
    if show_metrics:
        typer.echo(metrics.render())


@app.command("simulate-simple")
def simulate_simple(
    accuracy: float = typer.Option(1.0, help="Probability of swiping the right way"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config YAML"),
    show_metrics: bool = typer.Option(False, "--metrics", help="Print Prometheus metrics"),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
):
    """Autoplay a simple-mode session and print the result."""
    cfg = _load_config(config)
    rng = random.Random(seed)

    metrics = MetricsCollector()
    clock = ManualClock()
    session = SimpleSession(config=cfg, rng=rng, clock=clock, metrics=metrics)
    player = AutoPlayer(accuracy=accuracy, rng=rng)

    with session:
        summary = player.play_simple(session, clock)

    _print_summary(summary, as_json)
    if show_metrics:
        typer.echo(metrics.render())


def main():
    app()


if __name__ == "__main__":
    main()
