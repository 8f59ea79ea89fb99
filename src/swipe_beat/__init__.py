"""swipe-beat - Swipe-card rhythm game engine."""

__version__ = "0.1.0"

from swipe_beat.cards import Card, CardGenerator, CardStatus, Direction
from swipe_beat.classifier import SwipeClassifier, SwipeResult, GestureSample, DragTransform
from swipe_beat.card_queue import CardQueue
from swipe_beat.beatmap import Beatmap, BeatMatch, BeatmapError, Sequence
from swipe_beat.engine import SequenceEngine, Phase, EngineSnapshot, CardResolution
from swipe_beat.progress import DisplayCard, DisplayStatus, project, waiting_progress
from swipe_beat.summary import SessionSummary
from swipe_beat.clock import ManualClock, MonotonicClock, NullTransport
from swipe_beat.scheduling import EventScheduler, ScheduledEvent
from swipe_beat.config import GameConfig, ConfigError, load_config
from swipe_beat.session import GameSession, RhythmSession, SimpleSession
from swipe_beat.metrics import MetricsCollector
from swipe_beat.plugins import SessionPlugin, PluginManager, PluginEvent
from swipe_beat.autoplay import AutoPlayer
