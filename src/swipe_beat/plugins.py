"""Plugin system for swipe-beat sessions.

Plugins observe a session: swipes, card resolutions, sequence loads, phase
changes and the final summary. They never feed back into game state.

Plugin interface:
    class MyPlugin(SessionPlugin):
        name = "my_plugin"

        def on_complete(self, event):
            print(event.data["accuracy"])

Or use the decorator API:
    plugin = SessionPlugin(name="simple")

    @plugin.handler("incorrect")
    def on_miss(event):
        print("Missed", event.data["card_id"])

Drop a .py file defining a plugin in a directory and load it with
``PluginManager.load_directory``.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Callable, Optional

logger = logging.getLogger("swipe_beat.plugins")


@dataclass
class PluginEvent:
    """Event passed to plugin handlers."""
    type: str  # "swipe", "card", "sequence", "phase", "complete"
    name: str  # direction, card status, phase name, ...
    data: dict = field(default_factory=dict)
    timestamp: float = 0.0


class SessionPlugin:
    """Base class for session plugins. Override the hooks you care about."""

    name: str = "unnamed"
    version: str = "1.0.0"
    description: str = ""

    def __init__(self, name: Optional[str] = None):
        if name:
            self.name = name
        self._handlers: dict[str, list[Callable]] = {}

    def _dispatch_handlers(self, event: PluginEvent):
        handlers = self._handlers.get(event.name, []) + self._handlers.get("*", [])
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error("Plugin %s handler error: %s", self.name, e)

    def on_swipe(self, event: PluginEvent):
        """Called for each applied swipe; name is "none" for a gesture that was no swipe."""
        self._dispatch_handlers(event)

    def on_card(self, event: PluginEvent):
        """Called when a card is resolved (name is "correct" or "incorrect")."""
        self._dispatch_handlers(event)

    def on_sequence(self, event: PluginEvent):
        """Called when a rhythm sequence is loaded or finished."""
        pass

    def on_phase(self, event: PluginEvent):
        """Called on phase transitions."""
        pass

    def on_complete(self, event: PluginEvent):
        """Called once with the session summary in ``event.data``."""
        pass

    def on_startup(self, context: dict):
        """Called when a session starts. Context holds session references."""
        pass

    def on_shutdown(self):
        """Called when the session is torn down."""
        pass

    def handler(self, event_name: str = "*"):
        """Decorator to register a handler for a swipe direction or card status."""
        def decorator(fn: Callable):
            self._handlers.setdefault(event_name, []).append(fn)
            return fn
        return decorator


def _import_plugin_file(path: Path) -> ModuleType:
    module_name = f"swipe_beat_plugin_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"not an importable module: {path.name}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        del sys.modules[module_name]
        raise
    return module


def _find_plugin(module: ModuleType) -> Optional[SessionPlugin]:
    """A module-level ``plugin`` instance, else the first plugin class the module defines."""
    instance = getattr(module, "plugin", None)
    if isinstance(instance, SessionPlugin):
        return instance
    for value in vars(module).values():
        if (
            isinstance(value, type)
            and issubclass(value, SessionPlugin)
            and value.__module__ == module.__name__
        ):
            return value()
    return None


class PluginManager:
    """Holds the session's plugins and fans events out to them.

    A hook that raises is logged and skipped; plugin failures never reach
    the session.
    """

    def __init__(self):
        self._plugins: dict[str, SessionPlugin] = {}

    def register(self, plugin: SessionPlugin):
        if plugin.name in self._plugins:
            logger.warning("Plugin '%s' already registered, replacing", plugin.name)
        self._plugins[plugin.name] = plugin
        logger.info("Registered plugin: %s v%s", plugin.name, plugin.version)

    def load_directory(self, path: str | Path) -> int:
        """Register a plugin from every public .py file in ``path``.

        Returns how many were registered. Files that fail to import or
        define no plugin are logged and skipped.
        """
        path = Path(path)
        if not path.is_dir():
            logger.debug("Plugin directory %s does not exist", path)
            return 0

        loaded = 0
        for py_file in sorted(path.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            try:
                plugin = _find_plugin(_import_plugin_file(py_file))
            except Exception as e:
                logger.error("Failed to load plugin %s: %s", py_file.name, e)
                continue
            if plugin is None:
                logger.warning("No SessionPlugin found in %s", py_file.name)
                continue
            self.register(plugin)
            loaded += 1
        return loaded

    def startup(self, context: dict):
        self._broadcast("on_startup", context)

    def shutdown(self):
        self._broadcast("on_shutdown")

    def dispatch(self, event_type: str, event: PluginEvent):
        """Send an event to the ``on_<event_type>`` hook of every plugin."""
        self._broadcast(f"on_{event_type}", event)

    def _broadcast(self, hook: str, *args):
        for plugin in list(self._plugins.values()):
            method = getattr(plugin, hook, None)
            if method is None:
                continue
            try:
                method(*args)
            except Exception as e:
                logger.error("Plugin %s %s error: %s", plugin.name, hook, e)

    @property
    def plugins(self) -> dict[str, SessionPlugin]:
        return dict(self._plugins)
