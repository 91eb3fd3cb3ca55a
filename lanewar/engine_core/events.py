"""
Event Bus - Outward notifications for the view layer.

Every session owns exactly one EventBus. Engine components receive it
explicitly and publish through it; callers subscribe to refresh their
view. Nothing here is process-wide: closing the bus drops every
subscriber, and a new match gets a new bus.

Log-message events are the narration of every triggered effect and
double as the audit trail; they are also written to the module logger.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union
import logging

from .state import CardTemplate, GameResult, Side

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Notification kinds raised by the engine."""
    LOG_MESSAGE = "log_message"
    ADD_CARD_TO_HAND = "add_card_to_hand"
    ENERGY_CHANGED = "energy_changed"
    LANE_POWER_CHANGED = "lane_power_changed"
    GAME_ENDED = "game_ended"


@dataclass(frozen=True)
class LogMessageEvent:
    """Human-readable narration line."""
    message: str

    @property
    def event_type(self) -> EventType:
        return EventType.LOG_MESSAGE


@dataclass(frozen=True)
class CardAddedToHandEvent:
    """A card entered a side's hand (draw or ability)."""
    side: Side
    card: CardTemplate

    @property
    def event_type(self) -> EventType:
        return EventType.ADD_CARD_TO_HAND


@dataclass(frozen=True)
class EnergyChangedEvent:
    side: Side
    energy: int

    @property
    def event_type(self) -> EventType:
        return EventType.ENERGY_CHANGED


@dataclass(frozen=True)
class LanePowerChangedEvent:
    lane_index: int
    player_power: int
    opponent_power: int

    @property
    def event_type(self) -> EventType:
        return EventType.LANE_POWER_CHANGED


@dataclass(frozen=True)
class GameEndedEvent:
    result: GameResult

    @property
    def event_type(self) -> EventType:
        return EventType.GAME_ENDED


GameEvent = Union[
    LogMessageEvent,
    CardAddedToHandEvent,
    EnergyChangedEvent,
    LanePowerChangedEvent,
    GameEndedEvent,
]

Listener = Callable[[Any], None]


@dataclass
class EventBus:
    """
    Session-scoped publish/subscribe dispatcher.

    Listeners run synchronously, in subscription order, on the thread
    that emits.
    """
    session_id: str | None = None
    _listeners: dict[EventType, list[Listener]] = field(default_factory=dict)
    _closed: bool = False

    def subscribe(self, event_type: EventType, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.setdefault(event_type, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(event_type, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def emit(self, event: GameEvent) -> None:
        if self._closed:
            logger.debug("Dropping %s on closed bus %s", event.event_type.value, self.session_id)
            return
        for listener in list(self._listeners.get(event.event_type, [])):
            listener(event)

    def log(self, message: str) -> None:
        """Publish a narration line."""
        logger.info(message)
        self.emit(LogMessageEvent(message))

    def close(self) -> None:
        """Drop every subscriber; later emits are ignored."""
        self._listeners.clear()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


@dataclass
class EventRecorder:
    """Collects every event published on a bus, in order."""
    events: list[GameEvent] = field(default_factory=list)

    def attach(self, bus: EventBus) -> EventRecorder:
        for event_type in EventType:
            bus.subscribe(event_type, self.events.append)
        return self

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        return [e for e in self.events if e.event_type == event_type]

    @property
    def log_lines(self) -> list[str]:
        return [e.message for e in self.of_type(EventType.LOG_MESSAGE)]
