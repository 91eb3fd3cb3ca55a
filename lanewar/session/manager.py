"""
Session Manager - Creates and manages match sessions.

LIFECYCLE:
1. Caller starts a match -> create an in-memory session
2. During the match:
   - Caller places / retracts / moves cards and ends turns
   - The engine runs the opponent bot and resolves the turn
   - Every narration line is kept in the session's log history
3. Match ends (or the caller quits) -> session ended, event bus closed

Each session owns its own EventBus. Nothing is shared between sessions
and nothing is persisted.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import time
import uuid

from ..bots.policy import BotPolicy, GreedyLanePolicy
from ..engine_core.events import EventBus, EventType, LogMessageEvent
from ..engine_core.state import GameConfig, GameState, TurnPhase
from ..engine_core.turn import ImmediateScheduler, Scheduler, TurnEngine
from ..games.marvel import MARVEL_CATALOG, setup_marvel_game
from ..spec_schema.catalog import CardCatalog

logger = logging.getLogger(__name__)

LOG_HISTORY_LIMIT = 500
STALE_SESSION_SECONDS = 3600


class SessionState(Enum):
    """State of a match session."""
    ACTIVE = "active"
    RESOLVING = "resolving"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


@dataclass
class Session:
    """
    An ephemeral match session.

    Contains:
    - The turn engine (which owns the game state)
    - The session's event bus
    - A bounded history of narration lines
    """
    session_id: str
    engine: TurnEngine
    bus: EventBus
    created_at: float
    ended: bool = False
    abandoned: bool = False
    log_history: deque[str] = field(default_factory=lambda: deque(maxlen=LOG_HISTORY_LIMIT))

    @property
    def game_state(self) -> GameState:
        return self.engine.state

    @property
    def state(self) -> SessionState:
        if self.abandoned:
            return SessionState.ABANDONED
        phase = self.engine.state.phase
        if phase == TurnPhase.GAME_OVER:
            return SessionState.GAME_OVER
        if phase == TurnPhase.RESOLVING:
            return SessionState.RESOLVING
        return SessionState.ACTIVE

    def is_active(self) -> bool:
        """Check if the session can still take actions."""
        return not self.ended and self.state in {SessionState.ACTIVE, SessionState.RESOLVING}

    def _record(self, event: LogMessageEvent) -> None:
        self.log_history.append(event.message)


class SessionManager:
    """
    Manages match sessions.

    Responsibilities:
    - Create sessions with their own bus and engine
    - Track active sessions
    - Tear sessions down

    No persistence - sessions are in-memory only.
    """

    def __init__(self, catalog: CardCatalog | None = None,
                 stale_after_seconds: int = STALE_SESSION_SECONDS):
        self._sessions: dict[str, Session] = {}
        self.catalog = catalog or MARVEL_CATALOG
        self.stale_after_seconds = stale_after_seconds

    def create_session(
        self,
        config: GameConfig | None = None,
        player_deck_ids: list[int] | None = None,
        opponent_deck_ids: list[int] | None = None,
        bot_policy: BotPolicy | None = None,
        scheduler: Scheduler | None = None,
    ) -> Session:
        """
        Create a new match session.

        Args:
            config: Rules configuration
            player_deck_ids: Player deck as catalog ids (starter deck by default)
            opponent_deck_ids: Opponent deck as catalog ids
            bot_policy: Opponent policy (greedy by default)
            scheduler: Runs the pause before the bot turn

        Returns:
            New Session, already in the first player turn
        """
        self.cleanup_stale_sessions(self.stale_after_seconds)
        config = config or GameConfig()
        session_id = str(uuid.uuid4())
        bus = EventBus(session_id=session_id)
        rng = random.Random(config.random_seed)

        session = Session(session_id=session_id, engine=None, bus=bus, created_at=time.time())
        bus.subscribe(EventType.LOG_MESSAGE, session._record)

        state = setup_marvel_game(
            bus,
            config=config,
            rng=rng,
            catalog=self.catalog,
            player_deck_ids=player_deck_ids,
            opponent_deck_ids=opponent_deck_ids,
        )
        session.engine = TurnEngine(
            state=state,
            bus=bus,
            catalog=self.catalog,
            bot=bot_policy or GreedyLanePolicy(),
            rng=rng,
            scheduler=scheduler or ImmediateScheduler(),
        )
        session.engine.start()

        self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and clean up.

        The session is removed from memory and its event bus is closed.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.ended = True
        session.abandoned = reason != "completed" and not session.game_state.is_game_over
        session.bus.close()
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End finished sessions older than max_age.

        Runs before every new session is created.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        if to_remove:
            logger.info("Removed %d stale sessions", len(to_remove))
        return len(to_remove)
