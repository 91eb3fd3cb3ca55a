"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Formats engine objects as response models

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Failures come back as ErrorResponse values, never as exceptions.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import logging

from .schemas import (
    # Requests
    CreateSessionRequest,
    PlaceCardRequest,
    RetractCardRequest,
    MoveCardRequest,
    # Responses
    ActionResponse,
    ErrorResponse,
    GameStateResponse,
    LanePowerResponse,
    LogResponse,
    SessionResponse,
    # Shared
    CardInfo,
    LaneInfo,
    ResultInfo,
    SlotInfo,
    # Enums
    ErrorCode,
    SessionStatus,
)
from ..bots.policy import make_policy
from ..engine_core.action import ActionResult, ErrorCode as EngineErrorCode
from ..engine_core.state import CardTemplate, GameConfig, GameState, Side, Slot
from ..session import Session, SessionManager

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create session
        session_response = service.create_session(CreateSessionRequest())

        # Play
        response = service.place_card(session_id, PlaceCardRequest(...))
        response = service.end_turn(session_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    config: GameConfig = field(default_factory=GameConfig)

    # Policy name requested per session
    _policies: dict[str, str] = field(default_factory=dict)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        """Create a new match against the requested bot."""
        try:
            policy = make_policy(request.bot_policy, request.seed)
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.INVALID_REQUEST)

        catalog = self.session_manager.catalog
        for deck in (request.player_deck, request.opponent_deck):
            unknown = [card_id for card_id in deck or [] if card_id not in catalog]
            if unknown:
                return ErrorResponse(
                    error=f"Unknown card ids: {unknown}",
                    error_code=ErrorCode.INVALID_REQUEST,
                    details={"unknown_card_ids": unknown},
                )

        config = replace(self.config, random_seed=request.seed)
        session = self.session_manager.create_session(
            config=config,
            player_deck_ids=request.player_deck,
            opponent_deck_ids=request.opponent_deck,
            bot_policy=policy,
        )
        # Drop names of sessions the manager has already cleaned up
        for stale_id in [sid for sid in self._policies if self.session_manager.get_session(sid) is None]:
            del self._policies[stale_id]
        self._policies[session.session_id] = request.bot_policy
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Get session status."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a session."""
        self._policies.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Actions
    # =========================================================================

    def place_card(self, session_id: str, request: PlaceCardRequest) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        result = session.engine.place_card(request.hand_index, request.lane_index, request.slot_index)
        return self._action_response(session, result)

    def retract_card(self, session_id: str, request: RetractCardRequest) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        result = session.engine.retract_card(request.card_handle)
        return self._action_response(session, result)

    def move_card(self, session_id: str, request: MoveCardRequest) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        result = session.engine.move_card(request.card_handle, request.lane_index, request.slot_index)
        return self._action_response(session, result)

    def end_turn(self, session_id: str) -> ActionResponse | ErrorResponse:
        """End the player turn; the bot plays and the turn resolves."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        result = session.engine.end_player_turn()
        return self._action_response(session, result)

    def retreat(self, session_id: str) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        result = session.engine.retreat()
        return self._action_response(session, result)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._state_to_response(session)

    def get_lane_power(self, session_id: str, lane_index: int) -> LanePowerResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        if not 0 <= lane_index < len(session.game_state.lanes):
            return ErrorResponse(
                error=f"No lane {lane_index}",
                error_code=ErrorCode.INVALID_REQUEST,
            )
        power = session.engine.get_lane_power(lane_index)
        leader = power.winner
        return LanePowerResponse(
            lane_index=lane_index,
            player_power=power.player_power,
            opponent_power=power.opponent_power,
            leader=leader.value if leader else None,
        )

    def get_log(self, session_id: str, limit: int | None = None) -> LogResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        lines = list(session.log_history)
        if limit is not None:
            lines = lines[-limit:] if limit > 0 else []
        return LogResponse(session_id=session_id, lines=lines, count=len(lines))

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _action_response(self, session: Session, result: ActionResult) -> ActionResponse | ErrorResponse:
        if not result.success:
            logger.debug("Action refused in %s: %s", session.session_id, result.error)
            code = (
                ErrorCode.GAME_OVER if result.error_code == EngineErrorCode.GAME_OVER
                else ErrorCode.INVALID_ACTION
            )
            return ErrorResponse(
                error=result.error or "Action refused",
                error_code=code,
                details={"reason": result.error_code.value} if result.error_code else None,
            )
        return ActionResponse(
            success=True,
            changes=result.state_changes,
            card_handle=result.card_handle,
            game_state=self._state_to_response(session),
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            bot_policy=self._policies.get(session.session_id, session.engine.bot.get_name()),
            created_at=session.created_at,
            game_state=self._state_to_response(session),
        )

    def _state_to_response(self, session: Session) -> GameStateResponse:
        state = session.game_state
        player = state.side(Side.PLAYER)
        opponent = state.side(Side.OPPONENT)
        powers = session.engine.lane_powers()

        lanes = []
        for lane, power in zip(state.lanes, powers):
            lanes.append(LaneInfo(
                lane_index=lane.index,
                effect_name=lane.effect.name if lane.effect and lane.is_revealed else None,
                effect_description=(
                    lane.effect.description if lane.effect and lane.is_revealed else None
                ),
                is_revealed=lane.is_revealed,
                player_slots=[_slot_info(state, s) for s in lane.player_slots],
                opponent_slots=[_slot_info(state, s) for s in lane.opponent_slots],
                player_power=power.player_power,
                opponent_power=power.opponent_power,
                cards_cannot_be_destroyed=lane.properties.cards_cannot_be_destroyed,
            ))

        result = None
        if state.result is not None:
            result = ResultInfo(
                winner=state.result.winner.value if state.result.winner else None,
                lanes_won={side.value: wins for side, wins in state.result.lanes_won.items()},
                retreated=state.result.retreated,
            )

        return GameStateResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            turn=state.current_turn,
            max_turn=state.max_turn,
            phase=state.phase.value,
            priority=state.priority.value,
            player_energy=player.energy,
            opponent_energy=opponent.energy,
            hand=[_card_info(card) for card in player.hand],
            opponent_hand_size=len(opponent.hand),
            player_deck_size=len(player.deck),
            opponent_deck_size=len(opponent.deck),
            lanes=lanes,
            result=result,
        )


def _card_info(template: CardTemplate) -> CardInfo:
    return CardInfo(
        card_id=template.card_id,
        name=template.name,
        cost=template.cost,
        power=template.power,
        description=template.description,
        image=template.image,
    )


def _slot_info(state: GameState, slot: Slot) -> SlotInfo:
    card = state.card_in(slot)
    if card is None:
        return SlotInfo(slot_index=slot.slot_index)
    # Opponent cards stay face down until revealed
    hidden = card.side is Side.OPPONENT and not card.is_revealed
    return SlotInfo(
        slot_index=slot.slot_index,
        card_handle=card.handle,
        card=None if hidden else _card_info(card.template),
        power=0 if hidden else slot.power,
        is_revealed=card.is_revealed,
    )
