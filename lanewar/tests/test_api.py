"""
Tests for the API layer.

Tests:
- API service methods
- Error mapping from engine refusals
- HTTP routes, status codes and validation
"""

import pytest

from ..api.schemas import (
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    PlaceCardRequest,
    RetractCardRequest,
    SessionStatus,
)
from ..api.service import APIService
from ..engine_core.state import Side
from ..session import SessionManager


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService()

    @pytest.fixture
    def session_id(self, service):
        return service.create_session(CreateSessionRequest(seed=5)).session_id

    def test_create_session(self, service):
        """Can start a match via the service."""
        response = service.create_session(CreateSessionRequest(seed=5))

        assert response.session_id is not None
        assert response.status == SessionStatus.ACTIVE
        assert response.bot_policy == "greedy"
        assert response.game_state.turn == 1
        assert response.game_state.max_turn == 6
        assert len(response.game_state.hand) == 4
        assert response.game_state.opponent_hand_size == 4

    def test_unknown_bot(self, service):
        """An unknown bot name is a bad request."""
        response = service.create_session(CreateSessionRequest(bot_policy="minimax"))

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.INVALID_REQUEST

    def test_unknown_card_ids(self, service):
        response = service.create_session(CreateSessionRequest(player_deck=[1, 999]))

        assert response.error_code == ErrorCode.INVALID_REQUEST
        assert response.details == {"unknown_card_ids": [999]}

    def test_get_nonexistent_session(self, service):
        """Getting a nonexistent session returns an error."""
        response = service.get_session("nonexistent-id")

        assert hasattr(response, "error")
        assert response.error_code == "SESSION_NOT_FOUND"

    def test_place_and_retract(self, service, session_id):
        """A card placed this turn can be taken back."""
        placed = service.place_card(session_id, PlaceCardRequest(hand_index=0, lane_index=0, slot_index=0))

        assert placed.success
        assert placed.game_state.player_energy == 0
        slot = placed.game_state.lanes[0].player_slots[0]
        assert slot.card.name == "Quicksilver"
        assert slot.card_handle == placed.card_handle

        retracted = service.retract_card(session_id, RetractCardRequest(card_handle=placed.card_handle))

        assert retracted.success
        assert retracted.game_state.player_energy == 1
        assert retracted.game_state.hand[0].name == "Quicksilver"

    def test_refusal_carries_the_engine_reason(self, service, session_id):
        """Engine refusals map to INVALID_ACTION with the engine code."""
        service.place_card(session_id, PlaceCardRequest(hand_index=0, lane_index=0, slot_index=0))

        response = service.place_card(session_id, PlaceCardRequest(hand_index=0, lane_index=0, slot_index=0))

        assert response.error_code == ErrorCode.INVALID_ACTION
        assert response.details["reason"] == "SLOT_OCCUPIED"

    def test_end_turn_advances(self, service, session_id):
        response = service.end_turn(session_id)

        assert response.success
        assert response.game_state.turn == 2
        assert response.game_state.player_energy == 2
        assert response.game_state.lanes[1].is_revealed

    def test_opponent_cards_stay_hidden(self, service, session_id):
        """Unrevealed opponent cards show no identity or power."""
        session = service.session_manager.get_session(session_id)
        session.game_state.side(Side.OPPONENT).energy = 10
        session.engine.run_bot_turn()

        response = service.get_game_state(session_id)

        opponent_slots = [s for lane in response.lanes for s in lane.opponent_slots if s.card_handle]
        assert opponent_slots
        assert all(s.card is None and s.power == 0 for s in opponent_slots)

    def test_lane_effects_hidden_until_revealed(self, service, session_id):
        response = service.get_game_state(session_id)

        assert response.lanes[0].effect_name is not None
        assert response.lanes[2].effect_name is None

    def test_lane_power(self, service, session_id):
        response = service.get_lane_power(session_id, 0)

        assert response.lane_index == 0
        assert response.leader in (None, "player", "opponent")

    def test_lane_out_of_range(self, service, session_id):
        response = service.get_lane_power(session_id, 3)

        assert response.error_code == ErrorCode.INVALID_REQUEST

    def test_retreat_ends_the_game(self, service, session_id):
        """After a retreat every action reports GAME_OVER."""
        response = service.retreat(session_id)

        assert response.success
        assert response.game_state.status == SessionStatus.GAME_OVER
        assert response.game_state.result.winner == "opponent"
        assert response.game_state.result.retreated

        after = service.end_turn(session_id)
        assert after.error_code == ErrorCode.GAME_OVER

    def test_log(self, service, session_id):
        full = service.get_log(session_id)
        last = service.get_log(session_id, limit=1)

        assert "Quicksilver guaranteed in starting hand" in full.lines
        assert last.lines == full.lines[-1:]
        assert service.get_log(session_id, limit=0).count == 0

    def test_end_session(self, service, session_id):
        """Ended sessions disappear from the active list."""
        assert session_id in service.list_sessions()

        assert service.end_session(session_id)
        assert session_id not in service.list_sessions()
        assert service.end_turn(session_id).error_code == ErrorCode.SESSION_NOT_FOUND

    def test_stale_sessions_are_dropped_on_create(self):
        """Old finished matches are swept when a new one starts."""
        service = APIService(session_manager=SessionManager(stale_after_seconds=60))
        old_id = service.create_session(CreateSessionRequest(seed=1)).session_id
        service.retreat(old_id)
        service.session_manager.get_session(old_id).created_at -= 120

        new_id = service.create_session(CreateSessionRequest(seed=2)).session_id

        assert service.get_session(old_id).error_code == ErrorCode.SESSION_NOT_FOUND
        assert service._policies == {new_id: "greedy"}


class TestHTTP:
    """Tests for the FastAPI routes."""

    @pytest.fixture
    def client(self):
        pytest.importorskip("fastapi")
        from fastapi.testclient import TestClient
        from ..api.app import create_app

        return TestClient(create_app(service=APIService()))

    @pytest.fixture
    def session_id(self, client):
        response = client.post("/api/v1/sessions", json={"seed": 5})
        assert response.status_code == 200
        return response.json()["session_id"]

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["service"] == "lanewar-engine"

    def test_create_without_body(self, client):
        response = client.post("/api/v1/sessions")

        assert response.status_code == 200
        assert response.json()["bot_policy"] == "greedy"

    def test_bad_bot_is_400(self, client):
        response = client.post("/api/v1/sessions", json={"bot_policy": "minimax"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_missing_session_is_404(self, client):
        response = client.get("/api/v1/sessions/nope")

        assert response.status_code == 404
        assert response.json()["api_version"] == "v1"

    def test_place_then_occupied(self, client, session_id):
        """Placing twice on one slot is refused with 409."""
        body = {"hand_index": 0, "lane_index": 0, "slot_index": 0}

        first = client.post(f"/api/v1/sessions/{session_id}/place", json=body)
        second = client.post(f"/api/v1/sessions/{session_id}/place", json=body)

        assert first.status_code == 200
        assert first.json()["changes"] == ["Quicksilver placed in lane 1"]
        assert second.status_code == 409
        assert second.json()["error_code"] == "INVALID_ACTION"

    def test_negative_index_fails_validation(self, client, session_id):
        body = {"hand_index": -1, "lane_index": 0, "slot_index": 0}

        response = client.post(f"/api/v1/sessions/{session_id}/place", json=body)

        assert response.status_code == 422

    def test_end_turn_and_state(self, client, session_id):
        assert client.post(f"/api/v1/sessions/{session_id}/end-turn").status_code == 200

        state = client.get(f"/api/v1/sessions/{session_id}/state").json()

        assert state["turn"] == 2
        assert len(state["lanes"]) == 3

    def test_lane_power_routes(self, client, session_id):
        ok = client.get(f"/api/v1/sessions/{session_id}/lanes/0/power")
        bad = client.get(f"/api/v1/sessions/{session_id}/lanes/9/power")

        assert ok.status_code == 200
        assert bad.status_code == 400

    def test_log_route(self, client, session_id):
        response = client.get(f"/api/v1/sessions/{session_id}/log", params={"limit": 2})

        assert response.status_code == 200
        assert response.json()["count"] <= 2

    def test_retreat_then_game_over(self, client, session_id):
        assert client.post(f"/api/v1/sessions/{session_id}/retreat").status_code == 200

        response = client.post(f"/api/v1/sessions/{session_id}/end-turn")

        assert response.status_code == 409
        assert response.json()["error_code"] == "GAME_OVER"

    def test_delete_session(self, client, session_id):
        deleted = client.delete(f"/api/v1/sessions/{session_id}")

        assert deleted.json() == {"success": True, "session_id": session_id}
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404
        assert session_id not in client.get("/api/v1/sessions").json()["sessions"]
