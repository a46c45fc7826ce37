"""
Tests for API layer.

Tests:
- API service methods
- Viewer-specific snapshots
- HTTP endpoints and error responses
- OpenAPI schema generation
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import (
    CreateMatchRequest,
    MatchStatus,
    PlayCardsRequest,
)
from ..api.service import APIService
from ..errors import SessionNotFoundError


@pytest.fixture
def service():
    """Service that plays computer turns before returning."""
    return APIService(scripted_mode="inline")


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


class TestAPIService:
    """Tests for APIService."""

    def test_create_match(self, service):
        match = service.create_match(CreateMatchRequest(seed=5))

        assert match.phase == "lobby"
        assert match.status is MatchStatus.LOBBY
        assert match.players == []
        assert match.match_id in service.list_matches()

    def test_unknown_personality(self, service):
        with pytest.raises(ValueError):
            service.create_match(CreateMatchRequest(personality="reckless"))

    def test_unknown_scripted_mode(self):
        with pytest.raises(ValueError):
            APIService(scripted_mode="threads")

    def test_get_unknown_match(self, service):
        with pytest.raises(SessionNotFoundError):
            service.get_match("missing")

    def test_start_runs_computers_until_human(self, service):
        match = service.create_match(CreateMatchRequest(seed=5))
        service.add_computer(match.match_id)
        service.add_player(match.match_id, "Alice")

        response = service.start(match.match_id, viewer_id="player-2")

        # Computer 1 opens, then waits for Alice's response
        assert response.success
        assert response.computer_actions
        assert response.computer_actions[0].startswith("Computer 1 claimed")
        state = response.state
        assert state.status is MatchStatus.WAITING_HUMAN
        assert state.claim is not None
        assert state.claim.owner_id == "computer-1"
        assert set(state.available_actions) >= {"pass_turn", "challenge_claim"}

    def test_rejection_is_a_notice(self, service):
        match = service.create_match(CreateMatchRequest(seed=5))
        response = service.start(match.match_id)

        assert not response.success
        assert response.notice.code == "NOT_ENOUGH_PLAYERS"
        assert response.state.phase == "lobby"

    def test_unknown_card_id(self, service):
        match = service.create_match(CreateMatchRequest(seed=5))
        service.add_player(match.match_id, "Alice")
        service.add_player(match.match_id, "Bob")
        service.start(match.match_id)

        response = service.play(
            match.match_id,
            PlayCardsRequest(player_id="player-1", card_ids=["14-hearts"], claimed_rank="A"),
        )
        assert not response.success
        assert response.notice.code == "INVALID_CARDS"

    def test_viewer_sees_only_own_hand(self, service):
        match = service.create_match(CreateMatchRequest(seed=5))
        service.add_player(match.match_id, "Alice")
        service.add_player(match.match_id, "Bob")
        service.start(match.match_id)
        alice = service.get_match(match.match_id).players[0]
        service.play(
            match.match_id,
            PlayCardsRequest(
                player_id="player-1",
                card_ids=[c.card_id for c in alice.hand[:2]],
                claimed_rank="7",
            ),
        )

        view = service.get_match(match.match_id, viewer_id="player-2")
        assert view.players[0].hand is None
        assert view.players[0].card_count == 24
        assert len(view.players[1].hand) == 26
        assert view.pile is None
        assert view.pile_count == 2
        assert view.available_actions == ["play_cards", "pass_turn", "challenge_claim"]

        full = service.get_match(match.match_id)
        assert len(full.pile) == 2
        assert full.history[0].text == "Alice claimed 2 7s"

    def test_end_match(self, service):
        match = service.create_match(CreateMatchRequest())
        assert service.end_match(match.match_id)
        assert not service.end_match(match.match_id)


class TestTimerMode:
    """Tests for computer turns played on the event loop."""

    def _computer_match(self, service):
        match = service.create_match(CreateMatchRequest(seed=42))
        for _ in range(3):
            service.add_computer(match.match_id)
        return match.match_id

    def test_computers_play_to_the_end(self):
        service = APIService(scripted_mode="timer", bot_delay=0)

        async def scenario():
            match_id = self._computer_match(service)
            scheduler = service._schedulers[match_id]
            assert scheduler.running

            response = service.start(match_id)
            assert response.success
            assert response.computer_actions == []
            await scheduler.wait_idle(timeout=10)
            return match_id

        match_id = asyncio.run(scenario())
        state = service.get_match(match_id)
        assert state.status is MatchStatus.GAME_OVER
        assert state.winner_id is not None
        assert len(state.history) > 1

    def test_cleanup_stops_schedulers(self):
        service = APIService(scripted_mode="timer", bot_delay=0)

        async def scenario():
            match_id = self._computer_match(service)
            scheduler = service._schedulers[match_id]
            service.start(match_id)
            await scheduler.wait_idle(timeout=10)
            return match_id, scheduler

        match_id, scheduler = asyncio.run(scenario())
        service.session_manager.require_session(match_id).created_at -= 7200

        assert service.cleanup_stale_matches(max_age_seconds=3600) == 1
        assert not scheduler.running
        assert service._schedulers == {}
        assert service.list_matches() == []


class TestHTTP:
    """Tests for the HTTP endpoints."""

    def _open(self, client):
        response = client.post("/api/v1/matches", json={"seed": 3})
        assert response.status_code == 200
        return response.json()["match_id"]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_create_without_body(self, client):
        response = client.post("/api/v1/matches")
        assert response.status_code == 200
        assert response.json()["phase"] == "lobby"

    def test_bad_personality(self, client):
        response = client.post("/api/v1/matches", json={"personality": "reckless"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_unknown_match_is_404(self, client):
        response = client.get("/api/v1/matches/missing")
        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "MATCH_NOT_FOUND"
        assert body["success"] is False

        response = client.post("/api/v1/matches/missing/pass", json={"player_id": "x"})
        assert response.status_code == 404

    def test_full_round(self, client):
        match_id = self._open(client)
        base = f"/api/v1/matches/{match_id}"

        assert client.post(f"{base}/players", json={"name": "Alice"}).json()["success"]
        assert client.post(f"{base}/players", json={"name": "Bob"}).json()["success"]
        started = client.post(f"{base}/start").json()
        assert started["state"]["phase"] == "playing"
        assert started["state"]["current_player_id"] == "player-1"

        alice = started["state"]["players"][0]
        card_id = alice["hand"][0]["card_id"]
        played = client.post(
            f"{base}/play",
            json={"player_id": "player-1", "card_ids": [card_id], "claimed_rank": "A"},
        ).json()
        assert played["success"]
        assert played["state"]["claim"] == {"rank": "A", "count": 1, "owner_id": "player-1"}

        challenged = client.post(f"{base}/challenge", json={"player_id": "player-2"}).json()
        assert challenged["success"]
        state = challenged["state"]
        assert state["claim"] is None and state["pile_count"] == 0
        assert state["last_action"]["kind"] == "challenge"
        assert sum(p["card_count"] for p in state["players"]) == 52

        reset = client.post(f"{base}/reset").json()
        assert reset["state"]["phase"] == "lobby"
        assert len(reset["state"]["players"]) == 2

    def test_refused_action_is_not_an_http_error(self, client):
        match_id = self._open(client)
        response = client.post(f"/api/v1/matches/{match_id}/start")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["notice"]["title"] == "Not enough players"

    def test_invalid_body(self, client):
        match_id = self._open(client)
        response = client.post(f"/api/v1/matches/{match_id}/players", json={})
        assert response.status_code == 422

    def test_list_and_delete(self, client):
        match_id = self._open(client)
        listing = client.get("/api/v1/matches").json()
        assert match_id in listing["matches"]

        assert client.delete(f"/api/v1/matches/{match_id}").json()["success"]
        assert client.get(f"/api/v1/matches/{match_id}").status_code == 404

    def test_openapi_schema(self, client):
        schema = client.get("/openapi.json").json()
        assert "/api/v1/matches/{match_id}/play" in schema["paths"]
        assert "MatchStateResponse" in schema["components"]["schemas"]
