import pytest
from rest_framework.test import APIClient

from game import services
from game.models import Match
from matchmaking import utils
from matchmaking.hub import Hub

pytestmark = pytest.mark.django_db


def client_for(user):
    client = APIClient()
    client.force_authenticate(user)
    return client


@pytest.fixture
def pair(make_user, befriend):
    alice, bob = make_user("alice"), make_user("bob")
    befriend(alice, bob)
    return alice, bob


def test_challenge_accept_flow(pair):
    alice, bob = pair
    res = client_for(alice).post("/game/api/matches/", {"opponentUserId": bob.id}, format="json")
    assert res.status_code == 201
    match_id = res.data["match"]["id"]
    assert res.data["match"]["status"] == Match.WAITING
    assert res.data["match"]["playerO"] is None

    notes = client_for(bob).get("/match/api/notifications/").data["notifications"]
    assert [n["type"] for n in notes] == ["game_invite"]
    assert notes[0]["gameInvite"]["matchId"] == match_id

    res = client_for(bob).post(f"/game/api/matches/{match_id}/invite/accept/")
    assert res.status_code == 200
    assert res.data["match"]["status"] == Match.IN_PROGRESS
    assert res.data["match"]["playerO"]["id"] == bob.id


def test_accept_broadcasts_state_and_tells_both_players(pair, make_connection, monkeypatch):
    alice, bob = pair
    live = Hub()
    monkeypatch.setattr(utils, "hub", live)
    alice_conn, bob_conn, watcher = make_connection(), make_connection(), make_connection()
    live.connect(alice.id, alice_conn)
    live.connect(bob.id, bob_conn)

    res = client_for(alice).post("/game/api/matches/", {"opponentUserId": bob.id}, format="json")
    match_id = res.data["match"]["id"]
    assert bob_conn.types() == ["game_invite"]
    live.registry.subscribe(match_id, watcher)

    client_for(bob).post(f"/game/api/matches/{match_id}/invite/accept/")

    assert watcher.types() == ["match_state"]
    assert watcher.sent[0]["id"] == match_id
    assert watcher.sent[0]["status"] == Match.IN_PROGRESS
    assert alice_conn.types() == ["match_ready"]
    assert bob_conn.types() == ["game_invite", "match_ready"]
    for conn in (alice_conn, bob_conn):
        ready = conn.sent[-1]
        assert ready["matchId"] == match_id
        assert ready["match"]["playerO"]["id"] == bob.id


def test_challenge_busy_opponent(pair, make_user):
    alice, bob = pair
    services.create_paired_match(bob.id, make_user("carol").id)
    res = client_for(alice).post("/game/api/matches/", {"opponentUserId": bob.id}, format="json")
    assert res.status_code == 409
    assert Match.objects.count() == 1


def test_challenge_needs_friend(make_user):
    alice, stranger = make_user("alice"), make_user("zed")
    res = client_for(alice).post("/game/api/matches/", {"opponentUserId": stranger.id}, format="json")
    assert res.status_code == 403


def test_open_match_join_and_detail(pair, make_user):
    alice, bob = pair
    res = client_for(alice).post("/game/api/matches/", {}, format="json")
    match_id = res.data["match"]["id"]

    assert client_for(alice).post(f"/game/api/matches/{match_id}/join/").status_code == 409
    assert client_for(bob).post(f"/game/api/matches/{match_id}/join/").status_code == 200

    outsider = make_user("eve")
    assert client_for(outsider).get(f"/game/api/matches/{match_id}/").status_code == 403
    detail = client_for(bob).get(f"/game/api/matches/{match_id}/")
    assert detail.data["match"]["currentTurn"] == "X"


def test_list_and_stats(pair):
    alice, bob = pair
    match = services.create_paired_match(alice.id, bob.id)
    for user, pos in ((alice, 0), (bob, 3), (alice, 1), (bob, 4), (alice, 2)):
        services.apply_move(match.id, user.id, pos)
    services.create_open_match(alice.id)

    res = client_for(alice).get("/game/api/matches/", {"status": "finished"})
    assert [m["id"] for m in res.data["matches"]] == [str(match.id)]
    assert res.data["matches"][0]["winnerId"] == alice.id
    assert client_for(alice).get("/game/api/matches/", {"limit": 0}).status_code == 400

    assert client_for(alice).get("/game/api/stats/").data["stats"] == {"wins": 1, "losses": 0, "draws": 0}
    vs = client_for(bob).get(f"/game/api/stats/vs-friend/{alice.id}/").data["stats"]
    assert vs == {"wins": 0, "losses": 1, "draws": 0}

    board = APIClient().get("/game/api/leaderboard/").data["leaderboard"]
    assert board[0]["username"] == "alice"


def test_decline_invite(pair):
    alice, bob = pair
    match_id = client_for(alice).post(
        "/game/api/matches/", {"opponentUserId": bob.id}, format="json").data["match"]["id"]
    assert client_for(bob).post(f"/game/api/matches/{match_id}/invite/decline/").status_code == 200
    assert Match.objects.get().status == Match.ABANDONED
    assert client_for(bob).post(f"/game/api/matches/{match_id}/invite/accept/").status_code == 404
