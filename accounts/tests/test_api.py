import pytest
from rest_framework.test import APIClient

from accounts.models import Friendship, FriendInvite
from accounts.serializers import normalize_handle
from accounts.tokens import read_live_token
from matchmaking.models import Notification

pytestmark = pytest.mark.django_db


def client_for(user):
    client = APIClient()
    client.force_authenticate(user)
    return client


@pytest.mark.parametrize("raw,expected", [("  Al Ice_99 ", "alice99"), ("BOB", "bob"), ("ü-x", "x")])
def test_normalize_handle(raw, expected):
    assert normalize_handle(raw) == expected


def test_register_normalizes_and_rejects_duplicates():
    client = APIClient()
    res = client.post("/accounts/api/register/", {"username": " Alice ", "password": "longenough"}, format="json")
    assert res.status_code == 201
    assert res.data["user"]["username"] == "alice"

    res = APIClient().post("/accounts/api/register/", {"username": "ALICE", "password": "longenough"}, format="json")
    assert res.status_code == 400

    res = APIClient().post("/accounts/api/register/", {"username": "a", "password": "longenough"}, format="json")
    assert res.status_code == 400


def test_login_and_live_token(make_user):
    user = make_user("carol", password="longenough")
    client = APIClient()
    res = client.post("/accounts/api/login/", {"login": "Carol", "password": "longenough"}, format="json")
    assert res.status_code == 200

    res = client.post("/accounts/api/live-token/")
    assert res.status_code == 200
    assert read_live_token(res.data["token"]) == user.id


def test_live_token_requires_login():
    assert APIClient().post("/accounts/api/live-token/").status_code == 403


def test_friend_invite_accept_and_remove(make_user):
    alice, bob = make_user("alice"), make_user("bob")
    res = client_for(alice).post("/accounts/api/friends/invite/", {"username": "Bob"}, format="json")
    assert res.status_code == 201
    invite_id = res.data["invite"]["id"]
    assert Notification.objects.filter(to_user=bob, type=Notification.FRIEND_INVITE).count() == 1

    again = client_for(alice).post("/accounts/api/friends/invite/", {"userId": bob.id}, format="json")
    assert again.status_code == 409

    res = client_for(bob).post(f"/accounts/api/friends/invites/{invite_id}/accept/")
    assert res.status_code == 200
    assert FriendInvite.objects.get(id=invite_id).status == FriendInvite.ACCEPTED
    friendship = Friendship.objects.get()
    assert friendship.user_a_id < friendship.user_b_id
    assert Friendship.are_friends(bob.id, alice.id)

    res = client_for(alice).get("/accounts/api/friends/")
    assert [f["username"] for f in res.data["friends"]] == ["bob"]

    res = client_for(bob).post(f"/accounts/api/friends/remove/{alice.id}/")
    assert res.status_code == 204
    assert not Friendship.objects.exists()


def test_reinvite_after_reject_reactivates(make_user):
    alice, bob = make_user("alice"), make_user("bob")
    invite_id = client_for(alice).post(
        "/accounts/api/friends/invite/", {"userId": bob.id}, format="json").data["invite"]["id"]
    assert client_for(bob).post(f"/accounts/api/friends/invites/{invite_id}/reject/").status_code == 200

    res = client_for(alice).post("/accounts/api/friends/invite/", {"userId": bob.id}, format="json")
    assert res.status_code == 201
    assert res.data["invite"]["id"] == invite_id
    assert FriendInvite.objects.get().status == FriendInvite.PENDING


def test_cannot_invite_self_or_unknown(make_user):
    alice = make_user("alice")
    assert client_for(alice).post(
        "/accounts/api/friends/invite/", {"userId": alice.id}, format="json").status_code == 400
    assert client_for(alice).post(
        "/accounts/api/friends/invite/", {"username": "ghost"}, format="json").status_code == 404


def test_profile_update_keeps_handles_unique(make_user):
    alice = make_user("alice")
    make_user("bob")
    assert client_for(alice).post(
        "/accounts/api/profile/update/", {"username": "BOB"}, format="json").status_code == 400
    res = client_for(alice).post("/accounts/api/profile/update/", {"username": "Alicia"}, format="json")
    assert res.status_code == 200
    assert res.data["user"]["username"] == "alicia"
