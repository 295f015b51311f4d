import pytest


class FakeConnection:
    """Stands in for a live consumer; records what would have been sent."""

    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_json(self, payload):
        if self.fail:
            raise ConnectionError("socket closed")
        self.sent.append(payload)

    def types(self):
        return [p["type"] for p in self.sent]


@pytest.fixture
def make_user(db):
    from django.contrib.auth.models import User

    def make(username, password="secret-pass"):
        return User.objects.create_user(username=username, password=password)
    return make


@pytest.fixture
def befriend(db):
    from accounts.models import Friendship, canonical_pair

    def make(a, b):
        x, y = canonical_pair(a.id, b.id)
        return Friendship.objects.create(user_a_id=x, user_b_id=y)
    return make


@pytest.fixture
def make_connection():
    return FakeConnection
