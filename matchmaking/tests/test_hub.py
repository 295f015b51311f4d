import pytest
from asgiref.sync import sync_to_async

from game import services
from game.models import Match
from matchmaking.hub import Hub

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]

GT = "tic_tac_toe"


@pytest.fixture
def hub():
    return Hub()


@pytest.fixture
def users(make_user):
    return [make_user(name) for name in ("ann", "ben", "cat")]


async def test_send_to_user_reaches_every_connection(hub, make_connection):
    tab1, tab2, other = make_connection(), make_connection(), make_connection()
    hub.connect(1, tab1)
    hub.connect(1, tab2)
    hub.connect(2, other)

    await hub.send_to_user(1, {"type": "friend_invite"})
    assert tab1.types() == tab2.types() == ["friend_invite"]
    assert other.sent == []

    await hub.send_to_user(99, {"type": "friend_invite"})


async def test_dead_connection_does_not_block_others(hub, make_connection):
    dead, alive = make_connection(fail=True), make_connection()
    hub.registry.subscribe("m", dead)
    hub.registry.subscribe("m", alive)
    await hub.broadcast_match("m", {"type": "match_state"})
    assert alive.types() == ["match_state"]


async def test_pairs_two_queued_users(hub, users, make_connection):
    ann, ben, _ = users
    conns = {u.id: make_connection() for u in (ann, ben)}
    for uid, conn in conns.items():
        hub.connect(uid, conn)

    assert await hub.join_queue(ann.id) is None
    match = await hub.join_queue(ben.id)

    assert match.status == Match.IN_PROGRESS
    assert (match.player_x_id, match.player_o_id) == (ann.id, ben.id)
    assert hub.queue.user_ids(GT) == []
    for conn in conns.values():
        assert conn.types() == ["match_ready"]
        assert conn.sent[0]["matchId"] == str(match.id)
        assert conn.sent[0]["match"]["status"] == Match.IN_PROGRESS


async def test_strangers_are_paired_over_friends(hub, users, befriend):
    ann, ben, cat = users
    await sync_to_async(befriend)(ann, ben)
    hub.queue.enqueue(GT, ann.id)
    hub.queue.enqueue(GT, ben.id)
    match = await hub.join_queue(cat.id)

    assert {match.player_x_id, match.player_o_id} == {ann.id, cat.id}
    assert hub.queue.user_ids(GT) == [ben.id]


async def test_joining_queue_abandons_hosted_waiting_match(hub, users):
    ann = users[0]
    waiting = await sync_to_async(services.create_open_match)(ann.id)
    await hub.join_queue(ann.id)
    await sync_to_async(waiting.refresh_from_db)()
    assert waiting.status == Match.ABANDONED
    assert hub.queue.user_ids(GT) == [ann.id]


async def test_disconnect_clears_queue_and_subscription(hub, users, make_connection):
    ann, ben, cat = users
    conn = make_connection()
    hub.connect(ann.id, conn)
    hub.registry.subscribe("m", conn)
    await hub.join_queue(ann.id)

    hub.disconnect(ann.id, conn)
    assert hub.queue.user_ids(GT) == []
    assert hub.registry.match_connections("m") == []
    assert not hub.registry.is_online(ann.id)

    await hub.join_queue(ben.id)
    match = await hub.join_queue(cat.id)
    assert ann.id not in (match.player_x_id, match.player_o_id)


async def test_failed_pairing_requeues_both_in_order(hub, users, make_connection, monkeypatch):
    ann, ben, _ = users
    for u in (ann, ben):
        hub.connect(u.id, make_connection())

    def broken(*args, **kwargs):
        raise RuntimeError("db went away")

    monkeypatch.setattr(services, "create_paired_match", broken)
    await hub.join_queue(ann.id)
    with pytest.raises(RuntimeError):
        await hub.join_queue(ben.id)
    assert hub.queue.user_ids(GT) == [ann.id, ben.id]


async def test_failed_pairing_drops_users_who_left_meanwhile(hub, users, make_connection, monkeypatch):
    ann, ben, cat = users
    ben_conn = make_connection()
    hub.connect(ann.id, make_connection())
    hub.connect(ben.id, ben_conn)
    hub.connect(cat.id, make_connection())

    def leave_then_fail(first_id, second_id, game_type=GT):
        hub.disconnect(ben.id, ben_conn)
        hub.leave_queue(ann.id, GT)
        raise RuntimeError("db went away")

    monkeypatch.setattr(services, "create_paired_match", leave_then_fail)
    await hub.join_queue(ann.id)
    with pytest.raises(RuntimeError):
        await hub.join_queue(ben.id)
    assert hub.queue.user_ids(GT) == []
