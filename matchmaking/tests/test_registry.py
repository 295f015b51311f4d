from matchmaking.registry import ConnectionRegistry


def test_user_with_several_connections(make_connection):
    reg = ConnectionRegistry()
    tab1, tab2 = make_connection(), make_connection()
    reg.register_user(1, tab1)
    reg.register_user(1, tab2)
    assert set(reg.user_connections(1)) == {tab1, tab2}

    reg.unregister_user(1, tab1)
    assert reg.user_connections(1) == [tab2]
    reg.unregister_user(1, tab2)
    assert not reg.is_online(1)
    assert reg.online_users() == set()


def test_connection_watches_one_match_at_a_time(make_connection):
    reg = ConnectionRegistry()
    conn = make_connection()
    assert reg.subscribe("m1", conn) is None
    assert reg.subscribe("m2", conn) == "m1"
    assert reg.match_connections("m1") == []
    assert reg.match_connections("m2") == [conn]
    assert reg.subscribed_match(conn) == "m2"


def test_match_fan_out_spans_users(make_connection):
    reg = ConnectionRegistry()
    a, b = make_connection(), make_connection()
    reg.register_user(1, a)
    reg.register_user(2, b)
    reg.subscribe("m", a)
    reg.subscribe("m", b)
    assert set(reg.match_connections("m")) == {a, b}


def test_discard_is_idempotent(make_connection):
    reg = ConnectionRegistry()
    conn = make_connection()
    reg.register_user(7, conn)
    reg.subscribe("m", conn)

    reg.discard(7, conn)
    reg.discard(7, conn)
    assert reg.user_connections(7) == []
    assert reg.match_connections("m") == []
    assert reg.subscribed_match(conn) is None
    assert reg.unsubscribe(conn) is None
