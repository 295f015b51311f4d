import logging

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Which live connections belong to which user, and which match each one watches.

    A user may hold several connections at once; a connection watches at most
    one match. Only plain dict/set mutation happens here, never an await, so
    the structures stay consistent between suspension points.
    """

    def __init__(self):
        self._by_user = {}
        self._by_match = {}
        self._match_of = {}

    def register_user(self, user_id, connection):
        self._by_user.setdefault(user_id, set()).add(connection)

    def unregister_user(self, user_id, connection):
        conns = self._by_user.get(user_id)
        if not conns:
            return
        conns.discard(connection)
        if not conns:
            del self._by_user[user_id]

    def subscribe(self, match_id, connection):
        """Watch ``match_id``; returns the match this connection was watching before, if any."""
        match_id = str(match_id)
        previous = self.unsubscribe(connection)
        self._by_match.setdefault(match_id, set()).add(connection)
        self._match_of[connection] = match_id
        return previous

    def unsubscribe(self, connection):
        match_id = self._match_of.pop(connection, None)
        if match_id is None:
            return None
        conns = self._by_match.get(match_id)
        if conns is not None:
            conns.discard(connection)
            if not conns:
                del self._by_match[match_id]
        return match_id

    def discard(self, user_id, connection):
        """Drop ``connection`` from every structure. Safe to call repeatedly."""
        self.unregister_user(user_id, connection)
        self.unsubscribe(connection)

    def subscribed_match(self, connection):
        return self._match_of.get(connection)

    def user_connections(self, user_id):
        return list(self._by_user.get(user_id, ()))

    def match_connections(self, match_id):
        return list(self._by_match.get(str(match_id), ()))

    def is_online(self, user_id):
        return user_id in self._by_user

    def online_users(self):
        return set(self._by_user)
