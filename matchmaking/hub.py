"""
Process-wide live state: the connection registry, the matchmaking queues
and best-effort fan-out to live connections.

One ``Hub`` is created at import time and shared by every consumer; tests
build their own. Nothing here survives a restart.
"""
import logging

from asgiref.sync import sync_to_async

from accounts.models import Friendship
from game import services
from game.engine.rules import TIC_TAC_TOE
from .queue import MatchmakingQueue
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class Hub:
    def __init__(self, registry=None, queue=None):
        self.registry = registry or ConnectionRegistry()
        self.queue = queue or MatchmakingQueue()
        # (game_type, user_id) popped from the queue while their match is being created
        self._pairing = set()

    # --- connections ------------------------------------------------------

    def connect(self, user_id, connection):
        self.registry.register_user(user_id, connection)

    def disconnect(self, user_id, connection):
        self.registry.discard(user_id, connection)
        self._pairing = {p for p in self._pairing if p[1] != user_id}
        left = self.queue.remove_user(user_id)
        if left:
            logger.info("user %s left queue(s) %s on disconnect", user_id, left)

    # --- fan-out ----------------------------------------------------------

    async def _deliver(self, connection, payload):
        try:
            await connection.send_json(payload)
        except Exception:
            # Best effort; the connection's own close handler cleans it up
            logger.warning("dropping %s frame for a dead connection", payload.get("type"), exc_info=True)

    async def send_to_user(self, user_id, payload):
        for connection in self.registry.user_connections(user_id):
            await self._deliver(connection, payload)

    async def broadcast_match(self, match_id, payload):
        for connection in self.registry.match_connections(match_id):
            await self._deliver(connection, payload)

    # --- matchmaking ------------------------------------------------------

    async def join_queue(self, user_id, game_type=TIC_TAC_TOE):
        services.check_game_type(game_type)
        # Hosting a stale waiting match and queueing at once is not allowed
        await sync_to_async(services.abandon_waiting_matches)(user_id, game_type)
        self.queue.enqueue(game_type, user_id)
        logger.info("user %s queued for %s", user_id, game_type)
        return await self.try_pair(game_type)

    def leave_queue(self, user_id, game_type=TIC_TAC_TOE):
        self._pairing.discard((game_type, user_id))
        return self.queue.dequeue(game_type, user_id)

    async def try_pair(self, game_type=TIC_TAC_TOE):
        waiting = self.queue.user_ids(game_type)
        if len(waiting) < 2:
            return None
        friend_pairs = await sync_to_async(Friendship.pairs_among)(waiting)
        # The queue may have changed while we were awaiting; pick from what is there now
        pair = self.queue.pop_pair(game_type, friend_pairs, candidates=set(waiting))
        if pair is None:
            return None
        first, second = pair
        keys = {(game_type, e.user_id) for e in pair}
        self._pairing |= keys
        try:
            match = await sync_to_async(services.create_paired_match)(first.user_id, second.user_id, game_type)
            state = await sync_to_async(services.get_match_state)(match.id, game_type)
        except Exception:
            # Users who left or went offline meanwhile are not put back
            self.queue.restore(game_type, [
                e for e in pair
                if (game_type, e.user_id) in self._pairing and self.registry.is_online(e.user_id)
            ])
            raise
        finally:
            self._pairing -= keys
        payload = {"type": "match_ready", "matchId": state["id"], "gameType": game_type, "match": state}
        await self.send_to_user(first.user_id, payload)
        await self.send_to_user(second.user_id, payload)
        return match


hub = Hub()
