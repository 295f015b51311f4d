import logging

from asgiref.sync import sync_to_async

from . import services
from .engine.rules import TIC_TAC_TOE

logger = logging.getLogger(__name__)


class MatchCoordinator:
    """Async entry points for match subscription and moves.

    Validation and writes happen in ``services`` against a fresh read; after
    every change the persisted match is read again and that is what gets
    broadcast.
    """

    def __init__(self, hub, game_type=TIC_TAC_TOE):
        self.hub = hub
        self.game_type = game_type

    async def subscribe(self, connection, user_id, match_id):
        state = await sync_to_async(self._player_state)(match_id, user_id)
        self.hub.registry.subscribe(state["id"], connection)
        return state

    def unsubscribe(self, connection):
        return self.hub.registry.unsubscribe(connection)

    def _player_state(self, match_id, user_id):
        match = services.get_player_match(match_id, user_id, self.game_type)
        return services.build_match_state(match)

    async def move(self, user_id, match_id, position):
        result = await sync_to_async(services.apply_move)(match_id, user_id, position, self.game_type)
        await self.publish(result.match_id)
        return result

    async def publish(self, match_id):
        state = await sync_to_async(services.get_match_state)(match_id, self.game_type)
        if state is None:
            return None
        await self.hub.broadcast_match(state["id"], {"type": "match_state", **state})
        return state
