import json
import logging
from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from accounts.tokens import verify_live_token
from game.coordinator import MatchCoordinator
from game.engine.board import is_valid_position
from game.engine.rules import TIC_TAC_TOE
from game.errors import (
    CONFLICT_CODES, INVALID_JSON, INVALID_PAYLOAD, SERVER_ERROR, UNKNOWN_TYPE, GameError,
)
from ..hub import hub as default_hub

logger = logging.getLogger(__name__)

UNAUTHORIZED = 4401


class LiveConsumer(AsyncWebsocketConsumer):
    """One authenticated live connection: queueing, match subscription and moves.

    Every inbound frame is handled independently; nothing a client sends can
    close the socket.
    """

    hub = default_hub

    message_handlers = {
        "join_queue": "handle_join_queue",
        "leave_queue": "handle_leave_queue",
        "join_match": "handle_join_match",
        "leave_match": "handle_leave_match",
        "move": "handle_move",
    }

    async def connect(self):
        self.user_id = None
        token = self._query_param("token")
        user = await sync_to_async(verify_live_token)(token) if token else None
        if user is None:
            await self.close(code=UNAUTHORIZED)
            return

        self.user_id = user.id
        self.coordinator = MatchCoordinator(self.hub)
        self.hub.connect(self.user_id, self)
        await self.accept()
        logger.info("live connection opened for user %s", self.user_id)

    async def disconnect(self, close_code):
        if getattr(self, "user_id", None) is None:
            return
        self.hub.disconnect(self.user_id, self)
        logger.info("live connection closed for user %s (%s)", self.user_id, close_code)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data if text_data is not None else bytes_data)
        except (TypeError, ValueError):
            await self.send_error(INVALID_JSON, "Invalid JSON")
            return
        if not isinstance(data, dict):
            await self.send_error(INVALID_PAYLOAD, "Expected a JSON object")
            return

        msg_type = data.get("type")
        if not isinstance(msg_type, str):
            await self.send_error(INVALID_PAYLOAD, "type must be a string")
            return

        try:
            name = self.message_handlers.get(msg_type)
            if name is None:
                await self.send_error(UNKNOWN_TYPE, "Unknown message type")
                return
            await getattr(self, name)(data)
        except GameError as e:
            if e.code in CONFLICT_CODES:
                logger.debug("user %s %s rejected: %s", self.user_id, msg_type, e.code)
            else:
                logger.info("user %s %s rejected: %s", self.user_id, msg_type, e.code)
            await self.send_json(e.to_payload())
        except Exception:
            logger.exception("error handling %s from user %s", msg_type, self.user_id)
            await self.send_error(SERVER_ERROR, "Something went wrong")

    async def handle_join_queue(self, data):
        await self.hub.join_queue(self.user_id, self._game_type(data))

    async def handle_leave_queue(self, data):
        self.hub.leave_queue(self.user_id, self._game_type(data))

    async def handle_join_match(self, data):
        match_id = data.get("matchId")
        if not match_id or not isinstance(match_id, str):
            raise GameError(INVALID_PAYLOAD, "matchId required")
        state = await self.coordinator.subscribe(self, self.user_id, match_id)
        await self.send_json({"type": "match_state", **state})

    async def handle_leave_match(self, data):
        self.coordinator.unsubscribe(self)

    async def handle_move(self, data):
        match_id = data.get("matchId") or self.hub.registry.subscribed_match(self)
        if not match_id or not isinstance(match_id, str):
            raise GameError(INVALID_PAYLOAD, "matchId required")
        position = data.get("position")
        if not is_valid_position(position):
            raise GameError(INVALID_PAYLOAD, "position must be 0-8")
        await self.coordinator.move(self.user_id, match_id, position)

    async def send_json(self, payload):
        await self.send(text_data=json.dumps(payload))

    async def send_error(self, code, message):
        await self.send_json({"type": "error", "code": code, "message": message})

    def _game_type(self, data):
        game_type = data.get("gameType") or TIC_TAC_TOE
        if not isinstance(game_type, str):
            raise GameError(INVALID_PAYLOAD, "Unsupported game type")
        return game_type

    def _query_param(self, name):
        query = parse_qs(self.scope.get("query_string", b"").decode())
        values = query.get(name)
        return values[0] if values else None
