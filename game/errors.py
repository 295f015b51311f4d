INVALID_JSON = "invalid_json"
INVALID_PAYLOAD = "invalid_payload"
NOT_FOUND = "not_found"
FORBIDDEN = "forbidden"
INVALID_STATE = "invalid_state"
INVALID_MOVE = "invalid_move"
NOT_YOUR_TURN = "not_your_turn"
UNKNOWN_TYPE = "unknown_type"
SERVER_ERROR = "server_error"

# Rejections that happen under normal races; not failures
CONFLICT_CODES = {INVALID_STATE, INVALID_MOVE, NOT_YOUR_TURN}

HTTP_STATUS = {
    INVALID_JSON: 400,
    INVALID_PAYLOAD: 400,
    NOT_FOUND: 404,
    FORBIDDEN: 403,
    INVALID_STATE: 409,
    INVALID_MOVE: 409,
    NOT_YOUR_TURN: 409,
    UNKNOWN_TYPE: 400,
    SERVER_ERROR: 500,
}


class GameError(Exception):
    """A rejected request, reported to the caller with a protocol error code."""

    def __init__(self, code, message):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def http_status(self):
        return HTTP_STATUS.get(self.code, 400)

    def to_payload(self):
        return {"type": "error", "code": self.code, "message": self.message}
