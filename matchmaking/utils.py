from asgiref.sync import async_to_sync

from game import services
from .hub import hub


def notify_user(user_id, event_type, data):
    """Push from synchronous code (HTTP views). No-op when the user has no live connection."""
    async_to_sync(hub.send_to_user)(user_id, {"type": event_type, **data})


def publish_match_state(match_id):
    state = services.get_match_state(match_id)
    if state is not None:
        async_to_sync(hub.broadcast_match)(state["id"], {"type": "match_state", **state})
    return state
