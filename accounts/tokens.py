"""
Short-lived signed tokens for the live (websocket) connection.

They use their own salt and purpose so neither a session cookie nor any
other signed value can be replayed as a live-connection token.
"""
import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.core import signing

logger = logging.getLogger(__name__)

LIVE_SALT = "accounts.live-connection"
LIVE_PURPOSE = "live"


def issue_live_token(user_id: int) -> str:
    return signing.dumps({"uid": user_id, "purpose": LIVE_PURPOSE}, salt=LIVE_SALT, compress=True)


def read_live_token(token: str, max_age=None):
    """Return the user id carried by ``token`` or None if it does not verify."""
    if not token:
        return None
    if max_age is None:
        max_age = settings.LIVE_TOKEN_MAX_AGE
    try:
        payload = signing.loads(token, salt=LIVE_SALT, max_age=max_age)
    except signing.SignatureExpired:
        logger.info("live token expired")
        return None
    except signing.BadSignature:
        logger.info("live token failed verification")
        return None
    if not isinstance(payload, dict) or payload.get("purpose") != LIVE_PURPOSE:
        return None
    uid = payload.get("uid")
    return uid if isinstance(uid, int) else None


def verify_live_token(token: str, max_age=None):
    """Resolve ``token`` to an active ``User`` or None. Touches the database."""
    uid = read_live_token(token, max_age=max_age)
    if uid is None:
        return None
    return User.objects.filter(id=uid, is_active=True).first()
