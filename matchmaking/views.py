from django.shortcuts import get_object_or_404
from rest_framework.views import APIView
from rest_framework.response import Response

from game import services
from .models import Notification


def user_brief(user):
    return {"id": user.id, "username": user.username} if user else None


def serialize_notification(n):
    friend_invite = None
    if n.friend_invite_id:
        friend_invite = {
            "id": n.friend_invite.id,
            "status": n.friend_invite.status,
            "fromUser": user_brief(n.friend_invite.from_user),
        }
    game_invite = None
    if n.type == Notification.GAME_INVITE and n.match_id:
        game_invite = {
            "matchId": str(n.match_id),
            "gameType": n.match.game_type,
            "fromUser": user_brief(n.match.player_x),
            "expiresAt": n.expires_at,
        }
    return {
        "id": n.id,
        "type": n.type,
        "read": n.read,
        "createdAt": n.created_at,
        "friendInvite": friend_invite,
        "gameInvite": game_invite,
    }


class NotificationsList(APIView):
    def get(self, request):
        services.purge_expired_game_invites(request.user.id)
        qs = (Notification.objects.filter(to_user=request.user)
              .select_related("friend_invite__from_user", "match__player_x")
              .order_by("-created_at"))
        return Response({"notifications": [serialize_notification(n) for n in qs]})


class NotificationRead(APIView):
    def post(self, request, notification_id: int):
        n = get_object_or_404(Notification, id=notification_id, to_user=request.user)
        n.read = True
        n.save(update_fields=["read"])
        return Response({"ok": True})
