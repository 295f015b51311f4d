import logging

from django.conf import settings
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.models import User
from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated

from accounts.models import Friendship, FriendInvite, canonical_pair
from accounts.tokens import issue_live_token
from matchmaking.models import Notification
from matchmaking.utils import notify_user
from ..serializers import (
    FriendInviteCreateSerializer, ProfileUpdateSerializer, RegisterSerializer, UserSerializer, normalize_handle,
)

logger = logging.getLogger(__name__)


def user_brief(user):
    return {"id": user.id, "username": user.username}


class Register(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        s = RegisterSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = s.save()
        login(request, user)
        logger.info("registered user %s", user.id)
        return Response({"user": UserSerializer(user).data}, status=201)


class LoginAPI(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        username = normalize_handle(request.data.get("login", ""))
        password = request.data.get("password", "")
        user = authenticate(request, username=username, password=password)
        if not user:
            return Response({"error": "Invalid credentials"}, status=401)
        login(request, user)
        return Response({"user": UserSerializer(user).data})


class LogoutAPI(APIView):
    def post(self, request):
        logout(request)
        return Response({"ok": True})


class Me(APIView):
    def get(self, request):
        return Response({"user": UserSerializer(request.user).data})


class LiveToken(APIView):
    """Short-lived token to open the live connection with (``/ws/live/?token=...``)."""

    def post(self, request):
        return Response({
            "token": issue_live_token(request.user.id),
            "expiresIn": settings.LIVE_TOKEN_MAX_AGE,
        })


class ProfileUpdate(APIView):
    def post(self, request):
        s = ProfileUpdateSerializer(data=request.data, context={"request": request})
        s.is_valid(raise_exception=True)
        request.user.username = s.validated_data["username"]
        request.user.save(update_fields=["username"])
        return Response({"user": UserSerializer(request.user).data})


class FriendsList(APIView):
    def get(self, request):
        me = request.user.id
        rows = Friendship.objects.involving(me).select_related("user_a", "user_b")
        friends = [fr.other(me) for fr in rows]
        return Response({"friends": UserSerializer(friends, many=True).data})


class FriendInvitesList(APIView):
    def get(self, request):
        invites = (FriendInvite.objects.filter(to_user=request.user, status=FriendInvite.PENDING)
                   .select_related("from_user").order_by("-created_at"))
        return Response({"invites": [{
            "id": inv.id,
            "fromUser": user_brief(inv.from_user),
            "createdAt": inv.created_at,
        } for inv in invites]})


class FriendInviteCreate(APIView):
    def post(self, request):
        s = FriendInviteCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        if s.validated_data.get("userId"):
            target = get_object_or_404(User, id=s.validated_data["userId"])
        else:
            target = User.objects.filter(username=s.validated_data["username"]).first()
            if target is None:
                return Response({"error": "User not found"}, status=404)
        if target.id == request.user.id:
            return Response({"error": "Cannot invite yourself"}, status=400)
        if Friendship.are_friends(request.user.id, target.id):
            return Response({"error": "Already friends"}, status=409)

        with transaction.atomic():
            invite, created = FriendInvite.objects.select_for_update().get_or_create(
                from_user=request.user, to_user=target,
            )
            if not created:
                if invite.status == FriendInvite.PENDING:
                    return Response({"error": "Invite already sent"}, status=409)
                invite.status = FriendInvite.PENDING
                invite.save(update_fields=["status", "updated_at"])
            Notification.objects.get_or_create(
                to_user=target, type=Notification.FRIEND_INVITE, friend_invite=invite,
            )

        notify_user(target.id, "friend_invite", {
            "inviteId": invite.id,
            "fromUser": user_brief(request.user),
        })
        return Response({"invite": {
            "id": invite.id,
            "toUser": user_brief(target),
            "status": invite.status,
            "createdAt": invite.created_at,
        }}, status=201)


class FriendAccept(APIView):
    def post(self, request, invite_id: int):
        with transaction.atomic():
            invite = get_object_or_404(FriendInvite.objects.select_for_update(), id=invite_id, to_user=request.user)
            if invite.status != FriendInvite.PENDING:
                return Response({"error": "Invite already processed"}, status=409)
            invite.status = FriendInvite.ACCEPTED
            invite.save(update_fields=["status", "updated_at"])
            a, b = canonical_pair(invite.from_user_id, invite.to_user_id)
            Friendship.objects.get_or_create(user_a_id=a, user_b_id=b)

        notify_user(invite.from_user_id, "friend_accepted", {"friend": user_brief(request.user)})
        return Response({"friend": user_brief(invite.from_user)})


class FriendReject(APIView):
    def post(self, request, invite_id: int):
        invite = get_object_or_404(FriendInvite, id=invite_id, to_user=request.user)
        if invite.status != FriendInvite.PENDING:
            return Response({"error": "Invite already processed"}, status=409)
        invite.status = FriendInvite.REJECTED
        invite.save(update_fields=["status", "updated_at"])
        return Response({"ok": True})


class FriendRemove(APIView):
    def post(self, request, user_id: int):
        if user_id == request.user.id:
            return Response({"error": "Cannot remove yourself"}, status=400)
        deleted, _ = Friendship.objects.between(request.user.id, user_id).delete()
        if not deleted:
            return Response({"error": "Friendship not found"}, status=404)

        notify_user(request.user.id, "friend_removed", {"friendId": user_id})
        notify_user(user_id, "friend_removed", {"friendId": request.user.id})
        return Response(status=204)
