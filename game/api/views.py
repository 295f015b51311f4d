from django.db.models import Q
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from accounts.models import Friendship
from matchmaking.utils import notify_user, publish_match_state
from .. import services
from ..engine.rules import TIC_TAC_TOE
from ..errors import FORBIDDEN, INVALID_STATE, GameError
from ..models import Match
from ..serializers import (
    LeaderboardQuerySerializer, MatchCreateSerializer, MatchListQuerySerializer, MatchSummarySerializer,
)


def error_response(e: GameError):
    return Response({"error": e.message, "code": e.code}, status=e.http_status)


def announce_start(match):
    """Both seats are filled: push the state to watchers and tell both players."""
    state = publish_match_state(match.id)
    payload = {"matchId": state["id"], "gameType": match.game_type, "match": state}
    for user_id in (match.player_x_id, match.player_o_id):
        notify_user(user_id, "match_ready", payload)
    return state


class MatchListCreate(APIView):
    def get(self, request):
        q = MatchListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        me = request.user.id
        qs = (Match.objects.select_related("player_x", "player_o")
              .filter(Q(player_x_id=me) | Q(player_o_id=me), game_type=TIC_TAC_TOE))
        if q.validated_data.get("status"):
            qs = qs.filter(status=q.validated_data["status"])
        qs = qs.order_by("-created_at")[:q.validated_data["limit"]]
        return Response({"matches": MatchSummarySerializer(qs, many=True).data})

    def post(self, request):
        s = MatchCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        game_type = s.validated_data["gameType"]
        opponent_id = s.validated_data.get("opponentUserId")
        me = request.user
        try:
            if not opponent_id:
                match = services.create_open_match(me.id, game_type)
                return Response({"match": services.get_match_state(match.id, game_type)}, status=201)
            result = services.create_challenge(me.id, opponent_id, game_type)
        except GameError as e:
            return error_response(e)

        if result.outcome == result.BUSY:
            notify_user(me.id, "game_invite_opponent_busy", {"opponentId": opponent_id, "gameType": game_type})
            return Response({"error": "Opponent is busy", "code": INVALID_STATE}, status=409)
        if result.outcome == result.ACCEPTED:
            return Response({"match": announce_start(result.match)})

        state = services.get_match_state(result.match.id, game_type)
        if result.outcome == result.CREATED:
            notify_user(opponent_id, "game_invite", {
                "matchId": state["id"],
                "gameType": game_type,
                "fromUser": {"id": me.id, "username": me.username},
            })
            return Response({"match": state}, status=201)
        return Response({"match": state})


class MatchDetail(APIView):
    def get(self, request, match_id):
        try:
            match = services.get_player_match(match_id, request.user.id)
        except GameError as e:
            return error_response(e)
        return Response({"match": services.build_match_state(match)})


class MatchJoin(APIView):
    def post(self, request, match_id):
        try:
            match = services.join_open_match(match_id, request.user.id)
        except GameError as e:
            return error_response(e)
        return Response({"match": announce_start(match)})


class InviteAccept(APIView):
    def post(self, request, match_id):
        try:
            match = services.accept_game_invite(match_id, request.user.id)
        except GameError as e:
            return error_response(e)
        return Response({"match": announce_start(match)})


class InviteDecline(APIView):
    def post(self, request, match_id):
        try:
            match = services.decline_game_invite(match_id, request.user.id)
        except GameError as e:
            return error_response(e)
        notify_user(match.player_x_id, "game_invite_declined", {
            "matchId": str(match.id),
            "byUser": {"id": request.user.id, "username": request.user.username},
        })
        return Response({"ok": True})


class MyStats(APIView):
    def get(self, request):
        return Response({"stats": services.user_stats(request.user.id)})


class VsFriendStats(APIView):
    def get(self, request, friend_id: int):
        if not Friendship.are_friends(request.user.id, friend_id):
            return error_response(GameError(FORBIDDEN, "User is not your friend"))
        return Response({"stats": services.head_to_head(request.user.id, friend_id)})


class Leaderboard(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        q = LeaderboardQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response({"leaderboard": services.leaderboard(TIC_TAC_TOE, q.validated_data["limit"])})
