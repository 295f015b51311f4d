from rest_framework import serializers
from .engine.rules import GAME_TYPES, TIC_TAC_TOE
from .models import Match


class PlayerSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()


class MatchSummarySerializer(serializers.ModelSerializer):
    gameType = serializers.CharField(source="game_type")
    winnerId = serializers.IntegerField(source="winner_id", allow_null=True)
    playerX = PlayerSerializer(source="player_x")
    playerO = PlayerSerializer(source="player_o", allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at")
    finishedAt = serializers.DateTimeField(source="finished_at", allow_null=True)

    class Meta:
        model = Match
        fields = ("id", "gameType", "status", "winnerId", "playerX", "playerO", "createdAt", "finishedAt")


class MatchCreateSerializer(serializers.Serializer):
    opponentUserId = serializers.IntegerField(required=False, min_value=1)
    gameType = serializers.ChoiceField(choices=sorted(GAME_TYPES), default=TIC_TAC_TOE)


class MatchListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s for s, _ in Match.STATUSES], required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, default=20)


class LeaderboardQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)
