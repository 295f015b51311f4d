import uuid
from django.db import models
from django.contrib.auth.models import User

from .engine.rules import TIC_TAC_TOE


class Match(models.Model):
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    ABANDONED = "abandoned"
    STATUSES = (
        (WAITING, "waiting"),
        (IN_PROGRESS, "in_progress"),
        (FINISHED, "finished"),
        (ABANDONED, "abandoned"),
    )
    ACTIVE = (WAITING, IN_PROGRESS)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    game_type = models.CharField(max_length=32, default=TIC_TAC_TOE)

    player_x = models.ForeignKey(User, on_delete=models.CASCADE, related_name="matches_x")
    player_o = models.ForeignKey(User, on_delete=models.CASCADE, related_name="matches_o", null=True, blank=True)

    status = models.CharField(max_length=16, choices=STATUSES, default=WAITING)
    # null while unfinished, and for a draw
    winner = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name="matches_won")

    created_at = models.DateTimeField(auto_now_add=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=["game_type", "status"], name="match_type_status_idx")]

    def __str__(self):
        return f"{self.game_type}:{self.id}"

    def has_player(self, user_id):
        return user_id in (self.player_x_id, self.player_o_id)


class Move(models.Model):
    """Append-only; rows are never updated or deleted."""

    match = models.ForeignKey(Match, on_delete=models.CASCADE, related_name="moves")
    player = models.ForeignKey(User, on_delete=models.CASCADE, related_name="moves")
    number = models.PositiveIntegerField()
    position = models.PositiveSmallIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["number"]
        constraints = [
            models.UniqueConstraint(fields=["match", "number"], name="uq_move_number"),
            models.UniqueConstraint(fields=["match", "position"], name="uq_move_position"),
        ]


class UserGameStats(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="game_stats")
    game_type = models.CharField(max_length=32, default=TIC_TAC_TOE)
    wins = models.IntegerField(default=0)
    losses = models.IntegerField(default=0)
    draws = models.IntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "game_type"], name="uq_user_game_stats"),
        ]


class FriendGameRecord(models.Model):
    # user_a_id < user_b_id always
    user_a = models.ForeignKey(User, on_delete=models.CASCADE, related_name="records_a")
    user_b = models.ForeignKey(User, on_delete=models.CASCADE, related_name="records_b")
    game_type = models.CharField(max_length=32, default=TIC_TAC_TOE)
    wins_a = models.IntegerField(default=0)
    wins_b = models.IntegerField(default=0)
    draws = models.IntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user_a", "user_b", "game_type"], name="uq_friend_game_record"),
        ]
