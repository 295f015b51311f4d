from django.db import models
from django.contrib.auth.models import User


def canonical_pair(user_a_id, user_b_id):
    """Sorted id pair; every pair-keyed row is stored and looked up this way."""
    return tuple(sorted((user_a_id, user_b_id)))


class FriendshipQuerySet(models.QuerySet):
    def between(self, user_a_id, user_b_id):
        a, b = canonical_pair(user_a_id, user_b_id)
        return self.filter(user_a_id=a, user_b_id=b)

    def involving(self, user_id):
        return self.filter(models.Q(user_a_id=user_id) | models.Q(user_b_id=user_id))


class Friendship(models.Model):
    user_a = models.ForeignKey(User, on_delete=models.CASCADE, related_name="friendships_a")
    user_b = models.ForeignKey(User, on_delete=models.CASCADE, related_name="friendships_b")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = FriendshipQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user_a", "user_b"], name="uq_friendship_pair"),
        ]

    def __str__(self):
        return f"{self.user_a_id}<->{self.user_b_id}"

    def other(self, user_id):
        return self.user_b if self.user_a_id == user_id else self.user_a

    @classmethod
    def are_friends(cls, user_a_id, user_b_id):
        if user_a_id == user_b_id:
            return False
        return cls.objects.between(user_a_id, user_b_id).exists()

    @classmethod
    def pairs_among(cls, user_ids):
        """All friend pairs (as frozensets) whose both members are in ``user_ids``."""
        ids = list(user_ids)
        rows = cls.objects.filter(user_a_id__in=ids, user_b_id__in=ids).values_list("user_a_id", "user_b_id")
        return {frozenset(row) for row in rows}


class FriendInvite(models.Model):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    STATUSES = ((PENDING, "pending"), (ACCEPTED, "accepted"), (REJECTED, "rejected"))

    from_user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="friend_invites_sent")
    to_user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="friend_invites_received")
    status = models.CharField(max_length=16, choices=STATUSES, default=PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["from_user", "to_user"], name="uq_friend_invite"),
        ]
