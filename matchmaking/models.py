from django.conf import settings
from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone


class NotificationQuerySet(models.QuerySet):
    def live_game_invites(self, now=None):
        cutoff = (now or timezone.now()) - settings.GAME_INVITE_TTL
        return self.filter(type=Notification.GAME_INVITE, created_at__gt=cutoff)

    def expired_game_invites(self, now=None):
        cutoff = (now or timezone.now()) - settings.GAME_INVITE_TTL
        return self.filter(type=Notification.GAME_INVITE, created_at__lte=cutoff)


class Notification(models.Model):
    FRIEND_INVITE = "friend_invite"
    GAME_INVITE = "game_invite"
    TYPES = ((FRIEND_INVITE, "friend_invite"), (GAME_INVITE, "game_invite"))

    to_user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="notifications")
    type = models.CharField(max_length=32, choices=TYPES)
    friend_invite = models.ForeignKey("accounts.FriendInvite", null=True, blank=True, on_delete=models.CASCADE)
    match = models.ForeignKey("game.Match", null=True, blank=True, on_delete=models.CASCADE)
    created_at = models.DateTimeField(default=timezone.now)
    read = models.BooleanField(default=False)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        indexes = [models.Index(fields=["to_user","read","-created_at"], name="notif_user_read_idx")]

    @property
    def expires_at(self):
        if self.type != self.GAME_INVITE:
            return None
        return self.created_at + settings.GAME_INVITE_TTL
