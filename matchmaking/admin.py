from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "to_user", "type", "match", "friend_invite", "read", "created_at")
    list_filter = ("type", "read")
