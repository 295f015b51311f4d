from django.contrib import admin
from .models import Friendship, FriendInvite

@admin.register(Friendship)
class FriendshipAdmin(admin.ModelAdmin):
    list_display=("id","user_a","user_b","created_at")
    search_fields=("user_a__username","user_b__username")

@admin.register(FriendInvite)
class FriendInviteAdmin(admin.ModelAdmin):
    list_display=("id","from_user","to_user","status","created_at")
    list_filter=("status",)
