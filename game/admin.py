from django.contrib import admin
from .models import Match, Move, UserGameStats, FriendGameRecord

@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    list_display=("id","game_type","status","player_x","player_o","winner","created_at","finished_at")
    list_filter=("status","game_type")

@admin.register(Move)
class MoveAdmin(admin.ModelAdmin):
    list_display=("match","number","player","position","created_at")

@admin.register(UserGameStats)
class UserGameStatsAdmin(admin.ModelAdmin):
    list_display=("user","game_type","wins","losses","draws")

@admin.register(FriendGameRecord)
class FriendGameRecordAdmin(admin.ModelAdmin):
    list_display=("user_a","user_b","game_type","wins_a","wins_b","draws")
