from django.urls import path
from .api.views import (
    MatchListCreate, MatchDetail, MatchJoin, InviteAccept, InviteDecline, MyStats, VsFriendStats, Leaderboard,
)

urlpatterns = [
    path("api/matches/", MatchListCreate.as_view(), name="matches"),
    path("api/matches/<uuid:match_id>/", MatchDetail.as_view(), name="match_detail"),
    path("api/matches/<uuid:match_id>/join/", MatchJoin.as_view(), name="match_join"),
    path("api/matches/<uuid:match_id>/invite/accept/", InviteAccept.as_view(), name="invite_accept"),
    path("api/matches/<uuid:match_id>/invite/decline/", InviteDecline.as_view(), name="invite_decline"),
    path("api/stats/", MyStats.as_view(), name="my_stats"),
    path("api/stats/vs-friend/<int:friend_id>/", VsFriendStats.as_view(), name="vs_friend_stats"),
    path("api/leaderboard/", Leaderboard.as_view(), name="leaderboard"),
]
