from django.urls import path
from .api.views import (
    Register, LoginAPI, LogoutAPI, Me, LiveToken, ProfileUpdate,
    FriendsList, FriendInvitesList, FriendInviteCreate, FriendAccept, FriendReject, FriendRemove,
)

urlpatterns = [
    path("api/register/", Register.as_view(), name="api_register"),
    path("api/login/", LoginAPI.as_view(), name="api_login"),
    path("api/logout/", LogoutAPI.as_view(), name="api_logout"),
    path("api/me/", Me.as_view(), name="api_me"),
    path("api/live-token/", LiveToken.as_view(), name="api_live_token"),
    path("api/profile/update/", ProfileUpdate.as_view(), name="api_profile_update"),

    path("api/friends/", FriendsList.as_view(), name="api_friends"),
    path("api/friends/invites/", FriendInvitesList.as_view(), name="api_friend_invites"),
    path("api/friends/invite/", FriendInviteCreate.as_view(), name="api_friend_invite"),
    path("api/friends/invites/<int:invite_id>/accept/", FriendAccept.as_view(), name="api_friend_accept"),
    path("api/friends/invites/<int:invite_id>/reject/", FriendReject.as_view(), name="api_friend_reject"),
    path("api/friends/remove/<int:user_id>/", FriendRemove.as_view(), name="api_friend_remove"),
]
