# config/urls.py
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("accounts/", include("accounts.urls")),
    path("game/", include("game.urls")),
    path("match/", include("matchmaking.urls")),
]
