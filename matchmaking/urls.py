from django.urls import path
from . import views

urlpatterns = [
    path("api/notifications/", views.NotificationsList.as_view(), name="notifications"),
    path("api/notifications/<int:notification_id>/read/", views.NotificationRead.as_view(), name="notification_read"),
]
