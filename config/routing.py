from django.urls import path
from channels.routing import ProtocolTypeRouter, URLRouter
from matchmaking.consumers.live_consumer import LiveConsumer

websocket_urlpatterns = [
    path("ws/live/", LiveConsumer.as_asgi()),
]


def build_application(http_app):
    # The live socket authenticates with its own short-lived token, not the session cookie
    return ProtocolTypeRouter({
        "http": http_app,
        "websocket": URLRouter(websocket_urlpatterns),
    })
