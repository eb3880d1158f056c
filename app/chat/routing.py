"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/relay/ - The real-time relay; rooms are joined by event, not by URL

Authentication:
    JWT access token passed as ?token=<jwt> or as the subprotocol pair
    "jwt, <token>". JWTAuthMiddleware validates it and attaches the user
    to the consumer's scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/relay/", consumers.RelayConsumer.as_asgi()),
]
