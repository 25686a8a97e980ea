"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/ - Receive pushes of new messages

Authentication:
    JWT token should be passed as query parameter: ?token=<jwt_access_token>
    JWTAuthMiddleware validates the token and attaches the user to the
    consumer's scope; without a valid token the connection is anonymous.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/chat/", consumers.ChatConsumer.as_asgi()),
]
