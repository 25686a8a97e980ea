"""
WebSocket consumers for the chat application.

This module implements the WebSocket consumer that receives new-message
pushes. Sending happens over HTTP; the socket is receive-only apart from
a keepalive ping.

Consumers:
    ChatConsumer: One connection per client, subscribed to the groups the
        user may receive messages from

Authentication:
    Users are authenticated via JWT token passed as query parameter.
    JWTAuthMiddleware attaches the user (or AnonymousUser) to
    self.scope["user"]. Anonymous connections are accepted.

Channel Groups:
    chat.public         every connection
    chat.internal       authenticated connections
    chat.user.<id>      the connections of one user

Message Types (from client):
    - ping: Keepalive, answered with pong

Message Types (to client):
    - {"event": "message", "message": {...}}: New message
    - {"type": "pong"}
    - {"type": "error", "message": "..."}: Error response
"""

from __future__ import annotations

import logging

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from chat.constants import REALTIME_CONFIG, user_group
from chat.policies import is_authenticated

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer relaying chat messages to a client.

    Attributes:
        groups_joined: Channel layer groups this connection is subscribed to
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.groups_joined: list[str] = []

    def groups_for_user(self, user) -> list[str]:
        groups = [REALTIME_CONFIG.PUBLIC_GROUP]
        if is_authenticated(user):
            groups.append(REALTIME_CONFIG.INTERNAL_GROUP)
            groups.append(user_group(user.pk))
        return groups

    async def connect(self):
        """Join the groups for the connected user and accept."""
        user = self.scope.get("user")

        for group in self.groups_for_user(user):
            await self.channel_layer.group_add(group, self.channel_name)
            self.groups_joined.append(group)

        await self.accept()
        logger.info(
            f"Chat socket connected for "
            f"{'user ' + str(user.pk) if is_authenticated(user) else 'guest'}"
        )

    async def disconnect(self, close_code):
        """Leave every joined group."""
        for group in self.groups_joined:
            await self.channel_layer.group_discard(group, self.channel_name)
        self.groups_joined = []

    async def receive_json(self, content, **kwargs):
        """
        Handle incoming WebSocket frames.

        Expected message format:
            {"type": "ping"}
        """
        message_type = content.get("type") if isinstance(content, dict) else None

        if message_type == "ping":
            await self.send_json({"type": "pong"})
            return

        await self.send_json(
            {
                "type": "error",
                "message": f"Unknown message type: {message_type}",
            }
        )

    async def chat_message(self, event):
        """
        Handle chat.message events from channel layer.

        Sends the message to the WebSocket client.
        """
        await self.send_json(
            {
                "event": REALTIME_CONFIG.MESSAGE_CLIENT_EVENT,
                "message": event["message"],
            }
        )
