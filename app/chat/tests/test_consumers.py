"""
Tests for the chat WebSocket consumer and its JWT middleware.

The ASGI application is driven with channels' WebsocketCommunicator from
plain test functions through async_to_sync. The in-memory channel layer
is configured in the root conftest.

Tests that resolve a user from a token touch the database from the
consumer's event loop, so they use transactional database access.
"""

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.tokens import AccessToken

from authentication.tests.factories import UserFactory
from chat.middleware import JWTAuthMiddleware, get_token_from_query, get_user_from_token
from chat.routing import websocket_urlpatterns

WS_PATH = "/ws/chat/"


def application():
    return JWTAuthMiddleware(URLRouter(websocket_urlpatterns))


def run(coroutine_function, *args):
    """Run an async test body to completion."""
    return async_to_sync(coroutine_function)(*args)


async def send_to_group(group, message):
    await get_channel_layer().group_send(
        group, {"type": "chat.message", "message": message}
    )


# =============================================================================
# Middleware
# =============================================================================


class TestGetTokenFromQuery:
    """Tests for query string parsing."""

    def test_token_present(self):
        assert get_token_from_query({"query_string": b"token=abc&x=1"}) == "abc"

    def test_token_missing(self):
        assert get_token_from_query({"query_string": b"x=1"}) is None
        assert get_token_from_query({}) is None


@pytest.mark.django_db(transaction=True)
class TestGetUserFromToken:
    """
    Tests for token validation.

    Why it matters: a bad token must downgrade the socket to anonymous
    instead of failing the handshake.
    """

    def test_valid_token(self):
        user = UserFactory()

        resolved = run(get_user_from_token, str(AccessToken.for_user(user)))

        assert resolved.pk == user.pk

    def test_garbage_token(self):
        assert isinstance(run(get_user_from_token, "not-a-jwt"), AnonymousUser)

    def test_deleted_user(self):
        user = UserFactory()
        token = str(AccessToken.for_user(user))
        user.delete()

        assert isinstance(run(get_user_from_token, token), AnonymousUser)

    def test_inactive_user(self):
        user = UserFactory()
        token = str(AccessToken.for_user(user))
        user.is_active = False
        user.save()

        resolved = run(get_user_from_token, token)

        assert isinstance(resolved, AnonymousUser)


# =============================================================================
# Consumer
# =============================================================================


@pytest.mark.django_db(transaction=True)
class TestChatConsumerAnonymous:
    """Tests for guest connections."""

    def test_connect_and_ping(self):
        async def scenario():
            communicator = WebsocketCommunicator(application(), WS_PATH)
            connected, _ = await communicator.connect()
            await communicator.send_json_to({"type": "ping"})
            reply = await communicator.receive_json_from()
            await communicator.disconnect()
            return connected, reply

        connected, reply = run(scenario)

        assert connected is True
        assert reply == {"type": "pong"}

    def test_unknown_message_type(self):
        async def scenario():
            communicator = WebsocketCommunicator(application(), WS_PATH)
            await communicator.connect()
            await communicator.send_json_to({"type": "subscribe"})
            reply = await communicator.receive_json_from()
            await communicator.disconnect()
            return reply

        assert run(scenario) == {
            "type": "error",
            "message": "Unknown message type: subscribe",
        }

    def test_guest_receives_public_messages_only(self):
        async def scenario():
            communicator = WebsocketCommunicator(application(), WS_PATH)
            await communicator.connect()
            await send_to_group("chat.internal", {"text": "staff"})
            await send_to_group("chat.public", {"text": "everyone"})
            event = await communicator.receive_json_from()
            nothing_else = await communicator.receive_nothing()
            await communicator.disconnect()
            return event, nothing_else

        event, nothing_else = run(scenario)

        assert event == {"event": "message", "message": {"text": "everyone"}}
        assert nothing_else is True

    def test_invalid_token_connects_as_guest(self):
        async def scenario():
            communicator = WebsocketCommunicator(
                application(), f"{WS_PATH}?token=broken"
            )
            connected, _ = await communicator.connect()
            await communicator.disconnect()
            return connected

        assert run(scenario) is True


@pytest.mark.django_db(transaction=True)
class TestChatConsumerAuthenticated:
    """Tests for connections with a valid token."""

    def test_user_receives_own_and_internal_groups(self):
        user = UserFactory()
        token = str(AccessToken.for_user(user))

        async def scenario():
            communicator = WebsocketCommunicator(
                application(), f"{WS_PATH}?token={token}"
            )
            connected, _ = await communicator.connect()
            await send_to_group(f"chat.user.{user.pk}", {"text": "direct"})
            direct = await communicator.receive_json_from()
            await send_to_group("chat.internal", {"text": "staff"})
            internal = await communicator.receive_json_from()
            await send_to_group(f"chat.user.{user.pk + 1}", {"text": "not mine"})
            nothing_else = await communicator.receive_nothing()
            await communicator.disconnect()
            return connected, direct, internal, nothing_else

        connected, direct, internal, nothing_else = run(scenario)

        assert connected is True
        assert direct["message"] == {"text": "direct"}
        assert internal["message"] == {"text": "staff"}
        assert nothing_else is True

    def test_disconnect_leaves_groups(self):
        user = UserFactory()
        token = str(AccessToken.for_user(user))

        async def scenario():
            communicator = WebsocketCommunicator(
                application(), f"{WS_PATH}?token={token}"
            )
            await communicator.connect()
            await communicator.disconnect()
            layer = get_channel_layer()
            return layer.groups.get(f"chat.user.{user.pk}", {})

        assert run(scenario) == {}
