"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures with different channel roles
- Channel fixtures (private, p2p, internal, public)
- API client helpers for JWT-authenticated requests
- A recording publisher for realtime fan-out assertions

Usage:
    def test_example(private_channel, client_for, owner_user):
        response = client_for(owner_user).get(
            f"/api/v1/chat/channels/{private_channel.id}/"
        )
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.conf import ChatSettings
from chat.models import ChannelType
from chat.tests.factories import ChannelFactory, ChannelMemberFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def owner_user(db):
    """Create a user who will own the test channels."""
    return UserFactory(first_name="Olivia", last_name="Owner")


@pytest.fixture
def admin_user(db):
    """Create a user who will be an admin member."""
    return UserFactory(first_name="Adam", last_name="Admin")


@pytest.fixture
def member_user(db):
    """Create a user who will be a plain member."""
    return UserFactory(first_name="Mia", last_name="Member")


@pytest.fixture
def outsider_user(db):
    """Create a user who is not in any test channel."""
    return UserFactory(first_name="Oscar", last_name="Outsider")


# =============================================================================
# Channel Fixtures
# =============================================================================


@pytest.fixture
def private_channel(db, owner_user, admin_user, member_user):
    """
    Private channel owned by owner_user.

    Members: admin_user (admin), member_user.
    """
    channel = ChannelFactory(owner=owner_user, channel_type=ChannelType.PRIVATE)
    ChannelMemberFactory(channel=channel, user=admin_user, is_admin=True)
    ChannelMemberFactory(channel=channel, user=member_user)
    return channel


@pytest.fixture
def p2p_channel(db, owner_user, member_user):
    """P2P channel owned by owner_user with member_user as the only member."""
    channel = ChannelFactory(owner=owner_user, channel_type=ChannelType.P2P)
    ChannelMemberFactory(channel=channel, user=member_user)
    return channel


@pytest.fixture
def public_channel(db, owner_user):
    """Public channel without explicit members."""
    return ChannelFactory(
        owner=owner_user, channel_type=ChannelType.PUBLIC, name="Lobby"
    )


@pytest.fixture
def internal_channel(db, owner_user):
    """Internal channel without explicit members."""
    return ChannelFactory(
        owner=owner_user, channel_type=ChannelType.INTERNAL, name="Staff"
    )


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def chat_config():
    """Default chat settings."""
    return ChatSettings()


# =============================================================================
# Realtime Fixtures
# =============================================================================


class RecordingPublisher:
    """Publisher that records (group, event) pairs instead of sending."""

    def __init__(self):
        self.calls = []

    def __call__(self, group, event):
        self.calls.append((group, event))

    @property
    def groups(self):
        return [group for group, _ in self.calls]


@pytest.fixture
def publisher():
    return RecordingPublisher()


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """
    Return a function building a JWT-authenticated client for a user.

    Usage:
        client = client_for(owner_user)
    """

    def make_client(user):
        client = APIClient()
        token = RefreshToken.for_user(user).access_token
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return make_client
