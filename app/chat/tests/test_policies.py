"""
Tests for the channel/message access predicates in chat.policies.
"""

from django.contrib.auth.models import AnonymousUser

from chat.policies import (
    can_access,
    is_admin,
    is_authenticated,
    is_member,
    is_message_author,
    is_owner,
)
from chat.tests.factories import MessageFactory


# =============================================================================
# Identity Predicates
# =============================================================================


class TestIdentityPredicates:
    """Tests for is_authenticated / is_owner / is_member / is_admin."""

    def test_is_authenticated(self, owner_user):
        assert is_authenticated(owner_user) is True
        assert is_authenticated(AnonymousUser()) is False
        assert is_authenticated(None) is False

    def test_owner_is_admin_without_membership(self, private_channel, owner_user):
        """
        The owner is an implicit admin even without a membership row.

        Why it matters: channels created by the resolver never list their
        owner as a member.
        """
        assert is_owner(private_channel, owner_user)
        assert not is_member(private_channel, owner_user)
        assert is_admin(private_channel, owner_user)

    def test_admin_member_is_admin(self, private_channel, admin_user):
        assert is_member(private_channel, admin_user)
        assert is_admin(private_channel, admin_user)
        assert not is_owner(private_channel, admin_user)

    def test_plain_member_is_not_admin(self, private_channel, member_user):
        assert is_member(private_channel, member_user)
        assert not is_admin(private_channel, member_user)

    def test_anonymous_is_nothing(self, private_channel):
        guest = AnonymousUser()

        assert not is_owner(private_channel, guest)
        assert not is_member(private_channel, guest)
        assert not is_admin(private_channel, guest)


# =============================================================================
# Channel Access
# =============================================================================


class TestCanAccess:
    """
    Tests for can_access().

    public -> anyone; internal -> authenticated; private/p2p -> owner or member.
    """

    def test_public_open_to_everyone(self, public_channel, outsider_user):
        assert can_access(public_channel, outsider_user)
        assert can_access(public_channel, AnonymousUser())
        assert can_access(public_channel, None)

    def test_internal_requires_authentication(self, internal_channel, outsider_user):
        assert can_access(internal_channel, outsider_user)
        assert not can_access(internal_channel, AnonymousUser())

    def test_private_limited_to_owner_and_members(
        self, private_channel, owner_user, member_user, outsider_user
    ):
        assert can_access(private_channel, owner_user)
        assert can_access(private_channel, member_user)
        assert not can_access(private_channel, outsider_user)
        assert not can_access(private_channel, AnonymousUser())

    def test_p2p_limited_to_owner_and_member(
        self, p2p_channel, owner_user, member_user, outsider_user
    ):
        assert can_access(p2p_channel, owner_user)
        assert can_access(p2p_channel, member_user)
        assert not can_access(p2p_channel, outsider_user)


# =============================================================================
# Message Authorship
# =============================================================================


class TestIsMessageAuthor:
    """Tests for is_message_author()."""

    def test_sender_is_author(self, db, member_user, outsider_user):
        message = MessageFactory(sender=member_user)

        assert is_message_author(message, member_user)
        assert not is_message_author(message, outsider_user)

    def test_message_without_sender_has_no_author(self, db, outsider_user):
        """
        Nobody owns a system or guest message.

        Why it matters: guests are all AnonymousUser, so letting "no
        sender" match "no user" would let any guest edit any guest message.
        """
        message = MessageFactory(sender=None)

        assert not is_message_author(message, outsider_user)
        assert not is_message_author(message, AnonymousUser())
