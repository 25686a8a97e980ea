"""
Tests for chat models.

Covers:
- Channel name trimming and version counter
- Membership index (deduplication, staging, removal)
- Message text trimming and field defaults
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError, IntegrityError, models

from authentication.tests.factories import UserFactory
from chat.models import Channel, ChannelMember, ChannelType, Message, MessageType
from chat.tests.factories import ChannelFactory, ChannelMemberFactory, MessageFactory


# =============================================================================
# Channel Model Tests
# =============================================================================


class TestChannelModel:
    """Tests for Channel field behaviour."""

    def test_defaults(self, db):
        channel = ChannelFactory()

        assert channel.channel_type == ChannelType.PRIVATE
        assert channel.archived is False
        assert channel.last_message_at is None
        assert channel.version == 1

    def test_name_is_trimmed_on_save(self, db):
        channel = ChannelFactory(name="  General  ")

        channel.refresh_from_db()
        assert channel.name == "General"

    def test_is_broadcast_for_public_and_internal(self, db):
        assert ChannelFactory.build(channel_type=ChannelType.PUBLIC).is_broadcast
        assert ChannelFactory.build(channel_type=ChannelType.INTERNAL).is_broadcast
        assert not ChannelFactory.build(channel_type=ChannelType.P2P).is_broadcast
        assert not ChannelFactory.build(channel_type=ChannelType.PRIVATE).is_broadcast


class TestChannelVersion:
    """
    Tests for the version counter.

    Why it matters: clients compare versions to detect that a channel
    (or its member list) changed since they last fetched it.
    """

    def test_version_increments_when_field_changes(self, db):
        channel = ChannelFactory(name="Before")

        channel.name = "After"
        channel.save()

        assert channel.version == 2
        channel.refresh_from_db()
        assert channel.version == 2

    def test_version_unchanged_when_nothing_changed(self, db):
        channel = ChannelFactory(name="Same")

        channel.save()

        assert channel.version == 1

    def test_version_increments_when_members_change(self, db):
        channel = ChannelFactory()

        channel.stage_member(ChannelMember(user=UserFactory()))
        channel.save()

        assert channel.version == 2

    def test_saves_are_counted_per_save(self, db):
        channel = ChannelFactory()

        for name in ("one", "two", "three"):
            channel.name = name
            channel.save()

        assert channel.version == 4

    def test_failed_save_restores_version(self, db):
        """
        A save that raises leaves the counter as it was.

        Why it matters: retrying the save must bump the version once,
        not once per failed attempt.
        """
        channel = ChannelFactory(name="Before")
        channel.name = "After"

        with patch.object(
            models.Model, "save", side_effect=DatabaseError("locked"), autospec=True
        ):
            with pytest.raises(DatabaseError):
                channel.save()

        assert channel.version == 1
        channel.save()
        assert channel.version == 2


# =============================================================================
# Membership Index Tests
# =============================================================================


class TestMembershipIndex:
    """Tests for the user-id index over channel members."""

    def test_index_loads_members_in_insertion_order(self, db):
        channel = ChannelFactory()
        first = ChannelMemberFactory(channel=channel)
        second = ChannelMemberFactory(channel=channel)

        fresh = Channel.objects.get(pk=channel.pk)

        assert fresh.member_user_ids() == [first.user_id, second.user_id]

    def test_stage_member_keeps_existing_membership(self, db):
        """
        Staging a user that is already a member returns the existing row.

        Why it matters: a user can never appear twice in a channel.
        """
        channel = ChannelFactory()
        existing = ChannelMemberFactory(channel=channel, is_admin=True)
        fresh = Channel.objects.get(pk=channel.pk)

        staged = fresh.stage_member(ChannelMember(user=existing.user, is_admin=False))

        assert staged.pk == existing.pk
        assert staged.is_admin is True
        assert len(fresh.members_list()) == 1
        assert fresh.pending_members() == []

    def test_stage_member_on_unsaved_channel(self, db):
        user = UserFactory()
        channel = Channel(owner=UserFactory())

        channel.stage_member(ChannelMember(user=user))
        channel.stage_member(ChannelMember(user=user))

        assert channel.member_user_ids() == [user.pk]
        assert len(channel.pending_members()) == 1

    def test_get_member_ignores_anonymous(self, db):
        from django.contrib.auth.models import AnonymousUser

        channel = ChannelFactory()

        assert channel.get_member(None) is None
        assert channel.get_member(AnonymousUser()) is None

    def test_remove_member_marks_saved_row_for_deletion(self, db):
        channel = ChannelFactory()
        member = ChannelMemberFactory(channel=channel)
        fresh = Channel.objects.get(pk=channel.pk)

        fresh.remove_member(fresh.get_member(member.user))

        assert fresh.member_user_ids() == []
        assert [m.pk for m in fresh.removed_members()] == [member.pk]
        assert fresh.members_modified is True

    def test_remove_staged_member_drops_pending_write(self, db):
        channel = ChannelFactory()
        staged = channel.stage_member(ChannelMember(user=UserFactory()))

        channel.remove_member(staged)

        assert channel.pending_members() == []
        assert channel.removed_members() == []

    def test_unique_member_constraint(self, db):
        member = ChannelMemberFactory()

        with pytest.raises(IntegrityError):
            ChannelMemberFactory(channel=member.channel, user=member.user)


# =============================================================================
# Message Model Tests
# =============================================================================


class TestMessageModel:
    """Tests for Message field behaviour."""

    def test_defaults(self, db):
        message = MessageFactory()

        assert message.message_type == MessageType.MESSAGE
        assert message.removed is False
        assert message.versions == []

    def test_text_is_trimmed_on_save(self, db):
        message = MessageFactory(text="  hello  ")

        message.refresh_from_db()
        assert message.text == "hello"

    def test_sender_is_optional(self, db):
        message = MessageFactory(sender=None, message_type=MessageType.INFO)

        assert Message.objects.get(pk=message.pk).sender is None
