"""
Tests for chat Celery tasks.

Tasks are called directly (synchronously); scheduling is covered by the
BackgroundTasks tests in test_services.
"""

import uuid
from unittest.mock import patch

from django.db import DatabaseError
from freezegun import freeze_time

from chat.models import Channel, ChannelMember, Message
from chat.tasks import delete_channel_messages, record_channel_activity
from chat.tests.factories import ChannelFactory, MessageFactory


# =============================================================================
# record_channel_activity
# =============================================================================


class TestRecordChannelActivity:
    """
    Tests for the post-send bookkeeping task.

    Why it matters: previews order channels by last_message_at and the
    sender's own message must not show up as unread for them.
    """

    @freeze_time("2024-02-01 08:00:00")
    def test_touches_and_marks_seen(self, private_channel, member_user):
        assert record_channel_activity(str(private_channel.pk), member_user.pk) is True

        private_channel.refresh_from_db()
        member = ChannelMember.objects.get(channel=private_channel, user=member_user)
        assert private_channel.last_message_at is not None
        assert member.last_seen == private_channel.last_message_at

    def test_saves_once(self, private_channel, member_user):
        record_channel_activity(str(private_channel.pk), member_user.pk)

        private_channel.refresh_from_db()
        assert private_channel.version == 2

    def test_guest_only_touches(self, public_channel):
        assert record_channel_activity(str(public_channel.pk)) is True

        public_channel.refresh_from_db()
        assert public_channel.last_message_at is not None
        assert not ChannelMember.objects.filter(channel=public_channel).exists()

    def test_owner_gets_membership(self, p2p_channel, owner_user):
        record_channel_activity(str(p2p_channel.pk), owner_user.pk)

        member = ChannelMember.objects.get(channel=p2p_channel, user=owner_user)
        assert member.is_admin is True
        assert member.last_seen is not None

    def test_missing_channel_returns_false(self, db):
        assert record_channel_activity(str(uuid.uuid4()), None) is False

    def test_database_error_returns_false(self, private_channel):
        with patch(
            "chat.repositories.DjangoChannelRepository.save",
            side_effect=DatabaseError("locked"),
        ):
            assert record_channel_activity(str(private_channel.pk)) is False


# =============================================================================
# delete_channel_messages
# =============================================================================


class TestDeleteChannelMessages:
    """Tests for the message cascade task."""

    def test_deletes_only_that_channels_messages(self, db):
        channel = ChannelFactory()
        MessageFactory.create_batch(2, channel=channel)
        other = MessageFactory()

        assert delete_channel_messages(str(channel.pk)) == 2
        assert not Message.objects.filter(channel_id=channel.pk).exists()
        assert Message.objects.filter(pk=other.pk).exists()

    def test_no_messages(self, db):
        assert delete_channel_messages(str(uuid.uuid4())) == 0

    def test_database_error_returns_zero(self, db):
        channel = ChannelFactory()

        with patch(
            "chat.repositories.DjangoMessageRepository.delete_many",
            side_effect=DatabaseError("locked"),
        ):
            assert delete_channel_messages(str(channel.pk)) == 0

        assert Channel.objects.filter(pk=channel.pk).exists()
