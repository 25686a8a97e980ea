"""
Tests for chat signal handlers.

Tests verify:
- Editing a message's text records the previous version
- Deleting a channel removes its messages
- A failure to schedule the cascade never blocks the delete
"""

from unittest.mock import patch

from django.test import override_settings

from chat.models import Channel, Message
from chat.signals import record_message_version
from chat.tests.factories import ChannelFactory, MessageFactory


class TestRecordMessageVersionSignal:
    """Tests for the pre_save versioning handler."""

    def test_saving_new_text_records_previous(self, db):
        message = MessageFactory(text="first")

        message.text = "second"
        message.save()

        message.refresh_from_db()
        assert message.text == "second"
        assert [entry["text"] for entry in message.versions] == ["first"]

    def test_versions_survive_reload(self, db):
        message = MessageFactory(text="first")
        message.text = "second"
        message.save()

        fresh = Message.objects.get(pk=message.pk)
        fresh.text = "third"
        fresh.save()

        fresh.refresh_from_db()
        assert [entry["text"] for entry in fresh.versions] == ["second", "first"]

    @override_settings(CHAT={"VERSIONING_ENABLED": False})
    def test_respects_settings(self, db):
        message = MessageFactory(text="first")

        message.text = "second"
        message.save()

        message.refresh_from_db()
        assert message.versions == []

    def test_raw_save_is_ignored(self, db):
        """
        Fixture loading must not rewrite history.

        Why it matters: loaddata replays stored rows, versions included.
        """
        message = MessageFactory(text="first")
        message.text = "second"

        record_message_version(Message, message, raw=True)

        assert message.versions == []


class TestDeleteMessagesOfChannelSignal:
    """Tests for the post_delete cascade handler."""

    def test_channel_delete_removes_messages(self, db):
        channel = ChannelFactory()
        MessageFactory.create_batch(3, channel=channel)

        channel.delete()

        assert not Message.objects.filter(channel_id=channel.pk).exists()

    def test_schedule_failure_does_not_block_delete(self, db):
        channel = ChannelFactory()
        channel_id = channel.pk
        MessageFactory(channel=channel)

        with patch(
            "chat.tasks.delete_channel_messages.delay",
            side_effect=ConnectionError("broker down"),
        ):
            channel.delete()

        assert not Channel.objects.filter(pk=channel_id).exists()
        assert Message.objects.filter(channel_id=channel_id).count() == 1
