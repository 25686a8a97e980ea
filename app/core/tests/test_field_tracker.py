"""
Tests for FieldTrackerMixin in core/model_mixins.py.

Channel and Message are used as concrete models; both track a few fields.
"""

from chat.models import Channel, Message
from chat.tests.factories import ChannelFactory, MessageFactory


class TestFieldTrackerMixin:
    """
    Tests for change tracking.

    Why it matters: the channel version counter and message edit history
    both depend on knowing what changed since the last load or save.
    """

    def test_loaded_instance_has_no_changes(self, db):
        channel = Channel.objects.get(pk=ChannelFactory(name="General").pk)

        assert channel.has_changed() is False
        assert channel.changed_fields() == set()
        assert channel.loaded_value("name") == "General"

    def test_change_is_detected(self, db):
        channel = Channel.objects.get(pk=ChannelFactory(name="General").pk)

        channel.name = "Random"

        assert channel.has_changed("name") is True
        assert channel.has_changed("archived") is False
        assert channel.changed_fields() == {"name"}
        assert channel.loaded_value("name") == "General"

    def test_save_resets_snapshot(self, db):
        channel = ChannelFactory(name="General")

        channel.name = "Random"
        channel.save()

        assert channel.has_changed() is False
        assert channel.loaded_value("name") == "Random"

    def test_foreign_keys_tracked_by_attname(self, db):
        channel = ChannelFactory()
        other = ChannelFactory()

        channel.owner_id = other.owner_id

        assert channel.changed_fields() == {"owner_id"}

    def test_deferred_fields_are_skipped(self, db):
        message = MessageFactory(text="hello")

        deferred = Message.objects.only("id").get(pk=message.pk)

        assert deferred.loaded_value("text") is None
        assert deferred.has_changed() is False

    def test_loaded_value_default(self, db):
        channel = ChannelFactory()

        assert channel.loaded_value("unknown", default="fallback") == "fallback"
