"""
Django signals for the chat app.

Handlers:
- Record the previous text of an edited message (pre_save on Message)
- Schedule deletion of a deleted channel's messages (post_delete on Channel)

Usage:
    Signals are automatically connected when the app is ready.
    See apps.py for the import that triggers connection.
"""

import logging

from django.db.models.signals import post_delete, pre_save
from django.dispatch import receiver

from chat.conf import get_chat_settings
from chat.models import Channel, Message
from chat.services.background import BackgroundTasks
from chat.services.versioning import MessageVersioning

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Message)
def record_message_version(sender, instance, raw=False, **kwargs):
    """
    Push the previous text into the message history when it changed.

    Args:
        sender: The Message model class
        instance: The Message about to be saved
        raw: True when loading fixtures; history is left untouched then
    """
    if raw:
        return

    if MessageVersioning(get_chat_settings()).apply(instance):
        logger.debug(f"Recorded previous version of message {instance.pk}")


@receiver(post_delete, sender=Channel)
def delete_messages_of_channel(sender, instance, **kwargs):
    """
    Schedule removal of the deleted channel's messages.

    Message.channel has no database cascade, so the messages would
    otherwise be left behind.
    """
    from chat.tasks import delete_channel_messages

    BackgroundTasks(logger).schedule(delete_channel_messages, str(instance.pk))
