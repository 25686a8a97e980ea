"""
Message sending and editing.

Send flow:
    1. (send_to_users only) resolve the channel for the recipients
    2. persist the message
    3. publish it to the channel's websocket groups
    4. schedule touch + mark seen for the sender (best effort)

Edits only change the text; the previous text is archived by the
pre_save versioning hook (chat.signals).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from chat.models import Message, MessageType
from chat.policies import is_authenticated
from chat.repositories import DjangoMessageRepository, MessageRepository
from chat.serializers import MessageSerializer
from chat.services.background import BackgroundTasks
from chat.services.channels import ChannelResolver
from chat.services.notifications import ChannelNotifier
from core.services import BaseService

if TYPE_CHECKING:
    from chat.models import Channel


class MessageService(BaseService):
    """
    Create and edit messages.

    Args:
        resolver: Channel resolver for messages addressed to users
        notifier: Realtime fan-out
        background: Scheduler for best-effort follow-up tasks
        repository: Message storage
    """

    def __init__(
        self,
        resolver: ChannelResolver | None = None,
        notifier: ChannelNotifier | None = None,
        background: BackgroundTasks | None = None,
        repository: MessageRepository | None = None,
    ):
        self.resolver = resolver or ChannelResolver()
        self.notifier = notifier or ChannelNotifier()
        self.background = background or BackgroundTasks(self.get_logger())
        self.repository = repository or DjangoMessageRepository()

    def send(
        self,
        channel: Channel,
        sender,
        text: str,
        message_type: str = MessageType.MESSAGE,
    ) -> Message:
        """
        Post a message to an existing channel.

        Args:
            channel: Target channel
            sender: Author, or None/AnonymousUser for guests
            text: Message body
            message_type: One of MessageType

        Returns:
            The saved message
        """
        from chat.tasks import record_channel_activity

        author = sender if is_authenticated(sender) else None
        message = self.repository.save(
            Message(
                channel=channel,
                sender=author,
                text=text,
                message_type=message_type,
            )
        )

        payload = MessageSerializer(message, context={"expand": {"sender"}}).data
        self.notifier.notify(channel, dict(payload))

        self.background.schedule(
            record_channel_activity,
            str(channel.pk),
            author.pk if author else None,
        )

        self.get_logger().info(
            f"Message {message.pk} sent to channel {channel.pk} "
            f"by {'user ' + str(author.pk) if author else 'guest'}"
        )
        return message

    def send_to_users(
        self,
        sender,
        recipients: Iterable,
        text: str,
        message_type: str = MessageType.MESSAGE,
    ) -> Message:
        """
        Post a message to users, finding or creating their channel first.

        Raises:
            ValidationError: from ChannelResolver.resolve()
        """
        channel = self.resolver.resolve(sender, recipients)
        return self.send(channel, sender, text, message_type)

    def edit(self, message: Message, text: str) -> Message:
        message.text = text
        return self.repository.save(message)
