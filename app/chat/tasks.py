"""
Celery tasks for chat app.

This module defines async tasks for:
- Channel bookkeeping after a message was sent (touch + mark seen)
- Deleting the messages of a deleted channel

Both run best effort: database failures are logged, never retried into
the request that scheduled them.

Related files:
    - services/background.py: BackgroundTasks (scheduling)
    - services/channels.py: ChannelStateManager
    - signals.py: schedules delete_channel_messages on channel delete

Usage:
    from chat.tasks import record_channel_activity

    record_channel_activity.delay(str(channel.pk), user.pk)
"""

import logging

from celery import shared_task
from django.contrib.auth import get_user_model
from django.db import DatabaseError

logger = logging.getLogger(__name__)


@shared_task
def record_channel_activity(channel_id: str, user_id: int | None = None) -> bool:
    """
    Touch a channel and mark it seen by the sender.

    Both changes are written with a single save.

    Args:
        channel_id: Channel that received a message
        user_id: Sender, or None for guests (touch only)

    Returns:
        True if the channel was updated
    """
    from chat.repositories import DjangoChannelRepository
    from chat.services.channels import ChannelStateManager

    repository = DjangoChannelRepository()

    try:
        channel = repository.find_by_id(channel_id)
        if channel is None:
            logger.warning(f"Channel {channel_id} not found for activity update")
            return False

        user = None
        if user_id is not None:
            user = get_user_model().objects.filter(pk=user_id).first()

        manager = ChannelStateManager(repository=repository)
        manager.touch(channel, save=False)
        if user is not None:
            manager.mark_seen(channel, user, save=False)
        repository.save(channel)
    except DatabaseError:
        logger.exception(f"Failed to record activity on channel {channel_id}")
        return False

    return True


@shared_task
def delete_channel_messages(channel_id: str) -> int:
    """
    Delete every message of a (deleted) channel.

    Args:
        channel_id: Channel whose messages should go

    Returns:
        Number of deleted messages
    """
    from chat.repositories import DjangoMessageRepository, MessageQuery

    try:
        deleted = DjangoMessageRepository().delete_many(
            MessageQuery(channel_id=channel_id)
        )
    except DatabaseError:
        logger.exception(f"Failed to delete messages of channel {channel_id}")
        return 0

    logger.info(f"Deleted {deleted} message(s) of channel {channel_id}")
    return deleted
