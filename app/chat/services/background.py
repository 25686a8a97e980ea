"""
Best-effort scheduling of background side effects.

Channel bookkeeping after a send (touch + mark seen) and the message
cascade after a channel is deleted must never fail the request that
triggered them. BackgroundTasks enqueues Celery tasks and reports any
scheduling failure to the logger it was given instead of raising.

Usage:
    from chat.services.background import BackgroundTasks
    from chat.tasks import record_channel_activity

    BackgroundTasks().schedule(record_channel_activity, str(channel.pk), user.pk)
"""

from __future__ import annotations

import logging


class BackgroundTasks:
    """
    Fire-and-forget Celery dispatcher.

    Args:
        logger: Receives scheduling failures; defaults to this module's logger
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def schedule(self, task, *args, **kwargs) -> bool:
        """
        Enqueue ``task`` with the given arguments.

        Returns:
            True if the task was handed to Celery, False if that failed
        """
        try:
            task.delay(*args, **kwargs)
        except Exception:
            # Broker outages surface as several unrelated exception types
            self.logger.exception(
                f"Failed to schedule background task {getattr(task, 'name', task)!s} "
                f"with args={args!r}"
            )
            return False
        return True
