"""
Edit history for messages.

When the text of an existing message changes, the previous text and the
time it was last updated are pushed to the front of Message.versions.
The list is capped by ChatSettings.max_message_versions:

    cap >= 0 and len(versions) >= cap  -> keep the first ``cap`` entries
    cap < 0                            -> unbounded

so a cap of 0 keeps no history at all.

Applied from the pre_save signal in chat.signals, where the values loaded
from the database are still available through FieldTrackerMixin.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chat.conf import ChatSettings
    from chat.models import Message


class MessageVersioning:
    """
    Push the previous text of an edited message into its history.

    Args:
        config: Chat settings (versioning switch and cap)
    """

    def __init__(self, config: ChatSettings):
        self.config = config

    def apply(self, message: Message) -> bool:
        """
        Record the previous version of ``message`` if its text changed.

        Returns:
            True if a version was recorded
        """
        if not self.config.versioning_enabled:
            return False
        if message._state.adding or not message.has_changed("text"):
            return False

        previous_date = message.loaded_value("updated_at")
        entry = {
            "text": message.loaded_value("text"),
            "date": previous_date.isoformat() if previous_date else None,
        }
        message.versions = self.cap([entry, *(message.versions or [])])
        return True

    def cap(self, versions: list) -> list:
        limit = self.config.max_message_versions
        if 0 <= limit <= len(versions):
            return versions[:limit]
        return versions
