"""
Runtime configuration for the chat module.

Values come from the CHAT dict in Django settings (populated from the
environment by django-environ) and are frozen into a ChatSettings object.
Components that depend on them receive the object in their constructor
instead of reading settings themselves, so tests can pass any combination
without override_settings.

Settings keys:
    GRANT_DEFAULT_ACCESS: every authenticated user may use the chat API
        without the chat.access_chat permission
    HARD_DELETE_MESSAGES: removing a message deletes the row instead of
        clearing its text and flagging it removed
    VERSIONING_ENABLED: keep the previous text of edited messages
    MAX_MESSAGE_VERSIONS: how many previous texts to keep; 0 keeps none,
        a negative value keeps all

Usage:
    from chat.conf import ChatSettings, get_chat_settings

    config = get_chat_settings()
    manager = ChannelStateManager(config=config)

    # In tests
    versioning = MessageVersioning(ChatSettings(max_message_versions=5))
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class ChatSettings:
    """Immutable snapshot of the chat configuration."""

    grant_default_access: bool = True
    hard_delete_messages: bool = False
    versioning_enabled: bool = True
    max_message_versions: int = 10

    @classmethod
    def from_dict(cls, values: dict) -> ChatSettings:
        """
        Build settings from a CHAT-style dict.

        Missing keys keep their defaults.
        """
        defaults = cls()
        return cls(
            grant_default_access=bool(
                values.get("GRANT_DEFAULT_ACCESS", defaults.grant_default_access)
            ),
            hard_delete_messages=bool(
                values.get("HARD_DELETE_MESSAGES", defaults.hard_delete_messages)
            ),
            versioning_enabled=bool(
                values.get("VERSIONING_ENABLED", defaults.versioning_enabled)
            ),
            max_message_versions=int(
                values.get("MAX_MESSAGE_VERSIONS", defaults.max_message_versions)
            ),
        )


def get_chat_settings() -> ChatSettings:
    """
    Read the current chat settings.

    Not cached, so override_settings(CHAT=...) is picked up immediately.
    """
    return ChatSettings.from_dict(getattr(settings, "CHAT", {}))
