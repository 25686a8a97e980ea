"""
Chat application configuration.

This app provides the chat system with:
- Private, p2p, internal and public channels
- Owner/admin/member permissions
- Message history on edit and configurable hard or soft removal
- Read tracking, mute and realtime pushes over websockets
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    def ready(self):
        """Connect the versioning and cascade signals."""
        from chat import signals  # noqa: F401
