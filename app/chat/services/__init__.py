"""
Chat services.

Modules:
    channels: ChannelResolver, ChannelStateManager
    messages: MessageService (send / edit)
    versioning: MessageVersioning (edit history)
    previews: PreviewBuilder (channel list previews)
    notifications: ChannelNotifier (realtime fan-out)
    background: BackgroundTasks (best-effort Celery dispatch)

Usage:
    from chat.services import ChannelStateManager, MessageService

    MessageService().send_to_users(request.user, ["42"], "Hello!")
"""

from chat.services.background import BackgroundTasks
from chat.services.channels import ChannelResolver, ChannelStateManager
from chat.services.messages import MessageService
from chat.services.notifications import ChannelNotifier
from chat.services.previews import PreviewBuilder
from chat.services.versioning import MessageVersioning

__all__ = [
    "BackgroundTasks",
    "ChannelResolver",
    "ChannelStateManager",
    "MessageService",
    "ChannelNotifier",
    "PreviewBuilder",
    "MessageVersioning",
]
