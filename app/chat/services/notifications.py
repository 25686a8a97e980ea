"""
Realtime fan-out of new messages.

Groups on the channel layer (see chat.constants.REALTIME_CONFIG):

    chat.public         every websocket, anonymous ones included
    chat.internal       every authenticated websocket
    chat.user.<id>      the websockets of one user

Public and internal channels publish once to their type's group. Private
and p2p channels publish to the group of every non-muted member and of
the owner, each user once.

Publishing does not wait for delivery. A failing publish is logged and the
remaining groups are still attempted.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from chat.constants import REALTIME_CONFIG, user_group
from chat.models import ChannelType
from core.services import BaseService

if TYPE_CHECKING:
    from chat.models import Channel


class ChannelNotifier(BaseService):
    """
    Publish new messages to the websocket groups that should see them.

    Args:
        publisher: Callable ``(group, event)``; defaults to sending through
            the configured channel layer
    """

    def __init__(self, publisher: Callable[[str, dict], None] | None = None):
        self.publisher = publisher

    def recipient_ids(self, channel: Channel) -> list:
        """Non-muted members, then the owner; no duplicates."""
        user_ids = []
        for member in channel.members_list():
            if not member.mute and member.user_id not in user_ids:
                user_ids.append(member.user_id)
        if channel.owner_id not in user_ids:
            user_ids.append(channel.owner_id)
        return user_ids

    def groups_for(self, channel: Channel) -> list[str]:
        if channel.channel_type == ChannelType.PUBLIC:
            return [REALTIME_CONFIG.PUBLIC_GROUP]
        if channel.channel_type == ChannelType.INTERNAL:
            return [REALTIME_CONFIG.INTERNAL_GROUP]
        return [user_group(user_id) for user_id in self.recipient_ids(channel)]

    def notify(self, channel: Channel, payload: dict) -> list[str]:
        """
        Publish ``payload`` (a serialized message) for ``channel``.

        Returns:
            Groups a publish was attempted for
        """
        event = {"type": REALTIME_CONFIG.MESSAGE_EVENT_TYPE, "message": payload}
        groups = self.groups_for(channel)
        for group in groups:
            try:
                self.publish(group, event)
            except Exception:
                self.get_logger().exception(f"Failed to publish message to {group}")
        return groups

    def publish(self, group: str, event: dict) -> None:
        if self.publisher is not None:
            self.publisher(group, event)
            return

        channel_layer = get_channel_layer()
        if channel_layer is None:
            self.get_logger().warning("No channel layer configured, dropping push")
            return
        async_to_sync(channel_layer.group_send)(group, event)
