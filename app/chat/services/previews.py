"""
Channel previews for channel lists.

A preview summarizes a channel from one viewer's point of view:

    {
        "id": "<channel id>",
        "type": "p2p",
        "name": "Ada & Grace",
        "read": false,
        "muted": false,
        "last_message": {"sender": {...}, "text": "hi", "created_at": "..."}
    }

Naming:
    explicit name -> itself
    public/internal -> the type ("public", "internal")
    otherwise -> first names of up to three other members joined with
        " & ", "..." appended when more named members exist, "Untitled"
        when nobody has a name

Read status:
    No membership -> unread. Otherwise read when there is no message yet
    or the member's last_seen is strictly after the last message.

A failing channel does not break the list: build_many() substitutes
{"id", "name": None, "message": "Not available"} and logs the error.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from chat.constants import PREVIEW_CONFIG
from chat.models import ChannelMember, MessageType
from chat.policies import is_authenticated, is_owner
from chat.repositories import DjangoMessageRepository, MessageQuery, MessageRepository
from chat.serializers import LastMessageSerializer
from core.services import BaseService

if TYPE_CHECKING:
    from chat.models import Channel, Message


class PreviewBuilder(BaseService):
    """
    Build channel previews for a viewer.

    Args:
        message_repository: Message storage; defaults to the Django ORM one
    """

    def __init__(self, message_repository: MessageRepository | None = None):
        self.message_repository = message_repository or DjangoMessageRepository()

    def viewer_membership(self, channel: Channel, viewer) -> ChannelMember | None:
        """
        The viewer's membership; the owner always has one.

        The owner's membership is synthesized in memory (never saved) when
        no row exists yet.
        """
        member = channel.get_member(viewer)
        if member is None and is_owner(channel, viewer):
            member = ChannelMember(channel=channel, user=viewer, is_admin=True)
        return member

    def resolve_name(self, channel: Channel, viewer) -> str:
        if channel.name:
            return channel.name
        if channel.is_broadcast:
            return channel.channel_type

        viewer_id = viewer.pk if is_authenticated(viewer) else None
        names = [
            member.user.first_name
            for member in channel.members_list()
            if member.user_id != viewer_id and member.user.first_name
        ]
        shown = names[: PREVIEW_CONFIG.MAX_NAMES]
        if not shown:
            return PREVIEW_CONFIG.UNTITLED

        label = PREVIEW_CONFIG.NAME_SEPARATOR.join(shown)
        if len(names) > len(shown):
            label += PREVIEW_CONFIG.TRUNCATION_SUFFIX
        return label

    def last_message(self, channel: Channel) -> Message | None:
        return self.message_repository.find_latest(
            MessageQuery(
                channel_id=channel.pk,
                message_type=MessageType.MESSAGE,
                include_removed=False,
            )
        )

    def build(self, channel: Channel, viewer) -> dict:
        member = self.viewer_membership(channel, viewer)
        message = self.last_message(channel)

        read = member is not None and (
            message is None
            or (member.last_seen is not None and member.last_seen > message.created_at)
        )

        return {
            "id": str(channel.pk),
            "type": channel.channel_type,
            "name": self.resolve_name(channel, viewer),
            "read": read,
            "muted": bool(member and member.mute),
            "last_message": LastMessageSerializer(message).data if message else None,
        }

    def build_many(self, channels: Iterable[Channel], viewer) -> list[dict]:
        """Build previews, degrading per channel instead of failing the list."""
        previews = []
        for channel in channels:
            try:
                previews.append(self.build(channel, viewer))
            except Exception:
                self.get_logger().exception(f"Preview failed for channel {channel.pk}")
                previews.append(self.unavailable(channel))
        return previews

    def unavailable(self, channel: Channel) -> dict:
        return {
            "id": str(channel.pk),
            "name": None,
            "message": PREVIEW_CONFIG.UNAVAILABLE_MESSAGE,
        }
