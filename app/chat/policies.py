"""
Access policy predicates for channels and messages.

Pure functions over already loaded objects: no queries beyond the
channel's membership index, no side effects. DRF permission classes
(chat.permissions) and services build on them.

Rules:
    can_access: public -> anyone; internal -> authenticated users;
        private/p2p -> owner or member
    is_admin: owner, or member flagged is_admin
    is_owner: user is the channel owner
    is_message_author: authenticated user is the message sender
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from chat.models import ChannelType

if TYPE_CHECKING:
    from chat.models import Channel, Message


def is_authenticated(user) -> bool:
    return user is not None and bool(getattr(user, "is_authenticated", False))


def is_owner(channel: Channel, user) -> bool:
    return is_authenticated(user) and channel.owner_id == user.pk


def is_member(channel: Channel, user) -> bool:
    """Explicit membership only; the owner is not a member by default."""
    return channel.get_member(user) is not None


def is_admin(channel: Channel, user) -> bool:
    if is_owner(channel, user):
        return True
    member = channel.get_member(user)
    return member is not None and member.is_admin


def can_access(channel: Channel, user) -> bool:
    if channel.channel_type == ChannelType.PUBLIC:
        return True
    if channel.channel_type == ChannelType.INTERNAL:
        return is_authenticated(user)
    return is_owner(channel, user) or is_member(channel, user)


def is_message_author(message: Message, user) -> bool:
    """
    Whether ``user`` wrote ``message``.

    System and anonymous messages (no sender) have no author, so nobody
    can edit or remove them through the API.
    """
    return (
        message.sender_id is not None
        and is_authenticated(user)
        and message.sender_id == user.pk
    )
