"""
Chat system models.

This module defines the data models for the chat system:
- Channels of four kinds (private, p2p, internal, public)
- Per-user membership state (admin flag, mute flag, last seen)
- Messages with an optional bounded edit history

Models:
    Channel: Container for messages, owned by a user
    ChannelMember: One user's membership in a channel
    Message: Individual message within a channel

Design Decisions:
    - The owner is implicitly an admin member; a membership row for the
      owner is only created when owner state (seen/mute) must be stored
    - Channel keeps a user-id index over its members so lookups are O(1)
      and duplicate users can never be staged twice
    - Channel.version is bumped whenever a tracked field or the membership
      collection changes
    - Message.channel has no database-level cascade; deleting a channel
      schedules a task that deletes its messages (see chat.tasks)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F

from core.model_mixins import FieldTrackerMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class ChannelType(models.TextChoices):
    """
    Kind of channel.

    PRIVATE: Owner plus explicit members (multi-party direct messages)
    P2P: Two-party direct channel
    INTERNAL: Visible to every authenticated user
    PUBLIC: Visible to everyone, including anonymous visitors
    """

    PRIVATE = "private", "Private"
    INTERNAL = "internal", "Internal"
    PUBLIC = "public", "Public"
    P2P = "p2p", "Peer to peer"


# Types whose messages are broadcast to every subscriber of the type
BROADCAST_CHANNEL_TYPES = (ChannelType.PUBLIC, ChannelType.INTERNAL)


class MessageType(models.TextChoices):
    """Kind of message. Only MESSAGE counts for channel previews."""

    MESSAGE = "message", "Message"
    INFO = "info", "Info"
    WARNING = "warning", "Warning"
    DANGER = "danger", "Danger"


class Channel(UUIDPrimaryKeyMixin, FieldTrackerMixin, BaseModel):
    """
    Conversation container with an owner, a type and members.

    Fields:
        name: Optional display name (trimmed on save)
        owner: User who created the channel; implicitly an admin
        channel_type: private, p2p, internal or public
        archived: Hidden from channel listings when True
        last_message_at: When the last message was sent
        version: Incremented on every save that changes something

    Membership:
        Members are ChannelMember rows. Code that changes membership goes
        through the staging helpers below (stage_member, remove_member,
        mark_member_modified) and persists through
        chat.repositories.DjangoChannelRepository.save(), which writes the
        channel and the staged rows in one transaction.
    """

    tracked_fields = (
        "name",
        "owner_id",
        "channel_type",
        "archived",
        "last_message_at",
    )

    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Optional display name",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="owned_chat_channels",
        help_text="User who owns the channel (implicit admin)",
    )
    channel_type = models.CharField(
        max_length=10,
        choices=ChannelType.choices,
        default=ChannelType.PRIVATE,
        db_index=True,
        help_text="Kind of channel",
    )
    archived = models.BooleanField(
        default=False,
        help_text="Archived channels are hidden from listings",
    )
    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Timestamp of the most recent message",
    )
    version = models.PositiveIntegerField(
        default=1,
        help_text="Incremented whenever the channel or its members change",
    )

    class Meta:
        db_table = "chat_channel"
        ordering = ["-last_message_at", "-created_at"]
        indexes = [
            models.Index(
                fields=["channel_type", "archived"],
                name="chat_channel_type_arch_idx",
            ),
            models.Index(
                fields=["-last_message_at"],
                name="chat_channel_last_msg_idx",
            ),
        ]
        permissions = [
            ("access_chat", "Can access the chat module"),
        ]

    def __str__(self) -> str:
        if self.name:
            return f"{self.get_channel_type_display()}: {self.name}"
        return f"{self.get_channel_type_display()}({self.pk})"

    @property
    def is_broadcast(self) -> bool:
        """True for public and internal channels."""
        return self.channel_type in BROADCAST_CHANNEL_TYPES

    # -------------------------------------------------------------------------
    # Membership index
    # -------------------------------------------------------------------------

    def membership_index(self) -> dict:
        """
        Return the user-id -> ChannelMember index, loading it once.

        Uses prefetched members when available. If duplicate rows for a
        user ever exist, the first one (insertion order) wins.
        """
        index = getattr(self, "_membership_index", None)
        if index is None:
            index = {}
            if not self._state.adding:
                for member in self.members.all():
                    index.setdefault(member.user_id, member)
            self._membership_index = index
        return index

    def members_list(self) -> list[ChannelMember]:
        """Members in insertion order, staged additions included."""
        return list(self.membership_index().values())

    def member_user_ids(self) -> list:
        return list(self.membership_index().keys())

    def get_member(self, user: User | None) -> ChannelMember | None:
        """Return the explicit membership of ``user``, if any."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return self.membership_index().get(user.pk)

    def stage_member(self, member: ChannelMember) -> ChannelMember:
        """
        Add a membership to the index and mark it for persistence.

        A user that is already indexed keeps its existing membership,
        which is returned instead.
        """
        index = self.membership_index()
        existing = index.get(member.user_id)
        if existing is not None:
            return existing
        member.channel = self
        index[member.user_id] = member
        self.mark_member_modified(member)
        return member

    def remove_member(self, member: ChannelMember) -> None:
        """Drop a membership from the index and mark it for deletion."""
        self.membership_index().pop(member.user_id, None)
        self._pending_members().pop(member.user_id, None)
        if member.pk is not None:
            self._removed_members().append(member)
        self._members_modified = True

    def mark_member_modified(self, member: ChannelMember) -> None:
        """Record that ``member`` must be written on the next save."""
        self._pending_members()[member.user_id] = member
        self._members_modified = True

    @property
    def members_modified(self) -> bool:
        return getattr(self, "_members_modified", False)

    def pending_members(self) -> list[ChannelMember]:
        return list(self._pending_members().values())

    def removed_members(self) -> list[ChannelMember]:
        return list(self._removed_members())

    def clear_member_changes(self) -> None:
        self._pending = {}
        self._removed = []
        self._members_modified = False

    def _pending_members(self) -> dict:
        if getattr(self, "_pending", None) is None:
            self._pending = {}
        return self._pending

    def _removed_members(self) -> list:
        if getattr(self, "_removed", None) is None:
            self._removed = []
        return self._removed

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self, *args, **kwargs):
        """
        Save the channel, bumping version when anything changed.

        Uses an F() expression so concurrent saves each count, then reads
        the stored value back.
        """
        self.name = (self.name or "").strip()

        if self._state.adding or not (self.has_changed() or self.members_modified):
            super().save(*args, **kwargs)
            return

        previous_version = self.version
        self.version = F("version") + 1
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = {*update_fields, "version", "updated_at"}
        try:
            super().save(*args, **kwargs)
        except Exception:
            # A retried save must not stack F() expressions
            self.version = previous_version
            raise
        self.refresh_from_db(fields=["version"])


class ChannelMember(BaseModel):
    """
    A user's membership in a channel.

    Fields:
        channel: Channel this membership belongs to
        user: Member
        is_admin: May edit, archive and invite
        mute: Does not receive realtime pushes
        last_seen: Last time the member read the channel
    """

    channel = models.ForeignKey(
        Channel,
        on_delete=models.CASCADE,
        related_name="members",
        help_text="Channel this membership belongs to",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_memberships",
        help_text="Member user",
    )
    is_admin = models.BooleanField(
        default=False,
        help_text="Whether the member can administer the channel",
    )
    mute = models.BooleanField(
        default=False,
        help_text="Muted members receive no realtime notifications",
    )
    last_seen = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the member last read the channel",
    )

    class Meta:
        db_table = "chat_channel_member"
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["channel", "user"],
                name="unique_channel_member",
            ),
        ]
        indexes = [
            models.Index(
                fields=["user", "channel"],
                name="chat_member_user_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Member(channel={self.channel_id}, user={self.user_id})"


class Message(UUIDPrimaryKeyMixin, FieldTrackerMixin, BaseModel):
    """
    A message posted to a channel.

    Fields:
        text: Message body (trimmed; empty only after soft removal)
        message_type: message, info, warning or danger
        sender: Author; NULL for system and anonymous messages
        channel: Channel the message belongs to
        removed: Soft-removal flag
        versions: Previous texts, most recent first:
            [{"text": "...", "date": "<ISO 8601>"}, ...]

    Note:
        text and updated_at are tracked so the pre_save versioning hook
        can read the values as they were before the edit.
    """

    tracked_fields = ("text", "updated_at")

    text = models.TextField(
        blank=True,
        help_text="Message body",
    )
    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.MESSAGE,
        help_text="Kind of message",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="chat_messages",
        help_text="Author (NULL for system or anonymous messages)",
    )
    channel = models.ForeignKey(
        Channel,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="messages",
        help_text="Channel this message belongs to",
    )
    removed = models.BooleanField(
        default=False,
        help_text="Whether the message was soft-removed",
    )
    versions = models.JSONField(
        default=list,
        blank=True,
        help_text="Previous texts, most recent first",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["channel", "-created_at"],
                name="chat_msg_channel_created_idx",
            ),
        ]

    def __str__(self) -> str:
        preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        return f"Message({self.pk}): {preview}"

    def save(self, *args, **kwargs):
        self.text = (self.text or "").strip()
        super().save(*args, **kwargs)
