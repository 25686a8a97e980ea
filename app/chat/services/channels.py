"""
Channel resolution and channel state management.

ChannelResolver:
    Finds or creates the channel a direct message goes to.

    Recipient handling:
        - empty ids, duplicates and the sender's own id are dropped
        - nothing left -> EMPTY_RECIPIENTS
        - anonymous sender with several recipients ->
          UNAUTHORIZED_GUEST_MULTIPLE_RECEIVERS
        - ids of users that do not exist -> UNKNOWN_RECIPIENTS

    Reuse:
        - one recipient: a p2p channel between the two users
        - several recipients: a private channel owned by the sender with
          the same number of members and at least one requested recipient
        - anonymous sender: never reused; a new private channel owned by
          the recipient, without members

ChannelStateManager:
    Mutates the per-user membership state (admin, mute, last seen) and the
    channel's last message time, and removes messages according to the
    configured remove mode.

Error codes:
    EMPTY_RECIPIENTS, UNAUTHORIZED_GUEST_MULTIPLE_RECEIVERS,
    INVALID_RECIPIENT, UNKNOWN_RECIPIENTS, CHANNEL_CANNOT_LEAVE
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from chat.conf import ChatSettings, get_chat_settings
from chat.models import Channel, ChannelMember, ChannelType
from chat.policies import is_authenticated, is_owner
from chat.repositories import (
    ChannelQuery,
    ChannelRepository,
    DjangoChannelRepository,
)
from core.exceptions import ValidationError
from core.services import BaseService

if TYPE_CHECKING:
    from datetime import datetime

    from chat.models import Message


class ChannelResolver(BaseService):
    """
    Resolve (find or create) the channel for a message sent to users.

    Args:
        repository: Channel storage; defaults to the Django ORM repository
    """

    def __init__(self, repository: ChannelRepository | None = None):
        self.repository = repository or DjangoChannelRepository()

    def normalize_recipients(self, sender, recipients: Iterable | None) -> list:
        """
        Clean a raw recipient list.

        Returns:
            Recipient primary keys in request order, without blanks,
            duplicates or the sender

        Raises:
            ValidationError: INVALID_RECIPIENT for ids that cannot be a user key
        """
        pk_field = get_user_model()._meta.pk
        sender_id = sender.pk if is_authenticated(sender) else None

        normalized = []
        for raw in recipients or []:
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            try:
                user_id = pk_field.to_python(raw.strip() if isinstance(raw, str) else raw)
            except DjangoValidationError:
                raise ValidationError(
                    _("Invalid recipient id"),
                    error_code="INVALID_RECIPIENT",
                    details={"recipient": str(raw)},
                )
            if user_id == sender_id or user_id in normalized:
                continue
            normalized.append(user_id)
        return normalized

    def resolve(self, sender, recipients: Iterable | None) -> Channel:
        """
        Find or create the channel for ``sender`` writing to ``recipients``.

        Args:
            sender: Authenticated user, or None/AnonymousUser for guests
            recipients: Raw recipient ids

        Returns:
            Existing or newly created (persisted) channel

        Raises:
            ValidationError: see module docstring for error codes
        """
        recipient_ids = self.normalize_recipients(sender, recipients)
        if not recipient_ids:
            raise ValidationError(
                _("At least one recipient is required"),
                error_code="EMPTY_RECIPIENTS",
            )

        anonymous = not is_authenticated(sender)
        if anonymous and len(recipient_ids) > 1:
            raise ValidationError(
                _("Guests can only write to a single recipient"),
                error_code="UNAUTHORIZED_GUEST_MULTIPLE_RECEIVERS",
            )

        missing = set(recipient_ids) - self.repository.existing_user_ids(recipient_ids)
        if missing:
            raise ValidationError(
                _("Unknown recipients"),
                error_code="UNKNOWN_RECIPIENTS",
                details={"recipients": sorted(str(user_id) for user_id in missing)},
            )

        if anonymous:
            return self._create(
                owner_id=recipient_ids[0],
                channel_type=ChannelType.PRIVATE,
                member_ids=(),
            )

        existing = self.repository.find_one(self.reuse_query(sender, recipient_ids))
        if existing is not None:
            self.get_logger().debug(
                f"Reusing {existing.channel_type} channel {existing.pk} for user {sender.pk}"
            )
            return existing

        return self._create(
            owner_id=sender.pk,
            channel_type=ChannelType.P2P if len(recipient_ids) == 1 else ChannelType.PRIVATE,
            member_ids=recipient_ids,
        )

    def reuse_query(self, sender, recipient_ids: list) -> ChannelQuery:
        """Query matching a channel that can be reused for these recipients."""
        if len(recipient_ids) == 1:
            # Owner and members together are exactly the pair
            pair = (sender.pk, recipient_ids[0])
            return ChannelQuery(
                channel_type=ChannelType.P2P,
                owner_ids=pair,
                only_member_ids=pair,
                participant_ids=pair,
            )
        # Size plus one overlap, not an exact member set
        return ChannelQuery(
            channel_type=ChannelType.PRIVATE,
            owner_ids=(sender.pk,),
            member_ids=tuple(recipient_ids),
            min_members=len(recipient_ids),
            max_members=len(recipient_ids),
        )

    def _create(self, owner_id, channel_type: str, member_ids: Iterable) -> Channel:
        channel = Channel(owner_id=owner_id, channel_type=channel_type)
        for user_id in member_ids:
            channel.stage_member(ChannelMember(user_id=user_id, is_admin=False))
        self.repository.save(channel)

        self.get_logger().info(
            f"Created {channel_type} channel {channel.pk} owned by user {owner_id}"
        )
        return channel


class ChannelStateManager(BaseService):
    """
    Per-user channel state and message removal.

    Every mutating method persists through the repository unless it takes
    ``save=False``, in which case the caller saves the channel later.

    Args:
        config: Chat settings; read from Django settings when omitted
        repository: Channel storage; defaults to the Django ORM repository
        clock: Returns the current time (overridable in tests)
    """

    def __init__(
        self,
        config: ChatSettings | None = None,
        repository: ChannelRepository | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.config = config or get_chat_settings()
        self.repository = repository or DjangoChannelRepository()
        self.clock = clock

    def create(
        self,
        owner,
        channel_type: str = ChannelType.PRIVATE,
        name: str = "",
        entries: Iterable[dict] = (),
    ) -> Channel:
        """
        Create a channel owned by ``owner`` with the given members.

        Args:
            entries: Dicts with "user" (User) and optional "is_admin" (bool);
                a user listed twice keeps the first entry
        """
        channel = Channel(owner=owner, channel_type=channel_type, name=name)
        for entry in entries:
            channel.stage_member(
                ChannelMember(
                    user=entry["user"],
                    is_admin=bool(entry.get("is_admin", False)),
                )
            )
        self.repository.save(channel)

        self.get_logger().info(
            f"User {owner.pk} created {channel_type} channel {channel.pk} "
            f"with {len(channel.members_list())} member(s)"
        )
        return channel

    def touch(self, channel: Channel, save: bool = True) -> Channel:
        """Set the channel's last message time to now."""
        channel.last_message_at = self.clock()
        if save:
            self.repository.save(channel)
        return channel

    def ensure_membership(self, channel: Channel, user) -> ChannelMember | None:
        """
        Return the membership of ``user``, creating the owner's on demand.

        Idempotent: the owner's synthesized membership is staged once and
        returned by every later call.

        Returns:
            The membership, or None for anonymous users and non-members
        """
        if not is_authenticated(user):
            return None

        member = channel.get_member(user)
        if member is not None:
            return member

        if is_owner(channel, user):
            return channel.stage_member(ChannelMember(user=user, is_admin=True))
        return None

    def mark_seen(self, channel: Channel, user, save: bool = True) -> bool:
        """
        Record that ``user`` has read the channel up to now.

        Returns:
            False when the user has no (and gets no) membership
        """
        member = self.ensure_membership(channel, user)
        if member is None:
            return False

        member.last_seen = self.clock()
        channel.mark_member_modified(member)
        if save:
            self.repository.save(channel)
        return True

    def mute(self, channel: Channel, user) -> bool:
        """
        Stop realtime pushes of this channel to ``user``.

        Returns:
            False when the user has no (and gets no) membership
        """
        member = self.ensure_membership(channel, user)
        if member is None:
            return False

        member.mute = True
        channel.mark_member_modified(member)
        self.repository.save(channel)
        return True

    def invite(self, channel: Channel, entries: Iterable[dict]) -> Channel:
        """
        Add members or update their admin flag.

        Args:
            entries: Dicts with "user" (User) and optional "is_admin" (bool)
        """
        index = channel.membership_index()
        for entry in entries:
            user = entry["user"]
            is_admin = bool(entry.get("is_admin", False))

            member = index.get(user.pk)
            if member is None:
                channel.stage_member(ChannelMember(user=user, is_admin=is_admin))
            elif member.is_admin != is_admin:
                member.is_admin = is_admin
                channel.mark_member_modified(member)

        changed = len(channel.pending_members())
        self.repository.save(channel)
        self.get_logger().info(f"Invite updated {changed} member(s) of channel {channel.pk}")
        return channel

    def leave(self, channel: Channel, user) -> Channel:
        """
        Remove the caller's membership.

        Raises:
            ValidationError: CHANNEL_CANNOT_LEAVE for the owner and anonymous users
        """
        if not is_authenticated(user) or is_owner(channel, user):
            raise ValidationError(
                _("The owner cannot leave the channel"),
                error_code="CHANNEL_CANNOT_LEAVE",
            )

        member = channel.get_member(user)
        if member is not None:
            channel.remove_member(member)
        self.repository.save(channel)
        return channel

    def set_archived(self, channel: Channel, archived: bool) -> Channel:
        channel.archived = archived
        self.repository.save(channel)
        return channel

    def update(self, channel: Channel, name: str | None = None) -> Channel:
        """Edit channel metadata. The type is fixed at creation."""
        if name is not None:
            channel.name = name
        self.repository.save(channel)
        return channel

    def delete(self, channel: Channel) -> None:
        """
        Delete the channel.

        Its messages are removed afterwards by the post_delete handler in
        chat.signals.
        """
        channel_id = channel.pk
        self.repository.delete(channel)
        self.get_logger().info(f"Deleted channel {channel_id}")

    def remove_message(self, message: Message) -> Message | None:
        """
        Remove a message according to the configured remove mode.

        Returns:
            None after a hard delete, the soft-removed message otherwise
        """
        if self.config.hard_delete_messages:
            message.delete()
            return None

        message.text = ""
        message.removed = True
        message.save()
        return message
