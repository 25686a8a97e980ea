"""
Persistence boundary for the chat services.

The services in chat.services talk to storage only through the protocols
below. Queries are plain frozen dataclasses, not ORM objects, so a
repository can be replaced (e.g. by an in-memory fake) without touching
the services.

Protocols:
    ChannelRepository: find_one, find_by_id, save, delete, visible_to,
        existing_user_ids
    MessageRepository: find_latest, find_by_id, save, delete_many

Implementations:
    DjangoChannelRepository, DjangoMessageRepository (Django ORM)

Usage:
    repository = DjangoChannelRepository()
    channel = repository.find_one(
        ChannelQuery(
            channel_type=ChannelType.P2P,
            owner_ids=(alice.pk, bob.pk),
            only_member_ids=(alice.pk, bob.pk),
            participant_ids=(alice.pk, bob.pk),
        )
    )
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count, Exists, F, OuterRef, Prefetch, Q

from chat.models import Channel, ChannelMember, ChannelType, Message

if TYPE_CHECKING:
    from django.db.models import QuerySet


# =============================================================================
# Queries
# =============================================================================


@dataclass(frozen=True)
class ChannelQuery:
    """
    Predicate for channel lookups.

    Empty/None fields do not constrain the result.

    Attributes:
        channel_type: Exact channel type
        owner_ids: Owner must be one of these users
        member_ids: At least one member must be one of these users
        only_member_ids: No member may be outside these users
        participant_ids: Each of these users is the owner or a member
        min_members: Lower bound on the total number of members
        max_members: Upper bound on the total number of members
    """

    channel_type: str | None = None
    owner_ids: tuple = ()
    member_ids: tuple = ()
    only_member_ids: tuple = ()
    participant_ids: tuple = ()
    min_members: int | None = None
    max_members: int | None = None


@dataclass(frozen=True)
class MessageQuery:
    """
    Predicate for message lookups.

    Attributes:
        channel_id: Messages of this channel
        message_type: Exact message type
        include_removed: Whether soft-removed messages match
    """

    channel_id: Any = None
    message_type: str | None = None
    include_removed: bool = True


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class ChannelRepository(Protocol):
    """Storage operations the channel services rely on."""

    def find_one(self, query: ChannelQuery) -> Channel | None:
        """Return the oldest channel matching ``query``, or None."""
        ...

    def find_by_id(self, channel_id: Any) -> Channel | None:
        """Return the channel with this id, or None (also for malformed ids)."""
        ...

    def save(self, channel: Channel) -> Channel:
        """Persist the channel and its staged membership changes."""
        ...

    def delete(self, channel: Channel) -> None:
        """Delete the channel and its memberships."""
        ...

    def visible_to(self, user) -> QuerySet:
        """Non-archived channels ``user`` may list, most recent first."""
        ...

    def existing_user_ids(self, user_ids: Iterable) -> set:
        """Subset of ``user_ids`` that belong to existing users."""
        ...


@runtime_checkable
class MessageRepository(Protocol):
    """Storage operations on messages."""

    def find_latest(self, query: MessageQuery) -> Message | None:
        """Most recently created message matching ``query``."""
        ...

    def find_by_id(self, message_id: Any) -> Message | None:
        ...

    def save(self, message: Message) -> Message:
        ...

    def delete_many(self, query: MessageQuery) -> int:
        """Delete every message matching ``query``; return the count."""
        ...


# =============================================================================
# Django implementations
# =============================================================================


def member_prefetch() -> Prefetch:
    """Prefetch of members with their user and profile."""
    return Prefetch(
        "members",
        queryset=ChannelMember.objects.select_related("user__profile"),
    )


class DjangoChannelRepository:
    """ChannelRepository backed by the Django ORM."""

    def base_queryset(self) -> QuerySet:
        return Channel.objects.select_related("owner__profile").prefetch_related(
            member_prefetch()
        )

    def filter(self, query: ChannelQuery) -> QuerySet:
        """Translate a ChannelQuery into a queryset."""
        queryset = Channel.objects.all()

        if query.channel_type is not None:
            queryset = queryset.filter(channel_type=query.channel_type)

        if query.owner_ids:
            queryset = queryset.filter(owner_id__in=query.owner_ids)

        # Exists() keeps the member join out of the main query so the count
        # below covers all members, not just the matching ones
        if query.member_ids:
            queryset = queryset.filter(
                Exists(
                    ChannelMember.objects.filter(
                        channel=OuterRef("pk"), user_id__in=query.member_ids
                    )
                )
            )

        if query.only_member_ids:
            queryset = queryset.exclude(
                Exists(
                    ChannelMember.objects.filter(channel=OuterRef("pk")).exclude(
                        user_id__in=query.only_member_ids
                    )
                )
            )

        for user_id in query.participant_ids:
            queryset = queryset.filter(
                Q(owner_id=user_id)
                | Exists(
                    ChannelMember.objects.filter(channel=OuterRef("pk"), user_id=user_id)
                )
            )

        if query.min_members is not None or query.max_members is not None:
            queryset = queryset.annotate(member_count=Count("members", distinct=True))
            if query.min_members is not None:
                queryset = queryset.filter(member_count__gte=query.min_members)
            if query.max_members is not None:
                queryset = queryset.filter(member_count__lte=query.max_members)

        return queryset

    def find_one(self, query: ChannelQuery) -> Channel | None:
        channel_id = (
            self.filter(query)
            .order_by("created_at")
            .values_list("pk", flat=True)
            .first()
        )
        if channel_id is None:
            return None
        return self.base_queryset().get(pk=channel_id)

    def find_by_id(self, channel_id: Any) -> Channel | None:
        try:
            return self.base_queryset().filter(pk=channel_id).first()
        except DjangoValidationError:
            return None

    def save(self, channel: Channel) -> Channel:
        with transaction.atomic():
            channel.save()
            for member in channel.removed_members():
                member.delete()
            for member in channel.pending_members():
                member.channel = channel
                member.save()
            channel.clear_member_changes()
        return channel

    def delete(self, channel: Channel) -> None:
        channel.delete()

    def visible_to(self, user) -> QuerySet:
        """
        Channels listed for ``user``.

        Not archived, and either public or (for authenticated users) owned,
        internal, or joined.
        """
        visibility = Q(channel_type=ChannelType.PUBLIC)
        if user is not None and user.is_authenticated:
            visibility |= (
                Q(owner_id=user.pk)
                | Q(channel_type=ChannelType.INTERNAL)
                | Q(
                    Exists(
                        ChannelMember.objects.filter(
                            channel=OuterRef("pk"), user_id=user.pk
                        )
                    )
                )
            )
        return (
            self.base_queryset()
            .filter(visibility, archived=False)
            .order_by(F("last_message_at").desc(nulls_last=True), "-created_at")
        )

    def existing_user_ids(self, user_ids: Iterable) -> set:
        user_ids = list(user_ids)
        if not user_ids:
            return set()
        return set(
            get_user_model()
            .objects.filter(pk__in=user_ids)
            .values_list("pk", flat=True)
        )


class DjangoMessageRepository:
    """MessageRepository backed by the Django ORM."""

    def filter(self, query: MessageQuery) -> QuerySet:
        queryset = Message.objects.all()
        if query.channel_id is not None:
            queryset = queryset.filter(channel_id=query.channel_id)
        if query.message_type is not None:
            queryset = queryset.filter(message_type=query.message_type)
        if not query.include_removed:
            queryset = queryset.filter(removed=False)
        return queryset

    def find_latest(self, query: MessageQuery) -> Message | None:
        return (
            self.filter(query)
            .select_related("sender__profile")
            .order_by("-created_at")
            .first()
        )

    def find_by_id(self, message_id: Any) -> Message | None:
        try:
            return (
                Message.objects.select_related("sender__profile")
                .filter(pk=message_id)
                .first()
            )
        except DjangoValidationError:
            return None

    def save(self, message: Message) -> Message:
        message.save()
        return message

    def delete_many(self, query: MessageQuery) -> int:
        deleted, _ = self.filter(query).delete()
        return deleted


__all__ = [
    "ChannelQuery",
    "MessageQuery",
    "ChannelRepository",
    "MessageRepository",
    "DjangoChannelRepository",
    "DjangoMessageRepository",
]
