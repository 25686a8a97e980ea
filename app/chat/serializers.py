"""
Serializers for chat API.

This module provides serializers for the chat system:
- Channel serializers (read, create, update, invite, preview)
- Member serializers (read, invite entry)
- Message serializers (read, last-message preview, create, update)

Serializer Hierarchy:
    ChannelSerializer: Channel with members, owner and version
    ChannelCreateSerializer: Name, type and initial members
    ChannelUpdateSerializer: Rename (type is immutable)
    ChannelMemberSerializer: Membership with user reference
    ChannelMemberInputSerializer: One invite entry {user, is_admin}
    ChannelPreviewSerializer: Preview shape (documentation only)

    MessageSerializer: Message with sender reference
    LastMessageSerializer: Compact message for previews
    MessageCreateSerializer: Post to a channel
    DirectMessageCreateSerializer: Post to users
    MessageUpdateSerializer: Edit text

Expansion:
    User references render as the bare user id unless the dotted path is
    listed in context["expand"], in which case they render as
    UserSummarySerializer output:

        MessageSerializer(message, context={"expand": {"sender"}})
        ChannelSerializer(channel, context={"expand": {"users.user", "owner"}})

Design Decisions:
    - Read and write serializers are separate for clarity
    - Internal field names (channel_type, message_type) are exposed as "type"
    - Members come from the channel's membership index, so staged owner
      memberships show up before they are saved
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from chat.constants import MESSAGE_CONFIG
from chat.models import Channel, ChannelMember, ChannelType, Message, MessageType

User = get_user_model()


# =============================================================================
# Helper Functions
# =============================================================================


def is_expanded(serializer: serializers.BaseSerializer, path: str) -> bool:
    """Whether ``path`` is in the expand set of the serializer context."""
    return path in serializer.context.get("expand", ())


def user_reference(user, expanded: bool):
    """Render a user as its id, or as a summary when expanded."""
    if user is None:
        return None
    if expanded:
        return UserSummarySerializer(user).data
    return user.pk


# =============================================================================
# Member Serializers
# =============================================================================


class ChannelMemberSerializer(serializers.ModelSerializer):
    """
    Membership as exposed in channel payloads.

    user is an id, or a summary with expand=users.user.
    """

    user = serializers.SerializerMethodField(
        help_text="User id, or {id, name} when expanded"
    )

    class Meta:
        model = ChannelMember
        fields = ["user", "is_admin", "mute", "last_seen"]
        read_only_fields = fields

    def get_user(self, obj: ChannelMember):
        return user_reference(obj.user, is_expanded(self, "users.user"))


class ChannelMemberInputSerializer(serializers.Serializer):
    """One entry of an invite or of the initial member list."""

    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        help_text="User to add",
    )
    is_admin = serializers.BooleanField(
        default=False,
        help_text="Grant admin rights in the channel",
    )


# =============================================================================
# Channel Serializers
# =============================================================================


class ChannelSerializer(serializers.ModelSerializer):
    """
    Full channel representation.

    Output:
        {
            "id": "...",
            "name": "Team",
            "type": "private",
            "owner": 1,
            "users": [{"user": 2, "is_admin": false, "mute": false, "last_seen": null}],
            "archived": false,
            "last_message_at": null,
            "version": 1,
            "created_at": "...",
            "updated_at": "..."
        }
    """

    type = serializers.CharField(source="channel_type", read_only=True)
    owner = serializers.SerializerMethodField(
        help_text="Owner id, or {id, name} with expand=owner"
    )
    users = serializers.SerializerMethodField(help_text="Channel members")

    class Meta:
        model = Channel
        fields = [
            "id",
            "name",
            "type",
            "owner",
            "users",
            "archived",
            "last_message_at",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_owner(self, obj: Channel):
        return user_reference(obj.owner, is_expanded(self, "owner"))

    def get_users(self, obj: Channel) -> list:
        return ChannelMemberSerializer(
            obj.members_list(), many=True, context=self.context
        ).data


class ChannelCreateSerializer(serializers.Serializer):
    """
    Create a channel owned by the caller.

    Members listed twice are added once (first entry wins).
    """

    name = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        default="",
        help_text="Optional display name",
    )
    type = serializers.ChoiceField(
        choices=ChannelType.choices,
        default=ChannelType.PRIVATE,
        help_text="Channel type",
    )
    users = ChannelMemberInputSerializer(
        many=True,
        required=False,
        default=list,
        help_text="Initial members",
    )


class ChannelUpdateSerializer(serializers.Serializer):
    """Rename a channel. The type cannot be changed."""

    name = serializers.CharField(
        max_length=255,
        allow_blank=True,
        help_text="New display name",
    )


class ChannelPreviewSerializer(serializers.Serializer):
    """
    Shape of a channel preview (see chat.services.previews).

    Only used to document the preview endpoint; previews are built as
    plain dicts by PreviewBuilder.
    """

    id = serializers.UUIDField()
    type = serializers.ChoiceField(choices=ChannelType.choices)
    name = serializers.CharField()
    read = serializers.BooleanField()
    muted = serializers.BooleanField()
    last_message = serializers.DictField(allow_null=True)


# =============================================================================
# Message Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Message representation for listings, sends and realtime pushes.

    sender is an id (or null for guests and system messages), or a summary
    with expand=sender.
    """

    type = serializers.CharField(source="message_type", read_only=True)
    sender = serializers.SerializerMethodField(
        help_text="Sender id, or {id, name} with expand=sender"
    )
    channel = serializers.UUIDField(source="channel_id", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "text",
            "type",
            "sender",
            "channel",
            "removed",
            "versions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_sender(self, obj: Message):
        return user_reference(obj.sender, is_expanded(self, "sender"))


class LastMessageSerializer(serializers.ModelSerializer):
    """Compact last message embedded in channel previews."""

    sender = UserSummarySerializer(read_only=True, allow_null=True)

    class Meta:
        model = Message
        fields = ["sender", "text", "created_at"]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    """Post a message to a channel."""

    text = serializers.CharField(
        max_length=MESSAGE_CONFIG.MAX_TEXT_LENGTH,
        help_text="Message body",
    )
    type = serializers.ChoiceField(
        choices=MessageType.choices,
        default=MessageType.MESSAGE,
        help_text="Message type",
    )


class DirectMessageCreateSerializer(MessageCreateSerializer):
    """
    Post a message to users.

    Recipient ids are kept raw here; blanks, duplicates and the sender are
    dropped by ChannelResolver, which also rejects ids of unknown users.
    """

    to = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        allow_empty=True,
        help_text="Recipient user ids",
    )


class MessageUpdateSerializer(serializers.Serializer):
    """Edit the text of a message."""

    text = serializers.CharField(
        max_length=MESSAGE_CONFIG.MAX_TEXT_LENGTH,
        help_text="New message body",
    )
