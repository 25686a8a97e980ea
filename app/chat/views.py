"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ChannelViewSet: Channel CRUD, membership actions and channel messages
- MessageViewSet: Messages addressed to users, edit and removal

URL Structure:
    /api/v1/chat/channels/                   GET, POST
    /api/v1/chat/channels/preview/           GET
    /api/v1/chat/channels/{id}/              GET, POST, PATCH, DELETE
    /api/v1/chat/channels/{id}/archive/      POST
    /api/v1/chat/channels/{id}/unarchive/    POST
    /api/v1/chat/channels/{id}/invite/       POST
    /api/v1/chat/channels/{id}/leave/        POST
    /api/v1/chat/channels/{id}/mute/         POST
    /api/v1/chat/channels/{id}/messages/     GET, POST
    /api/v1/chat/messages/                   POST
    /api/v1/chat/messages/{id}/              POST, PATCH, DELETE

Query parameters:
    top, skip: Pagination (see chat.pagination)
    expand: Comma-separated user references to expand
        (users.user, owner, sender)

Design Decisions:
    - Channels the caller may not see answer 404, never 403
    - Malformed ids answer 400 before any lookup
    - Anonymous callers may read and post (public channels, guest
      messages); everything else requires an authenticated user
    - All operations use the service layer for business logic
"""

from __future__ import annotations

import uuid

from django.utils.translation import gettext_lazy as _
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from chat.models import Channel, Message
from chat.pagination import PreviewPagination, TopSkipPagination
from chat.permissions import (
    HasChatAccess,
    IsChannelAdmin,
    IsChannelOwner,
    IsMessageAuthor,
    PermissionDeniedErrorMixin,
)
from chat.policies import can_access
from chat.repositories import (
    DjangoChannelRepository,
    DjangoMessageRepository,
    MessageQuery,
)
from chat.serializers import (
    ChannelCreateSerializer,
    ChannelMemberInputSerializer,
    ChannelPreviewSerializer,
    ChannelSerializer,
    ChannelUpdateSerializer,
    DirectMessageCreateSerializer,
    MessageCreateSerializer,
    MessageSerializer,
    MessageUpdateSerializer,
)
from chat.services import ChannelStateManager, MessageService, PreviewBuilder
from core.exceptions import NotFoundError, ValidationError

PAGINATION_PARAMETERS = [
    OpenApiParameter("top", OpenApiTypes.INT, description="Page size"),
    OpenApiParameter("skip", OpenApiTypes.INT, description="Records to skip"),
]


def expand_parameter(*paths: str) -> OpenApiParameter:
    return OpenApiParameter(
        "expand",
        OpenApiTypes.STR,
        description=f"Comma-separated references to expand: {', '.join(paths)}",
    )


def parse_expand(request) -> set[str]:
    """Set of dotted paths listed in the expand query parameter."""
    raw = request.query_params.get("expand") or request.query_params.get("$expand")
    if not raw:
        return set()
    return {part.strip() for part in raw.split(",") if part.strip()}


def parse_uuid(raw, error_code: str):
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise ValidationError(
            _("Invalid id"),
            error_code=error_code,
            details={"id": str(raw)},
        )


@extend_schema_view(
    list=extend_schema(
        operation_id="list_channels",
        summary="List channels",
        parameters=[*PAGINATION_PARAMETERS, expand_parameter("users.user")],
        tags=["Chat - Channels"],
    ),
    create=extend_schema(
        operation_id="create_channel",
        summary="Create channel",
        request=ChannelCreateSerializer,
        responses={201: ChannelSerializer},
        tags=["Chat - Channels"],
    ),
    retrieve=extend_schema(
        operation_id="get_channel",
        summary="Get channel",
        parameters=[expand_parameter("users.user", "owner")],
        tags=["Chat - Channels"],
    ),
    update=extend_schema(
        operation_id="rename_channel",
        summary="Rename channel",
        request=ChannelUpdateSerializer,
        responses={200: ChannelSerializer},
        tags=["Chat - Channels"],
    ),
    partial_update=extend_schema(
        operation_id="update_channel",
        summary="Update channel",
        request=ChannelUpdateSerializer,
        responses={200: ChannelSerializer},
        tags=["Chat - Channels"],
    ),
    destroy=extend_schema(
        operation_id="delete_channel",
        summary="Delete channel",
        responses={204: None},
        tags=["Chat - Channels"],
    ),
)
class ChannelViewSet(PermissionDeniedErrorMixin, viewsets.GenericViewSet):
    """
    ViewSet for channel operations.

    list:
        Channels visible to the caller, most recently active first.
        Public channels for everyone; for authenticated users also owned,
        internal and joined ones. Archived channels are hidden.

    create:
        Create a channel owned by the caller.

    preview:
        Same listing as list, rendered as previews (name, read, muted,
        last message).

    retrieve:
        Channel details including members.

    update / partial_update:
        Rename the channel. Requires admin.

    destroy:
        Delete the channel; its messages are removed in the background.
        Requires owner.

    archive / unarchive / invite:
        Requires admin.

    leave:
        Remove the caller's membership. The owner cannot leave.

    mute:
        Stop realtime notifications of this channel for the caller.

    messages:
        GET lists messages newest first and, on the first page, marks the
        channel as seen by the caller. POST sends a message.
    """

    serializer_class = ChannelSerializer
    permission_classes = [HasChatAccess]
    pagination_class = TopSkipPagination
    anonymous_actions = ("list", "preview", "retrieve", "messages")

    repository = DjangoChannelRepository()
    message_repository = DjangoMessageRepository()

    def get_queryset(self):
        return self.repository.visible_to(self.request.user)

    def get_permissions(self):
        """Return permissions based on action."""
        if self.action in (
            "update",
            "partial_update",
            "archive",
            "unarchive",
            "invite",
        ):
            return [HasChatAccess(), IsChannelAdmin()]
        if self.action == "destroy":
            return [HasChatAccess(), IsChannelOwner()]
        return [HasChatAccess()]

    def get_object(self) -> Channel:
        """
        Load the channel from the URL and check object permissions.

        Raises:
            ValidationError: CHANNEL_INVALID_ID for malformed ids
            NotFoundError: CHANNEL_NOT_FOUND when missing or not accessible
        """
        channel_id = parse_uuid(self.kwargs.get("pk"), "CHANNEL_INVALID_ID")
        channel = self.repository.find_by_id(channel_id)
        if channel is None or not can_access(channel, self.request.user):
            raise NotFoundError(
                _("Channel not found"),
                error_code="CHANNEL_NOT_FOUND",
                details={"channel_id": str(channel_id)},
            )

        self.check_object_permissions(self.request, channel)
        return channel

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["expand"] = parse_expand(self.request)
        return context

    def state_manager(self) -> ChannelStateManager:
        return ChannelStateManager(repository=self.repository)

    def list(self, request):
        """List channels visible to the caller."""
        page = self.paginate_queryset(self.get_queryset())
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request):
        """Create a channel owned by the caller."""
        serializer = ChannelCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        channel = self.state_manager().create(
            owner=request.user,
            channel_type=data["type"],
            name=data.get("name", ""),
            entries=data.get("users", []),
        )

        output_serializer = self.get_serializer(channel)
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="preview_channels",
        summary="Preview channels",
        parameters=PAGINATION_PARAMETERS,
        responses={200: ChannelPreviewSerializer(many=True)},
        tags=["Chat - Channels"],
    )
    @action(detail=False, methods=["get"], pagination_class=PreviewPagination)
    def preview(self, request):
        """List channel previews for the caller."""
        page = self.paginate_queryset(self.get_queryset())
        previews = PreviewBuilder(self.message_repository).build_many(
            page, request.user
        )
        return self.get_paginated_response(previews)

    def retrieve(self, request, pk=None):
        """Get channel details."""
        channel = self.get_object()
        return Response(self.get_serializer(channel).data)

    def update(self, request, pk=None):
        """Rename the channel."""
        channel = self.get_object()
        serializer = ChannelUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        channel = self.state_manager().update(
            channel, name=serializer.validated_data["name"]
        )
        return Response(self.get_serializer(channel).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        """Delete the channel."""
        channel = self.get_object()
        self.state_manager().delete(channel)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="archive_channel",
        summary="Archive channel",
        request=None,
        responses={200: ChannelSerializer},
        tags=["Chat - Channels"],
    )
    @action(detail=True, methods=["post"])
    def archive(self, request, pk=None):
        """Hide the channel from listings."""
        channel = self.state_manager().set_archived(self.get_object(), True)
        return Response(self.get_serializer(channel).data)

    @extend_schema(
        operation_id="unarchive_channel",
        summary="Unarchive channel",
        request=None,
        responses={200: ChannelSerializer},
        tags=["Chat - Channels"],
    )
    @action(detail=True, methods=["post"])
    def unarchive(self, request, pk=None):
        """Show the channel in listings again."""
        channel = self.state_manager().set_archived(self.get_object(), False)
        return Response(self.get_serializer(channel).data)

    @extend_schema(
        operation_id="invite_channel_members",
        summary="Invite members",
        description=(
            "Add users to the channel or change the admin flag of existing "
            "members. Body: [{\"user\": 42, \"is_admin\": false}, ...]"
        ),
        request=ChannelMemberInputSerializer(many=True),
        responses={200: ChannelSerializer},
        tags=["Chat - Members"],
    )
    @action(detail=True, methods=["post"])
    def invite(self, request, pk=None):
        """Add members or update their admin flag."""
        channel = self.get_object()
        serializer = ChannelMemberInputSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)

        channel = self.state_manager().invite(channel, serializer.validated_data)
        return Response(self.get_serializer(channel).data)

    @extend_schema(
        operation_id="leave_channel",
        summary="Leave channel",
        request=None,
        responses={
            204: None,
            400: OpenApiResponse(description="The owner cannot leave"),
        },
        tags=["Chat - Members"],
    )
    @action(detail=True, methods=["post"])
    def leave(self, request, pk=None):
        """Leave the channel."""
        self.state_manager().leave(self.get_object(), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="mute_channel",
        summary="Mute channel",
        request=None,
        responses={204: None},
        tags=["Chat - Members"],
    )
    @action(detail=True, methods=["post"])
    def mute(self, request, pk=None):
        """Stop realtime notifications for the caller."""
        self.state_manager().mute(self.get_object(), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        methods=["GET"],
        operation_id="list_channel_messages",
        summary="List channel messages",
        parameters=[*PAGINATION_PARAMETERS, expand_parameter("sender")],
        responses={200: MessageSerializer(many=True)},
        tags=["Chat - Messages"],
    )
    @extend_schema(
        methods=["POST"],
        operation_id="send_channel_message",
        summary="Send message to channel",
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
        tags=["Chat - Messages"],
    )
    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        """List (newest first) or send channel messages."""
        channel = self.get_object()

        if request.method == "POST":
            serializer = MessageCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            message = MessageService().send(
                channel,
                request.user,
                serializer.validated_data["text"],
                serializer.validated_data["type"],
            )
            output_serializer = MessageSerializer(
                message, context={"request": request, "expand": {"sender"}}
            )
            return Response(output_serializer.data, status=status.HTTP_201_CREATED)

        queryset = (
            self.message_repository.filter(MessageQuery(channel_id=channel.pk))
            .select_related("sender__profile")
            .order_by("-created_at")
        )
        page = self.paginate_queryset(queryset)

        # Reading the first page counts as having seen the channel
        if self.paginator.skip == 0:
            self.state_manager().mark_seen(channel, request.user)

        serializer = MessageSerializer(
            page, many=True, context=self.get_serializer_context()
        )
        return self.get_paginated_response(serializer.data)


@extend_schema_view(
    create=extend_schema(
        operation_id="send_direct_message",
        summary="Send message to users",
        description=(
            "Send a message to one or more users. The channel is reused when "
            "one already exists (p2p for one recipient, private otherwise) "
            "and created when not. Guests may write to a single recipient."
        ),
        request=DirectMessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Invalid or empty recipients"),
        },
        tags=["Chat - Messages"],
    ),
    update=extend_schema(
        operation_id="edit_message",
        summary="Edit message",
        request=MessageUpdateSerializer,
        responses={200: MessageSerializer},
        tags=["Chat - Messages"],
    ),
    partial_update=extend_schema(
        operation_id="patch_message",
        summary="Edit message",
        request=MessageUpdateSerializer,
        responses={200: MessageSerializer},
        tags=["Chat - Messages"],
    ),
    destroy=extend_schema(
        operation_id="remove_message",
        summary="Remove message",
        description=(
            "Deletes the message (204) or clears its text and flags it as "
            "removed (200 with the message), depending on configuration."
        ),
        responses={200: MessageSerializer, 204: None},
        tags=["Chat - Messages"],
    ),
)
class MessageViewSet(PermissionDeniedErrorMixin, viewsets.GenericViewSet):
    """
    ViewSet for messages outside a channel URL.

    create:
        Send a message to users, resolving their channel.

    update / partial_update:
        Edit the text. The previous text is kept in the message history.
        Only the author can edit.

    destroy:
        Remove the message. Only the author can remove.
    """

    serializer_class = MessageSerializer
    permission_classes = [HasChatAccess]
    anonymous_actions = ("create",)

    repository = DjangoMessageRepository()

    def get_permissions(self):
        """Return permissions based on action."""
        if self.action in ("update", "partial_update", "destroy"):
            return [HasChatAccess(), IsMessageAuthor()]
        return [HasChatAccess()]

    def get_object(self) -> Message:
        """
        Load the message from the URL and check object permissions.

        Raises:
            ValidationError: MESSAGE_INVALID_ID for malformed ids
            NotFoundError: MESSAGE_NOT_FOUND
        """
        message_id = parse_uuid(self.kwargs.get("pk"), "MESSAGE_INVALID_ID")
        message = self.repository.find_by_id(message_id)
        if message is None:
            raise NotFoundError(
                _("Message not found"),
                error_code="MESSAGE_NOT_FOUND",
                details={"message_id": str(message_id)},
            )

        self.check_object_permissions(self.request, message)
        return message

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["expand"] = {"sender"}
        return context

    def create(self, request):
        """Send a message to users."""
        serializer = DirectMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        message = MessageService().send_to_users(
            request.user,
            data["to"],
            data["text"],
            data["type"],
        )
        return Response(
            self.get_serializer(message).data, status=status.HTTP_201_CREATED
        )

    def update(self, request, pk=None):
        """Edit the message text."""
        message = self.get_object()
        serializer = MessageUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = MessageService().edit(message, serializer.validated_data["text"])
        return Response(self.get_serializer(message).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        """Remove the message (hard or soft, per configuration)."""
        message = ChannelStateManager().remove_message(self.get_object())
        if message is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(self.get_serializer(message).data)
