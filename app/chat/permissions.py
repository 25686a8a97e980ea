"""
Permission classes for chat API.

This module provides DRF permission classes for the chat system:
- HasChatAccess: Caller may use the chat module at all
- IsChannelAdmin: Caller administers the channel (owner or admin member)
- IsChannelOwner: Caller owns the channel
- IsMessageAuthor: Caller wrote the message

Permission Hierarchy:
    OWNER > ADMIN > MEMBER

    OWNER can:
        - All ADMIN permissions
        - Delete the channel

    ADMIN can:
        - Rename, archive and unarchive the channel
        - Invite members and change their admin flag

    MEMBER can:
        - Read and post messages
        - Mute the channel
        - Leave the channel

Design Decisions:
    - Channel visibility is not a permission: views answer 404 for
      channels the caller may not see (see ChannelViewSet.get_object)
    - Object checks delegate to the pure predicates in chat.policies
    - Denials carry an error_code through PermissionDeniedErrorMixin
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.utils.translation import gettext_lazy as _
from rest_framework import permissions
from rest_framework.exceptions import NotAuthenticated

from chat.conf import get_chat_settings
from chat.policies import is_admin, is_authenticated, is_message_author, is_owner
from core.exceptions import PermissionDeniedError

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView

    from chat.models import Channel, Message


class PermissionDeniedErrorMixin:
    """
    ViewSet mixin raising PermissionDeniedError for failed permissions.

    DRF hands the failing permission's ``message`` and ``code`` to
    permission_denied(); the code becomes the error_code of the response.
    Unauthenticated requests still get DRF's 401.
    """

    def permission_denied(self, request, message=None, code=None):
        if request.authenticators and not request.successful_authenticator:
            raise NotAuthenticated()
        raise PermissionDeniedError(
            message or _("You do not have permission to perform this action."),
            error_code=code,
        )


class HasChatAccess(permissions.BasePermission):
    """
    Gate for every chat endpoint.

    Authenticated users pass when CHAT["GRANT_DEFAULT_ACCESS"] is on, and
    otherwise need the chat.access_chat permission. Anonymous callers only
    pass on the actions the view lists in ``anonymous_actions``.
    """

    message = _("You do not have access to the chat.")
    code = "CHAT_ACCESS_DENIED"

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not is_authenticated(user):
            return view.action in getattr(view, "anonymous_actions", ())

        if get_chat_settings().grant_default_access:
            return True
        return user.has_perm("chat.access_chat")


class IsChannelAdmin(permissions.BasePermission):
    """Owner or admin member of the channel."""

    message = _("Only channel admins can perform this action.")
    code = "CHANNEL_NOT_ADMIN"

    def has_object_permission(
        self, request: Request, view: APIView, obj: Channel
    ) -> bool:
        return is_admin(obj, request.user)


class IsChannelOwner(permissions.BasePermission):
    """
    Only the channel owner.

    Used for deleting the channel.
    """

    message = _("Only the channel owner can perform this action.")
    code = "CHANNEL_NOT_OWNER"

    def has_object_permission(
        self, request: Request, view: APIView, obj: Channel
    ) -> bool:
        return is_owner(obj, request.user)


class IsMessageAuthor(permissions.BasePermission):
    """Only the sender of the message may edit or remove it."""

    message = _("You can only modify your own messages.")
    code = "MESSAGE_NOT_MINE"

    def has_object_permission(
        self, request: Request, view: APIView, obj: Message
    ) -> bool:
        return is_message_author(obj, request.user)
