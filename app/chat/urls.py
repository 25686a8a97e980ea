"""
URL configuration for chat API.

URL Structure:
    Channels:
        /channels/                       GET, POST
        /channels/preview/               GET
        /channels/{id}/                  GET, POST, PATCH, DELETE
        /channels/{id}/archive/          POST
        /channels/{id}/unarchive/        POST
        /channels/{id}/invite/           POST
        /channels/{id}/leave/            POST
        /channels/{id}/mute/             POST
        /channels/{id}/messages/         GET, POST

    Messages:
        /messages/                       POST
        /messages/{id}/                  POST, PATCH, DELETE

Ids are matched as plain strings so malformed ids reach the views and
get a 400 with an error code instead of a bare 404.

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import path

from chat.pagination import PreviewPagination
from chat.views import ChannelViewSet, MessageViewSet

app_name = "chat"

urlpatterns = [
    path(
        "channels/",
        ChannelViewSet.as_view({"get": "list", "post": "create"}),
        name="channel-list",
    ),
    # Before the detail route, which would otherwise match "preview"
    path(
        "channels/preview/",
        ChannelViewSet.as_view(
            {"get": "preview"}, pagination_class=PreviewPagination
        ),
        name="channel-preview",
    ),
    path(
        "channels/<str:pk>/",
        ChannelViewSet.as_view(
            {
                "get": "retrieve",
                "post": "update",
                "put": "update",
                "patch": "partial_update",
                "delete": "destroy",
            }
        ),
        name="channel-detail",
    ),
    path(
        "channels/<str:pk>/archive/",
        ChannelViewSet.as_view({"post": "archive"}),
        name="channel-archive",
    ),
    path(
        "channels/<str:pk>/unarchive/",
        ChannelViewSet.as_view({"post": "unarchive"}),
        name="channel-unarchive",
    ),
    path(
        "channels/<str:pk>/invite/",
        ChannelViewSet.as_view({"post": "invite"}),
        name="channel-invite",
    ),
    path(
        "channels/<str:pk>/leave/",
        ChannelViewSet.as_view({"post": "leave"}),
        name="channel-leave",
    ),
    path(
        "channels/<str:pk>/mute/",
        ChannelViewSet.as_view({"post": "mute"}),
        name="channel-mute",
    ),
    path(
        "channels/<str:pk>/messages/",
        ChannelViewSet.as_view({"get": "messages", "post": "messages"}),
        name="channel-messages",
    ),
    path(
        "messages/",
        MessageViewSet.as_view({"post": "create"}),
        name="message-list",
    ),
    path(
        "messages/<str:pk>/",
        MessageViewSet.as_view(
            {
                "post": "update",
                "put": "update",
                "patch": "partial_update",
                "delete": "destroy",
            }
        ),
        name="message-detail",
    ),
]
