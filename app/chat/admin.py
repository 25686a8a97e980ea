"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Channel management (members inline)
- Message moderation
"""

from django.contrib import admin

from chat.models import Channel, ChannelMember, Message


class ChannelMemberInline(admin.TabularInline):
    """Inline display of members in channel admin."""

    model = ChannelMember
    extra = 0
    readonly_fields = ["last_seen", "created_at"]
    raw_id_fields = ["user"]


@admin.register(Channel)
class ChannelAdmin(admin.ModelAdmin):
    """Admin interface for Channel model."""

    list_display = [
        "id",
        "channel_type",
        "name",
        "owner",
        "archived",
        "version",
        "last_message_at",
        "created_at",
    ]
    list_filter = ["channel_type", "archived", "created_at"]
    search_fields = ["name", "id", "owner__email"]
    readonly_fields = ["version", "last_message_at", "created_at", "updated_at"]
    raw_id_fields = ["owner"]
    inlines = [ChannelMemberInline]
    ordering = ["-created_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "channel",
        "sender",
        "message_type",
        "text_preview",
        "removed",
        "created_at",
    ]
    list_filter = ["message_type", "removed", "created_at"]
    search_fields = ["text", "sender__email"]
    readonly_fields = ["versions", "created_at", "updated_at"]
    raw_id_fields = ["channel", "sender"]
    ordering = ["-created_at"]

    @admin.display(description="Text Preview")
    def text_preview(self, obj: Message) -> str:
        """Return truncated text for list display."""
        max_length = 50
        if len(obj.text) > max_length:
            return obj.text[:max_length] + "..."
        return obj.text
