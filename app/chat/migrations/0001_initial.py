import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Channel",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Optional display name",
                        max_length=255,
                    ),
                ),
                (
                    "channel_type",
                    models.CharField(
                        choices=[
                            ("private", "Private"),
                            ("internal", "Internal"),
                            ("public", "Public"),
                            ("p2p", "Peer to peer"),
                        ],
                        db_index=True,
                        default="private",
                        help_text="Kind of channel",
                        max_length=10,
                    ),
                ),
                (
                    "archived",
                    models.BooleanField(
                        default=False,
                        help_text="Archived channels are hidden from listings",
                    ),
                ),
                (
                    "last_message_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="Timestamp of the most recent message",
                        null=True,
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Incremented whenever the channel or its members change",
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        help_text="User who owns the channel (implicit admin)",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="owned_chat_channels",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_channel",
                "ordering": ["-last_message_at", "-created_at"],
                "permissions": [("access_chat", "Can access the chat module")],
                "indexes": [
                    models.Index(
                        fields=["channel_type", "archived"],
                        name="chat_channel_type_arch_idx",
                    ),
                    models.Index(
                        fields=["-last_message_at"],
                        name="chat_channel_last_msg_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChannelMember",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "is_admin",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the member can administer the channel",
                    ),
                ),
                (
                    "mute",
                    models.BooleanField(
                        default=False,
                        help_text="Muted members receive no realtime notifications",
                    ),
                ),
                (
                    "last_seen",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the member last read the channel",
                        null=True,
                    ),
                ),
                (
                    "channel",
                    models.ForeignKey(
                        help_text="Channel this membership belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="members",
                        to="chat.channel",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Member user",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chat_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_channel_member",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["user", "channel"],
                        name="chat_member_user_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("channel", "user"),
                        name="unique_channel_member",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("text", models.TextField(blank=True, help_text="Message body")),
                (
                    "message_type",
                    models.CharField(
                        choices=[
                            ("message", "Message"),
                            ("info", "Info"),
                            ("warning", "Warning"),
                            ("danger", "Danger"),
                        ],
                        default="message",
                        help_text="Kind of message",
                        max_length=10,
                    ),
                ),
                (
                    "removed",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the message was soft-removed",
                    ),
                ),
                (
                    "versions",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Previous texts, most recent first",
                    ),
                ),
                (
                    "channel",
                    models.ForeignKey(
                        db_constraint=False,
                        help_text="Channel this message belongs to",
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="messages",
                        to="chat.channel",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        blank=True,
                        help_text="Author (NULL for system or anonymous messages)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="chat_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["channel", "-created_at"],
                        name="chat_msg_channel_created_idx",
                    ),
                ],
            },
        ),
    ]
