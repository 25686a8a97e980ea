"""
Constants for the chat module.

This module centralizes fixed values for:
- Realtime group names and event types
- Top/skip pagination bounds
- Channel preview labels

Runtime switches (default access, remove mode, versioning) are not here;
they come from settings.CHAT through chat.conf.ChatSettings.

Import example:
    from chat.constants import REALTIME_CONFIG, PAGINATION_CONFIG
"""

from typing import Final


# =============================================================================
# Realtime Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Channel layer groups and events used to push new messages."""

    # Broadcast groups, one per broadcast channel type
    PUBLIC_GROUP: Final[str] = "chat.public"
    INTERNAL_GROUP: Final[str] = "chat.internal"

    # Per-user group, formatted with the user's primary key
    USER_GROUP_TEMPLATE: Final[str] = "chat.user.{user_id}"

    # Handler type on the consumer (dots map to underscores: chat_message)
    MESSAGE_EVENT_TYPE: Final[str] = "chat.message"

    # Event name sent to websocket clients
    MESSAGE_CLIENT_EVENT: Final[str] = "message"


# =============================================================================
# Pagination Configuration
# =============================================================================


class PAGINATION_CONFIG:
    """Bounds for top/skip pagination."""

    DEFAULT_TOP: Final[int] = 10
    MAX_TOP: Final[int] = 100


# =============================================================================
# Preview Configuration
# =============================================================================


class PREVIEW_CONFIG:
    """Labels used when building channel previews."""

    MAX_NAMES: Final[int] = 3
    NAME_SEPARATOR: Final[str] = " & "
    TRUNCATION_SUFFIX: Final[str] = "..."
    UNTITLED: Final[str] = "Untitled"
    UNAVAILABLE_MESSAGE: Final[str] = "Not available"


def user_group(user_id) -> str:
    """Return the per-user realtime group name for ``user_id``."""
    return REALTIME_CONFIG.USER_GROUP_TEMPLATE.format(user_id=user_id)


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Limits for message content."""

    MAX_TEXT_LENGTH: Final[int] = 10000  # Characters
