"""
Chat app for real-time messaging.

This app handles:
- Channels (private, p2p, internal, public) and their members
- Message sending, editing (with history) and removal
- Channel previews with read status
- WebSocket pushes of new messages

Related apps:
    - authentication: User model for owners, members and senders

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import MessageService

    # Send to users (finds or creates their channel)
    message = MessageService().send_to_users(
        sender=user,
        recipients=[other_user.pk],
        text="Hello!",
    )
"""
