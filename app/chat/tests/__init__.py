"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Channel, ChannelMember, Message model tests
- test_policies.py: Access predicates
- test_services.py: Resolver, state manager, versioning, previews, fan-out
- test_tasks.py: Celery task tests
- test_signals.py: Versioning and channel delete cascade
- test_consumers.py: WebSocket consumer and JWT middleware tests
- test_views.py: REST API endpoint tests

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
