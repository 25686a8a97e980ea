"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User and Profile model tests (including the manager)
- test_signals.py: Profile auto-creation

Usage:
    pytest authentication/tests/
"""
