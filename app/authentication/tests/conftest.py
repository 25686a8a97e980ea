"""
Test configuration and fixtures for authentication tests.

Usage:
    def test_example(user):
        assert user.profile is not None
"""

import pytest

from authentication.tests.factories import UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a verified user named Ada Lovelace."""
    return UserFactory(first_name="Ada", last_name="Lovelace")


@pytest.fixture
def unnamed_user(db):
    """Create a user whose profile has no name."""
    return UserFactory(first_name="", last_name="")
