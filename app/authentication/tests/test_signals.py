"""
Tests for authentication signals.

create_user_profile auto-creates an empty Profile whenever a new User is
created.
"""

from authentication.models import Profile, User
from authentication.tests.factories import UserFactory


class TestCreateUserProfileSignal:
    """Tests for the create_user_profile signal handler."""

    def test_profile_created_when_user_is_created(self, db):
        """
        Verify a Profile is automatically created for a new User.

        Signal trigger: post_save with created=True
        """
        user = User.objects.create_user(email="new@example.com", password="x")

        assert Profile.objects.filter(user=user).exists()

    def test_profile_not_duplicated_on_user_update(self, db):
        """Saving an existing user does not create a second profile."""
        user = UserFactory()
        user.is_staff = True
        user.save()

        assert Profile.objects.filter(user=user).count() == 1

    def test_raw_save_creates_no_profile(self, db):
        """Fixture loads bring their own profiles."""
        from authentication.signals import create_user_profile

        user = UserFactory()
        Profile.objects.filter(user=user).delete()

        create_user_profile(sender=User, instance=user, created=True, raw=True)

        assert not Profile.objects.filter(user=user).exists()

    def test_profile_starts_empty(self, db):
        user = User.objects.create_user(email="blank@example.com", password="x")

        profile = Profile.objects.get(user=user)
        assert profile.first_name == ""
        assert profile.last_name == ""
