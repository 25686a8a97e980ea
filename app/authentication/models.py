"""
Accounts that take part in chat channels.

User carries login and permission state only. Display names live on
Profile, which is created for every user by signals.create_user_profile
and read by the chat previews to label direct channels.
"""

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager
from core.models import BaseModel


class User(AbstractBaseUser, PermissionsMixin):
    """
    Chat participant, logged in by email.

    Deactivated users keep their channels and messages; their tokens stop
    resolving, so they reconnect as guests.
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="Login address, unique per account",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive accounts cannot obtain tokens or open sockets",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Grants access to the admin site",
    )
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def _profile(self):
        try:
            return self.profile
        except Profile.DoesNotExist:
            return None

    def get_full_name(self):
        profile = self._profile()
        return (profile and profile.full_name) or self.email

    def get_short_name(self):
        profile = self._profile()
        return (profile and profile.first_name) or self.email.split("@")[0]

    @property
    def first_name(self) -> str:
        """Profile first name, empty when unset. Previews skip empty names."""
        profile = self._profile()
        return profile.first_name if profile else ""


class Profile(BaseModel):
    """Display name of a user, keyed by the user itself."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        primary_key=True,
    )
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = "authentication_profile"
        verbose_name = "profile"
        verbose_name_plural = "profiles"

    def __str__(self):
        return self.full_name or str(self.user)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
