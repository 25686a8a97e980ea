"""Manager for email-identified users."""

from django.contrib.auth.models import BaseUserManager

PROFILE_FIELDS = ("first_name", "last_name")


class UserManager(BaseUserManager):
    """
    Creates users keyed by email.

    first_name and last_name are accepted for convenience and written to
    the Profile that the post_save signal creates.
    """

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("An email address is required")

        names = {
            field: extra_fields.pop(field)
            for field in PROFILE_FIELDS
            if field in extra_fields
        }
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        user = self.model(email=self.normalize_email(email), **extra_fields)
        # No password means the account can only authenticate by other means
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)

        if names:
            profile = user.profile
            for field, value in names.items():
                setattr(profile, field, value)
            profile.save(update_fields=[*names, "updated_at"])
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        for flag in ("is_staff", "is_superuser"):
            if extra_fields[flag] is not True:
                raise ValueError(f"Superuser must have {flag}=True.")
        return self.create_user(email, password, **extra_fields)
