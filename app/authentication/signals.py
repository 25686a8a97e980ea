"""
Signal handlers for authentication.

Connected from AuthenticationConfig.ready().
"""

import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created, raw=False, **kwargs):
    """Give every new user an empty Profile so previews can read names."""
    if not created or raw:
        return

    from authentication.models import Profile

    _, made = Profile.objects.get_or_create(user=instance)
    if made:
        logger.debug("Profile created for user %s", instance.pk)
