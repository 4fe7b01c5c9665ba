import logging

from django.contrib.auth import get_user_model
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import UserSettings

logger = logging.getLogger(__name__)


@receiver(post_save, sender=get_user_model())
def create_user_settings(sender, instance, created, **kwargs):
    """
    Create default display settings for every new user.
    """
    if not created:
        return

    _, settings_created = UserSettings.objects.get_or_create(user=instance)
    logger.info(
        "User settings initialized",
        extra={
            "user_id": instance.id,
            "created": settings_created,
            "action": "user_settings_initialized",
            "component": "create_user_settings",
        },
    )
