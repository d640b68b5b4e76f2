import logging

from django.contrib.auth.models import User
from django.contrib.auth.signals import user_logged_in, user_login_failed
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import UserProfile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """Ensure each user has an associated profile."""
    if created and not UserProfile.objects.filter(user=instance).exists():
        role = UserProfile.ADMIN if instance.is_superuser else UserProfile.USER
        UserProfile.objects.create(user=instance, role=role, name=instance.get_full_name())


@receiver(user_logged_in)
def log_login(sender, user, request, **kwargs):
    logger.info("Login ok: %s", user.username)


@receiver(user_login_failed)
def log_login_failed(sender, credentials, request, **kwargs):
    logger.warning("Login failed: %s", credentials.get("username", ""))
