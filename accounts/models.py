from django.contrib.auth.models import User
from django.db import models


class UserProfile(models.Model):
    """Extend Django's User with a station role."""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"
    ROLE_CHOICES = [
        (ADMIN, "Administrator"),
        (MANAGER, "Manager"),
        (USER, "Operator"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=USER)
    name = models.CharField(max_length=120, blank=True)

    def __str__(self):
        return f"{self.user.username} ({self.get_role_display()})"

    @property
    def is_manager(self) -> bool:
        return self.role in (self.ADMIN, self.MANAGER)


def role_of(user):
    """Role of ``user`` or ``None`` for anonymous/profile-less users."""
    if not user or not user.is_authenticated:
        return None
    profile = getattr(user, "profile", None)
    return profile.role if profile else None
