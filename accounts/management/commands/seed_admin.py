from django.conf import settings
from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import UserProfile

FALLBACK_PASSWORD = "admin123"


class Command(BaseCommand):
    help = (
        "Ensure the default administrator account exists. Creates it or "
        "resets name, password, role and active flag of the existing one."
    )

    def add_arguments(self, parser):
        parser.add_argument("--username", default=None, help="Defaults to DEFAULT_ADMIN_USERNAME.")
        parser.add_argument("--password", default=None, help="Defaults to DEFAULT_ADMIN_PASSWORD.")
        parser.add_argument("--name", default=None, help="Defaults to DEFAULT_ADMIN_NAME.")

    @transaction.atomic
    def handle(self, *args, **options):
        username = options.get("username") or settings.DEFAULT_ADMIN_USERNAME
        name = options.get("name") or settings.DEFAULT_ADMIN_NAME
        password = options.get("password") or settings.DEFAULT_ADMIN_PASSWORD
        if not password:
            self.stderr.write(
                self.style.WARNING(
                    f'DEFAULT_ADMIN_PASSWORD not set, using fallback password "{FALLBACK_PASSWORD}". '
                    "Change it in production!"
                )
            )
            password = FALLBACK_PASSWORD

        user, created = User.objects.get_or_create(username=username)
        user.set_password(password)
        user.is_active = True
        user.is_staff = True
        user.save()

        profile, _ = UserProfile.objects.get_or_create(user=user)
        profile.name = name
        profile.role = UserProfile.ADMIN
        profile.save(update_fields=["name", "role"])

        verb = "created" if created else "updated"
        self.stdout.write(self.style.SUCCESS(f"Default admin {verb}: {username} (ADMIN)"))
