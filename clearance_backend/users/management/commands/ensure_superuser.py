# users/management/commands/ensure_superuser.py

"""
PATH: users/management/commands/ensure_superuser.py

Production-safe superuser bootstrap.

- Reads AUTO_ADMIN_USERNAME + AUTO_ADMIN_PASSWORD from env (django-environ).
- Idempotent: creates superuser if missing; updates password if user exists.
- Does NOT print the password.
"""

from __future__ import annotations

import environ
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

env = environ.Env()


class Command(BaseCommand):
    help = "Create/update an initial superuser from env vars (idempotent)."

    def handle(self, *args, **options):
        username = env.str("AUTO_ADMIN_USERNAME", default="").strip()
        password = env.str("AUTO_ADMIN_PASSWORD", default="").strip()

        if not username or not password:
            self.stdout.write(self.style.WARNING("AUTO_ADMIN_* env vars not set. Skipping."))
            return

        User = get_user_model()

        with transaction.atomic():
            user = User.objects.filter(username=username).first()

            if user:
                user.is_active = True
                user.is_staff = True
                user.is_superuser = True
                user.set_password(password)
                user.save()
                self.stdout.write(self.style.SUCCESS(f"Superuser ensured: {username} (updated)"))
                return

            User.objects.create_superuser(username=username, password=password)
            self.stdout.write(self.style.SUCCESS(f"Superuser ensured: {username} (created)"))
