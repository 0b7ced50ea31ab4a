# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from users.models import User as UserModel


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    email: str
    first_name: str


SEED_USERS = (
    SeedUserSpec("Admin", UserModel.ROLE_ADMIN, "admin@example.com", "Admin"),
    SeedUserSpec("Manager", UserModel.ROLE_MANAGER, "manager@example.com", "Store Manager"),
    SeedUserSpec("Cashier", UserModel.ROLE_CASHIER, "cashier@example.com", "Front Till"),
)


def _upsert_user(*, User, spec: SeedUserSpec, password: str):
    """
    Idempotent user seed:
    - create if missing
    - re-align role/staff flags if it exists
    """
    is_admin = spec.role == UserModel.ROLE_ADMIN

    user, created = User.objects.get_or_create(
        email=spec.email,
        defaults={
            "role": spec.role,
            "first_name": spec.first_name,
            "is_staff": True,
            "is_superuser": is_admin,
        },
    )

    dirty = False
    if user.role != spec.role:
        user.role = spec.role
        dirty = True
    if user.is_superuser != is_admin:
        user.is_superuser = is_admin
        dirty = True

    if created:
        user.set_password(password)
        dirty = True

    if dirty:
        user.save()

    return user, created


class Command(BaseCommand):
    help = "Seed POS staff users (admin, manager, cashier)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="If set, resets password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()
        created_count = 0

        for spec in SEED_USERS:
            user, created = _upsert_user(User=User, spec=spec, password=password)

            if force_password and not created:
                user.set_password(password)
                user.save(update_fields=["password"])

            if created:
                created_count += 1
                self.stdout.write(f"created: {spec.label} <{spec.email}> ({spec.role})")
            else:
                self.stdout.write(f"exists:  {spec.label} <{spec.email}> ({spec.role})")

        self.stdout.write(f"Created users: {created_count}")
