"""
Accounts app models.

Defines the closed role enumeration and a custom User model that extends
Django's ``AbstractUser``.  Login is supported via any one of username,
e-mail, or phone number (see ``accounts.backends``).
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    """
    The three roles known to the case workflow.

    The set is closed: the role gateway in ``cases.gateway`` matches on
    these values, so adding a role means adding gateway rules too.
    """

    USER = "user", "Citizen"
    ADMIN = "admin", "Administrator"
    POLICE = "police", "Police Officer"


class User(AbstractUser):
    """
    Custom user model for FraudLens.

    Registration requires at minimum: username, password, email,
    first_name and last_name; ``phone_number`` is optional but unique when
    given.  New accounts always start with the ``user`` role; admins and
    police officers are provisioned by staff (Django admin or
    ``createsuperuser``).
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    phone_number = models.CharField(
        max_length=15,
        unique=True,
        null=True,
        blank=True,
        verbose_name="Phone Number",
        db_index=True,
    )
    role = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        default=UserRole.USER,
        db_index=True,
        verbose_name="Role",
    )
    badge_number = models.CharField(
        max_length=30,
        blank=True,
        default="",
        verbose_name="Badge Number",
        help_text="Police officers only.",
    )

    REQUIRED_FIELDS = ["email", "first_name", "last_name"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_full_name()}) - {self.get_role_display()}"

    # ── Helper predicates for role checks ────────────────────────────

    def has_role(self, role: str) -> bool:
        """Check if the user's role matches the given value."""
        return self.role == role

    @property
    def is_police(self) -> bool:
        return self.role == UserRole.POLICE

    @property
    def is_case_admin(self) -> bool:
        """Admins and superusers both manage the case workflow."""
        return self.is_superuser or self.role == UserRole.ADMIN
