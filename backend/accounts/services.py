"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the result
wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``  — handles new-user creation flow.
- ``OfficerDirectoryService``  — police officers available for assignment.
- ``UserManagementService``    — admin listing and role changes.
- ``CurrentUserService``       — "Me" endpoint helpers.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Q, QuerySet

from core.domain.access import Actor, require_role
from core.domain.exceptions import Conflict, DomainError, NotFound
from cases.stages import TERMINAL_STEP

from .models import UserRole

User = get_user_model()

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """Encapsulates the citizen self-registration flow."""

    @staticmethod
    def register_user(validated_data: dict[str, Any]) -> User:
        """
        Create a new account with the ``user`` role.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``RegisterRequestSerializer`` containing
            ``username``, ``password``, ``email``, ``phone_number``,
            ``first_name``, ``last_name``.

        Returns
        -------
        User
            The newly created (and saved) ``User`` instance.

        Raises
        ------
        core.domain.exceptions.Conflict
            If a unique field (username, email, phone_number) is
            already taken.
        """
        validated_data.pop("password_confirm", None)
        password = validated_data.pop("password")

        # Pre-check uniqueness for deterministic, field-specific errors
        conflicts = []
        if User.objects.filter(username=validated_data.get("username")).exists():
            conflicts.append("username")
        if User.objects.filter(email__iexact=validated_data.get("email")).exists():
            conflicts.append("email")
        phone = validated_data.get("phone_number")
        if phone and User.objects.filter(phone_number=phone).exists():
            conflicts.append("phone_number")

        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}."
            )

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    password=password,
                    role=UserRole.USER,
                    **validated_data,
                )
        except IntegrityError:
            raise Conflict(
                "A user with one of the provided unique fields already exists."
            )

        logger.info("Registered user %s (id=%s)", user.username, user.pk)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Officer Directory
# ═══════════════════════════════════════════════════════════════════


class OfficerDirectoryService:
    """Lookup helpers for police officers that can be attached to cases."""

    @staticmethod
    def list_officers(actor: Actor) -> QuerySet:
        """Return every active police officer.  Admin only."""
        require_role(actor, UserRole.ADMIN, message="Only administrators can list officers.")
        return User.objects.filter(
            role=UserRole.POLICE,
            is_active=True,
        ).order_by("last_name", "first_name", "username")

    @staticmethod
    def get_officer(officer_id: int) -> User:
        """
        Resolve an active police officer by primary key.

        Raises
        ------
        NotFound
            If no user with that id exists.
        DomainError
            If the user exists but is not an active police officer.
        """
        try:
            officer = User.objects.get(pk=officer_id)
        except User.DoesNotExist:
            raise NotFound(f"User with id {officer_id} does not exist.")

        if officer.role != UserRole.POLICE or not officer.is_active:
            raise DomainError(
                f"User '{officer.username}' is not an active police officer."
            )
        return officer


# ═══════════════════════════════════════════════════════════════════
#  User Management Service
# ═══════════════════════════════════════════════════════════════════


class UserManagementService:
    """
    Administrative operations on users: listing and role assignment.

    Every method is admin only.
    """

    @staticmethod
    def list_users(
        actor: Actor,
        *,
        role: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> QuerySet:
        """
        Return a filtered queryset of users, newest first.

        Each row is annotated with ``case_count``, the number of reports
        the account filed.  ``search`` matches username, name, e-mail or
        phone number, case-insensitively.
        """
        require_role(actor, UserRole.ADMIN, message="Only administrators can manage users.")

        qs = User.objects.annotate(case_count=Count("reported_cases"))
        if role:
            qs = qs.filter(role=role)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        if search:
            qs = qs.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(phone_number__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
            )
        return qs.order_by("-date_joined", "-pk")

    @staticmethod
    def get_user(actor: Actor, user_id: int) -> User:
        """Return a single annotated user or raise ``NotFound``."""
        try:
            return UserManagementService.list_users(actor).get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound(f"User with id {user_id} does not exist.")

    @staticmethod
    def assign_role(
        actor: Actor,
        user_id: int,
        role: str,
        *,
        badge_number: str = "",
    ) -> User:
        """
        Change a user's role.

        Raises
        ------
        DomainError
            If the administrator targets their own account.
        Conflict
            If a police officer losing the role is still assigned to an
            open case.
        NotFound
            If no user with that id exists.
        """
        require_role(actor, UserRole.ADMIN, message="Only administrators can assign roles.")
        if actor.id == user_id:
            raise DomainError("Administrators cannot change their own role.")

        with transaction.atomic():
            try:
                user = User.objects.select_for_update().get(pk=user_id)
            except User.DoesNotExist:
                raise NotFound(f"User with id {user_id} does not exist.")

            if user.role == UserRole.POLICE and role != UserRole.POLICE:
                open_cases = user.assigned_cases.filter(current_step__lt=TERMINAL_STEP).count()
                if open_cases:
                    raise Conflict(
                        f"Officer '{user.username}' is still assigned to "
                        f"{open_cases} open case(s); reassign them first."
                    )

            previous = user.role
            user.role = role
            update_fields = ["role"]
            if role == UserRole.POLICE and badge_number:
                user.badge_number = badge_number
                update_fields.append("badge_number")
            user.save(update_fields=update_fields)

        logger.info(
            "User %s role changed %s -> %s by actor %s",
            user.pk, previous, role, actor.id,
        )
        return UserManagementService.get_user(actor, user.pk)


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Helpers for the ``/me/`` endpoint."""

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """Apply the validated profile changes and save."""
        for field, value in validated_data.items():
            setattr(user, field, value)
        user.save(update_fields=list(validated_data))
        return user
