"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

import re
from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import UserRole

User = get_user_model()

PHONE_PATTERN = re.compile(r"^\+?\d{10,14}$")


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.ModelSerializer):
    """
    Validates new-user registration data.

    Required fields: username, password, email, first_name, last_name.
    ``phone_number`` is optional.

    The ``password`` field is write-only and will be hashed by the
    service layer before persisting.  The response after a successful
    registration is handled by ``UserDetailSerializer``.
    """

    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Minimum 8 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )
    phone_number = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
        max_length=15,
    )

    class Meta:
        model = User
        fields = [
            "username",
            "password",
            "password_confirm",
            "email",
            "phone_number",
            "first_name",
            "last_name",
        ]
        extra_kwargs = {
            "username": {"validators": []},
            "email": {"required": True, "validators": []},
            "first_name": {"required": True},
            "last_name": {"required": True},
        }

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Cross-field validation:
        1. Ensure password and password_confirm match.
        2. Validate phone_number format when one is given.
        """
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )

        phone = attrs.get("phone_number") or None
        if phone is not None and not PHONE_PATTERN.match(phone):
            raise serializers.ValidationError(
                {"phone_number": "Phone number must contain 10 to 14 digits (e.g. +919876543210)."}
            )
        attrs["phone_number"] = phone

        attrs.pop("password_confirm")
        return attrs


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Injects the workflow ``role`` claim into the JWT payload.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username, Phone Number, or Email.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        """
        Add the role claim to the JWT payload so the frontend can pick
        the right dashboard without a separate API call.
        """
        token = super().get_token(user)
        token["role"] = "admin" if user.is_superuser else user.role
        token["name"] = user.get_full_name() or user.username
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Authenticate using the custom ``MultiFieldAuthBackend``.

        Returns a dict containing ``access`` and ``refresh``; the
        authenticated user is kept on ``self.user`` for the view.
        """
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        if not user.is_active:
            raise serializers.ValidationError(
                {"detail": "User account is disabled."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


class TokenResponseSerializer(serializers.Serializer):
    """Schema-only: the JWT token pair returned after successful login."""

    access = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)
    user = serializers.DictField(read_only=True)


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation (used in me, login and registration
    responses).
    """

    role_display = serializers.CharField(source="get_role_display", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone_number",
            "first_name",
            "last_name",
            "is_active",
            "date_joined",
            "role",
            "role_display",
            "badge_number",
        ]
        read_only_fields = [
            "id",
            "username",
            "date_joined",
            "is_active",
            "role",
            "role_display",
            "badge_number",
        ]


class OfficerSerializer(serializers.ModelSerializer):
    """Compact police-officer entry for the assignment drop-down."""

    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "full_name", "email", "badge_number"]
        read_only_fields = fields


class UserListSerializer(serializers.ModelSerializer):
    """Admin view of an account, with the number of reports it filed."""

    role_display = serializers.CharField(source="get_role_display", read_only=True)
    case_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone_number",
            "first_name",
            "last_name",
            "role",
            "role_display",
            "badge_number",
            "is_active",
            "date_joined",
            "case_count",
        ]
        read_only_fields = fields


class AssignRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=UserRole.choices)
    badge_number = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        max_length=30,
        help_text="Stored when the new role is police.",
    )


class MeUpdateSerializer(serializers.ModelSerializer):
    """
    Allows the authenticated user to update limited profile fields.
    Sensitive fields (role, is_active, username) are read-only and
    cannot be self-modified.
    """

    class Meta:
        model = User
        fields = [
            "email",
            "phone_number",
            "first_name",
            "last_name",
        ]
        extra_kwargs = {
            "email": {"validators": []},
            "phone_number": {"validators": []},
        }

    def validate_email(self, value: str) -> str:
        if (
            self.instance
            and User.objects.exclude(pk=self.instance.pk)
            .filter(email__iexact=value)
            .exists()
        ):
            raise serializers.ValidationError(
                "This email is already in use by another account."
            )
        return value

    def validate_phone_number(self, value: str | None) -> str | None:
        if not value:
            return None
        if not PHONE_PATTERN.match(value):
            raise serializers.ValidationError(
                "Phone number must contain 10 to 14 digits (e.g. +919876543210)."
            )
        if (
            self.instance
            and User.objects.exclude(pk=self.instance.pk)
            .filter(phone_number=value)
            .exists()
        ):
            raise serializers.ValidationError(
                "This phone number is already in use by another account."
            )
        return value
