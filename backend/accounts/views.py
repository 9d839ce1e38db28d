"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``RegisterView``       — POST /auth/register/
- ``LoginView``          — POST /auth/login/
- ``MeView``             — GET / PATCH /me/
- ``OfficerListView``    — GET /officers/
- ``UserViewSet``        — GET /users/, GET /users/{id}/, PATCH /users/{id}/assign-role/
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import Actor

from .serializers import (
    AssignRoleSerializer,
    CustomTokenObtainPairSerializer,
    MeUpdateSerializer,
    OfficerSerializer,
    RegisterRequestSerializer,
    TokenResponseSerializer,
    UserDetailSerializer,
    UserListSerializer,
)
from .services import (
    CurrentUserService,
    OfficerDirectoryService,
    UserManagementService,
    UserRegistrationService,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class RegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register/

    Public endpoint.  Creates a new account with the ``user`` role.

    Request body  → ``RegisterRequestSerializer``
    Response body → ``UserDetailSerializer`` (201 Created)
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = RegisterRequestSerializer

    @extend_schema(
        summary="Register a citizen account",
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="Account created."),
            409: OpenApiResponse(description="Username, email or phone already taken."),
        },
        tags=["Accounts"],
    )
    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_user(serializer.validated_data)
        response_serializer = UserDetailSerializer(user)
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates a user via any of the three
    unique identifiers (username, phone_number, email) plus password.

    Request body  → ``{"identifier": ..., "password": ...}``
    Response body → ``{"access", "refresh", "user"}`` (200 OK)
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        request=CustomTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(response=TokenResponseSerializer, description="JWT pair and profile."),
            400: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = serializer.validated_data  # contains 'access' and 'refresh'
        payload["user"] = UserDetailSerializer(serializer.user).data

        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") View
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET  /api/accounts/me/  → Retrieve current user profile.
    PATCH /api/accounts/me/ → Update own profile fields.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user profile",
        responses={200: OpenApiResponse(response=UserDetailSerializer)},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        return Response(UserDetailSerializer(request.user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update own profile",
        request=MeUpdateSerializer,
        responses={200: OpenApiResponse(response=UserDetailSerializer)},
        tags=["Accounts"],
    )
    def patch(self, request: Request) -> Response:
        serializer = MeUpdateSerializer(
            instance=request.user,
            data=request.data,
            partial=True,
        )
        serializer.is_valid(raise_exception=True)
        user = CurrentUserService.update_profile(request.user, serializer.validated_data)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Officer Directory
# ═══════════════════════════════════════════════════════════════════


class OfficerListView(APIView):
    """
    GET /api/accounts/officers/

    Active police officers an admin can attach to a case.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List police officers",
        responses={
            200: OpenApiResponse(response=OfficerSerializer(many=True)),
            403: OpenApiResponse(description="Caller is not an admin."),
        },
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        officers = OfficerDirectoryService.list_officers(Actor.from_user(request.user))
        return Response(OfficerSerializer(officers, many=True).data, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  User Management ViewSet
# ═══════════════════════════════════════════════════════════════════


class UserViewSet(viewsets.ViewSet):
    """
    /api/accounts/users/

    Administrative user management (list, retrieve, assign-role).
    Admin only; the checks live in ``UserManagementService``.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List users",
        parameters=[
            OpenApiParameter("role", str, description="user, admin or police."),
            OpenApiParameter("is_active", bool),
            OpenApiParameter("search", str, description="Username, name, e-mail or phone."),
        ],
        responses={
            200: UserListSerializer(many=True),
            403: OpenApiResponse(description="Caller is not an admin."),
        },
        tags=["Accounts"],
    )
    def list(self, request: Request) -> Response:
        params = request.query_params
        is_active = params.get("is_active")
        users = UserManagementService.list_users(
            Actor.from_user(request.user),
            role=params.get("role") or None,
            is_active=None if is_active is None else is_active.lower() in ("1", "true"),
            search=params.get("search") or None,
        )
        return Response(UserListSerializer(users, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="User detail",
        responses={200: UserListSerializer, 404: OpenApiResponse(description="Unknown user.")},
        tags=["Accounts"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        user = UserManagementService.get_user(Actor.from_user(request.user), int(pk))
        return Response(UserListSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Change a user's role",
        request=AssignRoleSerializer,
        responses={
            200: UserListSerializer,
            400: OpenApiResponse(description="Invalid role or own account."),
            403: OpenApiResponse(description="Caller is not an admin."),
            409: OpenApiResponse(description="Officer still holds open cases."),
        },
        tags=["Accounts"],
    )
    @action(detail=True, methods=["patch"], url_path="assign-role")
    def assign_role(self, request: Request, pk: str = None) -> Response:
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserManagementService.assign_role(
            Actor.from_user(request.user),
            int(pk),
            serializer.validated_data["role"],
            badge_number=serializer.validated_data["badge_number"],
        )
        return Response(UserListSerializer(user).data, status=status.HTTP_200_OK)
