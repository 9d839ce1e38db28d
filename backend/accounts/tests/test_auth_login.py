"""
Integration tests — login with any unique identifier.

Endpoint under test:  POST /api/accounts/auth/login/
                      (named URL: accounts:login)
Request payload:      {"identifier": "<username|email|phone>", "password": "..."}
Success response:     HTTP 200 with {"access", "refresh", "user"}
Failure response:     HTTP 400 (CustomTokenObtainPairSerializer.validate)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()

_PASSWORD = "Str0ng!Pass99"


class TestLogin(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(
            username="ravi",
            email="ravi@example.com",
            phone_number="+919812345678",
            first_name="Ravi",
            last_name="Kumar",
            password=_PASSWORD,
            role="police",
        )

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:login")

    def _login(self, identifier, password=_PASSWORD):
        return self.client.post(
            self.url, {"identifier": identifier, "password": password}, format="json"
        )

    def test_login_with_username(self):
        response = self._login("ravi")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)
        self.assertEqual(response.data["user"]["id"], self.user.pk)

    def test_login_with_email_is_case_insensitive(self):
        response = self._login("RAVI@example.com")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

    def test_login_with_phone_number(self):
        response = self._login("+919812345678")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

    def test_login_with_phone_as_typed_locally(self):
        for typed in ("98123 45678", "+91-98123-45678", "919812345678"):
            with self.subTest(identifier=typed):
                response = self._login(typed)

                self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

    def test_shared_phone_number_matches_nobody(self):
        User.objects.create_user(
            username="ravi-old",
            email="ravi.old@example.com",
            phone_number="9812345678",
            password=_PASSWORD,
        )

        response = self._login("9812345678")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_phone_candidates(self):
        from accounts.backends import phone_candidates

        self.assertEqual(
            set(phone_candidates("98123 45678")),
            {"9812345678", "919812345678", "+919812345678"},
        )
        self.assertEqual(phone_candidates("ravi"), [])

    def test_access_token_carries_role_and_name(self):
        response = self._login("ravi")

        token = AccessToken(response.data["access"])
        self.assertEqual(token["role"], "police")
        self.assertEqual(token["name"], "Ravi Kumar")

    def test_wrong_password_is_rejected(self):
        response = self._login("ravi", "nope-nope-nope")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertNotIn("access", response.data)

    def test_unknown_identifier_is_rejected(self):
        response = self._login("nobody")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_user_cannot_log_in(self):
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])

        response = self._login("ravi")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_refresh_returns_new_access_token(self):
        refresh = self._login("ravi").data["refresh"]

        response = self.client.post(
            reverse("accounts:token-refresh"), {"refresh": refresh}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
