"""
Integration tests — citizen self-registration.

Endpoint under test:  POST /api/accounts/auth/register/
                      (named URL: accounts:register)
Success response:     HTTP 201 with the ``UserDetailSerializer`` payload;
                      the new account always gets the ``user`` role.
Failure responses:    HTTP 400 on validation errors, HTTP 409 when a
                      unique field is already taken.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

User = get_user_model()


def _payload(**overrides):
    data = {
        "username": "priya",
        "password": "Str0ng!Pass99",
        "password_confirm": "Str0ng!Pass99",
        "email": "priya@example.com",
        "phone_number": "+919876543210",
        "first_name": "Priya",
        "last_name": "Sharma",
    }
    data.update(overrides)
    return data


class TestRegistration(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:register")

    def test_register_creates_citizen(self):
        response = self.client.post(self.url, _payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["role"], "user")
        self.assertEqual(response.data["role_display"], "Citizen")
        self.assertNotIn("password", response.data)

        user = User.objects.get(username="priya")
        self.assertTrue(user.check_password("Str0ng!Pass99"))

    def test_role_in_payload_is_ignored(self):
        response = self.client.post(self.url, _payload(role="admin"), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(username="priya").role, "user")

    def test_phone_number_is_optional(self):
        response = self.client.post(self.url, _payload(phone_number=""), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIsNone(User.objects.get(username="priya").phone_number)

    def test_password_mismatch_is_rejected(self):
        response = self.client.post(
            self.url, _payload(password_confirm="Other!Pass99"), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_confirm", response.data)

    def test_malformed_phone_is_rejected(self):
        response = self.client.post(self.url, _payload(phone_number="12-34"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("phone_number", response.data)

    def test_duplicate_email_conflicts(self):
        User.objects.create_user(
            username="someone", email="PRIYA@example.com", password="x" * 10
        )

        response = self.client.post(self.url, _payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "conflict")
        self.assertIn("email", response.data["detail"])
