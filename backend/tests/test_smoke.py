"""
Smoke tests: the project boots and the schema renders.
"""

from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient


class SmokeTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_schema_renders(self):
        response = self.client.get(reverse("schema"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(b"/api/case-flow/{case_id}/progress/", response.content)

    def test_docs_page_renders(self):
        response = self.client.get(reverse("swagger-ui"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_protected_endpoints_require_a_token(self):
        for url in (
            reverse("case-flow-list"),
            reverse("scammer-list"),
            reverse("core:dashboard-stats"),
            reverse("accounts:me"),
        ):
            with self.subTest(url=url):
                self.assertEqual(
                    self.client.get(url).status_code, status.HTTP_401_UNAUTHORIZED
                )

    def test_unknown_domain_errors_use_the_json_envelope(self):
        from core.domain.exception_handler import domain_exception_handler
        from core.domain.exceptions import DomainError, NotFound, SideEffectFailure

        self.assertIsNone(domain_exception_handler(RuntimeError("x"), {}))

        response = domain_exception_handler(NotFound("gone"), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"detail": "gone", "code": "not_found"})

        response = domain_exception_handler(
            SideEffectFailure("smtp", step=4, collaborator="authority_notifier"), {}
        )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.data["step"], 4)

        response = domain_exception_handler(DomainError("bad"), {})
        self.assertEqual(response.status_code, 400)

