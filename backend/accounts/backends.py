"""
Login backend for FraudLens accounts.

Citizens sign in with whatever they remember: their username, their
e-mail address, or the mobile number they reported from.  Mobile numbers
are matched in the forms people type them (``98450 12345``,
``+91-98450-12345``, ``919845012345``).

Registered in ``settings.AUTHENTICATION_BACKENDS`` ahead of Django's
``ModelBackend``.
"""

from __future__ import annotations

import logging
import re

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()

logger = logging.getLogger(__name__)

_PHONE_SEPARATORS = re.compile(r"[\s\-().]")
_PHONE_SHAPE = re.compile(r"^\+?\d{7,15}$")

INDIA_DIALING_CODE = "91"


def phone_candidates(identifier: str) -> list[str]:
    """
    Stored forms a typed mobile number may match.

    A bare 10-digit Indian number also matches ``+91…`` and ``91…``;
    a ``+91``/``91`` number also matches its 10-digit local form.
    Returns an empty list when ``identifier`` is not shaped like a phone.
    """
    cleaned = _PHONE_SEPARATORS.sub("", identifier)
    if not _PHONE_SHAPE.match(cleaned):
        return []

    digits = cleaned.lstrip("+")
    local = digits
    if len(digits) == 12 and digits.startswith(INDIA_DIALING_CODE):
        local = digits[len(INDIA_DIALING_CODE):]

    candidates = [cleaned, digits]
    if len(local) == 10:
        candidates += [local, f"{INDIA_DIALING_CODE}{local}", f"+{INDIA_DIALING_CODE}{local}"]
    return list(dict.fromkeys(candidates))


class MultiFieldAuthBackend(ModelBackend):
    """
    Resolve ``identifier`` to exactly one account, then check the password.

    Lookup order is username, then e-mail (case-insensitive), then mobile
    number.  The first field that matches decides; a mobile number shared
    by several accounts matches none of them.
    """

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if identifier is None or password is None:
            return None

        user = self.resolve_identifier(identifier.strip())
        if user is None:
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        logger.info("Rejected login for account id=%s", user.pk)
        return None

    @staticmethod
    def resolve_identifier(identifier: str):
        """Return the single account ``identifier`` names, or ``None``."""
        if not identifier:
            return None

        user = User.objects.filter(username=identifier).first()
        if user is not None:
            return user

        if "@" in identifier:
            matches = list(User.objects.filter(email__iexact=identifier)[:2])
            return matches[0] if len(matches) == 1 else None

        candidates = phone_candidates(identifier)
        if not candidates:
            return None
        matches = list(User.objects.filter(phone_number__in=candidates)[:2])
        return matches[0] if len(matches) == 1 else None
