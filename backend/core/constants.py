"""
Core constants — **Single Source of Truth** for project-wide magic numbers.

Any business rule that references a fixed value should import it from
here instead of hardcoding.  Deployment-specific values (recipient
addresses, the compliance window) are read from ``settings.FRAUDLENS``
and only fall back to these defaults.
"""

# ── Case identifiers ────────────────────────────────────────────────
# Human-readable case ids look like ``FRD-482913-QX7A``:
#     prefix - last 6 digits of epoch milliseconds - 4 upper alnum
CASE_ID_PREFIX: str = "FRD"
CASE_ID_SUFFIX_LENGTH: int = 4

# ── Section 91 CrPC notice ──────────────────────────────────────────
CRPC_DOCUMENT_PREFIX: str = "91CRPC"
DEFAULT_CRPC_COMPLIANCE_HOURS: int = 48

DEFAULT_AUTHORITY_RECIPIENTS: dict[str, str] = {
    "telecom": "telecom@fraud.gov.in",
    "banking": "banking@fraud.gov.in",
    "nodal": "nodal@fraud.gov.in",
}
