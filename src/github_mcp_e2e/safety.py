"""Redaction helpers.

Anything the harness logs (call events, tool error text, transport failures) passes
through these helpers first so the e2e token, or anything that looks like a GitHub
credential, never ends up in CI output.
"""

from __future__ import annotations

import re
from typing import Any

REDACTED = "<redacted>"

_CRED_FIELD_NAMES = {
    "token",
    "access_token",
    "authorization",
    "password",
    "private_key",
    "github_personal_access_token",
}

_TOKEN_PREFIXES = (
    "ghp_",
    "gho_",
    "ghu_",
    "ghs_",
    "ghr_",
    "github_pat_",
)

_TOKEN_RE = re.compile(r"\b(?:gh[pousr]_[A-Za-z0-9]{16,}|github_pat_[A-Za-z0-9_]{16,})")
_BEARER_RE = re.compile(r"(?i)\bbearer\s+\S+")


def looks_like_secret_value(value: str) -> bool:
    """Return True if the whole value looks like a credential."""
    if not isinstance(value, str):
        return False
    lowered = value.lstrip().lower()
    if lowered.startswith("bearer "):
        return True
    return lowered.startswith(_TOKEN_PREFIXES)


def looks_like_credential_field_name(field_name: str) -> bool:
    """Return True if a key name looks like a credential field."""
    if not isinstance(field_name, str):
        return False
    return field_name.strip().lower() in _CRED_FIELD_NAMES


def redact_text(text: str, *secrets: str) -> str:
    """Return text with known secrets and token-looking substrings masked."""
    if not isinstance(text, str):
        return "<non-string>"
    out = text
    for secret in secrets:
        if secret:
            out = out.replace(secret, REDACTED)
    out = _BEARER_RE.sub(f"Bearer {REDACTED}", out)
    return _TOKEN_RE.sub(REDACTED, out)


def redact_arguments(obj: Any, *secrets: str) -> Any:
    """Return a copy of tool arguments that is safe to log."""
    if isinstance(obj, dict):
        out: dict[str, Any] = {}
        for k, v in obj.items():
            if looks_like_credential_field_name(str(k)):
                out[k] = REDACTED
            else:
                out[k] = redact_arguments(v, *secrets)
        return out
    if isinstance(obj, list):
        return [redact_arguments(item, *secrets) for item in obj]
    if isinstance(obj, str):
        if looks_like_secret_value(obj):
            return REDACTED
        return redact_text(obj, *secrets)
    return obj
