"""Input screening: sanitization, injection heuristics and upload checks.

These are defense-in-depth screens, not safety guarantees. Parameterized
queries and output encoding remain the actual protection against injection.
"""

from __future__ import annotations

import re
from enum import StrEnum

from authhub.config import UploadPolicy

_SCRIPT_TAG = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_HTML_TAG = re.compile(r"<[^>]*>")
_UNSAFE_CHARS = re.compile(r"[^\w\s@.-]")

_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_PHONE = re.compile(r"^\+?[1-9]\d{1,14}$")
_PHONE_NOISE = re.compile(r"[^\d+]")

_SUSPICIOUS_FILENAME = re.compile(r"[<>:\"/\\|?*]")


class SecurityVulnerability(StrEnum):
    NONE = "none"
    SQL_INJECTION = "sql_injection"
    XSS = "xss"
    PATH_TRAVERSAL = "path_traversal"
    COMMAND_INJECTION = "command_injection"


class FileUploadValidation(StrEnum):
    VALID = "valid"
    FILE_TOO_LARGE = "file_too_large"
    INVALID_FILE_TYPE = "invalid_file_type"
    INVALID_FILE_EXTENSION = "invalid_file_extension"
    SUSPICIOUS_FILE_NAME = "suspicious_file_name"


# Checked in order; first match wins.
_VULNERABILITY_PATTERNS: tuple[tuple[SecurityVulnerability, re.Pattern[str]], ...] = (
    (
        SecurityVulnerability.SQL_INJECTION,
        re.compile(
            r"'|;|--|/\*|\bunion\s+(all\s+)?select\b|\b(or|and)\s+\d+\s*=\s*\d+",
            re.IGNORECASE,
        ),
    ),
    (
        SecurityVulnerability.XSS,
        re.compile(
            r"<script[^>]*>.*?</script>|javascript:|\bon\w+\s*=",
            re.IGNORECASE | re.DOTALL,
        ),
    ),
    (SecurityVulnerability.PATH_TRAVERSAL, re.compile(r"\.\./|\.\.\\")),
    (SecurityVulnerability.COMMAND_INJECTION, re.compile(r"[;&|`$]")),
)


def sanitize_input(text: str) -> str:
    """Strip markup and unsafe characters from free-form input.

    Script elements are removed before generic tag stripping so their bodies
    never survive as plain text.
    """
    text = _SCRIPT_TAG.sub("", text)
    text = _HTML_TAG.sub("", text)
    text = _UNSAFE_CHARS.sub("", text)
    return text.strip()


def classify_vulnerability(text: str) -> SecurityVulnerability:
    """Return the first injection category whose pattern matches ``text``."""
    for category, pattern in _VULNERABILITY_PATTERNS:
        if pattern.search(text):
            return category
    return SecurityVulnerability.NONE


def validate_file_upload(
    file_name: str,
    file_size: int,
    mime_type: str,
    policy: UploadPolicy | None = None,
) -> FileUploadValidation:
    """Check an upload against size, MIME type, extension and name rules.

    Checks run in that order and the first failure is returned.
    """
    policy = policy or UploadPolicy()

    if file_size > policy.max_size_bytes:
        return FileUploadValidation.FILE_TOO_LARGE

    if mime_type.lower() not in policy.allowed_mime_types:
        return FileUploadValidation.INVALID_FILE_TYPE

    extension = file_name.lower().rsplit(".", 1)[-1]
    if extension not in policy.allowed_extensions:
        return FileUploadValidation.INVALID_FILE_EXTENSION

    if _SUSPICIOUS_FILENAME.search(file_name):
        return FileUploadValidation.SUSPICIOUS_FILE_NAME

    return FileUploadValidation.VALID


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL.match(email))


def is_valid_phone_number(phone: str) -> bool:
    return bool(_PHONE.match(_PHONE_NOISE.sub("", phone)))


def mask_sensitive_data(data: str, visible_chars: int = 4) -> str:
    """Mask the middle of a value for logging, e.g. ``+155*****1234``."""
    if len(data) <= visible_chars * 2:
        return "*" * len(data)
    middle = "*" * (len(data) - visible_chars * 2)
    return f"{data[:visible_chars]}{middle}{data[-visible_chars:]}"
