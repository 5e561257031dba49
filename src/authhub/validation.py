"""Form-level validation for sign-in and sign-up input.

Each validator returns a user-facing error message, or None when the value is
acceptable.
"""

from __future__ import annotations

import re

from authhub.config import PasswordPolicy

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MIXED_CASE_DIGIT = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
_PHONE_NOISE = re.compile(r"[^\d+]")
_DIGITS = re.compile(r"^\d+$")

SIGN_IN_MIN_PASSWORD = 6

DISPOSABLE_EMAIL_DOMAINS = frozenset(
    {
        "10minutemail.com",
        "guerrillamail.com",
        "mailinator.com",
        "tempmail.org",
        "throwaway.email",
        "temp-mail.org",
        "yopmail.com",
        "maildrop.cc",
        "sharklasers.com",
        "grr.la",
    }
)


def validate_required(value: str | None, field_name: str) -> str | None:
    if not value:
        return f"{field_name} is required"
    return None


def validate_email(value: str | None) -> str | None:
    if not value:
        return "Email is required"
    if not _EMAIL.match(value):
        return "Please enter a valid email address"
    return None


def validate_password(
    value: str | None,
    *,
    is_sign_up: bool = False,
    policy: PasswordPolicy | None = None,
) -> str | None:
    """Validate a password; sign-up applies the full policy."""
    if not value:
        return "Password is required"

    if not is_sign_up:
        if len(value) < SIGN_IN_MIN_PASSWORD:
            return f"Password must be at least {SIGN_IN_MIN_PASSWORD} characters long"
        return None

    policy = policy or PasswordPolicy()
    if len(value) < policy.min_length:
        return f"Password must be at least {policy.min_length} characters long"
    if policy.require_strong and not _MIXED_CASE_DIGIT.match(value):
        return (
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
    return None


def validate_password_confirmation(value: str | None, original: str | None) -> str | None:
    if not value:
        return "Please confirm your password"
    if value != original:
        return "Passwords do not match"
    return None


def validate_phone_number(value: str | None) -> str | None:
    """Validate an E.164-style number; a leading country code is required."""
    if not value:
        return "Phone number is required"

    cleaned = _PHONE_NOISE.sub("", value)
    if not cleaned.startswith("+"):
        return "Please include country code (e.g., +1 for US)"
    if len(cleaned) < 8:
        return "Please enter a valid phone number"
    if len(cleaned) > 16:
        return "Phone number is too long"
    if cleaned.startswith("+1") and len(cleaned) != 12:
        return "US/Canada numbers should be 10 digits after +1"
    return None


def validate_verification_code(value: str | None, *, expected_length: int = 6) -> str | None:
    if not value:
        return "Verification code is required"
    if len(value) != expected_length:
        return f"Verification code must be {expected_length} digits"
    if not _DIGITS.match(value):
        return "Verification code must contain only numbers"
    return None


def validate_email_domain(email: str | None, allowed_domains: list[str] | None) -> str | None:
    """Restrict an email to a set of domains; no restriction when the list is empty."""
    if email is None or not allowed_domains:
        return None

    if (problem := validate_email(email)) is not None:
        return problem

    domain = email.rsplit("@", 1)[-1].lower()
    if domain not in {d.lower() for d in allowed_domains}:
        return f"Email domain not allowed. Please use: {', '.join(allowed_domains)}"
    return None


def is_disposable_email(email: str) -> bool:
    return email.rsplit("@", 1)[-1].lower() in DISPOSABLE_EMAIL_DOMAINS


def format_phone_number(phone: str) -> str:
    """Format a number for display: ``+1 (555) 123-4567`` or ``+44 207 1234567``."""
    cleaned = _PHONE_NOISE.sub("", phone)

    if cleaned.startswith("+1") and len(cleaned) >= 11:
        digits = cleaned[2:]
        return f"+1 ({digits[:3]}) {digits[3:6]}-{digits[6:10]}"

    if cleaned.startswith("+") and len(cleaned) > 1:
        rest = cleaned[1:]
        if len(rest) <= 3:
            return f"+{rest}"
        if len(rest) <= 6:
            return f"+{rest[:2]} {rest[2:]}"
        return f"+{rest[:2]} {rest[2:5]} {rest[5:]}"

    return cleaned or phone
