"""Tests for form-level validators."""

import pytest

from authhub.config import PasswordPolicy
from authhub.validation import (
    format_phone_number,
    is_disposable_email,
    validate_email,
    validate_email_domain,
    validate_password,
    validate_password_confirmation,
    validate_phone_number,
    validate_required,
    validate_verification_code,
)


class TestEmailAndRequired:
    """Tests for required and email validators."""

    def test_required(self) -> None:
        assert validate_required("", "Name") == "Name is required"
        assert validate_required(None, "Name") == "Name is required"
        assert validate_required("Ada", "Name") is None

    @pytest.mark.parametrize("value", ["a@b.co", "first.last+tag@example.org"])
    def test_valid_emails(self, value: str) -> None:
        assert validate_email(value) is None

    def test_invalid_emails(self) -> None:
        assert validate_email("") == "Email is required"
        assert validate_email("nope") == "Please enter a valid email address"
        assert validate_email("a b@c.de") == "Please enter a valid email address"


class TestPassword:
    """Tests for password validators."""

    def test_sign_in_only_checks_minimum(self) -> None:
        assert validate_password("abcdef") is None
        assert validate_password("abc") == "Password must be at least 6 characters long"

    def test_sign_up_applies_policy(self) -> None:
        assert validate_password("abcdefgh", is_sign_up=True) == (
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
        assert validate_password("Abcdefg1", is_sign_up=True) is None
        assert validate_password("Abc1", is_sign_up=True) == (
            "Password must be at least 8 characters long"
        )

    def test_relaxed_policy(self) -> None:
        policy = PasswordPolicy(min_length=10, require_strong=False)
        assert validate_password("lowercaseonly", is_sign_up=True, policy=policy) is None
        assert validate_password("short", is_sign_up=True, policy=policy) == (
            "Password must be at least 10 characters long"
        )

    def test_confirmation(self) -> None:
        assert validate_password_confirmation("", "x") == "Please confirm your password"
        assert validate_password_confirmation("a", "b") == "Passwords do not match"
        assert validate_password_confirmation("same", "same") is None


class TestPhone:
    """Tests for phone validators and formatting."""

    def test_requires_country_code(self) -> None:
        assert validate_phone_number("5551234567") == "Please include country code (e.g., +1 for US)"

    def test_us_numbers_need_ten_digits(self) -> None:
        assert validate_phone_number("+1 555 123 456") == (
            "US/Canada numbers should be 10 digits after +1"
        )
        assert validate_phone_number("+1 (555) 123-4567") is None

    def test_length_bounds(self) -> None:
        assert validate_phone_number("+44123") == "Please enter a valid phone number"
        assert validate_phone_number("+4412345678901234") == "Phone number is too long"
        assert validate_phone_number("+442071234567") is None

    def test_verification_code(self) -> None:
        assert validate_verification_code("") == "Verification code is required"
        assert validate_verification_code("123") == "Verification code must be 6 digits"
        assert validate_verification_code("12a456") == "Verification code must contain only numbers"
        assert validate_verification_code("123456") is None
        assert validate_verification_code("1234", expected_length=4) is None

    @pytest.mark.parametrize(
        ("raw", "formatted"),
        [
            ("+15551234567", "+1 (555) 123-4567"),
            ("+1 555-123-4567", "+1 (555) 123-4567"),
            ("+442071234567", "+44 207 1234567"),
            ("+4420", "+44 20"),
            ("+44", "+44"),
        ],
    )
    def test_format(self, raw: str, formatted: str) -> None:
        assert format_phone_number(raw) == formatted


class TestDomains:
    """Tests for domain restrictions."""

    def test_no_restriction(self) -> None:
        assert validate_email_domain("a@anything.com", None) is None
        assert validate_email_domain("a@anything.com", []) is None

    def test_allowed_domain(self) -> None:
        assert validate_email_domain("a@Corp.com", ["corp.com"]) is None

    def test_rejected_domain(self) -> None:
        message = validate_email_domain("a@gmail.com", ["corp.com", "corp.io"])
        assert message == "Email domain not allowed. Please use: corp.com, corp.io"

    def test_disposable(self) -> None:
        assert is_disposable_email("x@Mailinator.com")
        assert not is_disposable_email("x@example.com")
