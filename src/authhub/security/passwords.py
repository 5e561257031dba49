"""Password strength scoring."""

from __future__ import annotations

import re
from enum import StrEnum

MIN_LENGTH = 8

_LOWER = re.compile(r"[a-z]")
_UPPER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")
_SYMBOL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")
_REPEATED = re.compile(r"(.)\1{2,}")
_SEQUENTIAL = re.compile(r"(012|123|234|345|456|567|678|789|890|abc|bcd|cde)")


class PasswordStrength(StrEnum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


def password_score(password: str) -> int:
    """Raw score behind ``classify_password_strength``.

    Length >= 12 adds 2 (>= 10 adds 1). Lowercase, uppercase and digits add 1
    each, a symbol adds 2. No run of 3+ identical characters adds 1. No
    sequential run (``012``..``890``, ``abc``..``cde``) adds 1, but only when
    the repeated-run bonus was also earned.
    """
    score = 0

    if len(password) >= 12:
        score += 2
    elif len(password) >= 10:
        score += 1

    if _LOWER.search(password):
        score += 1
    if _UPPER.search(password):
        score += 1
    if _DIGIT.search(password):
        score += 1
    if _SYMBOL.search(password):
        score += 2

    if not _REPEATED.search(password):
        score += 1
        if not _SEQUENTIAL.search(password.lower()):
            score += 1

    return score


def classify_password_strength(password: str) -> PasswordStrength:
    """Classify a password; anything shorter than 8 characters is weak."""
    if len(password) < MIN_LENGTH:
        return PasswordStrength.WEAK

    score = password_score(password)
    if score >= 7:
        return PasswordStrength.STRONG
    if score >= 4:
        return PasswordStrength.MEDIUM
    return PasswordStrength.WEAK


def password_suggestions(password: str) -> list[str]:
    """Human-readable hints for improving a password."""
    suggestions: list[str] = []
    if len(password) < MIN_LENGTH:
        suggestions.append("Use at least 8 characters")
    if not _LOWER.search(password):
        suggestions.append("Include lowercase letters")
    if not _UPPER.search(password):
        suggestions.append("Include uppercase letters")
    if not _DIGIT.search(password):
        suggestions.append("Include numbers")
    if not _SYMBOL.search(password):
        suggestions.append("Include special characters")
    if _REPEATED.search(password):
        suggestions.append("Avoid repeating characters")
    if _SEQUENTIAL.search(password.lower()):
        suggestions.append("Avoid sequences like 123 or abc")
    return suggestions
