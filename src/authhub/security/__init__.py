"""Stateless security primitives.

Every function here is pure and safe to call concurrently.
"""

from authhub.security.audit import RateLimiter, create_audit_log_entry
from authhub.security.hashing import HashedSecret, hash_data, verify_hashed_data
from authhub.security.passwords import (
    PasswordStrength,
    classify_password_strength,
    password_suggestions,
)
from authhub.security.screening import (
    FileUploadValidation,
    SecurityVulnerability,
    classify_vulnerability,
    is_valid_email,
    is_valid_phone_number,
    mask_sensitive_data,
    sanitize_input,
    validate_file_upload,
)
from authhub.security.sessions import (
    SessionDescriptor,
    create_session,
    is_valid_session,
    revoke_session,
    update_session_activity,
)
from authhub.security.tokens import (
    generate_csrf_token,
    generate_secure_token,
    validate_csrf_token,
)

__all__ = [
    "FileUploadValidation",
    "HashedSecret",
    "PasswordStrength",
    "RateLimiter",
    "SecurityVulnerability",
    "SessionDescriptor",
    "classify_password_strength",
    "classify_vulnerability",
    "create_audit_log_entry",
    "create_session",
    "generate_csrf_token",
    "generate_secure_token",
    "hash_data",
    "is_valid_email",
    "is_valid_phone_number",
    "is_valid_session",
    "mask_sensitive_data",
    "password_suggestions",
    "revoke_session",
    "sanitize_input",
    "update_session_activity",
    "validate_csrf_token",
    "validate_file_upload",
    "verify_hashed_data",
]
