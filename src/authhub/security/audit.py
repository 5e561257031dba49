"""Audit log entries and a best-effort in-process rate limiter.

Neither ``create_audit_log_entry`` nor ``RateLimiter.check`` ever raises: audit and
throttling are advisory.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from authhub.security.tokens import generate_secure_token

log = structlog.get_logger()


def create_audit_log_entry(
    action: str,
    member_id: str,
    *,
    resource: str | None = None,
    details: str | None = None,
    success: bool = True,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> dict[str, Any]:
    """Build a JSON-serializable audit record for a security event."""
    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "action": action,
        "member_id": member_id,
        "resource": resource,
        "details": details,
        "success": success,
        "ip_address": ip_address,
        "user_agent": user_agent,
        "entry_id": generate_secure_token(16),
    }


class RateLimiter:
    """Moving-window request counter keyed by identifier.

    Backed by ``limits`` in-memory storage, so it is single-process. Expired
    windows are dropped by the storage, not kept per identifier.
    """

    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)
        self._storage = MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self._storage)

    def check(self, identifier: str) -> bool:
        """Record an attempt and return whether it is within the limit."""
        try:
            return self._strategy.hit(self._item, identifier)
        except Exception as e:  # noqa: BLE001 - limiter is advisory
            log.warning("rate_limiter_failed_open", identifier=identifier, error=str(e))
            return True

    def remaining(self, identifier: str) -> int:
        return self._strategy.get_window_stats(self._item, identifier).remaining

    def reset(self, identifier: str | None = None) -> None:
        if identifier is None:
            self._storage.reset()
        else:
            self._strategy.clear(self._item, identifier)
