"""
One-time email verification codes.

Codes are six-digit integers drawn uniformly from [100000, 999999].
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional


class VerificationCodeIssuer:
    """
    Issues and checks numeric verification codes.
    """

    CODE_MIN = 100000
    CODE_MAX = 999999

    def __init__(self, expire_minutes: int = 24 * 60):
        """
        Args:
            expire_minutes: Lifetime of an issued code
        """
        self._ttl = timedelta(minutes=expire_minutes)

    def issue(self) -> int:
        """Generate a new code."""
        return self.CODE_MIN + secrets.randbelow(self.CODE_MAX - self.CODE_MIN + 1)

    def expires_at(self, now: Optional[datetime] = None) -> datetime:
        """Expiry timestamp for a code issued at ``now``."""
        return (now or datetime.now(timezone.utc)) + self._ttl

    @staticmethod
    def check(submitted: int, stored: Optional[int]) -> bool:
        """Exact comparison. A missing stored code never matches."""
        if stored is None:
            return False
        return submitted == stored

    @staticmethod
    def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
        """Codes without a recorded expiry are treated as still valid."""
        if expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) > expires_at
