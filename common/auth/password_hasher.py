"""
bcrypt password hashing.

Passwords are pre-hashed with SHA-256 before bcrypt. This handles bcrypt's
72-byte limit and ensures consistent behavior across all password lengths.

Example:
    hasher = PasswordHasher(rounds=10)
    password_hash = hasher.hash_password("Abc123!@")
    assert hasher.verify_password("Abc123!@", password_hash)
"""

import base64
import hashlib

import bcrypt as bcrypt_lib


class PasswordHasher:
    """Salted, one-way bcrypt hashing with a tunable cost factor."""

    def __init__(self, rounds: int = 10):
        """
        Args:
            rounds: bcrypt cost factor (log2 of the iteration count, 4-31)
        """
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds

    @staticmethod
    def _prehash_password(password: str) -> bytes:
        sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
        return base64.b64encode(sha256_hash)

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt with SHA-256 pre-hashing."""
        salt = bcrypt_lib.gensalt(rounds=self.rounds)
        return bcrypt_lib.hashpw(self._prehash_password(password), salt).decode("utf-8")

    def verify_password(self, password: str, hashed: str) -> bool:
        """
        Verify a password against its hash.

        Never raises for bad input: a malformed hash is simply not a match.
        """
        try:
            return bcrypt_lib.checkpw(
                self._prehash_password(password),
                hashed.encode("utf-8"),
            )
        except (ValueError, TypeError, AttributeError):
            return False
