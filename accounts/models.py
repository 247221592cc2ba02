"""
Account record.

Typed view over a document of the ``users`` collection. Stored keys are
camelCase; attributes are snake_case.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["user", "admin"]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes coming back from Mongo as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Account(BaseModel):
    """A registered user with credentials and verification state."""

    id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str = Field(repr=False)
    role: Role = "user"
    is_verified: bool = False
    verification_code: Optional[int] = Field(None, repr=False)
    verification_code_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Account":
        """Build an Account from a raw ``users`` document."""
        return cls(
            id=str(doc["_id"]),
            first_name=doc["firstName"],
            last_name=doc["lastName"],
            email=doc["email"],
            password_hash=doc["password"],
            role=doc.get("role", "user"),
            is_verified=doc.get("isVerified", False),
            verification_code=doc.get("verificationCode"),
            verification_code_expires_at=_as_utc(doc.get("verificationCodeExpiresAt")),
            created_at=_as_utc(doc.get("createdAt")),
            updated_at=_as_utc(doc.get("updatedAt")),
        )

    def to_public(self) -> Dict[str, Any]:
        """Client-facing view. Never includes the password hash or the pending code."""
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "role": self.role,
            "isVerified": self.is_verified,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
