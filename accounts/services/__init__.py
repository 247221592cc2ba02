"""
Account services.

Business-level collaborators used by the user pipelines.
"""

from accounts.services.account_store import (
    AccountStore,
    DuplicateEmailError,
    InvalidIdFormatError,
)
from accounts.services.email_service import EmailService
from accounts.services.verification_codes import VerificationCodeIssuer

__all__ = [
    "AccountStore",
    "DuplicateEmailError",
    "InvalidIdFormatError",
    "EmailService",
    "VerificationCodeIssuer",
]
