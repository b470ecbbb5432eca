from .user_store import User, UserStore
from .verification_registry import VerificationEntry, VerificationRegistry
from .account_service import AccountService

__all__ = [
    "User",
    "UserStore",
    "VerificationEntry",
    "VerificationRegistry",
    "AccountService",
]
