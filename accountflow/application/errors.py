from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    DUPLICATE_PHONE = "DuplicatePhone"
    DUPLICATE_USERNAME = "DuplicateUsername"
    DUPLICATE_EMAIL = "DuplicateEmail"
    USER_NOT_FOUND = "UserNotFound"
    NO_CODE_ISSUED = "NoCodeIssued"
    CODE_ALREADY_USED = "CodeAlreadyUsed"
    CODE_EXPIRED = "CodeExpired"
    CODE_MISMATCH = "CodeMismatch"


class AccountError(Exception):
    """Base class for every failure raised by the account core.

    ``field`` names the form field the failure belongs to, so the caller can
    render it next to the right input.
    """

    kind: Optional[ErrorKind] = None
    field: str = "phone"
    message: str = "Account operation failed"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class DuplicatePhone(AccountError):
    kind = ErrorKind.DUPLICATE_PHONE
    message = "This phone number is already registered"


class DuplicateUsername(AccountError):
    kind = ErrorKind.DUPLICATE_USERNAME
    field = "username"
    message = "Username already exists"


class DuplicateEmail(AccountError):
    kind = ErrorKind.DUPLICATE_EMAIL
    field = "email"
    message = "This email is already registered"


class UserNotFound(AccountError):
    kind = ErrorKind.USER_NOT_FOUND
    message = "User does not exist, please register first"


class VerificationError(AccountError):
    field = "code"


class NoCodeIssued(VerificationError):
    kind = ErrorKind.NO_CODE_ISSUED
    message = "Please request a verification code first"


class CodeAlreadyUsed(VerificationError):
    kind = ErrorKind.CODE_ALREADY_USED
    message = "Verification code has already been used"


class CodeExpired(VerificationError):
    kind = ErrorKind.CODE_EXPIRED
    message = "Verification code has expired"


class CodeMismatch(VerificationError):
    kind = ErrorKind.CODE_MISMATCH
    message = "Verification code is incorrect"


class InvalidInput(Exception):
    """Raised by the input glue when one or more fields fail shape checks."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))
