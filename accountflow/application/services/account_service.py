import threading
from dataclasses import dataclass, field
from typing import Optional

from ..errors import AccountError, InvalidInput
from ..ports.audit_logger import AuditLogger
from ..ports.code_delivery import CodeDelivery
from .user_store import User, UserStore
from .verification_registry import VerificationRegistry
from ...validation import is_blank, phone_errors, registration_errors


@dataclass
class AccountService:
    user_store: UserStore
    verifications: VerificationRegistry
    delivery: CodeDelivery
    audit: Optional[AuditLogger] = None
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def _audit(self, action: str, phone: str, user_id: Optional[int] = None, success: bool = True, details: Optional[dict] = None) -> None:
        if self.audit is not None:
            self.audit.log(action, phone, user_id=user_id, success=success, details=details)

    def send_code(self, phone: str) -> str:
        errors = phone_errors(phone)
        if errors:
            raise InvalidInput(errors)
        phone = phone.strip()
        code = self.verifications.issue(phone)
        self.delivery.deliver(phone, code)
        self._audit("code_sent", phone)
        return code

    def register(self, username: str, phone: str, email: str, code: str) -> User:
        errors = registration_errors(username, phone, email, code)
        if errors:
            raise InvalidInput(errors)
        # codes are issued under the trimmed phone
        phone = phone.strip()
        with self._lock:
            try:
                self.verifications.verify(phone, code)
                user = self.user_store.register(username=username, phone=phone, email=email)
            except AccountError as e:
                self._audit("register", phone, success=False, details={"kind": e.kind.value})
                raise
            self.user_store.set_current_session(user)
        self._audit("register", phone, user_id=user.id)
        return user

    def login(self, phone: str, code: str) -> User:
        errors = phone_errors(phone)
        if is_blank(code):
            errors["code"] = "Please enter the verification code"
        if errors:
            raise InvalidInput(errors)
        phone = phone.strip()
        with self._lock:
            try:
                self.verifications.verify(phone, code)
                user = self.user_store.login(phone)
            except AccountError as e:
                self._audit("login", phone, success=False, details={"kind": e.kind.value})
                raise
            self.user_store.set_current_session(user)
        self._audit("login", phone, user_id=user.id)
        return user

    def logout(self) -> None:
        with self._lock:
            user = self.user_store.current_session()
            self.user_store.logout()
        if user is not None:
            self._audit("logout", user.phone, user_id=user.id)

    def current_user(self) -> Optional[User]:
        return self.user_store.current_session()
