import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from ..errors import CodeAlreadyUsed, CodeExpired, CodeMismatch, NoCodeIssued
from ..ports.clock import Clock

logger = logging.getLogger(__name__)

CODE_TTL = timedelta(minutes=5)


@dataclass
class VerificationEntry:
    code: str
    issued_at: datetime
    used: bool = False


def generate_code() -> str:
    """Uniform 6-digit code in 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


class VerificationRegistry:
    """One-time codes keyed by phone, held for the life of the process."""

    def __init__(self, clock: Clock, ttl: timedelta = CODE_TTL, code_factory: Optional[Callable[[], str]] = None):
        self.clock = clock
        self.ttl = ttl
        self.code_factory = code_factory or generate_code
        self.entries: Dict[str, VerificationEntry] = {}
        self._lock = threading.Lock()

    def issue(self, phone: str) -> str:
        code = self.code_factory()
        with self._lock:
            self.entries[phone] = VerificationEntry(code=code, issued_at=self.clock.now())
        logger.info(f"Issued verification code for phone ending {phone[-4:]}")
        return code

    def verify(self, phone: str, submitted: str) -> bool:
        # check and mark used as one step so a code cannot be consumed twice
        with self._lock:
            entry = self.entries.get(phone)
            if entry is None:
                raise NoCodeIssued()
            if entry.used:
                raise CodeAlreadyUsed()
            if self.clock.now() - entry.issued_at > self.ttl:
                raise CodeExpired()
            if submitted != entry.code:
                raise CodeMismatch()
            entry.used = True
            return True
