import json
import logging
import threading
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import DuplicateEmail, DuplicatePhone, DuplicateUsername, UserNotFound
from ..ports.clock import Clock
from ..ports.kv_storage import KeyValueStorage

logger = logging.getLogger(__name__)

USERS_KEY = "users"
CURRENT_USER_KEY = "currentUser"


@dataclass(frozen=True)
class User:
    id: int
    username: str
    phone: str
    email: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["createdAt"] = data.pop("created_at")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=int(data["id"]),
            username=str(data["username"]),
            phone=str(data["phone"]),
            email=str(data["email"]),
            created_at=str(data["createdAt"]),
        )


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a trailing Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UserStore:
    """Registered users plus the single current-session snapshot.

    Both values are loaded from storage once, at construction, and every
    mutation rewrites the whole value back.
    """

    def __init__(self, storage: KeyValueStorage, clock: Clock):
        self.storage = storage
        self.clock = clock
        self._lock = threading.RLock()
        self.users: List[User] = self._load_users()
        self.current_user: Optional[User] = self._load_current_user()

    def _read_json(self, key: str) -> Any:
        raw = self.storage.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Stored value under '{key}' is not valid JSON, treating as empty")
            return None

    def _load_users(self) -> List[User]:
        data = self._read_json(USERS_KEY)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning(f"Stored value under '{USERS_KEY}' is not a list, treating as empty")
            return []
        users = []
        for item in data:
            try:
                users.append(User.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping malformed user record: {item!r}")
        return users

    def _load_current_user(self) -> Optional[User]:
        data = self._read_json(CURRENT_USER_KEY)
        if data is None:
            return None
        try:
            return User.from_dict(data)
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Stored value under '{CURRENT_USER_KEY}' is malformed, treating as empty")
            return None

    def _save_users(self, users: List[User]) -> None:
        self.storage.set_item(USERS_KEY, json.dumps([u.to_dict() for u in users]))

    def _next_id(self, now: datetime) -> int:
        candidate = int(now.timestamp() * 1000)
        if self.users:
            candidate = max(candidate, max(u.id for u in self.users) + 1)
        return candidate

    def register(self, username: str, phone: str, email: str) -> User:
        with self._lock:
            return self._register(username, phone, email)

    def _register(self, username: str, phone: str, email: str) -> User:
        if any(u.phone == phone for u in self.users):
            raise DuplicatePhone()
        if any(u.username == username for u in self.users):
            raise DuplicateUsername()
        if any(u.email == email for u in self.users):
            raise DuplicateEmail()

        now = self.clock.now()
        user = User(
            id=self._next_id(now),
            username=username,
            phone=phone,
            email=email,
            created_at=format_timestamp(now),
        )
        users = self.users + [user]
        # persist before publishing so a failed write leaves memory untouched
        self._save_users(users)
        self.users = users
        logger.info(f"Registered user {user.id}")
        return user

    def login(self, phone: str) -> User:
        user = next((u for u in self.users if u.phone == phone), None)
        if user is None:
            raise UserNotFound()
        return user

    def set_current_session(self, user: User) -> None:
        with self._lock:
            self.storage.set_item(CURRENT_USER_KEY, json.dumps(user.to_dict()))
            self.current_user = user

    def current_session(self) -> Optional[User]:
        return self.current_user

    def logout(self) -> None:
        with self._lock:
            self.current_user = None
            self.storage.remove_item(CURRENT_USER_KEY)
