# accountflow/dependencies.py
import logging
from datetime import timedelta
from typing import Optional

from fastapi import Request

from .config import Settings, settings as default_settings
from .application.ports.kv_storage import KeyValueStorage
from .application.ports.clock import Clock
from .application.services.user_store import UserStore
from .application.services.verification_registry import VerificationRegistry
from .application.services.account_service import AccountService
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.clock.system_clock import SystemClock
from .infrastructure.delivery.log_delivery import LoggingCodeDelivery
from .infrastructure.storage.file_kv_storage import JsonFileKeyValueStorage
from .infrastructure.storage.memory_kv_storage import InMemoryKeyValueStorage
from .infrastructure.storage.sql_kv_storage import SqlKeyValueStorage

logger = logging.getLogger(__name__)


def build_storage(cfg: Settings) -> KeyValueStorage:
    backend = cfg.STORAGE_BACKEND.lower()
    if backend == "memory":
        return InMemoryKeyValueStorage()
    if backend == "file":
        return JsonFileKeyValueStorage(cfg.STORAGE_FILE_PATH)
    if backend == "sql":
        from .database import build_engine, create_db_and_tables
        engine = build_engine(cfg.DATABASE_URL, echo=cfg.DEBUG)
        create_db_and_tables(engine)
        return SqlKeyValueStorage(engine)
    raise ValueError(f"Unknown STORAGE_BACKEND: {cfg.STORAGE_BACKEND}")


def build_account_service(cfg: Optional[Settings] = None, storage: Optional[KeyValueStorage] = None, clock: Optional[Clock] = None) -> AccountService:
    cfg = cfg or default_settings
    clock = clock or SystemClock()
    storage = storage if storage is not None else build_storage(cfg)
    logger.info(f"Using {type(storage).__name__} for account storage")
    return AccountService(
        user_store=UserStore(storage, clock),
        verifications=VerificationRegistry(clock, ttl=timedelta(seconds=cfg.VERIFICATION_CODE_TTL_SECONDS)),
        delivery=LoggingCodeDelivery(),
        audit=StdAuditLogger(),
    )


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings
