from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from datetime import datetime, timezone
from typing import Optional
import logging

# Load environment variables as early as possible
load_dotenv()

from .config import Settings, settings as default_settings
from .application.errors import AccountError, InvalidInput
from .application.services.account_service import AccountService
from .dependencies import build_account_service
from .exceptions import account_error_handler, invalid_input_handler, http_exception_handler, request_validation_handler
from .middleware import LoggingMiddleware, ErrorHandlingMiddleware
from .routers import auth_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format=default_settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def create_app(cfg: Optional[Settings] = None, account_service: Optional[AccountService] = None) -> FastAPI:
    cfg = cfg or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {cfg.APP_NAME}...")
        if getattr(app.state, "account_service", None) is None:
            app.state.account_service = build_account_service(cfg)
        yield
        logger.info(f"Shutting down {cfg.APP_NAME}...")

    app = FastAPI(
        title=cfg.APP_NAME,
        version=cfg.APP_VERSION,
        debug=cfg.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if cfg.DOCS_ENABLED else None),
        redoc_url=("/redoc" if cfg.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if cfg.DOCS_ENABLED else None)
    )
    app.state.settings = cfg
    app.state.account_service = account_service

    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(InvalidInput, invalid_input_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router)

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "service": cfg.APP_NAME,
            "version": cfg.APP_VERSION,
            "storage": cfg.STORAGE_BACKEND,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "accountflow.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        workers=1,
        log_level=default_settings.LOG_LEVEL.lower()
    )
