import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from walletledger.api.routes import get_api_router
from walletledger.core.config import Settings, get_settings
from walletledger.core.errors import LedgerError
from walletledger.db.locks import WalletLockRegistry
from walletledger.db.session import build_engine, build_session_factory, create_schema
from walletledger.services import AccountService, TransferEngine

logger = logging.getLogger("walletledger.api")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title=settings.app_name)
    app.include_router(get_api_router())

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    locks = WalletLockRegistry()
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.transfer_engine = TransferEngine(
        session_factory, locks, lock_timeout=settings.transfer_lock_timeout_seconds
    )
    app.state.account_service = AccountService(
        session_factory, locks, lock_timeout=settings.transfer_lock_timeout_seconds
    )

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=app.title,
            version="1.0.0",
            description="Wallet transfer ledger API",
            routes=app.routes,
        )
        components = openapi_schema.setdefault("components", {}).setdefault("securitySchemes", {})
        components["BearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
        for path in openapi_schema.get("paths", {}).values():
            for operation in path.values():
                operation.setdefault("security", []).append({"BearerAuth": []})

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        return JSONResponse(exc.as_dict(), status_code=exc.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage error for %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            {"detail": "Storage is unavailable", "code": "storage_unavailable"},
            status_code=503,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error for %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"detail": "Internal server error"}, status_code=500)

    @app.on_event("startup")
    async def prepare_schema():
        if settings.create_schema_on_startup:
            await create_schema(engine)

    @app.on_event("shutdown")
    async def dispose_engine():
        await engine.dispose()

    return app
