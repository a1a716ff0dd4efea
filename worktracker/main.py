import os
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .db import Base, engine
from .logging import setup_logging, RequestIdMiddleware, structlog
from .store.table_store import StoreError, StoreReadError
from .auth.router import router as auth_router
from .routes.dashboard import router as dashboard_router
from .routes.invoices import router as invoices_router
from .routes.issues import router as issues_router
from .routes.ledger import router as ledger_router
from .routes.calendar import router as calendar_router
from .routes.users import router as users_router
from .routes.files import router as files_router
from .models import models  # noqa: F401  registers tables on Base.metadata


def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    # a failed read is not an empty result; say so instead of returning []
    status_code = 503 if isinstance(exc, StoreReadError) else 400
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "kind": exc.kind, "table": exc.table})


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_exception_handler(StoreError, store_error_handler)

    # Routers
    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(invoices_router)
    app.include_router(issues_router)
    app.include_router(ledger_router)
    app.include_router(calendar_router)
    app.include_router(users_router)
    app.include_router(files_router)

    # Metrics
    Instrumentator().instrument(app).expose(app)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.on_event("startup")
    def _startup():
        log = structlog.get_logger()
        if settings.database_url.startswith("sqlite:///./"):
            os.makedirs("var", exist_ok=True)
        if settings.auto_create_db:
            Base.metadata.create_all(bind=engine)
            log.info("tables_ready", tables=sorted(Base.metadata.tables.keys()))

    return app


app = create_app()
