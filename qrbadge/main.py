# =======================================================================================
# qrbadge/main.py - FastAPI Application Entry Point
# =======================================================================================
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import config
from .database import DatabaseManager
from .api.routes.badges import public_router as badges_public_router, router as badges_router
from .api.routes.users import public_router as users_public_router, router as users_router
from .api.routes.accesses import router as accesses_router
from .models.schemas import HealthResponse
from .services import AuthService
from .utils.exceptions import QRBadgeError
from .utils.logging import get_logger, setup_logging
from .utils.validators import utcnow

logger = get_logger("api")

BANNER = "QR Badge API"


def setup_exception_handlers(app: FastAPI) -> None:
    """Every failure becomes exactly one {"error": ...} response."""

    @app.exception_handler(QRBadgeError)
    async def qrbadge_error_handler(request: Request, exc: QRBadgeError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        if config.API_DEBUG:
            logger.debug("Rejected request %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Données invalides"})

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = str(exc) if config.API_DEBUG else "An unexpected error occurred"
        return JSONResponse(status_code=500, content={"error": "Server error", "message": message})


def create_app(db: Optional[DatabaseManager] = None, auth: Optional[AuthService] = None) -> FastAPI:
    setup_logging(config.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.DB_CREATE_TABLES:
            app.state.db.create_all()
        logger.info("QR Badge API started")
        yield
        app.state.db.dispose()

    app = FastAPI(
        title="QR Badge Access Control API",
        version="1.0.0",
        description="QR badge validation, access logging and administration",
        lifespan=lifespan,
    )
    app.state.db = db or DatabaseManager()
    app.state.auth = auth or AuthService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    setup_exception_handlers(app)

    # Routers
    app.include_router(badges_public_router, prefix="/api", tags=["badges"])
    app.include_router(badges_router, prefix="/api", tags=["badges"])
    app.include_router(users_public_router, prefix="/api", tags=["users"])
    app.include_router(users_router, prefix="/api", tags=["users"])
    app.include_router(accesses_router, prefix="/api", tags=["accesses"])

    @app.get("/", tags=["health"])
    def root():
        return {"message": BANNER}

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    def health():
        return HealthResponse(status="ok", timestamp=utcnow())

    return app


app = create_app()
