"""FastAPI application exposing the user registration endpoints."""

import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import Counter, make_asgi_app
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import Settings, settings
from .database import Database
from .exceptions import RecordServiceError
from .schemas import MessageResponse, UserCreate, UserResponse, UserUpdate
from .security import PasswordHasher
from .services import UserService


logger = logging.getLogger(__name__)

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)


def get_user_service(request: Request) -> UserService:
    """Return the record service bound to the running application."""
    return request.app.state.user_service


def build_limiter() -> Limiter:
    """One bucket per client address and route, whatever id is in the path."""
    return Limiter(key_func=get_remote_address, key_style="endpoint")


def build_router(limiter: Limiter, write_limit: str) -> APIRouter:
    """Create the ``/api/users`` routes with writes limited to ``write_limit``."""

    router = APIRouter(prefix="/api/users", tags=["users"])

    @router.get("", response_model=List[UserResponse])
    def list_users(service: UserService = Depends(get_user_service)):
        """Return all registered users."""

        return service.list_users()

    @router.get("/{user_id}", response_model=UserResponse)
    def get_user(user_id: str, service: UserService = Depends(get_user_service)):
        """Return a single user by id."""

        return service.get_user(user_id)

    @router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    @limiter.limit(write_limit)
    def create_user(
        request: Request, payload: UserCreate, service: UserService = Depends(get_user_service)
    ):
        """Register a new user."""

        return service.create_user(payload)

    @router.put("/{user_id}", response_model=MessageResponse)
    @limiter.limit(write_limit)
    def update_user(
        request: Request,
        user_id: str,
        payload: UserUpdate,
        service: UserService = Depends(get_user_service),
    ):
        """Update a user; a blank password keeps the current one."""

        return service.update_user(user_id, payload)

    @router.delete("/{user_id}", response_model=MessageResponse)
    @limiter.limit(write_limit)
    def delete_user(
        request: Request, user_id: str, service: UserService = Depends(get_user_service)
    ):
        """Delete a user."""

        return service.delete_user(user_id)

    return router


async def record_service_error_handler(request: Request, exc: RecordServiceError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report every violation with status 400, without echoing input values."""
    errors = []
    for error in exc.errors():
        location, *path = error["loc"]
        errors.append(
            {
                "type": error["type"],
                "msg": error["msg"],
                "path": ".".join(str(part) for part in path),
                "location": location,
            }
        )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Server error"})


def create_app(
    app_settings: Settings | None = None, database: Database | None = None
) -> FastAPI:
    """Build the application.

    Parameters
    ----------
    app_settings: Settings, optional
        Configuration to use instead of the environment-derived defaults,
        including the write rate limit.
    database: Database, optional
        Pre-built storage client. When omitted one is opened from
        ``app_settings`` at startup and disposed at shutdown.
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database.from_settings(app_settings)
        db.init_db()
        app.state.database = db
        app.state.user_service = UserService(db, PasswordHasher(app_settings.bcrypt_rounds))
        logger.info("%s ready", app_settings.api_title)
        try:
            yield
        finally:
            if database is None:
                db.dispose()
            logger.info("database disconnected")

    limiter = build_limiter()
    app = FastAPI(title=app_settings.api_title, lifespan=lifespan)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RecordServiceError, record_service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log incoming requests and their outcomes while updating metrics."""
        logger.info("request %s %s", request.method, request.url.path)
        try:
            response = await call_next(request)
            REQUEST_COUNTER.labels(
                method=request.method,
                endpoint=request.url.path,
                status=str(response.status_code),
            ).inc()
            logger.info(
                "response %s %s status %s",
                request.method,
                request.url.path,
                response.status_code,
            )
            return response
        except Exception:
            REQUEST_COUNTER.labels(
                method=request.method,
                endpoint=request.url.path,
                status="500",
            ).inc()
            logger.exception("error handling %s %s", request.method, request.url.path)
            raise

    @app.get("/")
    def health():
        """Liveness probe."""
        return {"message": "TechNova API is running"}

    @app.get("/ready")
    def readiness(request: Request):
        """Readiness probe: the storage backend answers a trivial query."""
        if not request.app.state.database.ping():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"message": "Database unavailable"},
            )
        return {"message": "TechNova API is ready"}

    app.include_router(build_router(limiter, app_settings.write_rate_limit))
    app.mount("/metrics", make_asgi_app())
    return app


app = create_app()
