from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager
from typing import Optional
import logging

from core.config import settings
from core.exceptions import BaseCustomException
from core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from core.response import ErrorResponse, error_response, success_response
from database.connection import Database
from routers import auth, establishments, motoboys, orders, reports, tracking
from services.bootstrap import ensure_default_admin

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(BaseCustomException)
    async def custom_exception_handler(request: Request, exc: BaseCustomException):
        """Handle custom exceptions with standardized response format."""
        request_id = getattr(request.state, 'request_id', 'unknown')
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"{exc.__class__.__name__} [{request_id}] on {request.method} {request.url.path}: {exc.message}")

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                message=exc.message,
                error_code=exc.error_code,
                details=exc.details
            )
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors with detailed error messages."""
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(f"Validation error [{request_id}] on {request.method} {request.url.path}: {exc.errors()}")

        error_details = []
        for error in exc.errors():
            field = '.'.join(str(x) for x in error['loc'])
            error_details.append({
                "field": field,
                "message": error['msg'],
                "type": error['type']
            })

        return JSONResponse(
            status_code=400,
            content=error_response(
                message="Request validation failed",
                error_code="VALIDATION_ERROR",
                details={"errors": error_details}
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(f"HTTP exception [{request_id}] on {request.method} {request.url.path}: {exc.detail}")

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                message=str(exc.detail) if isinstance(exc.detail, str) else "HTTP error occurred",
                error_code=HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
            ),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(f"Unexpected error [{request_id}] on {request.method} {request.url.path}: {str(exc)}", exc_info=True)

        return JSONResponse(
            status_code=500,
            content=error_response(
                message="An unexpected error occurred. Please try again.",
                error_code="INTERNAL_ERROR",
                details={"request_id": request_id}
            )
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the default admin on startup; release the engine on shutdown."""
    database: Database = app.state.database
    try:
        logger.info("Starting up Motorotas API...")
        database.create_tables()

        db = database.session()
        try:
            ensure_default_admin(db)
        finally:
            db.close()

        logger.info("Motorotas API started successfully")
    except Exception as e:
        logger.error(f"Failed to start application: {str(e)}")
        raise

    yield

    database.dispose()


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Build the API bound to its own database."""
    app = FastAPI(
        lifespan=lifespan,
        title="Motorotas API",
        description="Delivery orders, couriers and live tracking for establishments",
        version="1.0.0",
        responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409)}
    )
    app.state.database = Database(database_url or settings.DATABASE_URL)

    register_exception_handlers(app)

    # CORS first so preflight requests are answered
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )
    # first added is executed last
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
    app.include_router(tracking.router, prefix="/api/tracking", tags=["Tracking"])
    app.include_router(establishments.router, prefix="/api/establishments", tags=["Establishments"])
    app.include_router(motoboys.router, prefix="/api/motoboys", tags=["Motoboys"])
    app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])

    @app.get("/api/health")
    def health_check(request: Request):
        """Reports whether the database answers."""
        database: Database = request.app.state.database
        try:
            database.ping()
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {str(e)}")
            return JSONResponse(
                status_code=503,
                content=error_response(
                    message="Database unavailable",
                    error_code="SERVICE_UNAVAILABLE"
                )
            )
        return success_response({"status": "ok", "database": "ok"})

    return app


app = create_app()
