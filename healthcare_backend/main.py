import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from healthcare_backend.config import Settings, get_settings
from healthcare_backend.database import Database
from healthcare_backend.exceptions import AppError, InternalError, ValidationFailed
from healthcare_backend.logging_config import configure_logging
from healthcare_backend.routers import doctors, mappings, patients
from healthcare_backend.routers import auth as auth_router

logger = structlog.get_logger(__name__)

VERSION = "1.0.0"

API_ENDPOINTS = {
    "authentication": {
        "POST /api/auth/register": "Register a new user",
        "POST /api/auth/login": "Login user and get JWT token",
    },
    "patients": {
        "POST /api/patients": "Create a new patient (Auth required)",
        "GET /api/patients": "Get all patients for authenticated user",
        "GET /api/patients/:id": "Get specific patient details",
        "PUT /api/patients/:id": "Update patient details",
        "DELETE /api/patients/:id": "Delete patient record",
    },
    "doctors": {
        "POST /api/doctors": "Create a new doctor (Auth required)",
        "GET /api/doctors": "Get all doctors",
        "GET /api/doctors/:id": "Get specific doctor details",
        "PUT /api/doctors/:id": "Update doctor details",
        "DELETE /api/doctors/:id": "Delete doctor record",
    },
    "mappings": {
        "POST /api/mappings": "Assign doctor to patient (Auth required)",
        "GET /api/mappings": "Get all patient-doctor mappings",
        "GET /api/mappings/:patient_id": "Get all doctors for specific patient",
        "GET /api/mappings/id/:id": "Get a single mapping",
        "DELETE /api/mappings/:id": "Remove doctor from patient",
    },
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with its outcome and duration."""
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            # Unhandled errors re-raise out of call_next; they are still 500s
            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status=status,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )


def _validation_details(exc: RequestValidationError) -> list:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        field = ".".join(loc[1:]) if len(loc) > 1 else (loc[0] if loc else "")
        details.append({
            "field": field,
            "location": loc[0] if loc else None,
            "message": err.get("msg", "Invalid value"),
        })
    return details


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ValidationFailed(_validation_details(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            content = {
                "error": "Not found",
                "message": f"Route {request.method} {request.url.path} not found",
            }
        else:
            content = {"error": str(exc.detail), "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            method=request.method,
            path=request.url.path,
        )
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(settings: Settings = None, database: Database = None) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: configure logging, then make sure the schema exists
        configure_logging(settings.environment, settings.log_level)
        await database.create_all()
        logger.info("healthcare_backend_started", environment=settings.environment, version=VERSION)
        yield
        # Shutdown
        await database.dispose()

    app = FastAPI(
        title="Healthcare Backend API",
        description="Patients, doctors and patient-doctor assignments with per-user ownership",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(patients.router, prefix="/api/patients", tags=["Patients"])
    app.include_router(doctors.router, prefix="/api/doctors", tags=["Doctors"])
    app.include_router(mappings.router, prefix="/api/mappings", tags=["Mappings"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "OK",
            "message": "Healthcare Backend API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": VERSION,
        }

    @app.get("/")
    async def root():
        return {
            "message": "Healthcare Backend API",
            "version": VERSION,
            "documentation": "/api",
            "health": "/health",
        }

    @app.get("/api")
    async def api_index():
        return {
            "message": "Healthcare Backend API",
            "version": VERSION,
            "endpoints": API_ENDPOINTS,
            "authentication": 'Include "Authorization: Bearer <token>" header for protected endpoints',
        }

    return app


app = create_app()
