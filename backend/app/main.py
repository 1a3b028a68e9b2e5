"""
Student Management API - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Registers the student routes and the error handlers
5. Provides the root descriptor and health check endpoints

The application follows a modular architecture:
- routes/: API endpoint handlers
- schemas/: request/response models and validation
- services/: single-row store operations
- models/: SQLAlchemy ORM models
- client/ and web/: HTTP client and server-rendered frontend
"""

import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import ALLOWED_ORIGINS, DATABASE_URL, SERVICE_NAME, SERVICE_VERSION
from app.database import create_tables
from app.errors import StudentError
from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.routes import students
from app.schemas.student import format_validation_errors

# Import models so they are registered with Base.metadata
from app.models.student import Student  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite, creating tables directly")
    create_tables()

app = FastAPI(
    title=SERVICE_NAME,
    description="Create, list, view, update and delete student records.",
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# ──────────────────────────────────────────────────────────────
# CORS Middleware
#
# Allows the web frontend (port 3000) to call the backend (port 8000).
# ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS or ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Generates a UUID per incoming request, stores it in a context
# variable for the log formatter, returns it in X-Request-ID and
# logs request start/end with latency.
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)
    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Error handlers
#
# StudentError subclasses carry their own status. Framework-level
# body errors (missing or malformed JSON) become 400s with the same
# shape. Anything else is a generic 500 with no internals exposed.
# ──────────────────────────────────────────────────────────────
@app.exception_handler(StudentError)
async def student_error_handler(request: Request, exc: StudentError):
    level = "ERROR" if exc.http_status >= 500 else "WARNING"
    log_with_context(logger, level, f"{exc.__class__.__name__}: {exc.message}",
                     extra_data={"path": request.url.path, "status_code": exc.http_status,
                                 "details": exc.details})
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = format_validation_errors(exc)
    log_with_context(logger, "WARNING", f"Invalid request on {request.url.path}",
                     extra_data={"details": details})
    return JSONResponse(status_code=400, content={"error": "Invalid request data", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Not Found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message},
                        headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log_with_context(logger, "ERROR", f"Unhandled exception on {request.url.path}",
                     extra_data={"error": exc.__class__.__name__}, exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


app.include_router(students.router, tags=["Students"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for container orchestrators and monitoring."""
    return {"status": "healthy", "service": "student-records-backend", "version": SERVICE_VERSION}


@app.get("/", tags=["Root"])
def root():
    """Static service descriptor."""
    return {
        "message": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": {
            "students": "/api/students",
        }
    }
