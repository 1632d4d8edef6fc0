"""
Student Registry - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Opens the database store at startup and closes it on shutdown
4. Implements request ID middleware (X-Request-ID header)
5. Registers the student API routes
6. Provides liveness and health check endpoints

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Business logic (validation, student CRUD)
- logging_config.py: Structured logging configuration
- database.py: Database store lifecycle
"""

import os
import time
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.routes import students
from app.database import StudentStore

# Import all models so they are registered with Base.metadata
from app.models.student import Student

VERSION = "1.0.0"

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store once for the life of the process."""
    store: StudentStore = app.state.store
    store.open()
    yield
    store.close()


def create_app(store: Optional[StudentStore] = None) -> FastAPI:
    """
    Build the application around a store.

    Without an explicit store one is created from DATABASE_URL. A missing
    or broken URL does not stop the app from starting; the student routes
    answer 500 until the database is reachable.
    """
    app = FastAPI(
        title="Student Registry",
        description="Create, list, update and delete student records.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.store = store if store is not None else StudentStore(os.getenv("DATABASE_URL"))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"]     # Expose request ID header to frontend
    )

    # ──────────────────────────────────────────────────────────
    # Request ID Middleware
    #
    # Generates a UUID per incoming request, stores it in a context
    # variable for every log entry, returns it in X-Request-ID and
    # logs request start/end with latency.
    # ──────────────────────────────────────────────────────────
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
                "query_params": dict(request.query_params)
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

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        # Unparseable JSON bodies get the same envelope as every other failure
        log_with_context(logger, "WARNING",
            f"Invalid request body: {request.method} {request.url.path}",
            extra_data={"errors": exc.errors()})
        return JSONResponse(status_code=500, content={
            "status": "FAILED",
            "message": "Invalid request body",
            "error": "Request body is not valid JSON"
        })

    app.include_router(students.router, tags=["Students"])

    @app.get("/", tags=["Root"], response_class=PlainTextResponse)
    def root():
        """Liveness message."""
        return "Server is up :)"

    @app.get("/health", tags=["Health"])
    def health_check(request: Request):
        """
        Health check endpoint for Docker health checks and monitoring.

        Reports whether the database store is connected.
        """
        connected = request.app.state.store.is_connected
        return {
            "status": "healthy",
            "service": "student-registry",
            "version": VERSION,
            "database": "connected" if connected else "unavailable"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 3000))
    uvicorn.run(app, host="0.0.0.0", port=port)
