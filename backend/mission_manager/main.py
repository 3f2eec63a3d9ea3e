"""
Mission Manager - FastAPI Application

Main entry point for the Mission Manager backend.

Architecture:
- Routers translate HTTP to service calls and back
- MissionService orchestrates the mission core:
  checklist model → report accumulator → delegation state machine
- Repositories are the only code that talks to the database
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .routers import auth_router, users_router, missions_router
from .services.missions import MissionError, ValidationError
from .database import init_db

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Mission Manager",
    description="""
    Mission Manager - Mission Assignment and Reporting

    Managers create missions and assign them to employees. Employees file
    reports against the mission checklist and may hand a mission over to a
    colleague, who accepts or rejects the request.

    ## Mission lifecycle
    1. **NEW**: created with a fixed checklist
    2. **IN_PROGRESS**: at least one report filed, more to come
    3. **COMPLETED**: the reporter declared the mission done; no further reports

    ## Delegation
    PENDING → ACCEPTED | REJECTED → cleared by the delegator.
    Only acceptance moves the mission to the new assignee.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(missions_router)


# =============================================================================
# ERROR HANDLING
# =============================================================================

@app.exception_handler(MissionError)
async def mission_error_handler(request: Request, exc: MissionError):
    body = {"message": exc.message}
    if isinstance(exc, ValidationError) and exc.missing_fields:
        body["missingFields"] = exc.missing_fields
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "message": str(exc) or "Internal Server Error",
            "details": getattr(exc, "details", None),
            "code": getattr(exc, "code", None),
        },
    )


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Mission Manager",
        "version": "1.0.0",
        "description": "Mission assignment, reporting and delegation",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m mission_manager.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3001")))
