"""
FastAPI entry point for the Definition of Done Generator.
"""
import os
import logging
from dotenv import load_dotenv

# Load .env before settings are read
load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from dod_agent.api import generate
from dod_agent.config import settings

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.api_title,
    description="Generates Definition-of-Done checklists from Jira tickets and GitLab merge requests",
    version=settings.api_version,
)

# Local development origins; more can be added via CORS_ALLOWED_ORIGINS
ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

# Comma-separated list (e.g., "https://staging.example.com,https://dev.example.com")
extra_origins = os.getenv("CORS_ALLOWED_ORIGINS", "").strip()
if extra_origins:
    for origin in extra_origins.split(","):
        origin = origin.strip()
        if origin and origin not in ALLOWED_ORIGINS:
            ALLOWED_ORIGINS.append(origin)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler so unexpected failures still return JSON.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {str(exc)}"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({"detail": exc.errors(), "body": exc.body}),
    )


# Include routers
app.include_router(generate.router, prefix="/api/v1", tags=["Definition of Done"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Definition of Done Generator API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
