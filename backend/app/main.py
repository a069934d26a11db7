"""Main FastAPI application."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.api import auth, sites, public
from app.database import Base, engine
from app.utils.exceptions import AppException, app_exception_to_http
from app.utils.logger import logger

# Local SQLite runs create the records table on import; hosted databases use migrations
if settings.database_url.startswith("sqlite"):
    Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Landing Page Builder API",
    description="Generate, save and publish AI-built landing pages",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Translate application errors into HTTP responses."""
    http_exc = app_exception_to_http(exc)
    if http_exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": http_exc.detail},
        headers=http_exc.headers,
    )


# Include routers
app.include_router(auth.router)
app.include_router(sites.router)
app.include_router(public.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Landing Page Builder API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
