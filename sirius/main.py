"""
Main application entry point - FastAPI app instance and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn sirius.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI  # The FastAPI framework
from fastapi.middleware.cors import CORSMiddleware  # Cross-Origin Resource Sharing

from sirius.core.config import settings  # Application settings
from sirius.core.logging_config import setup_logging
from sirius.routers import chat, device  # Route handlers (endpoints)
from sirius.services.device_gateway import DeviceGateway
from sirius.services.device_session import DeviceSession

logger = logging.getLogger("sirius.main")


def build_device_session() -> DeviceSession:
    """
    Create the process-wide device session.

    The address comes from DEVICE_ADDRESS when set; the device still has
    to be probed before commands are sent.
    """
    session = DeviceSession(DeviceGateway())
    if settings.DEVICE_ADDRESS:
        session.set_address(settings.DEVICE_ADDRESS)
    return session


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------
# Runs once per application instance. State is kept on app.state so that
# each app (and each TestClient) has its own device session.
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    app.state.device_session = build_device_session()
    logger.info(f"{settings.APP_NAME} started (LLM provider: {settings.LLM_PROVIDER})")
    yield
    logger.info(f"{settings.APP_NAME} shutting down")


# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
# - docs_url: Swagger UI, visit http://localhost:8000/docs to test endpoints
# - redoc_url: ReDoc, an alternative view of the same docs
app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# The chat and voice pages are served from a different origin than the API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# chat.router: /api/chat, /api/assistant, /api/chat/stats
# device.router: /api/device, /api/device/status
app.include_router(chat.router)
app.include_router(device.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Simple health check endpoint.

    Does NOT contact the device or the model.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}
