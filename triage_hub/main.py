"""
Triage Hub - FastAPI Application Entry Point

Request triage and real-time notification fanout for a community service
hub.

DESIGN PRINCIPLES:
- Triage always answers: the external classifier is optional, the
  rule-based fallback is not
- Real-time delivery is best effort; durable records belong to the caller
- Each app owns its room registry (no process-wide room state)
"""

from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from triage_hub.config.firebase import initialize_firestore
from triage_hub.core.settings import settings
from triage_hub.routes import health, notifications, realtime, triage
from triage_hub.services.classifier import ClassifierGateway
from triage_hub.services.collaborators import (
    FirestoreMessageStore,
    FirestoreSessionAuthenticator,
    MessageStore,
    SessionAuthenticator,
    build_collaborators,
)
from triage_hub.services.realtime import FanoutDispatcher, RealtimeChannel, RoomRegistry
from triage_hub.utils.logger import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    gateway: Optional[ClassifierGateway] = None,
    authenticator: Optional[SessionAuthenticator] = None,
    message_store: Optional[MessageStore] = None
) -> FastAPI:
    """
    Build the application and its services.

    Any collaborator not passed in is chosen from settings; the classifier
    gateway is created lazily on first triage call when not given.
    """
    configure_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Request triage with rule-based fallback and real-time notification fanout",
        debug=settings.DEBUG
    )

    if authenticator is None or message_store is None:
        default_authenticator, default_store = build_collaborators(settings)
        authenticator = authenticator or default_authenticator
        message_store = message_store or default_store

    registry = RoomRegistry()
    dispatcher = FanoutDispatcher(registry, settings.REALTIME_DELIVERY_TIMEOUT_SECONDS)
    app.state.room_registry = registry
    app.state.dispatcher = dispatcher
    app.state.realtime_channel = RealtimeChannel(registry, dispatcher, message_store)
    app.state.authenticator = authenticator
    app.state.message_store = message_store
    app.state.classifier_gateway = gateway

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions and log them with full traceback."""
        logger.error(
            f"🔥 Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Internal server error: {str(exc)}"}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors()}
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

        uses_firestore = isinstance(authenticator, FirestoreSessionAuthenticator) or isinstance(
            message_store, FirestoreMessageStore
        )
        if not uses_firestore:
            return
        try:
            initialize_firestore()
        except Exception as e:
            logger.warning(f"Firestore initialization failed: {e}")
            logger.warning("The app will start but real-time handshakes and messages may fail.")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(f"Shutting down {settings.APP_NAME}")
        if app.state.classifier_gateway is not None:
            app.state.classifier_gateway.close()

    app.include_router(health.router)
    app.include_router(triage.router)
    app.include_router(notifications.router)
    app.include_router(realtime.router)

    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
            "realtime": "/ws?token={token}"
        }

    return app


app = create_app()
