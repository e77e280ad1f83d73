import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from controllers.presence_controller import health as relay_health
from dal.detection_dal import DetectionDAL
from routes.api_route import router as api_router
from routes.realtime_ws import router as realtime_router
from services.alerts.discord_notifier import DiscordNotifier
from services.realtime.confirmation_engine import ConfirmationEngine
from services.realtime.connection_manager import ConnectionManager
from services.realtime.frame_cache import FrameCache
from services.realtime.relay_context import RelayContext
from services.realtime.session_store import SessionStore
from utils.database_init import AsyncDatabaseInitializer
from utils.settings import RelaySettings

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger; unknown level names fall back to INFO."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_relay(settings: RelaySettings, db_initializer: AsyncDatabaseInitializer) -> RelayContext:
    """Construct a fresh relay (registry, engine, cache, fan-out, alerts, log)."""
    return RelayContext(
        sessions=SessionStore(),
        engine=ConfirmationEngine(
            required_count=settings.required_count,
            window_seconds=settings.window_seconds,
            tracked_class=settings.tracked_class,
        ),
        frames=FrameCache(),
        connections=ConnectionManager(),
        notifier=DiscordNotifier(
            settings.discord_webhook_url,
            timeout=settings.alert_timeout_seconds,
            enabled=settings.notifications_enabled,
        ),
        detections=DetectionDAL(db_initializer, max_detections=settings.max_detections),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite detection log (always new on startup, at <database_dir>/app.db)
      - the relay context, including the webhook HTTP client
    and attach them to `app.state`.
    """
    settings: RelaySettings = app.state.settings

    # This will delete any existing DB at db_path and create a fresh one.
    db_initializer = AsyncDatabaseInitializer(settings.database_dir)
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    relay = build_relay(settings, db_initializer)
    app.state.relay = relay
    if not settings.discord_webhook_url:
        LOGGER.warning("DISCORD_WEBHOOK_URL is not set; confirmed detections will not be sent anywhere")
    LOGGER.info(
        "Relay ready: confirming '%s' after %d detections within %.1fs",
        settings.tracked_class,
        settings.required_count,
        settings.window_seconds,
    )

    try:
        yield
    finally:
        await relay.notifier.aclose()
        LOGGER.info("Relay shut down")


def create_app(settings: Optional[RelaySettings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    settings = settings or RelaySettings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Overwatch Relay", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health(request: Request):
        """Report liveness with current session and detection counts."""
        return await relay_health(request)

    # Register application routers
    app.include_router(api_router)
    app.include_router(realtime_router)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings: RelaySettings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
