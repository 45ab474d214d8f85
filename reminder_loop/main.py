# main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from reminder_loop import __version__, database
from reminder_loop.config import Settings, get_settings
from reminder_loop.logging import RequestLoggingMiddleware, init_logging
from reminder_loop.notifications import LocalNotificationCenter, NotificationCenter, make_webhook_handler
from reminder_loop.routes import router
from reminder_loop.services.scheduler import NotificationScheduler
from reminder_loop.services.shared_store import SharedStore, SqlSharedStore
from reminder_loop.surfaces import MainSurface

logger = logging.getLogger("main")


def create_app(
    settings: Optional[Settings] = None,
    *,
    center: Optional[NotificationCenter] = None,
    store: Optional[SharedStore] = None,
) -> FastAPI:
    settings = settings or get_settings()

    # -----------------------------------------------------------------------
    # App lifespan (startup/shutdown)
    # -----------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wire the store, notification center, scheduler and main surface."""
        engine = None
        app_store = store
        if app_store is None:
            logger.info("Startup: initializing shared store...")
            engine = database.make_engine(settings.database_url)
            try:
                await database.init_db_async(engine)
                logger.info("Connected to database: %s", database.get_database_dsn(engine))
            except Exception as e:
                # store reads fall back to defaults, writes are dropped
                logger.error("Shared store unavailable, using defaults: %s", e)
            app_store = SqlSharedStore(database.make_session_factory(engine), settings.app_group)

        app_center = center or LocalNotificationCenter(
            permission_policy=settings.permission_policy,
            max_pending=settings.max_pending_notifications,
            delivered_limit=settings.delivered_history_limit,
        )
        if isinstance(app_center, LocalNotificationCenter):
            if settings.notification_webhook_url:
                app_center.add_delivery_handler(
                    make_webhook_handler(settings.notification_webhook_url, settings.notification_webhook_token)
                )
                logger.info("Delivery webhook enabled")
            app_center.start()

        scheduler = NotificationScheduler(app_center, app_store, settings)
        scheduler.register_category()
        main_surface = MainSurface(scheduler, settings)
        await main_surface.on_launch()

        app.state.settings = settings
        app.state.store = app_store
        app.state.center = app_center
        app.state.scheduler = scheduler
        app.state.main_surface = main_surface

        yield  # app runs during this block

        logger.info("Shutdown: stopping notification center...")
        await main_surface.close()
        if isinstance(app_center, LocalNotificationCenter):
            app_center.shutdown()
        if engine is not None:
            try:
                await database.shutdown_db_async(engine)
            except Exception as e:
                logger.error("Error during shutdown cleanup: %s", e)
        logger.info("Cleanup complete.")

    # -----------------------------------------------------------------------
    # FastAPI Application
    # -----------------------------------------------------------------------
    app = FastAPI(title="Reminder Loop", version=__version__, lifespan=lifespan)
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/", tags=["Health"])
    async def root():
        """Basic health check to verify the service is running."""
        return {"status": "ok", "message": "Reminder loop is running."}

    app.include_router(router)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    init_logging(settings)
    uvicorn.run(create_app(settings), host="127.0.0.1", port=8000)


if __name__ == "__main__":
    run()
