import logging
from typing import Any, Dict, cast

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

logger = logging.getLogger("database")


def _detect_driver(url: str) -> str:
    try:
        return make_url(url).drivername
    except Exception:
        return url.split(":", 1)[0]


# ---------------------------------------------------------------------------
# Engine Setup
# ---------------------------------------------------------------------------

def make_engine(url: str) -> AsyncEngine:
    """Create the async engine backing the shared store."""
    url = str(url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is required for the shared store.")

    driver = _detect_driver(url)
    engine_kwargs: Dict[str, Any] = {
        "echo": False,
        "future": True,
        "pool_pre_ping": True,
    }
    if driver.startswith("sqlite"):
        # SQLite file is opened per call; both surfaces may touch it
        engine_kwargs["poolclass"] = NullPool
        engine_kwargs["pool_pre_ping"] = False
    elif driver.startswith("postgresql+"):
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 5

    return create_async_engine(url, **engine_kwargs)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------

def get_database_dsn(engine: AsyncEngine, hide_password: bool = True) -> str:
    """Return the engine's DSN string with the password masked."""
    try:
        return make_url(cast(str, str(engine.url))).render_as_string(hide_password=hide_password)
    except Exception:
        return str(engine.url)


async def init_db_async(engine: AsyncEngine) -> None:
    """Create the shared store tables if they do not exist."""
    from reminder_loop.models import models

    try:
        async with engine.begin() as conn:
            await conn.run_sync(models.Base.metadata.create_all)
        logger.info("Database initialized successfully.")
    except Exception as e:
        logger.critical("Database initialization failed: %s", e)
        raise RuntimeError("Failed to initialize database") from e


async def shutdown_db_async(engine: AsyncEngine) -> None:
    """Dispose the async engine cleanly."""
    try:
        await engine.dispose()
        logger.info("Database connection pool closed.")
    except Exception as e:
        logger.error("Error shutting down database engine: %s", e)
        raise
