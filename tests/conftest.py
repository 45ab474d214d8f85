import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from reminder_loop import database
from reminder_loop.config import Settings
from reminder_loop.notifications import LocalNotificationCenter
from reminder_loop.services.scheduler import NotificationScheduler
from reminder_loop.services.shared_store import MemorySharedStore, SqlSharedStore


@pytest.fixture(autouse=True)
def event_log_path(tmp_path, monkeypatch):
    # Keep the notification event log out of the working tree
    path = tmp_path / "logs" / "notification_events.jsonl"
    monkeypatch.setenv("NOTIFICATION_EVENT_LOG", str(path))
    return path


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'reminder_loop.db'}",
        app_group="group.test",
        success_feedback_seconds=0.05,
    )


@pytest.fixture
def store():
    return MemorySharedStore()


@pytest_asyncio.fixture
async def sql_store(settings):
    engine = database.make_engine(settings.database_url)
    await database.init_db_async(engine)
    yield SqlSharedStore(database.make_session_factory(engine), settings.app_group)
    await database.shutdown_db_async(engine)


@pytest.fixture
def center():
    # Never started: pending requests stay on the scheduler until fired by hand
    return LocalNotificationCenter(permission_policy="grant")


@pytest.fixture
def scheduler(center, store, settings):
    return NotificationScheduler(center, store, settings)


@pytest.fixture
def client(settings):
    from reminder_loop.main import create_app

    app = create_app(settings, center=LocalNotificationCenter(permission_policy="grant"), store=MemorySharedStore())
    with TestClient(app) as c:
        yield c
