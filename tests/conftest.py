from collections.abc import AsyncIterator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from crcbot.config.settings import BotConfig
from crcbot.database.db import Base, build_session_factory
from crcbot.database import models  # noqa: F401
from crcbot.discord.rest import DiscordResponse

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeDiscord:
    """Records outgoing REST calls instead of talking to Discord."""

    def __init__(self, status_code: int = 200, message_id: str = "900000000000000001"):
        self.status_code = status_code
        self.message_id = message_id
        self.posts: list[tuple[str, dict]] = []
        self.pins: list[tuple[str, str]] = []

    async def post_message(self, channel_id: str, payload: dict) -> DiscordResponse:
        self.posts.append((channel_id, payload))
        if self.status_code is None:
            return DiscordResponse(status_code=None, error="connection refused")
        data = {"id": self.message_id} if self.status_code < 300 and self.message_id else {}
        return DiscordResponse(status_code=self.status_code, data=data)

    async def pin_message(self, channel_id: str, message_id: str) -> bool:
        self.pins.append((channel_id, message_id))
        return True


@pytest.fixture
def config() -> BotConfig:
    return BotConfig(
        public_key="",
        bot_token="test-token",
        info_channel_id="555",
        default_winners=1,
        default_duration="1h",
        entry_role_id=None,
        retention_days=7,
        tick_ms=0,
    )


@pytest.fixture
def discord() -> FakeDiscord:
    return FakeDiscord()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    # File-based SQLite so every session gets its own connection, like the PostgreSQL pool
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    @event.listens_for(db_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield db_engine

    await db_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return build_session_factory(engine)
