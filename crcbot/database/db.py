from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
import logging

from crcbot.config import settings


# Создаем базовый класс для моделей
Base = declarative_base()


def make_async_url(database_url: str) -> str:
    """Приводит строку подключения к асинхронному драйверу asyncpg"""
    if database_url.startswith("postgres://"):
        database_url = "postgresql://" + database_url[len("postgres://"):]
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


def build_engine(database_url: str = None) -> AsyncEngine:
    """
    Создает асинхронный движок с пулом соединений.

    Каждый шаг жизненного цикла розыгрыша берет соединение из пула
    на одну операцию, поэтому пул должен выдерживать много коротких запросов.
    """
    url = make_async_url(database_url or settings.DATABASE_URL)
    if not url.startswith("postgresql+asyncpg"):
        return create_async_engine(url, echo=settings.DEBUG, future=True)

    return create_async_engine(
        url,
        echo=settings.DEBUG,
        future=True,
        pool_size=20,  # Размер пула соединений
        max_overflow=40,  # Максимальное количество дополнительных соединений
        pool_timeout=30,  # Тайм-аут ожидания соединения из пула
        pool_pre_ping=True,  # Проверка соединения перед использованием
        # Важно для PgBouncer (pool_mode transaction/statement): отключаем prepared statements
        connect_args={
            "statement_cache_size": 0,
        },
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine()

# Фабрика сессий процесса
async_session = build_session_factory(engine)


async def init_db(db_engine: AsyncEngine = None):
    """
    Инициализирует базу данных и создает необходимые таблицы.
    """
    db_engine = db_engine or engine
    # Импорт моделей регистрирует таблицы в метаданных
    from crcbot.database import models  # noqa: F401

    try:
        logging.info("Инициализация базы данных...")

        async with db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await create_indexes(conn)

        logging.info("База данных инициализирована успешно")
        return async_session
    except Exception as e:
        logging.error(f"Ошибка при инициализации базы данных: {e}")
        raise


async def create_indexes(conn):
    """
    Создает индексы для выборок очистки и завершения розыгрышей
    """
    try:
        await conn.execute(text("CREATE INDEX IF NOT EXISTS idx_giveaways_status_ends_at ON giveaways(status, ends_at)"))
        await conn.execute(text("CREATE INDEX IF NOT EXISTS idx_giveaway_entries_user_id ON giveaway_entries(user_id)"))
        logging.info("Индексы базы данных созданы успешно")
    except Exception as e:
        logging.warning(f"Ошибка при создании индексов: {e}")


async def dispose_engine():
    """Закрывает все соединения пула при завершении работы"""
    await engine.dispose()
    logging.info("Пул соединений с базой данных закрыт")
