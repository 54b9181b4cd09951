from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List, Optional
import enum
import logging

from crcbot.database.models import Giveaway, GiveawayEntry, GiveawayStatus

logger = logging.getLogger(__name__)

# SQLSTATE нарушения уникальности в PostgreSQL
UNIQUE_VIOLATION = "23505"


class EntryResult(enum.Enum):
    """Результат вставки заявки на участие"""
    OK = "ok"
    DUPLICATE = "duplicate"
    FAILED = "failed"


def is_unique_violation(error: IntegrityError) -> bool:
    """
    Проверяет, что IntegrityError вызвана именно нарушением уникальности,
    а не, например, внешним ключом или NOT NULL.
    """
    orig = getattr(error, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == UNIQUE_VIOLATION
    message = str(orig or error)
    return "UNIQUE constraint failed" in message or "duplicate key value" in message


class GiveawayRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, channel_id: str, prize: str, winners: int, created_by: str, ends_at: datetime,
                     guild_id: str | None = None, title: str | None = None, description: str | None = None,
                     host_id: str | None = None) -> Giveaway:
        """Создает розыгрыш в статусе running (message_id пока пустой)"""
        giveaway = Giveaway(
            guild_id=guild_id,
            channel_id=channel_id,
            prize=prize,
            title=title,
            description=description,
            winners=winners,
            host_id=host_id,
            created_by=created_by,
            ends_at=ends_at,
            status=GiveawayStatus.RUNNING.value,
        )
        self.session.add(giveaway)
        await self.session.commit()
        await self.session.refresh(giveaway)
        return giveaway

    async def set_message_id(self, giveaway_id: int, message_id: str) -> bool:
        """Сохраняет ID опубликованного сообщения. Записывается только один раз."""
        stmt = (
            update(Giveaway)
            .where(Giveaway.id == giveaway_id, Giveaway.message_id.is_(None))
            .values(message_id=message_id)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def get_by_id(self, giveaway_id: int) -> Optional[Giveaway]:
        result = await self.session.execute(select(Giveaway).where(Giveaway.id == giveaway_id))
        return result.scalar_one_or_none()

    async def list_due(self, now: datetime, limit: int = 50) -> List[Giveaway]:
        # status=running и время окончания уже наступило
        result = await self.session.execute(
            select(Giveaway)
            .where(Giveaway.status == GiveawayStatus.RUNNING.value, Giveaway.ends_at <= now)
            .order_by(Giveaway.ends_at)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def mark_ended(self, giveaway_id: int) -> bool:
        """
        Переводит розыгрыш в статус ended.

        Returns:
            bool: False, если розыгрыш уже завершен другим процессом
        """
        stmt = (
            update(Giveaway)
            .where(Giveaway.id == giveaway_id, Giveaway.status == GiveawayStatus.RUNNING.value)
            .values(status=GiveawayStatus.ENDED.value)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    def _expired_filter(self, cutoff: datetime):
        return (Giveaway.status != GiveawayStatus.RUNNING.value, Giveaway.ends_at < cutoff)

    async def count_expired(self, cutoff: datetime) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Giveaway).where(*self._expired_filter(cutoff))
        )
        return result.scalar() or 0

    async def delete_expired(self, cutoff: datetime) -> int:
        """
        Удаляет завершенные розыгрыши старше cutoff.
        Заявки удаляются базой данных каскадно (ON DELETE CASCADE).
        """
        stmt = (
            delete(Giveaway)
            .where(*self._expired_filter(cutoff))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0


class GiveawayEntryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, giveaway_id: int, user_id: str) -> EntryResult:
        """
        Добавляет заявку. Повторное участие определяется ограничением
        уникальности (giveaway_id, user_id), без блокировок в приложении.
        """
        stmt = insert(GiveawayEntry).values(giveaway_id=giveaway_id, user_id=user_id)
        try:
            await self.session.execute(stmt)
            await self.session.commit()
            return EntryResult.OK
        except IntegrityError as e:
            await self.session.rollback()
            if is_unique_violation(e):
                return EntryResult.DUPLICATE
            logger.error(f"Ошибка целостности при добавлении заявки {giveaway_id}/{user_id}: {e}")
            return EntryResult.FAILED
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Ошибка базы данных при добавлении заявки {giveaway_id}/{user_id}: {e}")
            return EntryResult.FAILED

    async def count_entries(self, giveaway_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(GiveawayEntry).where(GiveawayEntry.giveaway_id == giveaway_id)
        )
        return result.scalar() or 0

    async def list_user_ids(self, giveaway_id: int) -> List[str]:
        result = await self.session.execute(
            select(GiveawayEntry.user_id)
            .where(GiveawayEntry.giveaway_id == giveaway_id)
            .order_by(GiveawayEntry.created_at, GiveawayEntry.user_id)
        )
        return [row[0] for row in result.fetchall()]
