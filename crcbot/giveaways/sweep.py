import asyncio
import logging
import random
from datetime import datetime, timedelta
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import async_sessionmaker

from crcbot.config.settings import BotConfig
from crcbot.database.repositories import GiveawayRepository
from crcbot.utils.helpers import utcnow
from crcbot.utils.tasks import run_periodically

SWEEP_INTERVAL = 24 * 60 * 60  # раз в сутки
MAX_JITTER = 5 * 60  # до 5 минут, чтобы несколько экземпляров не совпадали по времени


class RetentionSweep:
    """
    Удаляет завершенные (ended/cancelled) розыгрыши, закончившиеся раньше,
    чем retention_days назад. Заявки удаляются каскадом в базе.
    """

    def __init__(self, session_factory: async_sessionmaker, config: BotConfig,
                 clock: Callable[[], datetime] = utcnow,
                 sleep: Callable[[float], Awaitable] = asyncio.sleep,
                 rng: random.Random = None):
        self.session_factory = session_factory
        self.retention_days = max(1, config.retention_days)
        self.clock = clock
        self.sleep = sleep
        self.rng = rng or random.Random()

    def cutoff(self) -> datetime:
        return self.clock() - timedelta(days=self.retention_days)

    async def run_once(self) -> int:
        """
        Один проход очистки.

        Returns:
            int: количество удаленных розыгрышей
        """
        cutoff = self.cutoff()
        async with self.session_factory() as session:
            repo = GiveawayRepository(session)
            eligible = await repo.count_expired(cutoff)
            logging.info(f"[cleanup] К удалению: {eligible} розыгрыш(ей) старше {self.retention_days} дн.")
            if not eligible:
                return 0
            deleted = await repo.delete_expired(cutoff)

        logging.info(f"[cleanup] Удалено розыгрышей: {deleted} (заявки удалены каскадно)")
        return deleted

    async def run_forever(self):
        """Очистка при старте, затем раз в сутки со случайной задержкой перед первым циклом"""
        jitter = self.rng.uniform(0, MAX_JITTER)
        await run_periodically("retention_sweep", self.run_once, SWEEP_INTERVAL,
                               first_delay=jitter, sleep=self.sleep)
