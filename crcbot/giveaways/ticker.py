import asyncio
import logging
from typing import Awaitable, Callable

from crcbot.giveaways.service import GiveawayService
from crcbot.utils.tasks import run_periodically


async def run_expiry_ticker(service: GiveawayService, tick_ms: int,
                            sleep: Callable[[float], Awaitable] = asyncio.sleep):
    """
    Периодически завершает розыгрыши с истекшим временем.
    tick_ms <= 0 отключает задачу.
    """
    if tick_ms <= 0:
        logging.info("Автоматическое завершение розыгрышей отключено (G_TICK_MS=0)")
        return
    await run_periodically("giveaway_ticker", service.end_due_giveaways, tick_ms / 1000, sleep=sleep)
