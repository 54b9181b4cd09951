import asyncio
import logging
from typing import Awaitable, Callable


def format_delay(seconds: float) -> str:
    """Форматирует задержку как Ч:ММ:СС"""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


async def _run_job(name: str, job: Callable[[], Awaitable]):
    try:
        await job()
    except asyncio.CancelledError:
        raise
    except Exception as e:
        # Ошибка одного запуска не должна останавливать расписание
        logging.exception(f"Ошибка в фоновой задаче {name}: {e}")


async def run_periodically(name: str, job: Callable[[], Awaitable], interval: float, first_delay: float = 0.0,
                           run_immediately: bool = True,
                           sleep: Callable[[float], Awaitable] = asyncio.sleep):
    """
    Запускает job сразу (если run_immediately), затем через first_delay + interval,
    и дальше каждые interval секунд.

    sleep передается явно, чтобы расписание можно было проверить без реального ожидания.
    """
    try:
        if run_immediately:
            await _run_job(name, job)

        delay = first_delay + interval
        while True:
            logging.info(f"Следующий запуск задачи {name} через {format_delay(delay)}")
            await sleep(delay)
            await _run_job(name, job)
            delay = interval
    except asyncio.CancelledError:
        logging.info(f"Задача {name} отменена")
        raise
