import asyncio
import logging
import sys
import argparse
import signal
import functools

from crcbot.config.settings import BotConfig
from crcbot.bot.dispatcher import InteractionDispatcher
from crcbot.database.db import init_db, async_session, dispose_engine
from crcbot.discord.rest import DiscordRestClient
from crcbot.giveaways.service import GiveawayService
from crcbot.giveaways.sweep import RetentionSweep
from crcbot.giveaways.ticker import run_expiry_ticker
from crcbot.webapp.app import setup_webapp, start_webapp

# Фоновые задачи процесса и событие завершения
background_tasks = []
shutdown_event = asyncio.Event()


def handle_shutdown_signal(sig, loop):
    """Обработчик сигналов для корректного завершения работы приложения."""
    logging.info(f"Получен сигнал завершения: {sig}")
    shutdown_event.set()


def start_background_task(coro, name: str):
    task = asyncio.create_task(coro, name=name)
    background_tasks.append(task)
    task.add_done_callback(
        lambda t: logging.error(f"Задача {name} завершилась с ошибкой: {t.exception()}")
        if not t.cancelled() and t.exception() else None
    )
    logging.info(f"Запущена фоновая задача {name}")
    return task


async def main():
    """Точка входа в приложение."""
    parser = argparse.ArgumentParser(description="Запуск обработчика взаимодействий CRC")
    parser.add_argument("--port", type=int, help="Порт веб-сервера (переопределяет PORT/WEBAPP_PORT)")
    parser.add_argument("--no-sweep", action="store_true", help="Не запускать фоновую очистку старых розыгрышей")
    parser.add_argument("--sweep-once", action="store_true", help="Выполнить одну очистку и завершить работу")
    args = parser.parse_args()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, functools.partial(handle_shutdown_signal, sig, loop))
        except NotImplementedError:
            # Для систем, где add_signal_handler не поддерживается (Windows)
            logging.info(f"Обработчик сигнала {sig} не зарегистрирован - не поддерживается платформой")

    config = BotConfig.from_env()
    logging.info("Запуск CRC interactions")

    discord = None
    try:
        await init_db()
        sweep = RetentionSweep(async_session, config)

        if args.sweep_once:
            deleted = await sweep.run_once()
            logging.info(f"Очистка завершена. Удалено розыгрышей: {deleted}")
            return

        discord = DiscordRestClient(config.bot_token, config.api_base)
        service = GiveawayService(async_session, discord, config)
        dispatcher = InteractionDispatcher(service, discord, config)
        app = setup_webapp(dispatcher, config)

        if args.no_sweep:
            logging.warning("Очистка старых розыгрышей отключена флагом --no-sweep")
        else:
            start_background_task(sweep.run_forever(), "retention_sweep")
        start_background_task(run_expiry_ticker(service, config.tick_ms), "giveaway_ticker")

        await start_webapp(app, port=args.port, shutdown_event=shutdown_event)
    finally:
        await shutdown(discord)


async def shutdown(discord: DiscordRestClient = None):
    """Корректное завершение работы приложения."""
    logging.info("Завершение работы приложения...")

    for task in background_tasks:
        if task and not task.done():
            logging.debug(f"Отмена задачи: {task.get_name()}")
            task.cancel()
            try:
                await asyncio.wait_for(task, timeout=5.0)
            except asyncio.CancelledError:
                logging.debug("Задача успешно отменена")
            except asyncio.TimeoutError:
                logging.warning("Тайм-аут при отмене задачи")
            except Exception as e:
                logging.error(f"Ошибка при отмене задачи: {e}")
    background_tasks.clear()

    if discord is not None:
        await discord.close()
    await dispose_engine()

    shutdown_event.set()
    logging.info("Все фоновые задачи завершены")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.info("Принудительное завершение работы")
    except Exception as e:
        logging.error(f"Необработанное исключение: {e}")
        sys.exit(1)
