from fastapi import FastAPI
import asyncio
import logging
import uvicorn

from crcbot import __version__
from crcbot.bot.dispatcher import InteractionDispatcher
from crcbot.config import settings
from crcbot.config.settings import BotConfig
from crcbot.webapp.middlewares import DiscordSignatureMiddleware
from crcbot.webapp.routers import interactions_router


def setup_webapp(dispatcher: InteractionDispatcher, config: BotConfig) -> FastAPI:
    """
    Настройка FastAPI приложения.

    Args:
        dispatcher (InteractionDispatcher): Диспетчер взаимодействий
        config (BotConfig): Конфигурация бота

    Returns:
        FastAPI: Настроенное FastAPI приложение
    """
    app = FastAPI(
        title="CRC Interactions",
        description="Обработчик взаимодействий Discord для Code Red Creations",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
    )

    # Проверка подписи Discord для /interactions
    app.add_middleware(
        DiscordSignatureMiddleware,
        public_key=config.public_key,
        protected_paths=["/interactions"],
    )

    # Диспетчер в состоянии приложения
    app.state.dispatcher = dispatcher

    app.include_router(interactions_router)

    @app.get("/")
    async def root():
        return {"message": "CRC interactions are running", "version": __version__}

    logging.info("Веб-приложение настроено")

    return app


async def start_webapp(app: FastAPI, host: str = None, port: int = None, shutdown_event=None) -> None:
    """
    Запуск веб-сервера с приложением FastAPI.

    Args:
        app (FastAPI): Экземпляр FastAPI приложения
        host (str, optional): Адрес, по умолчанию WEBAPP_HOST
        port (int, optional): Порт, по умолчанию WEBAPP_PORT
        shutdown_event (asyncio.Event, optional): Событие для сигнализации остановки сервера
    """
    host = host or settings.WEBAPP_HOST
    port = port or settings.WEBAPP_PORT
    config = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        log_level="info" if settings.DEBUG else "warning",
        access_log=settings.DEBUG,  # Отключаем логи доступа в продакшн
        proxy_headers=True,  # Доверяем заголовкам прокси
        forwarded_allow_ips="*"  # Разрешаем все IP для заголовков X-Forwarded-*
    )
    server = uvicorn.Server(config)

    if not shutdown_event:
        logging.info(f"Веб-сервер запускается на {host}:{port}")
        await server.serve()
        return

    server_task = asyncio.create_task(server.serve(), name="webapp_server_task")
    shutdown_task = asyncio.create_task(shutdown_event.wait(), name="webapp_shutdown_task")
    logging.info(f"CRC interactions on :{port}")

    # Ждем либо завершения сервера, либо сигнала завершения
    done, _ = await asyncio.wait([server_task, shutdown_task], return_when=asyncio.FIRST_COMPLETED)

    if server_task in done:
        shutdown_task.cancel()
        exc = server_task.exception()
        if exc:
            logging.error(f"Веб-сервер завершился с ошибкой: {exc}")
        else:
            logging.info("Веб-сервер завершил работу")
        return

    # Получен сигнал завершения: просим uvicorn остановиться штатно
    logging.info("Получен сигнал завершения работы, останавливаем веб-сервер")
    server.should_exit = True
    try:
        await asyncio.wait_for(server_task, timeout=10.0)
    except asyncio.TimeoutError:
        logging.warning("Тайм-аут при остановке веб-сервера")
        server_task.cancel()
    logging.info("Веб-сервер остановлен")
