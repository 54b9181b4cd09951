import argparse
import logging
import os
import sys

from alembic import command
from alembic.config import Config

from crcbot.config import settings

ALEMBIC_INI = os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini")


def mask_url(database_url: str) -> str:
    """Скрывает пароль в строке подключения для логов"""
    scheme, sep, rest = database_url.partition("://")
    if not sep or "@" not in rest:
        return database_url
    credentials, host = rest.rsplit("@", 1)
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"


def run_migrations(action: str = "upgrade", revision: str = None, sql: bool = False) -> bool:
    """
    Выполняет действие Alembic над схемой розыгрышей.

    Args:
        action (str): upgrade, downgrade, stamp или current
        revision (str): Целевая версия (head для upgrade/stamp, -1 для downgrade)
        sql (bool): Только вывести SQL (offline-режим)

    База, созданная через init_db() при старте бота, уже содержит таблицы:
    для нее достаточно stamp head, чтобы Alembic начал учитывать версии.
    """
    if not os.path.exists(ALEMBIC_INI):
        logging.error(f"Файл alembic.ini не найден: {ALEMBIC_INI}")
        return False

    alembic_cfg = Config(ALEMBIC_INI)
    logging.info(f"База данных: {mask_url(settings.DATABASE_URL)}")

    try:
        if action == "upgrade":
            target = revision or "head"
            logging.info(f"Обновление схемы до {target}")
            command.upgrade(alembic_cfg, target, sql=sql)
        elif action == "downgrade":
            target = revision or "-1"
            logging.info(f"Откат схемы на {target}")
            command.downgrade(alembic_cfg, target, sql=sql)
        elif action == "stamp":
            target = revision or "head"
            logging.info(f"Отметка версии {target} без изменения схемы")
            command.stamp(alembic_cfg, target, sql=sql)
        elif action == "current":
            command.current(alembic_cfg, verbose=True)
        else:
            logging.error(f"Неизвестное действие: {action}")
            return False
    except Exception as e:
        logging.error(f"Ошибка при выполнении {action}: {e}")
        return False

    logging.info(f"Действие {action} выполнено")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Миграции базы данных розыгрышей")
    parser.add_argument("action", nargs="?", default="upgrade",
                        choices=["upgrade", "downgrade", "stamp", "current"],
                        help="Действие Alembic (по умолчанию upgrade)")
    parser.add_argument("--revision", help="Целевая версия схемы")
    parser.add_argument("--sql", action="store_true", help="Вывести SQL без выполнения")
    args = parser.parse_args()

    sys.exit(0 if run_migrations(args.action, args.revision, args.sql) else 1)
