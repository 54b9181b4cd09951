from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Union


def utcnow() -> datetime:
    """Текущее время в UTC с tzinfo"""
    return datetime.now(timezone.utc)


def format_log_message(message: str, extra: Optional[Dict[str, Any]] = None) -> str:
    """
    Добавляет к сообщению лога контекст в виде key=value.

    Пример: format_log_message("Заявка принята", {"giveaway": 5})
    -> "Заявка принята | giveaway=5"
    """
    if not extra:
        return message
    context = " | ".join(f"{key}={value}" for key, value in extra.items() if value is not None)
    return f"{message} | {context}" if context else message


def safe_get(data: Optional[Dict[str, Any]], keys: Union[str, Sequence[str]], default: Any = None) -> Any:
    """
    Достает значение из вложенных словарей payload-а Discord.

    Args:
        data: Исходный словарь (может быть None)
        keys: Ключ или путь из ключей, например ["member", "user", "id"]
        default: Значение, если по пути ничего нет или там None
    """
    path = [keys] if isinstance(keys, str) else list(keys)
    current = data
    for key in path:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
    return default if current is None else current
