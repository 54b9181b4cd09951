import re
from typing import Optional

# Множители единиц времени в миллисекундах
UNIT_MS = {
    "d": 86_400_000,
    "h": 3_600_000,
    "m": 60_000,
    "s": 1_000,
}

DURATION_TOKEN = re.compile(r"(\d+)\s*([dhms])", re.IGNORECASE)


def parse_duration(text: Optional[str]) -> Optional[int]:
    """
    Переводит строку вида "1h 30m" или "2d" в миллисекунды.

    Все найденные токены <число><единица> суммируются, повторяющиеся
    единицы накапливаются ("1h 1h" = 2 часа).

    Returns:
        Optional[int]: длительность в мс или None, если токенов нет
        или сумма не положительна
    """
    if not text:
        return None
    total = sum(int(value) * UNIT_MS[unit.lower()] for value, unit in DURATION_TOKEN.findall(text))
    return total if total > 0 else None
