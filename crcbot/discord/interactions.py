import re
from enum import IntEnum
from typing import Any, Dict, List, Optional

from crcbot.utils.helpers import safe_get

# Флаг эфемерного ответа (виден только вызвавшему пользователю)
EPHEMERAL = 1 << 6

# Бит ADMINISTRATOR в строке permissions участника
ADMINISTRATOR = 1 << 3


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class ResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    MODAL = 9


class ComponentType(IntEnum):
    ACTION_ROW = 1
    BUTTON = 2
    STRING_SELECT = 3
    TEXT_INPUT = 4


class ButtonStyle(IntEnum):
    PRIMARY = 1


class TextInputStyle(IntEnum):
    SHORT = 1
    PARAGRAPH = 2


def pong() -> Dict[str, Any]:
    return {"type": ResponseType.PONG}


def message(content: str = None, embeds: List[dict] = None, components: List[dict] = None,
            ephemeral: bool = False) -> Dict[str, Any]:
    """Ответ сообщением на взаимодействие"""
    data: Dict[str, Any] = {}
    if ephemeral:
        data["flags"] = EPHEMERAL
    if content is not None:
        data["content"] = content
    if embeds is not None:
        data["embeds"] = embeds
    if components is not None:
        data["components"] = components
    return {"type": ResponseType.CHANNEL_MESSAGE_WITH_SOURCE, "data": data}


def ephemeral(content: str = None, embeds: List[dict] = None) -> Dict[str, Any]:
    return message(content=content, embeds=embeds, ephemeral=True)


def modal(data: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": ResponseType.MODAL, "data": data}


def command_name(body: Dict[str, Any]) -> str:
    """Нормализует имя команды: нижний регистр, дефисы и пробелы -> _"""
    return re.sub(r"[-\s]+", "_", str(safe_get(body, ["data", "name"], "")).lower())


def custom_id(body: Dict[str, Any]) -> str:
    return str(safe_get(body, ["data", "custom_id"], ""))


def invoking_user_id(body: Dict[str, Any]) -> Optional[str]:
    """ID пользователя: в гильдии он внутри member, в личных сообщениях - в user"""
    user_id = safe_get(body, ["member", "user", "id"]) or safe_get(body, ["user", "id"])
    return str(user_id) if user_id is not None else None


def member_roles(body: Dict[str, Any]) -> List[str]:
    return [str(role) for role in safe_get(body, ["member", "roles"], [])]


def member_is_admin(body: Dict[str, Any]) -> bool:
    try:
        return int(safe_get(body, ["member", "permissions"], "0")) & ADMINISTRATOR != 0
    except (TypeError, ValueError):
        return False


def modal_values(body: Dict[str, Any]) -> Dict[str, str]:
    """Собирает значения полей формы {custom_id: значение без пробелов по краям}"""
    values = {}
    for row in safe_get(body, ["data", "components"], []):
        for component in row.get("components") or []:
            key = component.get("custom_id")
            if key:
                values[key] = (component.get("value") or "").strip()
    return values
