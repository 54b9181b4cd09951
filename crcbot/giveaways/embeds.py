from datetime import datetime
from typing import Any, Dict, List, Optional

from crcbot.discord.interactions import ButtonStyle, ComponentType, TextInputStyle

GSTART_MODAL_ID = "gstart_modal"
JOIN_PREFIX = "g_join:"


def relative_timestamp(moment: datetime) -> str:
    """Метка времени Discord в относительном формате (<t:...:R>)"""
    return f"<t:{int(moment.timestamp())}:R>"


def join_custom_id(giveaway_id: int) -> str:
    return f"{JOIN_PREFIX}{giveaway_id}"


def parse_join_custom_id(custom_id: str) -> Optional[int]:
    """Извлекает ID розыгрыша из custom_id кнопки; None если формат неверный"""
    if not custom_id or not custom_id.startswith(JOIN_PREFIX):
        return None
    raw = custom_id[len(JOIN_PREFIX):]
    return int(raw) if raw.isascii() and raw.isdigit() else None


def build_giveaway_embed(prize: str, ends_at: datetime, winners: int, title: str = None,
                         description: str = None, host_id: str = None,
                         entry_role_id: str = None) -> Dict[str, Any]:
    text = ""
    if title:
        text += f"**{title}**\n"
    if description:
        text += f"{description}\n\n"
    text += f"Ends {relative_timestamp(ends_at)}\n"
    text += f"Winners: **{winners}**"
    if entry_role_id:
        text += f"\nRequirement: <@&{entry_role_id}>"
    if host_id:
        text += f"\nHost: <@{host_id}>"
    return {"title": f"🎉 Giveaway: {prize}", "description": text}


def build_join_components(giveaway_id: int) -> List[Dict[str, Any]]:
    return [{
        "type": ComponentType.ACTION_ROW,
        "components": [{
            "type": ComponentType.BUTTON,
            "style": ButtonStyle.PRIMARY,
            "label": "Join 🎉",
            "custom_id": join_custom_id(giveaway_id),
        }],
    }]


def build_announcement(giveaway_id: int, prize: str, ends_at: datetime, winners: int, title: str = None,
                       description: str = None, host_id: str = None,
                       entry_role_id: str = None) -> Dict[str, Any]:
    """Тело сообщения с анонсом розыгрыша и кнопкой участия"""
    embed = build_giveaway_embed(prize, ends_at, winners, title, description, host_id, entry_role_id)
    return {"embeds": [embed], "components": build_join_components(giveaway_id)}


def build_results_message(prize: str, winner_ids: List[str], entrants: int,
                          message_id: str = None) -> Dict[str, Any]:
    if winner_ids:
        mentions = ", ".join(f"<@{user_id}>" for user_id in winner_ids)
        content = f"🎉 Giveaway ended! Congratulations {mentions}, you won **{prize}**!"
    else:
        content = f"Giveaway for **{prize}** ended with no valid entries."
    payload: Dict[str, Any] = {
        "content": content,
        "allowed_mentions": {"users": list(winner_ids)},
    }
    if message_id:
        payload["message_reference"] = {"message_id": message_id, "fail_if_not_exists": False}
    payload["embeds"] = [{"description": f"Entries: **{entrants}**"}]
    return payload


def _text_input(custom_id: str, label: str, style: int, required: bool,
                max_length: int = None) -> Dict[str, Any]:
    field = {
        "type": ComponentType.TEXT_INPUT,
        "custom_id": custom_id,
        "label": label,
        "style": style,
        "required": required,
    }
    if max_length:
        field["max_length"] = max_length
    return {"type": ComponentType.ACTION_ROW, "components": [field]}


def build_create_modal(default_duration: str, default_winners: int) -> Dict[str, Any]:
    """Форма создания розыгрыша для команды /gstart"""
    return {
        "custom_id": GSTART_MODAL_ID,
        "title": "Create Giveaway",
        "components": [
            _text_input("prize", "Prize", TextInputStyle.SHORT, True, 100),
            _text_input("title", "Title (optional)", TextInputStyle.SHORT, False, 100),
            _text_input("description", "Description (optional)", TextInputStyle.PARAGRAPH, False, 1000),
            _text_input("duration", f"Duration (e.g. {default_duration})", TextInputStyle.SHORT, True),
            _text_input("winners", f"Winners (default {default_winners})", TextInputStyle.SHORT, False),
            _text_input("host_id", "Host ID (optional)", TextInputStyle.SHORT, False),
        ],
    }
