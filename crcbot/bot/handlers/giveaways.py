from typing import Any, Dict
import logging

from crcbot.discord import interactions
from crcbot.giveaways.embeds import build_create_modal, parse_join_custom_id, relative_timestamp
from crcbot.giveaways.service import GiveawayForm, JoinOutcome
from crcbot.utils.helpers import format_log_message

JOIN_MESSAGES = {
    JoinOutcome.JOINED: "✅ You joined!",
    JoinOutcome.ALREADY_JOINED: "You're already in.",
    JoinOutcome.CLOSED: "This giveaway is no longer accepting entries.",
}


async def gstart_command(body: Dict[str, Any], context) -> Dict[str, Any]:
    """Команда /gstart открывает форму создания розыгрыша"""
    config = context.config
    return interactions.modal(build_create_modal(config.default_duration, config.default_winners))


async def gstart_modal_submit(body: Dict[str, Any], context) -> Dict[str, Any]:
    """Отправка формы /gstart: создание и публикация розыгрыша"""
    form = GiveawayForm.from_values(interactions.modal_values(body))
    guild_id = body.get("guild_id")
    creation = await context.service.create_giveaway(
        form,
        guild_id=str(guild_id) if guild_id is not None else None,
        channel_id=str(body.get("channel_id")),
        user_id=interactions.invoking_user_id(body),
    )
    return interactions.ephemeral(f"Giveaway created (ends {relative_timestamp(creation.ends_at)}).")


async def join_button(body: Dict[str, Any], context) -> Dict[str, Any]:
    """Кнопка участия g_join:<id>"""
    giveaway_id = parse_join_custom_id(interactions.custom_id(body))
    user_id = interactions.invoking_user_id(body)
    if giveaway_id is None or not user_id:
        logging.warning(format_log_message("Некорректное нажатие кнопки участия",
                                           {"custom_id": interactions.custom_id(body), "user": user_id}))
        return interactions.ephemeral(JOIN_MESSAGES[JoinOutcome.CLOSED])

    outcome = await context.service.join(giveaway_id, user_id, interactions.member_roles(body))
    return interactions.ephemeral(JOIN_MESSAGES[outcome])
