from typing import Any, Dict
import logging

from crcbot.discord import interactions
from crcbot.discord.interactions import ComponentType

INFO_SELECT_ID = "crc_info_select"
EMBED_COLOR = 16711422

CATEGORIES = {
    "donation_info": {
        "label": "Donation information",
        "emoji": "💵",
        "summary": "Information about the perks and costs of donation to Code Red Creations",
        "embed": {
            "title": "Donation information",
            "description": (
                "If you would like to support our community and get some perks for yourself, you can do it over here:\n"
                "[Code Red Creations - Roblox Group](https://www.roblox.com/share/g/70326561)\n"
                "*Create a ticket to aquire your role.*"
            ),
            "fields": [
                {"name": "💎 - Platinum Member", "value": "- Shout out\n- Role + Colour\n- Platinum Chat\n*Price: 200R$/month*", "inline": True},
                {"name": "⚜️ - Ultimate Member", "value": "- Shout out\n- Role + Colour\n- Ultimate Giveaways\n*Price: 400R$/month*", "inline": True},
                {"name": "🌟 - Server Booster", "value": "- Shout out\n- Role + Colour\n- Platinum Chat", "inline": True},
            ],
        },
    },
    "applying_info": {
        "label": "Applying for Staff/Developer",
        "emoji": "🛡️",
        "summary": "Information about the requirements for applying and more.",
        "embed": {
            "title": "Applying for a Staff or Developer position",
            "description": "At Code Red Creations, we're looking for active UGC developers and, from time to time, new staff members.",
            "fields": [
                {"name": "Applying for the Staff Team", "value": "Keep an eye on announcements for openings!", "inline": False},
                {"name": "Applying for UGC Developer", "value": "Open a ticket and share your portfolio!", "inline": False},
            ],
        },
    },
    "products_info": {
        "label": "Products information",
        "emoji": "🛒",
        "summary": "Information about the products we sell at Code Red Creations.",
        "embed": {
            "title": "Products information",
            "description": "We create high-quality Roblox UGCs. Open a ticket for questions.",
        },
    },
    "affiliation_info": {
        "label": "Affiliation information",
        "emoji": "🤝",
        "summary": "Information about perks and requirements to affiliate with Code Red Creations.",
        "embed": {
            "title": "Affiliation information",
            "description": "Our Affiliation Program lets communities collaborate with Code Red Creations.\n\nOpen a ticket if interested.",
        },
    },
}


def build_public_content() -> Dict[str, Any]:
    """Обзорные embed-ы и меню выбора категории"""
    overview = {
        "color": EMBED_COLOR,
        "description": "Select a category from the dropdown to learn more about each category.",
        "fields": [
            {"name": item["label"], "value": item["summary"], "inline": False}
            for item in CATEGORIES.values()
        ],
    }
    select = {
        "type": ComponentType.STRING_SELECT,
        "custom_id": INFO_SELECT_ID,
        "placeholder": "Choose a category…",
        "options": [
            {"label": item["label"], "value": key, "emoji": {"name": item["emoji"]}}
            for key, item in CATEGORIES.items()
        ],
    }
    return {
        "embeds": [overview],
        "components": [{"type": ComponentType.ACTION_ROW, "components": [select]}],
    }


async def donate_command(body: Dict[str, Any], context) -> Dict[str, Any]:
    content = build_public_content()
    return interactions.message(embeds=content["embeds"], components=content["components"])


async def info_select(body: Dict[str, Any], context) -> Dict[str, Any]:
    values = (body.get("data") or {}).get("values") or []
    category = CATEGORIES.get(values[0]) if values else None
    if category is None:
        embed = {"title": "Unknown", "description": "This option is not configured."}
    else:
        embed = dict(category["embed"])
    embed["color"] = EMBED_COLOR
    return interactions.ephemeral(embeds=[embed])


async def post_info_command(body: Dict[str, Any], context) -> Dict[str, Any]:
    """/post_info: публикует и закрепляет информационное сообщение (только для администраторов)"""
    channel_id = context.config.info_channel_id
    if not context.config.bot_token or not channel_id:
        return interactions.ephemeral("Missing BOT token or INFO_CHANNEL_ID.")
    if not interactions.member_is_admin(body):
        return interactions.ephemeral("Only admins can run this.")

    response = await context.discord.post_message(channel_id, build_public_content())
    if not response.ok:
        logging.warning(f"Не удалось опубликовать информационное сообщение (HTTP {response.status_code})")
        return interactions.ephemeral(f"Couldn't post info (HTTP {response.status_code}).")

    pinned = False
    if response.message_id:
        pinned = await context.discord.pin_message(channel_id, response.message_id)
    return interactions.ephemeral(f"Posted{' and pinned' if pinned else ''} in <#{channel_id}>.")
