from unittest.mock import AsyncMock

import pytest

from crcbot.bot.dispatcher import GENERIC_ERROR, UNHANDLED, InteractionDispatcher
from crcbot.bot.handlers.info import CATEGORIES, INFO_SELECT_ID
from crcbot.config.settings import BotConfig
from crcbot.discord.interactions import EPHEMERAL, ResponseType
from crcbot.giveaways.errors import StoreFailure
from crcbot.giveaways.service import GiveawayForm, GiveawayService
from tests.conftest import FakeDiscord

ADMIN_PERMISSIONS = str(1 << 3)


def command(name, permissions="0"):
    return {
        "type": 2,
        "guild_id": "1",
        "channel_id": "100",
        "member": {"user": {"id": "42"}, "roles": [], "permissions": permissions},
        "data": {"name": name},
    }


def component(custom_id, roles=(), values=None):
    data = {"custom_id": custom_id}
    if values is not None:
        data["values"] = values
    return {
        "type": 3,
        "guild_id": "1",
        "channel_id": "100",
        "member": {"user": {"id": "7"}, "roles": list(roles)},
        "data": data,
    }


def modal_submit(**fields):
    return {
        "type": 5,
        "guild_id": "1",
        "channel_id": "100",
        "member": {"user": {"id": "42"}},
        "data": {
            "custom_id": "gstart_modal",
            "components": [
                {"type": 1, "components": [{"type": 4, "custom_id": key, "value": value}]}
                for key, value in fields.items()
            ],
        },
    }


def content_of(response):
    return response["data"].get("content")


def is_ephemeral(response):
    return response["type"] == ResponseType.CHANNEL_MESSAGE_WITH_SOURCE and response["data"].get("flags") == EPHEMERAL


@pytest.fixture
def service(session_factory, discord, config, clock):
    return GiveawayService(session_factory, discord, config, clock=clock)


@pytest.fixture
def dispatcher(service, discord, config):
    return InteractionDispatcher(service, discord, config)


@pytest.mark.asyncio
async def test_ping_returns_pong(dispatcher):
    assert await dispatcher.dispatch({"type": 1}) == {"type": 1}


@pytest.mark.asyncio
async def test_unknown_command_is_unhandled(dispatcher):
    response = await dispatcher.dispatch(command("nope"))

    assert is_ephemeral(response)
    assert content_of(response) == UNHANDLED


@pytest.mark.asyncio
async def test_unknown_interaction_type_is_unhandled(dispatcher):
    response = await dispatcher.dispatch({"type": 4, "data": {"name": "gstart"}})

    assert content_of(response) == UNHANDLED


@pytest.mark.asyncio
async def test_unknown_component_is_unhandled(dispatcher):
    response = await dispatcher.dispatch(component("something_else"))

    assert content_of(response) == UNHANDLED


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["gstart", "GStart"])
async def test_gstart_opens_modal(dispatcher, name):
    response = await dispatcher.dispatch(command(name))

    assert response["type"] == ResponseType.MODAL
    modal = response["data"]
    assert modal["custom_id"] == "gstart_modal"
    field_ids = [row["components"][0]["custom_id"] for row in modal["components"]]
    assert field_ids == ["prize", "title", "description", "duration", "winners", "host_id"]


@pytest.mark.asyncio
async def test_command_names_are_normalized(dispatcher):
    response = await dispatcher.dispatch(command("Post-Info"))

    # routed to /post_info, which rejects non-admins
    assert content_of(response) == "Only admins can run this."


@pytest.mark.asyncio
async def test_modal_submit_creates_giveaway(dispatcher, discord):
    body = modal_submit(prize=" Nitro ", title="", description="", duration="2h", winners="", host_id="")

    response = await dispatcher.dispatch(body)

    assert is_ephemeral(response)
    assert content_of(response).startswith("Giveaway created (ends <t:")
    assert len(discord.posts) == 1
    assert discord.posts[0][0] == "100"
    assert discord.posts[0][1]["embeds"][0]["title"] == "🎉 Giveaway: Nitro"


@pytest.mark.asyncio
async def test_modal_submit_validation_error(dispatcher, discord):
    response = await dispatcher.dispatch(modal_submit(prize="", duration="2h"))

    assert is_ephemeral(response)
    assert content_of(response).startswith("Invalid form")
    assert discord.posts == []


@pytest.mark.asyncio
async def test_modal_submit_post_failure(session_factory, config, clock):
    discord = FakeDiscord(status_code=500)
    service = GiveawayService(session_factory, discord, config, clock=clock)
    dispatcher = InteractionDispatcher(service, discord, config)

    response = await dispatcher.dispatch(modal_submit(prize="Nitro", duration="1h"))

    assert is_ephemeral(response)
    assert content_of(response) == "Couldn't post giveaway (HTTP 500)."


@pytest.mark.asyncio
async def test_join_button_flow(dispatcher, service):
    creation = await service.create_giveaway(GiveawayForm(prize="Nitro", duration="1h"), "1", "100", "42")
    body = component(f"g_join:{creation.giveaway_id}")

    first = await dispatcher.dispatch(body)
    second = await dispatcher.dispatch(body)

    assert is_ephemeral(first)
    assert content_of(first) == "✅ You joined!"
    assert content_of(second) == "You're already in."


@pytest.mark.asyncio
@pytest.mark.parametrize("custom_id", ["g_join:abc", "g_join:", "g_join:404"])
async def test_join_button_for_unknown_giveaway(dispatcher, custom_id):
    response = await dispatcher.dispatch(component(custom_id))

    assert content_of(response) == "This giveaway is no longer accepting entries."


@pytest.mark.asyncio
async def test_join_button_role_gate(session_factory, discord, clock):
    config = BotConfig(entry_role_id="999", bot_token="test-token")
    service = GiveawayService(session_factory, discord, config, clock=clock)
    dispatcher = InteractionDispatcher(service, discord, config)
    creation = await service.create_giveaway(GiveawayForm(prize="Nitro", duration="1h"), "1", "100", "42")

    denied = await dispatcher.dispatch(component(f"g_join:{creation.giveaway_id}", roles=["1"]))
    allowed = await dispatcher.dispatch(component(f"g_join:{creation.giveaway_id}", roles=["999"]))

    assert is_ephemeral(denied)
    assert content_of(denied) == "You need <@&999> to join this giveaway."
    assert content_of(allowed) == "✅ You joined!"


@pytest.mark.asyncio
async def test_store_failure_is_reported_to_user(dispatcher, service):
    service.join = AsyncMock(side_effect=StoreFailure())

    response = await dispatcher.dispatch(component("g_join:1"))

    assert is_ephemeral(response)
    assert content_of(response) == StoreFailure.message


@pytest.mark.asyncio
async def test_unexpected_error_gives_generic_reply(dispatcher, service):
    service.join = AsyncMock(side_effect=RuntimeError("boom"))

    response = await dispatcher.dispatch(component("g_join:1"))

    assert is_ephemeral(response)
    assert content_of(response) == GENERIC_ERROR


@pytest.mark.asyncio
async def test_donate_is_public(dispatcher):
    response = await dispatcher.dispatch(command("donate"))

    assert response["type"] == ResponseType.CHANNEL_MESSAGE_WITH_SOURCE
    assert "flags" not in response["data"]
    select = response["data"]["components"][0]["components"][0]
    assert select["custom_id"] == INFO_SELECT_ID
    assert [option["value"] for option in select["options"]] == list(CATEGORIES)


@pytest.mark.asyncio
async def test_info_select_shows_category(dispatcher):
    response = await dispatcher.dispatch(component(INFO_SELECT_ID, values=["products_info"]))

    assert is_ephemeral(response)
    assert response["data"]["embeds"][0]["title"] == "Products information"


@pytest.mark.asyncio
async def test_info_select_unknown_option(dispatcher):
    response = await dispatcher.dispatch(component(INFO_SELECT_ID, values=["nope"]))

    assert response["data"]["embeds"][0]["title"] == "Unknown"


@pytest.mark.asyncio
async def test_post_info_posts_and_pins(dispatcher, discord):
    response = await dispatcher.dispatch(command("post_info", permissions=ADMIN_PERMISSIONS))

    assert content_of(response) == "Posted and pinned in <#555>."
    assert discord.posts[0][0] == "555"
    assert discord.pins == [("555", discord.message_id)]


@pytest.mark.asyncio
async def test_post_info_requires_configuration(service, discord, clock):
    dispatcher = InteractionDispatcher(service, discord, BotConfig(bot_token="", info_channel_id=None))

    response = await dispatcher.dispatch(command("post_info", permissions=ADMIN_PERMISSIONS))

    assert content_of(response) == "Missing BOT token or INFO_CHANNEL_ID."
    assert discord.posts == []


@pytest.mark.asyncio
async def test_post_info_reports_failed_post(service, config):
    discord = FakeDiscord(status_code=403)
    dispatcher = InteractionDispatcher(service, discord, config)

    response = await dispatcher.dispatch(command("post_info", permissions=ADMIN_PERMISSIONS))

    assert content_of(response) == "Couldn't post info (HTTP 403)."
    assert discord.pins == []


@pytest.mark.asyncio
async def test_out_of_range_duration_gets_validation_reply(dispatcher, discord):
    response = await dispatcher.dispatch(modal_submit(prize="Nitro", duration="3000000d"))

    assert is_ephemeral(response)
    assert content_of(response).startswith("Invalid form")
    assert discord.posts == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"type": 3, "data": {"custom_id": 5}},
    {"type": 2, "data": {"name": 7}},
    {"type": 5, "data": {"custom_id": ["gstart_modal"]}},
])
async def test_non_string_identifiers_are_unhandled(dispatcher, body):
    response = await dispatcher.dispatch(body)

    assert is_ephemeral(response)
    assert content_of(response) == UNHANDLED
