from typing import Any, Awaitable, Callable, Dict, Optional
import logging

from crcbot.bot.handlers import giveaways, info
from crcbot.config.settings import BotConfig
from crcbot.discord import interactions
from crcbot.discord.interactions import InteractionType
from crcbot.giveaways.errors import GiveawayError, ValidationError, Forbidden
from crcbot.giveaways.service import GiveawayService
from crcbot.utils.helpers import format_log_message

Handler = Callable[[Dict[str, Any], "InteractionDispatcher"], Awaitable[Optional[Dict[str, Any]]]]

GENERIC_ERROR = "Sorry, something went wrong."
UNHANDLED = "Unhandled."


class InteractionDispatcher:
    """
    Маршрутизирует взаимодействия Discord по типу и имени команды/custom_id.
    Любая ошибка обработчика превращается в эфемерный ответ пользователю.
    """

    # Слэш-команды: нормализованное имя -> обработчик
    COMMANDS: Dict[str, Handler] = {
        "gstart": giveaways.gstart_command,
        "donate": info.donate_command,
        "post_info": info.post_info_command,
    }

    # Компоненты (кнопки, меню): точный custom_id -> обработчик
    COMPONENTS: Dict[str, Handler] = {
        info.INFO_SELECT_ID: info.info_select,
    }

    # Компоненты по префиксу custom_id
    COMPONENT_PREFIXES: Dict[str, Handler] = {
        "g_join:": giveaways.join_button,
    }

    # Формы: custom_id -> обработчик
    MODALS: Dict[str, Handler] = {
        "gstart_modal": giveaways.gstart_modal_submit,
    }

    def __init__(self, service: GiveawayService, discord, config: BotConfig):
        self.service = service
        self.discord = discord
        self.config = config

    def resolve(self, body: Dict[str, Any]) -> Optional[Handler]:
        kind = body.get("type")
        if kind == InteractionType.APPLICATION_COMMAND:
            return self.COMMANDS.get(interactions.command_name(body))
        if kind == InteractionType.MESSAGE_COMPONENT:
            custom_id = interactions.custom_id(body)
            if custom_id in self.COMPONENTS:
                return self.COMPONENTS[custom_id]
            for prefix, handler in self.COMPONENT_PREFIXES.items():
                if custom_id.startswith(prefix):
                    return handler
            return None
        if kind == InteractionType.MODAL_SUBMIT:
            return self.MODALS.get(interactions.custom_id(body))
        return None

    async def dispatch(self, body: Dict[str, Any]) -> Dict[str, Any]:
        # PING отвечаем сразу, без какой-либо другой логики
        if body.get("type") == InteractionType.PING:
            return interactions.pong()

        context = {
            "type": body.get("type"),
            "name": interactions.command_name(body) or None,
            "custom_id": interactions.custom_id(body) or None,
            "user": interactions.invoking_user_id(body),
        }
        logging.info(format_log_message("Взаимодействие", context))

        handler = self.resolve(body)
        if handler is None:
            return interactions.ephemeral(UNHANDLED)

        try:
            response = await handler(body, self)
        except (ValidationError, Forbidden) as e:
            return interactions.ephemeral(e.message)
        except GiveawayError as e:
            logging.error(format_log_message(f"Ошибка розыгрыша: {e.__class__.__name__}", context))
            return interactions.ephemeral(e.message)
        except Exception as e:
            logging.exception(format_log_message(f"Ошибка обработчика взаимодействия: {e}", context))
            return interactions.ephemeral(GENERIC_ERROR)

        return response or interactions.ephemeral(UNHANDLED)
