from crcbot.config import settings
from crcbot.config.settings import BotConfig

__all__ = ["settings", "BotConfig"]
