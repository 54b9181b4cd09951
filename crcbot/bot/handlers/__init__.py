from crcbot.bot.handlers import giveaways, info

__all__ = ["giveaways", "info"]
