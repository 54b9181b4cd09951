from crcbot.bot.dispatcher import InteractionDispatcher

__all__ = ["InteractionDispatcher"]
