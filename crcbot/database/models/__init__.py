from crcbot.database.models.giveaway import Giveaway, GiveawayStatus
from crcbot.database.models.giveaway_entry import GiveawayEntry

__all__ = ["Giveaway", "GiveawayStatus", "GiveawayEntry"]
