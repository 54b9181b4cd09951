from crcbot.database.repositories.giveaway_repository import (
    GiveawayRepository,
    GiveawayEntryRepository,
    EntryResult,
)

__all__ = ["GiveawayRepository", "GiveawayEntryRepository", "EntryResult"]
