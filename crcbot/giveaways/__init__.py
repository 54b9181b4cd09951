from crcbot.giveaways.duration import parse_duration
from crcbot.giveaways.errors import GiveawayError, ValidationError, Forbidden, PostFailure, StoreFailure
from crcbot.giveaways.service import (
    GiveawayService,
    GiveawayForm,
    GiveawayCreation,
    CreationState,
    JoinOutcome,
)
from crcbot.giveaways.sweep import RetentionSweep

__all__ = [
    "parse_duration",
    "GiveawayError",
    "ValidationError",
    "Forbidden",
    "PostFailure",
    "StoreFailure",
    "GiveawayService",
    "GiveawayForm",
    "GiveawayCreation",
    "CreationState",
    "JoinOutcome",
    "RetentionSweep",
]
