"""
Жизненный цикл розыгрыша: создание через форму, публикация анонса,
прием заявок и завершение с выбором победителей.
"""

import enum
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from crcbot.config.settings import BotConfig
from crcbot.database.models import Giveaway
from crcbot.database.repositories import GiveawayRepository, GiveawayEntryRepository, EntryResult
from crcbot.discord.rest import DiscordResponse
from crcbot.giveaways.duration import parse_duration
from crcbot.giveaways.embeds import build_announcement, build_results_message
from crcbot.giveaways.errors import ValidationError, Forbidden, PostFailure, StoreFailure
from crcbot.utils.helpers import format_log_message, utcnow

logger = logging.getLogger(__name__)


class MessagePoster(Protocol):
    async def post_message(self, channel_id: str, payload: Dict[str, Any]) -> DiscordResponse:
        ...


class CreationState(enum.Enum):
    """Фаза создания розыгрыша (без транзакции между фазами)"""
    PENDING_ANNOUNCEMENT = "pending-announcement"  # строка сохранена, анонса нет
    ANNOUNCED = "announced"  # анонс опубликован, message_id не сохранен
    LINKED = "linked"  # message_id записан в строку розыгрыша


class JoinOutcome(enum.Enum):
    JOINED = "joined"
    ALREADY_JOINED = "already_joined"
    CLOSED = "closed"


@dataclass
class GiveawayForm:
    """Сырые значения полей формы /gstart"""
    prize: str = ""
    title: str = ""
    description: str = ""
    duration: str = ""
    winners: str = ""
    host_id: str = ""

    @classmethod
    def from_values(cls, values: Dict[str, str]) -> "GiveawayForm":
        return cls(**{name: (values.get(name) or "").strip() for name in cls.__dataclass_fields__})


@dataclass
class GiveawayCreation:
    giveaway_id: int
    ends_at: datetime
    state: CreationState
    message_id: Optional[str] = None


def parse_winners(raw: str, default: int) -> int:
    """
    Количество победителей: пусто -> значение по умолчанию,
    не число или меньше 1 -> 1.
    """
    if not raw or not raw.strip():
        return max(1, default)
    try:
        return max(1, int(raw.strip()))
    except ValueError:
        return 1


class GiveawayService:
    def __init__(self, session_factory: async_sessionmaker, discord: MessagePoster, config: BotConfig,
                 clock: Callable[[], datetime] = utcnow, rng: random.Random = None):
        self.session_factory = session_factory
        self.discord = discord
        self.config = config
        self.clock = clock
        self.rng = rng or random.Random()

    async def create_giveaway(self, form: GiveawayForm, guild_id: Optional[str], channel_id: str,
                              user_id: str) -> GiveawayCreation:
        """
        Создает розыгрыш и публикует анонс.

        1. Сохраняет строку со статусом running (PENDING_ANNOUNCEMENT)
        2. Публикует анонс с кнопкой участия (ANNOUNCED)
        3. Записывает message_id (LINKED)

        Raises:
            ValidationError: нет приза или длительность не распознана
            StoreFailure: строку не удалось сохранить
            PostFailure: анонс не опубликован, строка остается в базе
        """
        prize = form.prize.strip()
        duration_ms = parse_duration(form.duration.strip() or self.config.default_duration)
        if not prize or not duration_ms:
            raise ValidationError()

        winners = parse_winners(form.winners, self.config.default_winners)
        title = form.title.strip() or None
        description = form.description.strip() or None
        host_id = form.host_id.strip() or None
        try:
            ends_at = self.clock() + timedelta(milliseconds=duration_ms)
        except (OverflowError, ValueError):
            # Дата окончания вне диапазона datetime
            raise ValidationError()

        try:
            async with self.session_factory() as session:
                giveaway = await GiveawayRepository(session).create(
                    channel_id=channel_id,
                    prize=prize,
                    winners=winners,
                    created_by=user_id,
                    ends_at=ends_at,
                    guild_id=guild_id,
                    title=title,
                    description=description,
                    host_id=host_id,
                )
                giveaway_id = giveaway.id
        except SQLAlchemyError as e:
            logger.error(f"Ошибка при сохранении розыгрыша: {e}")
            raise StoreFailure("Could not create the giveaway (error).")

        creation = GiveawayCreation(giveaway_id, ends_at, CreationState.PENDING_ANNOUNCEMENT)
        logger.info(format_log_message("Розыгрыш сохранен", {"id": giveaway_id, "guild": guild_id, "ends_at": ends_at}))

        payload = build_announcement(giveaway_id, prize, ends_at, winners, title, description, host_id,
                                     self.config.entry_role_id)
        response = await self.discord.post_message(channel_id, payload)
        if not response.ok:
            # Строка остается без message_id, ее удалит очистка
            logger.warning(format_log_message("Анонс розыгрыша не опубликован",
                                              {"id": giveaway_id, "status": response.status_code}))
            raise PostFailure(giveaway_id, response.status_code)

        creation.state = CreationState.ANNOUNCED
        creation.message_id = response.message_id

        if creation.message_id:
            try:
                async with self.session_factory() as session:
                    if await GiveawayRepository(session).set_message_id(giveaway_id, creation.message_id):
                        creation.state = CreationState.LINKED
            except SQLAlchemyError as e:
                logger.error(f"Не удалось сохранить message_id для розыгрыша {giveaway_id}: {e}")
        else:
            logger.warning(f"Discord не вернул ID сообщения для розыгрыша {giveaway_id}")

        return creation

    async def join(self, giveaway_id: int, user_id: str, roles: Iterable[str] = ()) -> JoinOutcome:
        """
        Регистрирует участие пользователя.

        Повторное нажатие определяется ограничением уникальности в базе,
        поэтому одновременные нажатия безопасны без блокировок.
        """
        role_id = self.config.entry_role_id
        if role_id and role_id not in set(roles):
            raise Forbidden(role_id)

        try:
            async with self.session_factory() as session:
                giveaway = await GiveawayRepository(session).get_by_id(giveaway_id)
                if giveaway is None or not giveaway.is_running():
                    return JoinOutcome.CLOSED
                result = await GiveawayEntryRepository(session).add(giveaway_id, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Ошибка базы данных при участии в розыгрыше {giveaway_id}: {e}")
            raise StoreFailure()

        if result is EntryResult.DUPLICATE:
            return JoinOutcome.ALREADY_JOINED
        if result is EntryResult.FAILED:
            raise StoreFailure()
        logger.debug(format_log_message("Новая заявка", {"giveaway": giveaway_id, "user": user_id}))
        return JoinOutcome.JOINED

    async def end_due_giveaways(self) -> int:
        """
        Завершает все розыгрыши, время которых истекло.

        Returns:
            int: количество завершенных этим вызовом розыгрышей
        """
        async with self.session_factory() as session:
            due = await GiveawayRepository(session).list_due(self.clock())

        ended = 0
        for giveaway in due:
            try:
                if await self.end_giveaway(giveaway) is not None:
                    ended += 1
            except SQLAlchemyError as e:
                logger.error(f"Ошибка при завершении розыгрыша {giveaway.id}: {e}")
        return ended

    async def end_giveaway(self, giveaway: Giveaway) -> Optional[List[str]]:
        """
        Переводит розыгрыш в ended, выбирает победителей и публикует итоги.

        Returns:
            Optional[List[str]]: ID победителей или None, если розыгрыш
            уже завершил другой процесс
        """
        async with self.session_factory() as session:
            if not await GiveawayRepository(session).mark_ended(giveaway.id):
                return None
            entrants = await GiveawayEntryRepository(session).list_user_ids(giveaway.id)

        # Равновероятная выборка без повторений
        winner_ids = self.rng.sample(entrants, min(giveaway.winners, len(entrants)))
        logger.info(format_log_message("Розыгрыш завершен", {
            "id": giveaway.id, "entries": len(entrants), "winners": ",".join(winner_ids) or "-",
        }))

        payload = build_results_message(giveaway.prize, winner_ids, len(entrants), giveaway.message_id)
        response = await self.discord.post_message(giveaway.channel_id, payload)
        if not response.ok:
            logger.warning(f"Итоги розыгрыша {giveaway.id} не опубликованы (HTTP {response.status_code})")
        return winner_ids
