import enum

from sqlalchemy import Column, String, Integer, BigInteger, Text, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from crcbot.database.db import Base


class GiveawayStatus(str, enum.Enum):
    RUNNING = "running"
    ENDED = "ended"
    CANCELLED = "cancelled"


class Giveaway(Base):
    __tablename__ = "giveaways"

    # В SQLite автоинкремент работает только для INTEGER PRIMARY KEY
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    guild_id = Column(String, nullable=True)
    channel_id = Column(String, nullable=False)
    message_id = Column(String, nullable=True)  # заполняется после публикации анонса
    prize = Column(String(100), nullable=False)
    title = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    winners = Column(Integer, nullable=False, default=1)
    host_id = Column(String, nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(16), nullable=False, default=GiveawayStatus.RUNNING.value)  # running | ended | cancelled

    entries = relationship(
        "GiveawayEntry",
        back_populates="giveaway",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("winners >= 1", name="ck_giveaways_winners_positive"),
    )

    def is_running(self) -> bool:
        return self.status == GiveawayStatus.RUNNING.value

    def __repr__(self):
        return f"<Giveaway(id={self.id}, prize='{self.prize}', status={self.status}, ends_at={self.ends_at})>"
