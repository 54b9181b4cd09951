from sqlalchemy import Column, String, Integer, BigInteger, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from crcbot.database.db import Base


class GiveawayEntry(Base):
    __tablename__ = "giveaway_entries"

    # Составной ключ (giveaway_id, user_id): один пользователь - одна заявка
    giveaway_id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("giveaways.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id = Column(String, primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    giveaway = relationship("Giveaway", back_populates="entries")

    def __repr__(self):
        return f"<GiveawayEntry(giveaway_id={self.giveaway_id}, user_id={self.user_id})>"
