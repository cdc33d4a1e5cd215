"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    An immutable catalog card.

    Created by catalog seeding; never mutated by gameplay.
    """

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    type: Mapped[str] = mapped_column(String(16), index=True)
    legend: Mapped[str] = mapped_column(Text, default="")
    element: Mapped[str] = mapped_column(String(16), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name})>"


class EffectDB(Base):
    """
    Effect text that can be attached to cards.

    Effects are opaque strings; nothing interprets them. Soft deletion sets
    `deleted_at` and hides the effect from every read.
    """

    __tablename__ = "effects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    def __repr__(self) -> str:
        return f"<EffectDB(id={self.id}, deleted={self.deleted_at is not None})>"


class CardEffectDB(Base):
    """Association between a catalog card and one of its effects."""

    __tablename__ = "card_effects"

    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True
    )
    effect_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("effects.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    def __repr__(self) -> str:
        return f"<CardEffectDB(card_id={self.card_id}, effect_id={self.effect_id})>"


class UserProgressionDB(Base):
    """
    Level, experience and money for one user.

    Exactly one row per user, created lazily with starting values.
    """

    __tablename__ = "user_info"
    __table_args__ = (
        CheckConstraint("level >= 1", name="ck_user_info_level"),
        CheckConstraint("experience >= 0", name="ck_user_info_experience"),
        CheckConstraint("money >= 0", name="ck_user_info_money"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    level: Mapped[int] = mapped_column(Integer, default=1)
    experience: Mapped[int] = mapped_column(Integer, default=0)
    money: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<UserProgressionDB(user_id={self.user_id}, level={self.level})>"


class UserCardDB(Base):
    """
    Inventory row: how many copies of a card a user owns.

    Repeat acquisitions increment `amount`; never a second row per pair.
    """

    __tablename__ = "user_cards"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", name="uq_user_card"),
        CheckConstraint("amount >= 0", name="ck_user_cards_amount"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    amount: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    card: Mapped["CardDB"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<UserCardDB(user_id={self.user_id}, card_id={self.card_id}, amount={self.amount})>"


class DeckDB(Base):
    """
    A user's deck.

    `valid` is decided once at creation and never re-derived.
    """

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    name: Mapped[str] = mapped_column(String(100))
    valid: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, user_id={self.user_id}, name={self.name})>"


class DeckCardDB(Base):
    """Number of copies of one card in one deck."""

    __tablename__ = "deck_cards"
    __table_args__ = (CheckConstraint("number > 0", name="ck_deck_cards_number"),)

    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), primary_key=True
    )
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    number: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<DeckCardDB(deck_id={self.deck_id}, card_id={self.card_id}, number={self.number})>"


class GameTableDB(Base):
    """A match table. Completion (winner, finished_at) is tracked here."""

    __tablename__ = "tables"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String(1), index=True)
    privacy: Mapped[str] = mapped_column(String(16), index=True)
    password: Mapped[str | None] = mapped_column(String(10), nullable=True)
    prize: Mapped[str] = mapped_column(String(16), index=True)
    amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    winner: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<GameTableDB(id={self.id}, category={self.category})>"


class UserTableDB(Base):
    """Owner and (optional) rival seated at a table."""

    __tablename__ = "user_tables"
    __table_args__ = (
        UniqueConstraint("table_id", "user_id", name="uq_table_user"),
        UniqueConstraint("table_id", "rival_id", name="uq_table_rival"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    rival_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    table_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tables.id", ondelete="CASCADE"), index=True
    )
    time: Mapped[int] = mapped_column(Integer, default=0)

    table: Mapped["GameTableDB"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<UserTableDB(table_id={self.table_id}, user_id={self.user_id})>"


class TableStateDB(Base):
    """
    One snapshot of a table's board.

    Card-id list columns hold JSON array text (see models.match_state).
    Deck ids are plain integers so later deck changes never alter history.
    """

    __tablename__ = "table_state"
    __table_args__ = (Index("ix_table_state_table_created", "table_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    table_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tables.id", ondelete="CASCADE"), index=True
    )
    log: Mapped[str] = mapped_column(Text, default="")
    owners_deck_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rivals_deck_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    owners_active_monster: Mapped[str] = mapped_column(Text, default="[]")
    owners_bench_monster_1: Mapped[str] = mapped_column(Text, default="[]")
    owners_bench_monster_2: Mapped[str] = mapped_column(Text, default="[]")
    owners_bench_monster_3: Mapped[str] = mapped_column(Text, default="[]")
    owners_active_monster_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    owners_bench_monster_1_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    owners_bench_monster_2_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    owners_bench_monster_3_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    owners_graveyard: Mapped[str] = mapped_column(Text, default="[]")

    rivals_active_monster: Mapped[str] = mapped_column(Text, default="[]")
    rivals_bench_monster_1: Mapped[str] = mapped_column(Text, default="[]")
    rivals_bench_monster_2: Mapped[str] = mapped_column(Text, default="[]")
    rivals_bench_monster_3: Mapped[str] = mapped_column(Text, default="[]")
    rivals_active_monster_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rivals_bench_monster_1_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rivals_bench_monster_2_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rivals_bench_monster_3_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rivals_graveyard: Mapped[str] = mapped_column(Text, default="[]")

    # Python-side default keeps sub-second ordering on every backend
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<TableStateDB(id={self.id}, table_id={self.table_id})>"
