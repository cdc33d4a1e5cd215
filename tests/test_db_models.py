"""Tests for SQLAlchemy ORM models."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.models.db import (
    DeckCardDB,
    DeckDB,
    GameTableDB,
    TableStateDB,
    UserCardDB,
    UserProgressionDB,
    UserTableDB,
)


class TestUserProgressionDB:
    async def test_one_row_per_user(self, session: AsyncSession) -> None:
        session.add(UserProgressionDB(user_id=1, level=1, experience=0, money=100))
        await session.commit()

        session.add(UserProgressionDB(user_id=1, level=1, experience=0, money=100))
        with pytest.raises(IntegrityError):
            await session.commit()

    @pytest.mark.parametrize(
        ("level", "experience", "money"),
        [(0, 0, 0), (1, -1, 0), (1, 0, -1)],
    )
    async def test_check_constraints(
        self, session: AsyncSession, level: int, experience: int, money: int
    ) -> None:
        """Level >= 1, experience >= 0 and money >= 0 are enforced by the schema."""
        session.add(UserProgressionDB(user_id=1, level=level, experience=experience, money=money))

        with pytest.raises(IntegrityError):
            await session.commit()


class TestUserCardDB:
    async def test_one_row_per_user_and_card(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        card_id = catalog["Tidecaller"]
        session.add(UserCardDB(user_id=1, card_id=card_id, amount=1))
        await session.commit()

        session.add(UserCardDB(user_id=1, card_id=card_id, amount=2))
        with pytest.raises(IntegrityError):
            await session.commit()

    async def test_card_relationship(self, session: AsyncSession, catalog: dict[str, int]) -> None:
        session.add(UserCardDB(user_id=1, card_id=catalog["Tidecaller"], amount=1))
        await session.commit()

        result = await session.execute(select(UserCardDB).where(UserCardDB.user_id == 1))
        row = result.scalar_one()

        assert row.card.name == "Tidecaller"


class TestDeckDB:
    async def test_entries_cascade_on_delete(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        deck = DeckDB(user_id=1, name="Tides", valid=True)
        deck.cards = [DeckCardDB(card_id=catalog["Tidecaller"], number=40)]
        session.add(deck)
        await session.commit()

        await session.delete(deck)
        await session.commit()

        result = await session.execute(select(DeckCardDB))
        assert result.scalars().all() == []

    async def test_entry_number_positive(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        deck = DeckDB(user_id=1, name="Empty", valid=False)
        deck.cards = [DeckCardDB(card_id=catalog["Tidecaller"], number=0)]
        session.add(deck)

        with pytest.raises(IntegrityError):
            await session.commit()


class TestTableStateDB:
    async def test_card_lists_default_to_empty_arrays(self, session: AsyncSession) -> None:
        table = GameTableDB(category="A", privacy="public", prize="money")
        session.add(table)
        await session.flush()
        session.add(UserTableDB(user_id=1, table_id=table.id))
        state = TableStateDB(table_id=table.id)
        session.add(state)
        await session.commit()

        assert state.owners_active_monster == "[]"
        assert state.rivals_graveyard == "[]"
        assert state.owners_active_monster_hp is None
        assert state.created_at is not None
