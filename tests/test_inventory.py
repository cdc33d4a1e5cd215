"""Tests for the inventory ledger."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db.inventory import add_copies, get_owned, list_owned, owned_amounts
from tcgserver.models.db import UserCardDB
from tcgserver.models.failure import InvalidArgumentError


class TestAddCopies:
    async def test_first_acquisition_creates_row(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        amount = await add_copies(session, 1, catalog["Ember Drake"], 3)

        assert amount == 3
        assert await get_owned(session, 1, catalog["Ember Drake"]) == 3

    @pytest.mark.parametrize("deltas", [[1, 1], [4, 2, 7], [10, 1, 1, 1]])
    async def test_cumulative(
        self, session: AsyncSession, catalog: dict[str, int], deltas: list[int]
    ) -> None:
        """Repeated acquisitions add up in a single row."""
        card_id = catalog["Tidecaller"]
        for delta in deltas:
            await add_copies(session, 1, card_id, delta)

        assert await get_owned(session, 1, card_id) == sum(deltas)

        result = await session.execute(
            select(func.count()).select_from(UserCardDB).where(UserCardDB.user_id == 1)
        )
        assert result.scalar_one() == 1

    @pytest.mark.parametrize("delta", [0, -1])
    async def test_rejects_non_positive(
        self, session: AsyncSession, catalog: dict[str, int], delta: int
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            await add_copies(session, 1, catalog["Ember Drake"], delta)

        assert await get_owned(session, 1, catalog["Ember Drake"]) == 0

    async def test_users_are_independent(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        await add_copies(session, 1, catalog["Ember Drake"], 2)
        await add_copies(session, 2, catalog["Ember Drake"], 5)

        assert await get_owned(session, 1, catalog["Ember Drake"]) == 2
        assert await get_owned(session, 2, catalog["Ember Drake"]) == 5


class TestReads:
    async def test_get_owned_absent_is_zero(self, session: AsyncSession) -> None:
        assert await get_owned(session, 1, 12345) == 0

    async def test_list_owned_ordered_by_name(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        await add_copies(session, 1, catalog["Tidecaller"], 1)
        await add_copies(session, 1, catalog["Ember Drake"], 2)
        await add_copies(session, 1, catalog["Fire Energy"], 20)

        entries = await list_owned(session, 1)

        assert [(e.card.name, e.amount) for e in entries] == [
            ("Ember Drake", 2),
            ("Fire Energy", 20),
            ("Tidecaller", 1),
        ]

    async def test_list_owned_empty(self, session: AsyncSession) -> None:
        assert await list_owned(session, 1) == []

    async def test_owned_amounts(self, session: AsyncSession, catalog: dict[str, int]) -> None:
        """Only owned cards appear in the map."""
        await add_copies(session, 1, catalog["Tidecaller"], 4)
        await add_copies(session, 1, catalog["Ember Drake"], 2)

        amounts = await owned_amounts(
            session, 1, [catalog["Tidecaller"], catalog["Stone Warden"]]
        )

        assert amounts == {catalog["Tidecaller"]: 4}

    async def test_owned_amounts_no_ids(self, session: AsyncSession) -> None:
        assert await owned_amounts(session, 1, []) == {}
