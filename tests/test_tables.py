"""Tests for table lifecycle bookkeeping."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db.tables import (
    create_table,
    get_table,
    get_user_table,
    is_table_owner,
    is_table_participant,
    is_waiting_for_rival,
    join_table,
    list_user_tables,
    seat_to_model,
    update_table,
    update_user_table_time,
)
from tcgserver.models.failure import InvalidArgumentError, NotFoundError, TableClosedError
from tcgserver.models.table import SeatAssignment, TableCategory, TablePrivacy, TablePrize

OWNER = 1
RIVAL = 2


async def _open_table(session: AsyncSession, owner_id: int = OWNER, **kwargs) -> int:
    table = await create_table(
        session,
        owner_id,
        category=kwargs.pop("category", TableCategory.B),
        privacy=kwargs.pop("privacy", TablePrivacy.PUBLIC),
        prize=kwargs.pop("prize", TablePrize.MONEY),
        **kwargs,
    )
    return table.id


class TestCreateTable:
    async def test_create_seats_owner(self, session: AsyncSession) -> None:
        table_id = await _open_table(session, amount=50)

        table = await get_table(session, table_id)
        user_table = await get_user_table(session, table_id)

        assert table is not None
        assert (table.category, table.privacy, table.prize) == ("B", "public", "money")
        assert table.amount == 50
        assert user_table is not None
        assert seat_to_model(user_table) == SeatAssignment(
            table_id=table_id, owner_id=OWNER, rival_id=None, time=0
        )

    async def test_private_table_password(self, session: AsyncSession) -> None:
        table_id = await _open_table(session, privacy=TablePrivacy.PRIVATE, password="0042")

        table = await get_table(session, table_id)

        assert table is not None
        assert table.password == "0042"

    @pytest.mark.parametrize("password", ["12345678901", "abc", "12a4"])
    async def test_rejects_bad_password(self, session: AsyncSession, password: str) -> None:
        with pytest.raises(InvalidArgumentError):
            await _open_table(session, privacy=TablePrivacy.PRIVATE, password=password)

    async def test_rejects_negative_amount(self, session: AsyncSession) -> None:
        with pytest.raises(InvalidArgumentError):
            await _open_table(session, amount=-1)


class TestJoinTable:
    async def test_join(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)
        assert await is_waiting_for_rival(session, table_id)

        user_table = await join_table(session, table_id, RIVAL)

        assert user_table.rival_id == RIVAL
        assert not await is_waiting_for_rival(session, table_id)
        assert await is_table_participant(session, RIVAL, table_id)

    async def test_cannot_join_own_table(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)

        with pytest.raises(InvalidArgumentError):
            await join_table(session, table_id, OWNER)

        assert await is_waiting_for_rival(session, table_id)

    async def test_seat_already_taken(self, session: AsyncSession) -> None:
        """A table holds at most one rival."""
        table_id = await _open_table(session)
        await join_table(session, table_id, RIVAL)

        with pytest.raises(InvalidArgumentError):
            await join_table(session, table_id, 3)

        user_table = await get_user_table(session, table_id)
        assert user_table is not None
        assert user_table.rival_id == RIVAL

    async def test_join_missing_table(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await join_table(session, 999, RIVAL)

    async def test_waiting_for_missing_table(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await is_waiting_for_rival(session, 999)


class TestOwnership:
    async def test_owner_and_participants(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)
        await join_table(session, table_id, RIVAL)

        assert await is_table_owner(session, OWNER, table_id)
        assert not await is_table_owner(session, RIVAL, table_id)
        assert await is_table_participant(session, OWNER, table_id)
        assert not await is_table_participant(session, 3, table_id)
        assert not await is_table_owner(session, OWNER, 999)

    async def test_list_user_tables(self, session: AsyncSession) -> None:
        """Tables show up for both owner and rival, newest first."""
        first = await _open_table(session)
        second = await _open_table(session, owner_id=RIVAL)
        await _open_table(session, owner_id=3)
        await join_table(session, second, OWNER)

        tables = await list_user_tables(session, OWNER)

        assert [row.table_id for row in tables] == [second, first]

    async def test_update_time(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)

        user_table = await update_user_table_time(session, table_id, OWNER, 90)

        assert user_table.time == 90

    async def test_only_owner_sets_time(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)
        await join_table(session, table_id, RIVAL)

        with pytest.raises(NotFoundError):
            await update_user_table_time(session, table_id, RIVAL, 90)

    async def test_rejects_negative_time(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)

        with pytest.raises(InvalidArgumentError):
            await update_user_table_time(session, table_id, OWNER, -1)


class TestUpdateTable:
    async def test_partial_update(self, session: AsyncSession) -> None:
        """Fields left as None keep their value."""
        table_id = await _open_table(session, amount=50)

        await update_table(session, table_id, OWNER, category=TableCategory.S, amount=80)

        table = await get_table(session, table_id)
        assert table is not None
        assert (table.category, table.privacy, table.prize) == ("S", "public", "money")
        assert table.amount == 80

    async def test_make_private_with_password(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)

        user_table = await update_table(
            session, table_id, OWNER, privacy=TablePrivacy.PRIVATE, password="1234"
        )

        assert user_table.table.privacy == "private"
        assert user_table.table.password == "1234"

    async def test_private_without_password(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)

        with pytest.raises(InvalidArgumentError):
            await update_table(session, table_id, OWNER, privacy=TablePrivacy.PRIVATE)

        table = await get_table(session, table_id)
        assert table is not None
        await session.refresh(table)
        assert table.privacy == "public"

    @pytest.mark.parametrize(
        "changes", [{"password": "12ab"}, {"password": "12345678901"}, {"amount": -5}]
    )
    async def test_rejects_bad_values(self, session: AsyncSession, changes: dict) -> None:
        table_id = await _open_table(session)

        with pytest.raises(InvalidArgumentError):
            await update_table(session, table_id, OWNER, **changes)

    async def test_only_owner(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)

        with pytest.raises(NotFoundError):
            await update_table(session, table_id, RIVAL, prize=TablePrize.AURA)

    async def test_closed_once_rival_joins(self, session: AsyncSession) -> None:
        table_id = await _open_table(session)
        await join_table(session, table_id, RIVAL)

        with pytest.raises(TableClosedError):
            await update_table(session, table_id, OWNER, prize=TablePrize.AURA)

        table = await get_table(session, table_id)
        assert table is not None
        await session.refresh(table)
        assert table.prize == "money"

    async def test_missing_table(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await update_table(session, 999, OWNER, category=TableCategory.A)
