"""
Table lifecycle bookkeeping.

Creates tables, seats the owner and at most one rival, and tracks the
owner's clock. Supplies the table ids used by the match state store.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db.database import atomic, table_locks
from tcgserver.models.db import GameTableDB, UserTableDB
from tcgserver.models.failure import InvalidArgumentError, NotFoundError, TableClosedError
from tcgserver.models.table import (
    MAX_TABLE_PASSWORD_LENGTH,
    SeatAssignment,
    TableCategory,
    TablePrivacy,
    TablePrize,
)

logger = logging.getLogger(__name__)


def seat_to_model(user_table: UserTableDB) -> SeatAssignment:
    """Convert a user_tables row to a domain model."""
    return SeatAssignment(
        table_id=user_table.table_id,
        owner_id=user_table.user_id,
        rival_id=user_table.rival_id,
        time=user_table.time,
    )


def _validate_password(password: str | None) -> None:
    if password is None:
        return
    if len(password) > MAX_TABLE_PASSWORD_LENGTH:
        raise InvalidArgumentError(
            f"Password must be {MAX_TABLE_PASSWORD_LENGTH} characters or less"
        )
    if not password.isdigit():
        raise InvalidArgumentError("Password must contain only numeric characters")


async def create_table(
    session: AsyncSession,
    owner_id: int,
    category: TableCategory,
    privacy: TablePrivacy,
    prize: TablePrize,
    password: str | None = None,
    amount: int | None = None,
) -> GameTableDB:
    """
    Create a table and seat its owner, atomically.

    Raises:
        InvalidArgumentError: If the password is not numeric or too long,
            or amount is negative
    """
    _validate_password(password)
    if amount is not None and amount < 0:
        raise InvalidArgumentError("Amount must not be negative")

    async with atomic(session):
        table = GameTableDB(
            category=category.value,
            privacy=privacy.value,
            prize=prize.value,
            password=password,
            amount=amount,
        )
        session.add(table)
        await session.flush()
        session.add(UserTableDB(user_id=owner_id, table_id=table.id, rival_id=None))
        await session.flush()

    return table


async def get_table(session: AsyncSession, table_id: int) -> GameTableDB | None:
    """Get a table by id, or None."""
    return await session.get(GameTableDB, table_id)


async def get_user_table(session: AsyncSession, table_id: int) -> UserTableDB | None:
    """Get the seat assignment for a table, or None."""
    result = await session.execute(
        select(UserTableDB)
        .where(UserTableDB.table_id == table_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def is_table_owner(session: AsyncSession, user_id: int, table_id: int) -> bool:
    user_table = await get_user_table(session, table_id)
    return user_table is not None and user_table.user_id == user_id


async def is_table_participant(session: AsyncSession, user_id: int, table_id: int) -> bool:
    """True if the user is the owner or the rival of the table."""
    user_table = await get_user_table(session, table_id)
    if user_table is None:
        return False
    return user_id in (user_table.user_id, user_table.rival_id)


async def is_waiting_for_rival(session: AsyncSession, table_id: int) -> bool:
    """
    True if nobody has joined the table yet.

    Raises NotFoundError if the table has no seat assignment.
    """
    user_table = await get_user_table(session, table_id)
    if user_table is None:
        raise NotFoundError("Table", table_id)
    return user_table.rival_id is None


async def _get_user_table_for_update(session: AsyncSession, table_id: int) -> UserTableDB:
    result = await session.execute(
        select(UserTableDB)
        .where(UserTableDB.table_id == table_id)
        .with_for_update(of=UserTableDB)
        .execution_options(populate_existing=True)
    )
    user_table = result.scalar_one_or_none()
    if user_table is None:
        raise NotFoundError("Table", table_id)
    return user_table


async def join_table(session: AsyncSession, table_id: int, rival_id: int) -> UserTableDB:
    """
    Seat a rival at a table that is waiting for one.

    Raises:
        NotFoundError: If the table does not exist
        InvalidArgumentError: If the rival is the owner or the seat is taken
    """
    async with table_locks.hold(table_id), atomic(session):
        user_table = await _get_user_table_for_update(session, table_id)
        if user_table.user_id == rival_id:
            raise InvalidArgumentError("You cannot join your own table")
        if user_table.rival_id is not None:
            raise InvalidArgumentError("Table already has a rival")

        user_table.rival_id = rival_id
        await session.flush()

    return user_table


async def update_table(
    session: AsyncSession,
    table_id: int,
    owner_id: int,
    category: TableCategory | None = None,
    privacy: TablePrivacy | None = None,
    prize: TablePrize | None = None,
    password: str | None = None,
    amount: int | None = None,
) -> UserTableDB:
    """
    Change a table's settings while it waits for a rival.

    Only the arguments that are not None change. A private table must end
    up with a password.

    Raises:
        NotFoundError: If the table does not exist or is not owned by owner_id
        TableClosedError: If a rival has already joined
        InvalidArgumentError: Bad password or amount, or private without password
    """
    _validate_password(password)
    if amount is not None and amount < 0:
        raise InvalidArgumentError("Amount must not be negative")

    async with table_locks.hold(table_id), atomic(session):
        user_table = await _get_user_table_for_update(session, table_id)
        if user_table.user_id != owner_id:
            raise NotFoundError("Table", table_id)
        if user_table.rival_id is not None:
            raise TableClosedError(table_id)

        table = await get_table(session, table_id)
        if table is None:
            raise NotFoundError("Table", table_id)

        if category is not None:
            table.category = category.value
        if privacy is not None:
            table.privacy = privacy.value
        if prize is not None:
            table.prize = prize.value
        if password is not None:
            table.password = password
        if amount is not None:
            table.amount = amount
        if table.privacy == TablePrivacy.PRIVATE.value and not table.password:
            raise InvalidArgumentError("Private tables require a password")
        await session.flush()

    logger.info("Owner %s updated table %s", owner_id, table_id)
    return user_table


async def list_user_tables(session: AsyncSession, user_id: int) -> list[UserTableDB]:
    """Tables the user owns or has joined, newest first."""
    result = await session.execute(
        select(UserTableDB)
        .where(or_(UserTableDB.user_id == user_id, UserTableDB.rival_id == user_id))
        .order_by(UserTableDB.table_id.desc())
    )
    return list(result.scalars().all())


async def update_user_table_time(
    session: AsyncSession, table_id: int, user_id: int, time: int
) -> UserTableDB:
    """
    Set the owner's clock for a table.

    Raises:
        NotFoundError: If the user does not own the table
        InvalidArgumentError: If time is negative
    """
    if time < 0:
        raise InvalidArgumentError("Time must not be negative")

    async with atomic(session):
        user_table = await get_user_table(session, table_id)
        if user_table is None or user_table.user_id != user_id:
            raise NotFoundError("Table", table_id)
        user_table.time = time
        await session.flush()

    return user_table
