"""
Progression ledger: level, experience and money per user.

Read-modify-write operations (grant_experience, spend_money) hold the
user's row lock for the whole transaction. add_money is a single delta
UPDATE and needs no lock.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.config import STARTING_EXPERIENCE, STARTING_LEVEL, STARTING_MONEY
from tcgserver.db.database import atomic, user_locks
from tcgserver.models.db import UserProgressionDB
from tcgserver.models.failure import (
    InsufficientFundsError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
)
from tcgserver.models.progression import Progression

logger = logging.getLogger(__name__)


def progression_to_model(row: UserProgressionDB) -> Progression:
    """Convert a database progression row to a domain model."""
    return Progression(
        user_id=row.user_id,
        level=row.level,
        experience=row.experience,
        money=row.money,
    )


async def get_progression(session: AsyncSession, user_id: int) -> UserProgressionDB | None:
    """
    Get a user's progression row.

    Returns None if the user has none yet.
    """
    result = await session.execute(
        select(UserProgressionDB).where(UserProgressionDB.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_progression_for_update(session: AsyncSession, user_id: int) -> UserProgressionDB:
    """
    Get a user's progression row and hold its row lock until the transaction ends.

    Raises:
        NotFoundError: If the user has no progression row
    """
    result = await session.execute(
        select(UserProgressionDB)
        .where(UserProgressionDB.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError("Progression", user_id)
    return row


async def ensure_default_progression(
    session: AsyncSession, user_id: int
) -> tuple[Progression, bool]:
    """
    Get existing progression or create the default one.

    Defaults: level 1, experience 0, money 100. An existing row is
    returned unchanged.

    Returns:
        Tuple of (progression, created) where created is True if new.
    """
    existing = await get_progression(session, user_id)
    if existing is not None:
        return progression_to_model(existing), False

    row = UserProgressionDB(
        user_id=user_id,
        level=STARTING_LEVEL,
        experience=STARTING_EXPERIENCE,
        money=STARTING_MONEY,
    )
    session.add(row)
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent creator; theirs is the row
        await session.rollback()
    except SQLAlchemyError as e:
        await session.rollback()
        raise InternalError(detail=str(e)) from e
    else:
        logger.info("Created default progression for user %s", user_id)
        return progression_to_model(row), True

    existing = await get_progression(session, user_id)
    if existing is None:
        raise NotFoundError("Progression", user_id)
    return progression_to_model(existing), False


async def grant_experience(session: AsyncSession, user_id: int, amount: int) -> Progression:
    """
    Add experience and apply a single level-up check.

    If experience reaches level * 1000, level rises by exactly one and
    money increases by new_level * 100, even when the grant overshoots
    several thresholds.

    Raises:
        InvalidArgumentError: If amount is negative
        NotFoundError: If the user has no progression row
        InternalError: If the commit fails (nothing is written)
    """
    if amount < 0:
        raise InvalidArgumentError(
            "Experience amount must not be negative", detail=f"amount={amount}"
        )

    async with user_locks.hold(user_id), atomic(session):
        row = await get_progression_for_update(session, user_id)
        progression = progression_to_model(row)
        levelled_up = progression.apply_experience(amount)

        row.level = progression.level
        row.experience = progression.experience
        row.money = progression.money
        await session.flush()

    if levelled_up:
        logger.info("User %s reached level %d", user_id, progression.level)
    return progression


async def add_money(session: AsyncSession, user_id: int, amount: int) -> Progression:
    """
    Add (or, with a negative amount, remove) money as one delta UPDATE.

    Raises:
        NotFoundError: If the user has no progression row
        InternalError: If the update fails, e.g. money would go below zero
    """
    async with atomic(session):
        result = await session.execute(
            update(UserProgressionDB)
            .where(UserProgressionDB.user_id == user_id)
            .values(money=UserProgressionDB.money + amount)
        )
        # rowcount is available on UPDATE results; type stubs incomplete for async
        if int(result.rowcount) == 0:  # type: ignore[attr-defined]
            raise NotFoundError("Progression", user_id)

    row = await get_progression(session, user_id)
    if row is None:
        raise NotFoundError("Progression", user_id)
    await session.refresh(row)
    return progression_to_model(row)


async def spend_money(session: AsyncSession, user_id: int, amount: int) -> Progression:
    """
    Spend money if the user can afford it.

    Raises:
        InvalidArgumentError: If amount is not positive
        NotFoundError: If the user has no progression row
        InsufficientFundsError: If money < amount (nothing changes)
    """
    if amount <= 0:
        raise InvalidArgumentError("Spend amount must be positive", detail=f"amount={amount}")

    async with user_locks.hold(user_id), atomic(session):
        row = await get_progression_for_update(session, user_id)
        if row.money < amount:
            logger.info(
                "User %s cannot spend %d: only %d available", user_id, amount, row.money
            )
            raise InsufficientFundsError(required=amount, available=row.money)

        row.money -= amount
        await session.flush()
        progression = progression_to_model(row)

    return progression
