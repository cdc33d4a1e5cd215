"""
Inventory ledger: copies of each card owned per user.

One row per (user, card). Acquisitions merge into the existing row.
"""

from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db.cards import card_to_model
from tcgserver.db.database import atomic, inventory_locks
from tcgserver.models.card import InventoryEntry
from tcgserver.models.db import CardDB, UserCardDB
from tcgserver.models.failure import InvalidArgumentError


async def add_copies(session: AsyncSession, user_id: int, card_id: int, delta: int) -> int:
    """
    Add `delta` copies of a card to a user's inventory.

    Creates the row on first acquisition, otherwise increments it.

    Returns:
        The new amount owned.

    Raises:
        InvalidArgumentError: If delta is not positive
    """
    if delta <= 0:
        raise InvalidArgumentError("Copies to add must be positive", detail=f"delta={delta}")

    async with inventory_locks.hold(user_id), atomic(session):
        result = await session.execute(
            update(UserCardDB)
            .where(UserCardDB.user_id == user_id, UserCardDB.card_id == card_id)
            .values(amount=UserCardDB.amount + delta)
        )
        # rowcount is available on UPDATE results; type stubs incomplete for async
        if int(result.rowcount) == 0:  # type: ignore[attr-defined]
            session.add(UserCardDB(user_id=user_id, card_id=card_id, amount=delta))
            await session.flush()

    return await get_owned(session, user_id, card_id)


async def get_owned(session: AsyncSession, user_id: int, card_id: int) -> int:
    """Copies of a card the user owns. 0 if none."""
    result = await session.execute(
        select(UserCardDB.amount).where(
            UserCardDB.user_id == user_id, UserCardDB.card_id == card_id
        )
    )
    return result.scalar_one_or_none() or 0


async def owned_amounts(
    session: AsyncSession,
    user_id: int,
    card_ids: Iterable[int],
    for_update: bool = False,
) -> dict[int, int]:
    """
    Copies owned for several cards in one query.

    Cards the user does not own are absent from the result. With
    `for_update`, the rows stay locked until the caller's transaction ends.
    """
    ids = set(card_ids)
    if not ids:
        return {}

    query = select(UserCardDB.card_id, UserCardDB.amount).where(
        UserCardDB.user_id == user_id, UserCardDB.card_id.in_(ids)
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return {card_id: amount for card_id, amount in result.all()}


async def list_owned(session: AsyncSession, user_id: int) -> list[InventoryEntry]:
    """All cards a user owns, ordered by card name."""
    result = await session.execute(
        select(CardDB, UserCardDB.amount)
        .join(UserCardDB, UserCardDB.card_id == CardDB.id)
        .where(UserCardDB.user_id == user_id)
        .order_by(CardDB.name)
    )
    return [
        InventoryEntry(card=card_to_model(card), amount=amount) for card, amount in result.all()
    ]
