"""
Card effect catalog.

Effects are descriptions attached to cards through card_effects. They
are stored and listed, never interpreted. A soft-deleted effect keeps
its row but disappears from every read; a hard delete removes the row
and its card associations.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db.database import atomic
from tcgserver.models.card import Effect
from tcgserver.models.db import CardDB, CardEffectDB, EffectDB
from tcgserver.models.failure import InvalidArgumentError

logger = logging.getLogger(__name__)


def effect_to_model(effect: EffectDB) -> Effect:
    return Effect(id=effect.id, description=effect.description)


async def get_effect(session: AsyncSession, effect_id: int) -> EffectDB | None:
    """Get a live effect by id. Soft-deleted effects are None."""
    result = await session.execute(
        select(EffectDB).where(EffectDB.id == effect_id, EffectDB.deleted_at.is_(None))
    )
    return result.scalar_one_or_none()


async def list_effects(session: AsyncSession) -> list[EffectDB]:
    """All live effects, ordered by id."""
    result = await session.execute(
        select(EffectDB).where(EffectDB.deleted_at.is_(None)).order_by(EffectDB.id)
    )
    return list(result.scalars().all())


async def get_or_create_effect(session: AsyncSession, description: str) -> tuple[EffectDB, bool]:
    """
    Find a live effect with this exact description, or stage a new one.

    The caller commits.

    Returns:
        Tuple of (effect, created) where created is True if new.

    Raises:
        InvalidArgumentError: If the description is empty
    """
    description = description.strip()
    if not description:
        raise InvalidArgumentError("Effect description cannot be empty")

    result = await session.execute(
        select(EffectDB)
        .where(EffectDB.description == description, EffectDB.deleted_at.is_(None))
        .order_by(EffectDB.id)
        .limit(1)
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        return existing, False

    effect = EffectDB(description=description)
    session.add(effect)
    await session.flush()
    return effect, True


async def set_card_effects(session: AsyncSession, card_id: int, effect_ids: list[int]) -> None:
    """
    Replace a card's effects with `effect_ids`, in one flush.

    Duplicate ids are attached once. The caller commits.
    """
    await session.execute(delete(CardEffectDB).where(CardEffectDB.card_id == card_id))
    for effect_id in dict.fromkeys(effect_ids):
        session.add(CardEffectDB(card_id=card_id, effect_id=effect_id))
    await session.flush()


async def list_card_effects(session: AsyncSession, card_id: int) -> list[EffectDB]:
    """Live effects attached to a card, ordered by id."""
    result = await session.execute(
        select(EffectDB)
        .join(CardEffectDB, CardEffectDB.effect_id == EffectDB.id)
        .where(CardEffectDB.card_id == card_id, EffectDB.deleted_at.is_(None))
        .order_by(EffectDB.id)
    )
    return list(result.scalars().all())


async def list_effect_cards(session: AsyncSession, effect_id: int) -> list[CardDB]:
    """Cards carrying an effect, ordered by id."""
    result = await session.execute(
        select(CardDB)
        .join(CardEffectDB, CardEffectDB.card_id == CardDB.id)
        .where(CardEffectDB.effect_id == effect_id)
        .order_by(CardDB.id)
    )
    return list(result.scalars().all())


async def soft_delete_effect(session: AsyncSession, effect_id: int) -> bool:
    """
    Hide an effect. Card associations are kept.

    Returns:
        False if the effect does not exist or is already deleted.
    """
    async with atomic(session):
        effect = await get_effect(session, effect_id)
        if effect is None:
            return False
        effect.deleted_at = datetime.now(UTC)
        await session.flush()

    logger.info("Soft-deleted effect %s", effect_id)
    return True


async def hard_delete_effect(session: AsyncSession, effect_id: int) -> bool:
    """
    Remove an effect and its card associations, deleted or not.

    Returns:
        False if no such effect row exists.
    """
    async with atomic(session):
        effect = await session.get(EffectDB, effect_id)
        if effect is None:
            return False
        await session.execute(delete(CardEffectDB).where(CardEffectDB.effect_id == effect_id))
        await session.delete(effect)
        await session.flush()

    logger.info("Deleted effect %s", effect_id)
    return True
