"""
Card catalog operations.

The catalog is read-only to gameplay. `create_card` and `upsert_card`
exist for seeding and administration.
"""

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.models.card import Card, CardElement, CardType
from tcgserver.models.db import CardDB
from tcgserver.models.failure import InvalidArgumentError


def card_to_model(card: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(
        id=card.id,
        name=card.name,
        type=CardType(card.type),
        legend=card.legend,
        element=CardElement(card.element),
    )


async def get_card(session: AsyncSession, card_id: int) -> CardDB | None:
    """Get a card by id. Returns None if it does not exist."""
    return await session.get(CardDB, card_id)


async def get_card_by_name(session: AsyncSession, name: str) -> CardDB | None:
    """Get a card by its unique name."""
    result = await session.execute(select(CardDB).where(CardDB.name == name))
    return result.scalar_one_or_none()


async def card_exists(session: AsyncSession, card_id: int) -> bool:
    result = await session.execute(select(func.count()).where(CardDB.id == card_id))
    return result.scalar_one() > 0


async def list_cards(
    session: AsyncSession,
    card_type: CardType | None = None,
    element: CardElement | None = None,
) -> list[CardDB]:
    """List catalog cards, optionally filtered, ordered by name."""
    query = select(CardDB)
    if card_type is not None:
        query = query.where(CardDB.type == card_type.value)
    if element is not None:
        query = query.where(CardDB.element == element.value)
    result = await session.execute(query.order_by(CardDB.name))
    return list(result.scalars().all())


async def search_cards(session: AsyncSession, term: str) -> list[CardDB]:
    """Case-insensitive substring search over name and legend."""
    pattern = f"%{term.strip().lower()}%"
    result = await session.execute(
        select(CardDB)
        .where(
            or_(
                func.lower(CardDB.name).like(pattern),
                func.lower(CardDB.legend).like(pattern),
            )
        )
        .order_by(CardDB.name)
    )
    return list(result.scalars().all())


async def create_card(
    session: AsyncSession,
    name: str,
    card_type: CardType,
    element: CardElement,
    legend: str = "",
) -> CardDB:
    """
    Create a new catalog card.

    Raises InvalidArgumentError if the name is empty or already taken.
    """
    name = name.strip()
    if not name:
        raise InvalidArgumentError("Card name cannot be empty")
    if await get_card_by_name(session, name) is not None:
        raise InvalidArgumentError(f"Card '{name}' already exists")

    card = CardDB(name=name, type=card_type.value, legend=legend, element=element.value)
    session.add(card)
    await session.flush()
    return card


async def upsert_card(
    session: AsyncSession,
    name: str,
    card_type: CardType,
    element: CardElement,
    legend: str = "",
) -> tuple[CardDB, bool]:
    """
    Insert or update a card keyed by name.

    Returns:
        Tuple of (card, created) where created is True if new.
    """
    existing = await get_card_by_name(session, name)
    if existing is None:
        return await create_card(session, name, card_type, element, legend), True

    existing.type = card_type.value
    existing.element = element.value
    existing.legend = legend
    await session.flush()
    return existing, False
