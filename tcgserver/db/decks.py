"""
Deck CRUD operations.

Deck creation goes through services.deck_validator, which owns the
transaction; the helpers here only stage rows on the session.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tcgserver.db.database import atomic
from tcgserver.models.db import DeckCardDB, DeckDB
from tcgserver.models.deck import Deck, DeckEntry


def deck_to_model(deck: DeckDB) -> Deck:
    """Convert a database deck (with cards loaded) to a domain model."""
    entries = sorted(
        (DeckEntry(card_id=card.card_id, number=card.number) for card in deck.cards),
        key=lambda entry: entry.card_id,
    )
    return Deck(id=deck.id, user_id=deck.user_id, name=deck.name, valid=deck.valid, entries=entries)


async def get_deck(session: AsyncSession, deck_id: int) -> DeckDB | None:
    """
    Get a deck with its cards.

    Returns None if the deck does not exist.
    """
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.id == deck_id)
        .options(selectinload(DeckDB.cards))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_decks(session: AsyncSession, user_id: int) -> list[DeckDB]:
    """All decks owned by a user, oldest first."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.user_id == user_id)
        .options(selectinload(DeckDB.cards))
        .order_by(DeckDB.id)
    )
    return list(result.scalars().all())


async def count_decks(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count()).select_from(DeckDB).where(DeckDB.user_id == user_id)
    )
    return int(result.scalar_one())


async def insert_deck(session: AsyncSession, user_id: int, name: str, valid: bool) -> DeckDB:
    """Stage a new deck row and assign its id. Does not commit."""
    deck = DeckDB(user_id=user_id, name=name, valid=valid)
    session.add(deck)
    await session.flush()
    return deck


async def add_deck_cards(session: AsyncSession, deck: DeckDB, entries: list[DeckEntry]) -> None:
    """Stage one deck_cards row per entry. Does not commit."""
    session.add_all(
        DeckCardDB(deck_id=deck.id, card_id=entry.card_id, number=entry.number)
        for entry in entries
    )
    await session.flush()


async def delete_deck(session: AsyncSession, deck_id: int) -> bool:
    """
    Delete a deck and its cards.

    Returns True if deleted, False if not found. Snapshots that reference
    the deck keep their deck id.
    """
    async with atomic(session):
        deck = await get_deck(session, deck_id)
        if deck is None:
            return False
        await session.delete(deck)
    return True
