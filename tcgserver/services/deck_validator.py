"""
Deck validation and creation.

A deck is legal when:
1. The owner has a free deck slot (3 + level // 25)
2. It holds at least 40 card copies
3. The owner owns at least as many copies of every card as the deck uses

A failed rule is a normal outcome. `validate_composition` reports missing
cards as False; `create_validated_deck` raises the specific KnownError and
writes nothing.

`validate_composition` reads inventory without locking, so its answer
can be stale by the time a caller acts on it. `create_validated_deck`
does not rely on it. Inside one transaction it locks the owner's
progression row, counts decks, then re-reads inventory with row locks.
Two creations for the same user therefore run one after the other, even
from different processes.
"""

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.config import MAX_DECK_NAME_LENGTH, MIN_DECK_SIZE
from tcgserver.db.database import atomic, inventory_locks
from tcgserver.db.decks import add_deck_cards, count_decks, insert_deck
from tcgserver.db.inventory import owned_amounts
from tcgserver.db.progression import get_progression, get_progression_for_update
from tcgserver.models.deck import Deck, DeckEntry, DeckSlotStatus, compute_deck_limit
from tcgserver.models.failure import (
    DeckLimitReachedError,
    DeckTooSmallError,
    InvalidArgumentError,
    MissingRequiredCardsError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


def merge_deck_entries(card_ids: Sequence[int], counts: Sequence[int]) -> list[DeckEntry]:
    """
    Pair card ids with counts, one entry per distinct card.

    Repeated card ids have their counts summed. Order of first appearance
    is kept.

    Raises:
        InvalidArgumentError: If the sequences differ in length or a count
            is not positive
    """
    if len(card_ids) != len(counts):
        raise InvalidArgumentError(
            "card_ids and card_count arrays must have the same length",
            detail=f"{len(card_ids)} card ids, {len(counts)} counts",
        )

    merged: dict[int, int] = {}
    for card_id, count in zip(card_ids, counts, strict=True):
        if count <= 0:
            raise InvalidArgumentError(
                "Card counts must be positive", detail=f"card {card_id}: {count}"
            )
        merged[card_id] = merged.get(card_id, 0) + count

    return [DeckEntry(card_id=card_id, number=number) for card_id, number in merged.items()]


def check_minimum_size(entries: Sequence[DeckEntry]) -> int:
    """
    Total copies in the deck.

    Raises:
        DeckTooSmallError: If the total is below the minimum deck size
    """
    total = sum(entry.number for entry in entries)
    if total < MIN_DECK_SIZE:
        raise DeckTooSmallError(minimum=MIN_DECK_SIZE, actual=total)
    return total


def find_shortfalls(
    entries: Sequence[DeckEntry], owned: dict[int, int]
) -> list[tuple[int, int, int]]:
    """(card_id, required, owned) for every entry the inventory cannot cover."""
    return [
        (entry.card_id, entry.number, owned.get(entry.card_id, 0))
        for entry in entries
        if owned.get(entry.card_id, 0) < entry.number
    ]


async def get_deck_limit(session: AsyncSession, user_id: int) -> int:
    """
    Maximum number of decks the user may own.

    Raises:
        NotFoundError: If the user has no progression row
    """
    progression = await get_progression(session, user_id)
    if progression is None:
        raise NotFoundError("Progression", user_id)
    return compute_deck_limit(progression.level)


async def check_slot_available(session: AsyncSession, user_id: int) -> DeckSlotStatus:
    """Compare the user's deck count against their deck limit."""
    limit = await get_deck_limit(session, user_id)
    current = await count_decks(session, user_id)
    return DeckSlotStatus(can_create=current < limit, limit=limit, current=current)


async def validate_composition(
    session: AsyncSession,
    user_id: int,
    card_ids: Sequence[int],
    counts: Sequence[int],
) -> bool:
    """
    Check a proposed deck against the minimum size and the user's inventory.

    Returns:
        True if the user owns enough copies of every card, False otherwise.

    Raises:
        InvalidArgumentError: If card_ids and counts differ in length
        DeckTooSmallError: If the total is below the minimum deck size
    """
    entries = merge_deck_entries(card_ids, counts)
    check_minimum_size(entries)

    owned = await owned_amounts(session, user_id, (entry.card_id for entry in entries))
    return not find_shortfalls(entries, owned)


def _validate_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise InvalidArgumentError("Deck name cannot be empty")
    if len(name) > MAX_DECK_NAME_LENGTH:
        raise InvalidArgumentError(
            f"Deck name must be {MAX_DECK_NAME_LENGTH} characters or less"
        )
    return name


async def create_validated_deck(
    session: AsyncSession,
    user_id: int,
    name: str,
    card_ids: Sequence[int],
    counts: Sequence[int],
) -> Deck:
    """
    Validate and persist a deck as one transaction.

    On success the deck is stored with valid=True and one entry per
    distinct card. On any failure nothing from this call is written.

    Raises:
        InvalidArgumentError: Malformed name, lengths or counts
        NotFoundError: If the user has no progression row
        DeckLimitReachedError: If the user has no free deck slot
        DeckTooSmallError: If the deck has fewer than 40 cards
        MissingRequiredCardsError: If the user lacks copies of any card
        InternalError: If storage fails partway (rolled back)
    """
    name = _validate_name(name)
    entries = merge_deck_entries(card_ids, counts)

    async with inventory_locks.hold(user_id), atomic(session):
        # The progression row lock serializes deck creation per user across processes
        progression = await get_progression_for_update(session, user_id)
        limit = compute_deck_limit(progression.level)
        current = await count_decks(session, user_id)
        if current >= limit:
            logger.info(
                "User %s refused deck '%s': %d of %d decks used",
                user_id,
                name,
                current,
                limit,
            )
            raise DeckLimitReachedError(limit=limit)

        total = check_minimum_size(entries)

        owned = await owned_amounts(
            session, user_id, (entry.card_id for entry in entries), for_update=True
        )
        shortfalls = find_shortfalls(entries, owned)
        if shortfalls:
            logger.info("User %s refused deck '%s': missing %s", user_id, name, shortfalls)
            raise MissingRequiredCardsError(shortfalls)

        deck = await insert_deck(session, user_id, name, valid=True)
        await add_deck_cards(session, deck, entries)
        created = Deck(
            id=deck.id,
            user_id=user_id,
            name=deck.name,
            valid=True,
            entries=sorted(entries, key=lambda entry: entry.card_id),
        )

    logger.info("User %s created deck %s '%s' with %d cards", user_id, created.id, name, total)
    return created
