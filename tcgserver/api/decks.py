"""
Deck endpoints.

Creation runs the full deck validation (slot limit, minimum size,
inventory coverage) and writes nothing if any check fails.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db import deck_to_model, delete_deck, get_deck, list_decks
from tcgserver.db.database import get_session
from tcgserver.models.db import DeckDB
from tcgserver.models.deck import Deck
from tcgserver.models.failure import NotFoundError
from tcgserver.services.deck_validator import check_slot_available, create_validated_deck

router = APIRouter(prefix="/users/{user_id}/decks", tags=["decks"])


class DeckEntryResponse(BaseModel):
    card_id: int
    number: int


class DeckResponse(BaseModel):
    """A deck with its entries."""

    id: int
    user_id: int
    name: str
    valid: bool
    total_cards: int
    entries: list[DeckEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_deck(cls, deck: Deck) -> "DeckResponse":
        return cls(
            id=deck.id,
            user_id=deck.user_id,
            name=deck.name,
            valid=deck.valid,
            total_cards=deck.total_cards(),
            entries=[
                DeckEntryResponse(card_id=entry.card_id, number=entry.number)
                for entry in deck.entries
            ],
        )


class DeckCreateRequest(BaseModel):
    """Request model for creating a deck."""

    name: str = Field(..., examples=["Fire Rush"])
    card_ids: list[int] = Field(..., description="Card ids, parallel to card_counts")
    card_counts: list[int] = Field(..., description="Copies of each card, parallel to card_ids")


class DeckLimitResponse(BaseModel):
    """Deck slot usage for a user."""

    user_id: int
    can_create: bool
    limit: int
    current: int


class DeleteResponse(BaseModel):
    deck_id: int
    deleted: bool


async def _get_owned_deck(session: AsyncSession, user_id: int, deck_id: int) -> DeckDB:
    deck = await get_deck(session, deck_id)
    if deck is None:
        raise NotFoundError("Deck", deck_id)
    if deck.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Deck belongs to another user",
        )
    return deck


@router.get("", response_model=list[DeckResponse])
async def get_user_decks(
    user_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[DeckResponse]:
    decks = await list_decks(session, user_id)
    return [DeckResponse.from_deck(deck_to_model(deck)) for deck in decks]


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_user_deck(
    user_id: int,
    request: DeckCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Create a validated deck.

    Fails with:
    - 409 deck_limit_reached if every deck slot is used
    - 400 deck_too_small if the deck has fewer than 40 cards
    - 400 missing_required_cards if the user does not own enough copies
    """
    deck = await create_validated_deck(
        session, user_id, request.name, request.card_ids, request.card_counts
    )
    return DeckResponse.from_deck(deck)


@router.get("/limit", response_model=DeckLimitResponse)
async def get_user_deck_limit(
    user_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckLimitResponse:
    """How many decks the user may own and how many they have."""
    slots = await check_slot_available(session, user_id)
    return DeckLimitResponse(
        user_id=user_id,
        can_create=slots.can_create,
        limit=slots.limit,
        current=slots.current,
    )


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_user_deck(
    user_id: int,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    deck = await _get_owned_deck(session, user_id, deck_id)
    return DeckResponse.from_deck(deck_to_model(deck))


@router.delete("/{deck_id}", response_model=DeleteResponse)
async def delete_user_deck(
    user_id: int,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a deck. Match history that references it is left as is."""
    await _get_owned_deck(session, user_id, deck_id)
    deleted = await delete_deck(session, deck_id)
    return DeleteResponse(deck_id=deck_id, deleted=deleted)
