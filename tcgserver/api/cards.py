"""
Card catalog endpoints.

Read-only: the catalog and its effects are seeded by the seed_catalog job.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db import (
    card_exists,
    card_to_model,
    effect_to_model,
    get_card,
    list_card_effects,
    list_cards,
    search_cards,
)
from tcgserver.db.database import get_session
from tcgserver.models.card import Card, CardElement, CardType, Effect
from tcgserver.models.failure import NotFoundError

router = APIRouter(prefix="/cards", tags=["cards"])


class CardResponse(BaseModel):
    """A catalog card."""

    id: int
    name: str
    type: CardType
    legend: str
    element: CardElement

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            type=card.type,
            legend=card.legend,
            element=card.element,
        )


class EffectResponse(BaseModel):
    """An effect printed on catalog cards."""

    id: int
    description: str

    @classmethod
    def from_effect(cls, effect: Effect) -> "EffectResponse":
        return cls(id=effect.id, description=effect.description)


@router.get("", response_model=list[CardResponse])
async def get_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    card_type: Annotated[CardType | None, Query(alias="type")] = None,
    element: CardElement | None = None,
) -> list[CardResponse]:
    """List the catalog ordered by name, optionally filtered by type and element."""
    cards = await list_cards(session, card_type=card_type, element=element)
    return [CardResponse.from_card(card_to_model(card)) for card in cards]


@router.get("/search", response_model=list[CardResponse])
async def search_catalog(
    session: Annotated[AsyncSession, Depends(get_session)],
    q: Annotated[str, Query(min_length=1, max_length=100)],
) -> list[CardResponse]:
    """Case-insensitive search over card names and legend text."""
    cards = await search_cards(session, q)
    return [CardResponse.from_card(card_to_model(card)) for card in cards]


@router.get("/{card_id}", response_model=CardResponse)
async def get_catalog_card(
    card_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError("Card", card_id)
    return CardResponse.from_card(card_to_model(card))


@router.get("/{card_id}/effects", response_model=list[EffectResponse])
async def get_card_effects(
    card_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[EffectResponse]:
    """Effects printed on the card, ordered by id. Deleted effects are left out."""
    if not await card_exists(session, card_id):
        raise NotFoundError("Card", card_id)
    effects = await list_card_effects(session, card_id)
    return [EffectResponse.from_effect(effect_to_model(effect)) for effect in effects]
