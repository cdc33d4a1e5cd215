"""
Per-user progression and inventory endpoints.

User ids come from the authentication layer in front of this service
and are trusted as given.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.api.cards import CardResponse
from tcgserver.db import (
    add_copies,
    add_money,
    card_exists,
    ensure_default_progression,
    get_owned,
    get_progression,
    grant_experience,
    list_owned,
    progression_to_model,
    spend_money,
)
from tcgserver.db.database import get_session
from tcgserver.models.failure import NotFoundError
from tcgserver.models.progression import Progression

router = APIRouter(prefix="/users", tags=["users"])


class ProgressionResponse(BaseModel):
    """Level, experience and money of a user."""

    user_id: int
    level: int
    experience: int
    money: int
    next_level_at: int = Field(..., description="Experience total that reaches the next level")

    @classmethod
    def from_progression(cls, progression: Progression) -> "ProgressionResponse":
        return cls(
            user_id=progression.user_id,
            level=progression.level,
            experience=progression.experience,
            money=progression.money,
            next_level_at=progression.experience_for_next_level(),
        )


class EnsureProgressionResponse(ProgressionResponse):
    created: bool = Field(..., description="True if the default row was created by this call")


class AmountRequest(BaseModel):
    """Request carrying an experience or money amount."""

    amount: int


class OwnedCardResponse(BaseModel):
    """Copies of one card owned by a user."""

    card: CardResponse
    amount: int


class OwnedAmountResponse(BaseModel):
    user_id: int
    card_id: int
    amount: int


class AddCopiesRequest(BaseModel):
    """Request model for granting card copies."""

    card_id: int
    amount: int = Field(..., description="Copies to add; must be positive", examples=[3])


# =============================================================================
# PROGRESSION
# =============================================================================


@router.get("/{user_id}/progression", response_model=ProgressionResponse)
async def get_user_progression(
    user_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProgressionResponse:
    """Get a user's progression. 404 if it was never created."""
    row = await get_progression(session, user_id)
    if row is None:
        raise NotFoundError("Progression", user_id)
    return ProgressionResponse.from_progression(progression_to_model(row))


@router.post("/{user_id}/progression", response_model=EnsureProgressionResponse)
async def ensure_user_progression(
    user_id: int,
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> EnsureProgressionResponse:
    """
    Create the default progression if the user has none.

    Idempotent: an existing progression is returned unchanged with 200;
    a new one is returned with 201.
    """
    progression, created = await ensure_default_progression(session, user_id)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return EnsureProgressionResponse(
        **ProgressionResponse.from_progression(progression).model_dump(),
        created=created,
    )


@router.post("/{user_id}/experience", response_model=ProgressionResponse)
async def grant_user_experience(
    user_id: int,
    request: AmountRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProgressionResponse:
    """Grant experience; at most one level is gained per grant."""
    progression = await grant_experience(session, user_id, request.amount)
    return ProgressionResponse.from_progression(progression)


@router.post("/{user_id}/money", response_model=ProgressionResponse)
async def add_user_money(
    user_id: int,
    request: AmountRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProgressionResponse:
    """Add money. A negative amount removes money."""
    progression = await add_money(session, user_id, request.amount)
    return ProgressionResponse.from_progression(progression)


@router.post("/{user_id}/money/spend", response_model=ProgressionResponse)
async def spend_user_money(
    user_id: int,
    request: AmountRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProgressionResponse:
    """Spend money. 409 with the available amount if the user cannot afford it."""
    progression = await spend_money(session, user_id, request.amount)
    return ProgressionResponse.from_progression(progression)


# =============================================================================
# INVENTORY
# =============================================================================


@router.get("/{user_id}/cards", response_model=list[OwnedCardResponse])
async def get_user_cards(
    user_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[OwnedCardResponse]:
    """All cards the user owns, ordered by card name."""
    entries = await list_owned(session, user_id)
    return [
        OwnedCardResponse(card=CardResponse.from_card(entry.card), amount=entry.amount)
        for entry in entries
    ]


@router.get("/{user_id}/cards/{card_id}", response_model=OwnedAmountResponse)
async def get_user_card(
    user_id: int,
    card_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OwnedAmountResponse:
    """Copies of one card the user owns; 0 if none."""
    amount = await get_owned(session, user_id, card_id)
    return OwnedAmountResponse(user_id=user_id, card_id=card_id, amount=amount)


@router.post("/{user_id}/cards", response_model=OwnedAmountResponse)
async def add_user_cards(
    user_id: int,
    request: AddCopiesRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OwnedAmountResponse:
    """Add copies of a catalog card to the user's inventory."""
    if not await card_exists(session, request.card_id):
        raise NotFoundError("Card", request.card_id)

    amount = await add_copies(session, user_id, request.card_id, request.amount)
    return OwnedAmountResponse(user_id=user_id, card_id=request.card_id, amount=amount)
