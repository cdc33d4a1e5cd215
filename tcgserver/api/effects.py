"""
Card effect endpoints.

Effects come from the seed_catalog job. Deleting is the only write:
soft by default, or permanent with `purge=true`.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.api.cards import CardResponse, EffectResponse
from tcgserver.db import (
    card_to_model,
    effect_to_model,
    get_effect,
    hard_delete_effect,
    list_effect_cards,
    list_effects,
    soft_delete_effect,
)
from tcgserver.db.database import get_session
from tcgserver.models.failure import NotFoundError

router = APIRouter(prefix="/effects", tags=["effects"])


class EffectDeleteResponse(BaseModel):
    effect_id: int
    purged: bool


@router.get("", response_model=list[EffectResponse])
async def get_effects(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[EffectResponse]:
    """All effects that have not been deleted."""
    return [
        EffectResponse.from_effect(effect_to_model(effect))
        for effect in await list_effects(session)
    ]


@router.get("/{effect_id}", response_model=EffectResponse)
async def get_catalog_effect(
    effect_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> EffectResponse:
    effect = await get_effect(session, effect_id)
    if effect is None:
        raise NotFoundError("Effect", effect_id)
    return EffectResponse.from_effect(effect_to_model(effect))


@router.get("/{effect_id}/cards", response_model=list[CardResponse])
async def get_effect_cards(
    effect_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[CardResponse]:
    """Cards carrying the effect, ordered by id."""
    if await get_effect(session, effect_id) is None:
        raise NotFoundError("Effect", effect_id)
    cards = await list_effect_cards(session, effect_id)
    return [CardResponse.from_card(card_to_model(card)) for card in cards]


@router.delete("/{effect_id}", response_model=EffectDeleteResponse)
async def delete_effect(
    effect_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    purge: bool = False,
) -> EffectDeleteResponse:
    """
    Delete an effect.

    A soft delete hides the effect and keeps its card links. With
    purge=true the effect and its card links are removed, including an
    effect that was already soft-deleted.
    """
    if purge:
        deleted = await hard_delete_effect(session, effect_id)
    else:
        deleted = await soft_delete_effect(session, effect_id)
    if not deleted:
        raise NotFoundError("Effect", effect_id)
    return EffectDeleteResponse(effect_id=effect_id, purged=purge)
