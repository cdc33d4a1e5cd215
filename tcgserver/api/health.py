"""
Liveness and readiness endpoints.

The server is ready once its database answers and the card catalog has
been seeded: without cards no deck can be built and no match started.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db.database import get_session
from tcgserver.models.db import CardDB

router = APIRouter(tags=["health"])


class LivenessResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    """Readiness verdict with what was checked."""

    status: str
    database: str
    catalog_cards: int | None = None


@router.get("/health", response_model=LivenessResponse)
async def health() -> LivenessResponse:
    """Answers while the process is serving. Touches nothing else."""
    return LivenessResponse(status="healthy")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ReadinessResponse:
    """503 while the database is unreachable or the catalog is empty."""
    try:
        result = await session.execute(select(func.count()).select_from(CardDB))
    except (SQLAlchemyError, OSError):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not ready", database="disconnected")

    catalog_cards = int(result.scalar_one())
    if catalog_cards == 0:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not ready", database="connected", catalog_cards=0)
    return ReadinessResponse(status="ready", database="connected", catalog_cards=catalog_cards)
