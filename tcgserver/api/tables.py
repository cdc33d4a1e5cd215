"""
Table lifecycle and match state endpoints.

Seating decides who may write a table's match state: the owner starts
the match, and either seated player may append or revise snapshots.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.config import BENCH_SIZE, DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from tcgserver.db import (
    append_snapshot,
    create_initial_state,
    create_table,
    get_current_state,
    get_state_history,
    get_user_table,
    has_state,
    is_table_owner,
    is_table_participant,
    join_table,
    list_user_tables,
    revise_snapshot,
    seat_to_model,
    update_table,
    update_user_table_time,
)
from tcgserver.db.database import get_session
from tcgserver.models.db import TableStateDB, UserTableDB
from tcgserver.models.failure import NotFoundError
from tcgserver.models.match_state import BoardSlot, MatchSnapshot, MatchState, SideState
from tcgserver.models.table import TableCategory, TablePrivacy, TablePrize

router = APIRouter(tags=["tables"])


# =============================================================================
# TABLE MODELS
# =============================================================================


class TableCreateRequest(BaseModel):
    """Request model for opening a table."""

    owner_id: int
    category: TableCategory
    privacy: TablePrivacy = TablePrivacy.PUBLIC
    prize: TablePrize
    password: str | None = Field(default=None, description="Numeric code for private tables")
    amount: int | None = Field(default=None, description="Prize amount for money tables")


class TableResponse(BaseModel):
    """A table and who is seated at it."""

    table_id: int
    owner_id: int
    rival_id: int | None
    waiting_for_rival: bool
    time: int
    category: TableCategory
    privacy: TablePrivacy
    prize: TablePrize
    amount: int | None = None

    @classmethod
    def from_row(cls, user_table: UserTableDB) -> "TableResponse":
        seat = seat_to_model(user_table)
        table = user_table.table
        return cls(
            table_id=seat.table_id,
            owner_id=seat.owner_id,
            rival_id=seat.rival_id,
            waiting_for_rival=seat.waiting_for_rival,
            time=seat.time,
            category=TableCategory(table.category),
            privacy=TablePrivacy(table.privacy),
            prize=TablePrize(table.prize),
            amount=table.amount,
        )


class TableUpdateRequest(BaseModel):
    """Request model for editing a table. Omitted fields keep their value."""

    user_id: int = Field(..., description="Must be the table owner")
    category: TableCategory | None = None
    privacy: TablePrivacy | None = None
    prize: TablePrize | None = None
    password: str | None = None
    amount: int | None = None


class JoinRequest(BaseModel):
    rival_id: int


class TimeRequest(BaseModel):
    """Request model for updating the owner's clock."""

    user_id: int
    time: int


# =============================================================================
# MATCH STATE MODELS
# =============================================================================


class BoardSlotModel(BaseModel):
    """One board position: a stack of card ids and optional hit points."""

    cards: list[int] = Field(default_factory=list)
    hp: int | None = None

    def to_slot(self) -> BoardSlot:
        return BoardSlot(cards=list(self.cards), hp=self.hp)

    @classmethod
    def from_slot(cls, slot: BoardSlot) -> "BoardSlotModel":
        return cls(cards=list(slot.cards), hp=slot.hp)


def _empty_bench() -> list[BoardSlotModel]:
    return [BoardSlotModel() for _ in range(BENCH_SIZE)]


class SideStateModel(BaseModel):
    """One player's half of the board."""

    deck_id: int | None = None
    active: BoardSlotModel = Field(default_factory=BoardSlotModel)
    bench: list[BoardSlotModel] = Field(
        default_factory=_empty_bench, min_length=BENCH_SIZE, max_length=BENCH_SIZE
    )
    graveyard: list[int] = Field(default_factory=list, description="Card ids in discard order")

    def to_side(self) -> SideState:
        return SideState(
            deck_id=self.deck_id,
            active=self.active.to_slot(),
            bench=[slot.to_slot() for slot in self.bench],
            graveyard=list(self.graveyard),
        )

    @classmethod
    def from_side(cls, side: SideState) -> "SideStateModel":
        return cls(
            deck_id=side.deck_id,
            active=BoardSlotModel.from_slot(side.active),
            bench=[BoardSlotModel.from_slot(slot) for slot in side.bench],
            graveyard=list(side.graveyard),
        )


class MatchStateModel(BaseModel):
    """Full board of a match."""

    log: str = ""
    owner: SideStateModel = Field(default_factory=SideStateModel)
    rival: SideStateModel = Field(default_factory=SideStateModel)

    def to_state(self) -> MatchState:
        return MatchState(log=self.log, owner=self.owner.to_side(), rival=self.rival.to_side())


class SnapshotResponse(BaseModel):
    """A stored snapshot of a table's match."""

    id: int
    table_id: int
    state: MatchStateModel
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: MatchSnapshot) -> "SnapshotResponse":
        return cls(
            id=snapshot.id,
            table_id=snapshot.table_id,
            state=MatchStateModel(
                log=snapshot.state.log,
                owner=SideStateModel.from_side(snapshot.state.owner),
                rival=SideStateModel.from_side(snapshot.state.rival),
            ),
            created_at=snapshot.created_at,
            updated_at=snapshot.updated_at,
        )


class InitialStateRequest(BaseModel):
    """Request model for starting a match."""

    user_id: int = Field(..., description="Must be the table owner")
    owners_deck_id: int | None = None
    rivals_deck_id: int | None = None


class AppendStateRequest(BaseModel):
    """Request model for recording a state transition."""

    user_id: int = Field(..., description="Must be seated at the table")
    state: MatchStateModel
    expected_snapshot_id: int | None = Field(
        default=None,
        description="Append only while this snapshot is still current",
    )


class ReviseStateRequest(BaseModel):
    user_id: int
    state: MatchStateModel


async def _require_seat(
    session: AsyncSession, table_id: int, user_id: int, owner_only: bool = False
) -> None:
    if await get_user_table(session, table_id) is None:
        raise NotFoundError("Table", table_id)

    if owner_only:
        allowed = await is_table_owner(session, user_id, table_id)
    else:
        allowed = await is_table_participant(session, user_id, table_id)
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is not seated at this table",
        )


# =============================================================================
# TABLE LIFECYCLE
# =============================================================================


@router.post("/tables", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
async def open_table(
    request: TableCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TableResponse:
    """Open a table and seat its owner."""
    if request.privacy is TablePrivacy.PRIVATE and not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Private tables require a password",
        )

    table = await create_table(
        session,
        owner_id=request.owner_id,
        category=request.category,
        privacy=request.privacy,
        prize=request.prize,
        password=request.password,
        amount=request.amount,
    )
    user_table = await get_user_table(session, table.id)
    if user_table is None:
        raise NotFoundError("Table", table.id)
    return TableResponse.from_row(user_table)


@router.get("/users/{user_id}/tables", response_model=list[TableResponse])
async def get_user_tables(
    user_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[TableResponse]:
    """Tables the user owns or has joined, newest first."""
    return [TableResponse.from_row(row) for row in await list_user_tables(session, user_id)]


@router.patch("/tables/{table_id}", response_model=TableResponse)
async def edit_table(
    table_id: int,
    request: TableUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TableResponse:
    """
    Change the table's settings. Owner only.

    Fails with 409 table_closed once a rival has joined.
    """
    await _require_seat(session, table_id, request.user_id, owner_only=True)
    user_table = await update_table(
        session,
        table_id,
        request.user_id,
        category=request.category,
        privacy=request.privacy,
        prize=request.prize,
        password=request.password,
        amount=request.amount,
    )
    return TableResponse.from_row(user_table)


@router.post("/tables/{table_id}/join", response_model=TableResponse)
async def join_user_table(
    table_id: int,
    request: JoinRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TableResponse:
    user_table = await join_table(session, table_id, request.rival_id)
    return TableResponse.from_row(user_table)


@router.put("/tables/{table_id}/time", response_model=TableResponse)
async def set_table_time(
    table_id: int,
    request: TimeRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TableResponse:
    """Set the owner's clock."""
    user_table = await update_user_table_time(session, table_id, request.user_id, request.time)
    return TableResponse.from_row(user_table)


# =============================================================================
# MATCH STATE
# =============================================================================


@router.post(
    "/tables/{table_id}/state",
    response_model=SnapshotResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_match(
    table_id: int,
    request: InitialStateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SnapshotResponse:
    """Write the first, empty snapshot for a table. 409 if the match already started."""
    await _require_seat(session, table_id, request.user_id, owner_only=True)

    if await has_state(session, table_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Match state already initialized for this table",
        )

    snapshot = await create_initial_state(
        session,
        table_id,
        owners_deck_id=request.owners_deck_id,
        rivals_deck_id=request.rivals_deck_id,
    )
    return SnapshotResponse.from_snapshot(snapshot)


@router.get("/tables/{table_id}/state", response_model=SnapshotResponse | None)
async def get_match_state(
    table_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SnapshotResponse | None:
    """Current snapshot of the table, or null if the match has not started."""
    snapshot = await get_current_state(session, table_id)
    if snapshot is None:
        return None
    return SnapshotResponse.from_snapshot(snapshot)


@router.put("/tables/{table_id}/state", response_model=SnapshotResponse)
async def record_match_state(
    table_id: int,
    request: AppendStateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SnapshotResponse:
    """
    Append a full snapshot; it becomes the current state.

    With expected_snapshot_id, fails with 409 stale_snapshot if another
    write landed first.
    """
    await _require_seat(session, table_id, request.user_id)
    snapshot = await append_snapshot(
        session,
        table_id,
        request.state.to_state(),
        expected_snapshot_id=request.expected_snapshot_id,
    )
    return SnapshotResponse.from_snapshot(snapshot)


@router.patch("/tables/{table_id}/state/{snapshot_id}", response_model=SnapshotResponse)
async def revise_match_state(
    table_id: int,
    snapshot_id: int,
    request: ReviseStateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SnapshotResponse:
    """Correct a snapshot in place without adding history."""
    await _require_seat(session, table_id, request.user_id)

    row = await session.get(TableStateDB, snapshot_id)
    if row is None or row.table_id != table_id:
        raise NotFoundError("Snapshot", snapshot_id)

    snapshot = await revise_snapshot(session, snapshot_id, request.state.to_state())
    return SnapshotResponse.from_snapshot(snapshot)


@router.get("/tables/{table_id}/history", response_model=list[SnapshotResponse])
async def get_match_history(
    table_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(le=MAX_HISTORY_LIMIT)] = DEFAULT_HISTORY_LIMIT,
) -> list[SnapshotResponse]:
    """
    Up to `limit` snapshots, newest first.

    Snapshots that cannot be decoded are left out.
    """
    snapshots = await get_state_history(session, table_id, limit)
    return [SnapshotResponse.from_snapshot(snapshot) for snapshot in snapshots]
