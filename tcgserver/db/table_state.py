"""
Match state store: append-only snapshot history per table.

The current state of a table is its most recently created snapshot.
Gameplay appends a new full snapshot for every transition; revising a
snapshot in place is reserved for corrections that must not show up as
history (e.g. attaching a deck id learned after the snapshot was written).

Concurrency: without `expected_snapshot_id`, two writers that read the
same current snapshot both append and the later one becomes current.
Passing the id that was read makes the append conditional. The parent
tables row is locked with SELECT ... FOR UPDATE before the current
snapshot is read, so the check and the insert happen in one transaction
that other writers of the same table, in any process, queue behind.

Timestamps are returned as UTC-aware datetimes whichever backend stored
them.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.db.database import atomic, table_locks
from tcgserver.models.db import GameTableDB, TableStateDB
from tcgserver.models.failure import (
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    StaleSnapshotError,
)
from tcgserver.models.match_state import (
    BoardSlot,
    MatchSnapshot,
    MatchState,
    SideState,
    SnapshotDecodeError,
    decode_card_ids,
    encode_card_ids,
)

logger = logging.getLogger(__name__)

# Column prefix for each side of the board
_SIDES = {"owner": "owners", "rival": "rivals"}


def _side_columns(prefix: str, side: SideState) -> dict[str, Any]:
    columns: dict[str, Any] = {
        f"{prefix}_deck_id": side.deck_id,
        f"{prefix}_active_monster": encode_card_ids(side.active.cards),
        f"{prefix}_active_monster_hp": side.active.hp,
        f"{prefix}_graveyard": encode_card_ids(side.graveyard),
    }
    for index, slot in enumerate(side.bench, start=1):
        columns[f"{prefix}_bench_monster_{index}"] = encode_card_ids(slot.cards)
        columns[f"{prefix}_bench_monster_{index}_hp"] = slot.hp
    return columns


def state_to_columns(state: MatchState) -> dict[str, Any]:
    """Flatten a MatchState into table_state column values."""
    columns: dict[str, Any] = {"log": state.log}
    columns.update(_side_columns(_SIDES["owner"], state.owner))
    columns.update(_side_columns(_SIDES["rival"], state.rival))
    return columns


def _side_from_row(prefix: str, row: TableStateDB) -> SideState:
    def slot(name: str) -> BoardSlot:
        return BoardSlot(
            cards=decode_card_ids(getattr(row, f"{prefix}_{name}")),
            hp=getattr(row, f"{prefix}_{name}_hp"),
        )

    return SideState(
        deck_id=getattr(row, f"{prefix}_deck_id"),
        active=slot("active_monster"),
        bench=[slot(f"bench_monster_{index}") for index in (1, 2, 3)],
        graveyard=decode_card_ids(getattr(row, f"{prefix}_graveyard")),
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def snapshot_to_model(row: TableStateDB) -> MatchSnapshot:
    """
    Convert a table_state row to a domain snapshot.

    Raises:
        SnapshotDecodeError: If any card-id column holds malformed text
    """
    return MatchSnapshot(
        id=row.id,
        table_id=row.table_id,
        state=MatchState(
            log=row.log or "",
            owner=_side_from_row(_SIDES["owner"], row),
            rival=_side_from_row(_SIDES["rival"], row),
        ),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _latest_for_table(table_id: int) -> Select[tuple[TableStateDB]]:
    return (
        select(TableStateDB)
        .where(TableStateDB.table_id == table_id)
        .order_by(TableStateDB.created_at.desc(), TableStateDB.id.desc())
    )


async def _lock_table(session: AsyncSession, table_id: int) -> GameTableDB:
    result = await session.execute(
        select(GameTableDB).where(GameTableDB.id == table_id).with_for_update()
    )
    table = result.scalar_one_or_none()
    if table is None:
        raise NotFoundError("Table", table_id)
    return table


async def _insert_snapshot(
    session: AsyncSession, table_id: int, state: MatchState
) -> TableStateDB:
    row = TableStateDB(table_id=table_id, **state_to_columns(state))
    session.add(row)
    await session.flush()
    return row


async def create_initial_state(
    session: AsyncSession,
    table_id: int,
    owners_deck_id: int | None = None,
    rivals_deck_id: int | None = None,
) -> MatchSnapshot:
    """
    Write the first snapshot for a table: empty slots, no HP, empty graveyards.

    Callers must not call this twice for the same table; the store does
    not check.
    """
    state = MatchState(
        owner=SideState(deck_id=owners_deck_id),
        rival=SideState(deck_id=rivals_deck_id),
    )
    async with atomic(session):
        row = await _insert_snapshot(session, table_id, state)
        snapshot = snapshot_to_model(row)

    logger.debug("Initialized match state for table %s (snapshot %s)", table_id, row.id)
    return snapshot


async def has_state(session: AsyncSession, table_id: int) -> bool:
    """True if the table has at least one snapshot."""
    result = await session.execute(
        select(TableStateDB.id).where(TableStateDB.table_id == table_id).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def get_current_state(session: AsyncSession, table_id: int) -> MatchSnapshot | None:
    """
    Get the most recently created snapshot for a table.

    Returns None if the table has no history yet.
    """
    result = await session.execute(_latest_for_table(table_id).limit(1))
    row = result.scalar_one_or_none()
    if row is None:
        return None
    try:
        return snapshot_to_model(row)
    except SnapshotDecodeError as e:
        raise InternalError("Stored match state is corrupt", detail=str(e)) from e


async def append_snapshot(
    session: AsyncSession,
    table_id: int,
    state: MatchState,
    expected_snapshot_id: int | None = None,
) -> MatchSnapshot:
    """
    Append a new full snapshot; it becomes the table's current state.

    Args:
        table_id: Table the snapshot belongs to
        state: Complete board after the transition
        expected_snapshot_id: If given, append only while this is still
            the table's current snapshot

    Raises:
        NotFoundError: If the table does not exist
        StaleSnapshotError: If expected_snapshot_id is no longer current
    """
    async with table_locks.hold(table_id), atomic(session):
        await _lock_table(session, table_id)
        if expected_snapshot_id is not None:
            result = await session.execute(
                _latest_for_table(table_id).with_only_columns(TableStateDB.id).limit(1)
            )
            current_id = result.scalar_one_or_none()
            if current_id != expected_snapshot_id:
                logger.warning(
                    "Stale append on table %s: expected snapshot %s, current %s",
                    table_id,
                    expected_snapshot_id,
                    current_id,
                )
                raise StaleSnapshotError(table_id, expected_snapshot_id, current_id)

        row = await _insert_snapshot(session, table_id, state)
        snapshot = snapshot_to_model(row)

    logger.debug("Appended snapshot %s to table %s", row.id, table_id)
    return snapshot


async def revise_snapshot(
    session: AsyncSession, snapshot_id: int, state: MatchState
) -> MatchSnapshot:
    """
    Overwrite an existing snapshot in place without growing history.

    The snapshot keeps its table and creation time.

    Raises:
        NotFoundError: If the snapshot does not exist
    """
    async with atomic(session):
        row = await session.get(TableStateDB, snapshot_id, populate_existing=True)
        if row is None:
            raise NotFoundError("Snapshot", snapshot_id)

        for column, value in state_to_columns(state).items():
            setattr(row, column, value)
        await session.flush()
        snapshot = snapshot_to_model(row)

    logger.debug("Revised snapshot %s on table %s", snapshot_id, snapshot.table_id)
    return snapshot


async def get_state_history(
    session: AsyncSession, table_id: int, limit: int
) -> list[MatchSnapshot]:
    """
    Get up to `limit` snapshots for a table, newest first.

    Rows that fail to decode are logged and skipped, so the result can
    have gaps.

    Raises:
        InvalidArgumentError: If limit is less than 1
    """
    if limit < 1:
        raise InvalidArgumentError("History limit must be at least 1", detail=f"limit={limit}")

    result = await session.execute(_latest_for_table(table_id).limit(limit))

    snapshots: list[MatchSnapshot] = []
    for row in result.scalars().all():
        try:
            snapshots.append(snapshot_to_model(row))
        except SnapshotDecodeError as e:
            logger.warning("Skipping snapshot %s of table %s: %s", row.id, table_id, e)
    return snapshots
