"""
Match board state.

A table's match is recorded as an append-only sequence of snapshots.
Each snapshot carries the full board (not a diff): for owner and rival,
one active slot, three bench slots and a graveyard.

Slots hold a list of card ids rather than a single id because a slot can
stack several card instances (a monster plus its equipment, energies).
Graveyards keep discard order.

INVARIANT: Card-id lists are never absent. A slot with nothing in it is
an empty list, both in memory and after a storage round-trip.
"""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import StrictInt, TypeAdapter, ValidationError

from tcgserver.config import BENCH_SIZE
from tcgserver.models.failure import InvalidArgumentError

_CARD_IDS: TypeAdapter[list[int]] = TypeAdapter(list[StrictInt])


class SnapshotDecodeError(ValueError):
    """Stored card-id text is not a JSON array of integers."""


def encode_card_ids(card_ids: list[int] | None) -> str:
    """Encode a card-id list as JSON array text. None encodes as `[]`."""
    return _CARD_IDS.dump_json(list(card_ids or [])).decode()


def decode_card_ids(raw: str | bytes | None) -> list[int]:
    """
    Decode JSON array text into a card-id list.

    SQL NULL, empty text and JSON `null` all decode to an empty list.

    Raises:
        SnapshotDecodeError: If the text is not a JSON array of integers
    """
    if raw is None or raw.strip() in ("", b"", "null", b"null"):
        return []
    try:
        return _CARD_IDS.validate_json(raw)
    except ValidationError as e:
        raise SnapshotDecodeError(f"Invalid card id list: {raw!r}") from e


def _empty_bench() -> list["BoardSlot"]:
    return [BoardSlot() for _ in range(BENCH_SIZE)]


@dataclass
class BoardSlot:
    """
    One board position.

    Attributes:
        cards: Card ids stacked in this slot, bottom first
        hp: Current hit points of the slot's monster (None if unset)
    """

    cards: list[int] = field(default_factory=list)
    hp: int | None = None


@dataclass
class SideState:
    """One player's half of the board."""

    deck_id: int | None = None
    active: BoardSlot = field(default_factory=BoardSlot)
    bench: list[BoardSlot] = field(default_factory=_empty_bench)
    graveyard: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.bench) != BENCH_SIZE:
            raise InvalidArgumentError(
                f"Bench must have exactly {BENCH_SIZE} slots",
                detail=f"got {len(self.bench)}",
            )


@dataclass
class MatchState:
    """Full board of a match at one point in time."""

    log: str = ""
    owner: SideState = field(default_factory=SideState)
    rival: SideState = field(default_factory=SideState)


@dataclass
class MatchSnapshot:
    """
    A persisted MatchState.

    Attributes:
        id: Snapshot identifier
        table_id: Table this snapshot belongs to
        state: Board contents
        created_at: Ordering key within the table's history
        updated_at: Last in-place revision
    """

    id: int
    table_id: int
    state: MatchState
    created_at: datetime
    updated_at: datetime
