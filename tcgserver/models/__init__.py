from tcgserver.models.card import Card, CardElement, CardType, Effect, InventoryEntry
from tcgserver.models.deck import Deck, DeckEntry, DeckSlotStatus, compute_deck_limit
from tcgserver.models.failure import (
    ApiResponse,
    DeckLimitReachedError,
    DeckTooSmallError,
    FailureDetail,
    FailureKind,
    InsufficientFundsError,
    InternalError,
    InvalidArgumentError,
    KnownError,
    MissingRequiredCardsError,
    NotFoundError,
    OutcomeType,
    StaleSnapshotError,
    TableClosedError,
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
from tcgserver.models.progression import Progression
from tcgserver.models.table import (
    SeatAssignment,
    TableCategory,
    TablePrivacy,
    TablePrize,
)

__all__ = [
    "ApiResponse",
    "BoardSlot",
    "Card",
    "CardElement",
    "CardType",
    "Deck",
    "DeckEntry",
    "DeckLimitReachedError",
    "DeckSlotStatus",
    "DeckTooSmallError",
    "Effect",
    "FailureDetail",
    "FailureKind",
    "InsufficientFundsError",
    "InternalError",
    "InvalidArgumentError",
    "InventoryEntry",
    "KnownError",
    "MatchSnapshot",
    "MatchState",
    "MissingRequiredCardsError",
    "NotFoundError",
    "OutcomeType",
    "Progression",
    "SeatAssignment",
    "SideState",
    "SnapshotDecodeError",
    "StaleSnapshotError",
    "TableClosedError",
    "TableCategory",
    "TablePrivacy",
    "TablePrize",
    "compute_deck_limit",
    "decode_card_ids",
    "encode_card_ids",
]
