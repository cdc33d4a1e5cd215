"""
Failure classification for the game backend.

Every business or storage failure raised by the data layer is a
`KnownError` subclass. The API translates these into an `ApiResponse`
envelope with the error's HTTP status; nothing below the API layer
raises `HTTPException`.

Taxonomy:
- InvalidArgument: malformed input (mismatched lengths, non-positive deltas)
- NotFound: referenced user/progression/deck/table/snapshot does not exist
- InsufficientFunds: spend larger than available money
- DeckTooSmall / MissingRequiredCards / DeckLimitReached: deck rules
- StaleSnapshot: optimistic append lost against a concurrent writer
- TableClosed: table settings edited after a rival sat down
- Internal: storage or transaction failure (always rolled back)
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"

    # Business rules
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DECK_TOO_SMALL = "deck_too_small"
    MISSING_REQUIRED_CARDS = "missing_required_cards"
    DECK_LIMIT_REACHED = "deck_limit_reached"

    # Concurrency
    STALE_SNAPSHOT = "stale_snapshot"
    TABLE_CLOSED = "table_closed"

    INTERNAL = "internal"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope used for failures surfaced by the API."""

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class InvalidArgumentError(KnownError):
    """Malformed input to a ledger or validator operation."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_ARGUMENT,
            message=message,
            detail=detail,
            status_code=400,
        )


class NotFoundError(KnownError):
    """A referenced record does not exist."""

    def __init__(self, resource: str, identifier: object):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{resource} not found",
            detail=f"{resource} {identifier!r} does not exist",
            status_code=404,
        )


class InsufficientFundsError(KnownError):
    """Raised when a spend exceeds the money available. State is untouched."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            kind=FailureKind.INSUFFICIENT_FUNDS,
            message=f"Insufficient funds: required {required}, available {available}",
            detail=f"required={required} available={available}",
            suggestion="Earn more money before making this purchase.",
            status_code=409,
        )


class DeckTooSmallError(KnownError):
    """
    Raised when a proposed deck has fewer copies than the minimum.

    This is checked before inventory, so it fires regardless of ownership.
    """

    def __init__(self, minimum: int, actual: int):
        self.minimum = minimum
        self.actual = actual
        super().__init__(
            kind=FailureKind.DECK_TOO_SMALL,
            message=f"Deck must have at least {minimum} cards",
            detail=f"requested {actual} cards",
            suggestion=f"Add {minimum - actual} more cards to the deck.",
            status_code=400,
        )


class MissingRequiredCardsError(KnownError):
    """
    Raised when the owner lacks copies of one or more requested cards.

    Attributes:
        shortfalls: (card_id, required, owned) for every card not fully covered
    """

    def __init__(self, shortfalls: list[tuple[int, int, int]]):
        self.shortfalls = shortfalls
        detail = ", ".join(
            f"card {card_id}: need {required}, own {owned}"
            for card_id, required, owned in shortfalls
        )
        super().__init__(
            kind=FailureKind.MISSING_REQUIRED_CARDS,
            message="You do not have all the required cards",
            detail=detail or None,
            status_code=400,
        )


class DeckLimitReachedError(KnownError):
    """Raised when the user already owns as many decks as their level allows."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            kind=FailureKind.DECK_LIMIT_REACHED,
            message=f"Deck limit reached: maximum {limit} decks allowed",
            detail=f"limit={limit}",
            suggestion="Delete a deck or level up to unlock more deck slots.",
            status_code=409,
        )


class StaleSnapshotError(KnownError):
    """Raised when an append expected a different current snapshot."""

    def __init__(self, table_id: int, expected: int, current: int | None):
        self.table_id = table_id
        self.expected = expected
        self.current = current
        super().__init__(
            kind=FailureKind.STALE_SNAPSHOT,
            message="Match state changed since it was read",
            detail=f"table {table_id}: expected snapshot {expected}, current {current}",
            suggestion="Reload the match state and retry the action.",
            status_code=409,
        )


class TableClosedError(KnownError):
    """Raised when a table's settings change after a rival has joined."""

    def __init__(self, table_id: int):
        self.table_id = table_id
        super().__init__(
            kind=FailureKind.TABLE_CLOSED,
            message="Table settings can only change while waiting for a rival",
            detail=f"table {table_id} already has a rival",
            status_code=409,
        )


class InternalError(KnownError):
    """Storage or transaction failure. The unit of work was rolled back."""

    def __init__(self, message: str = "Storage operation failed", detail: str | None = None):
        super().__init__(
            kind=FailureKind.INTERNAL,
            message=message,
            detail=detail,
            status_code=500,
        )
