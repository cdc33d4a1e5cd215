from dataclasses import dataclass, field

from tcgserver.config import BASE_DECK_SLOTS, LEVELS_PER_BONUS_SLOT


def compute_deck_limit(level: int) -> int:
    """Decks a user of `level` may own: 3, plus one per 25 levels."""
    return BASE_DECK_SLOTS + level // LEVELS_PER_BONUS_SLOT


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """Copies of one card included in a deck."""

    card_id: int
    number: int


@dataclass
class Deck:
    """
    A user's deck.

    Attributes:
        id: Deck identifier
        user_id: Owner
        name: Display name
        valid: True once the deck passed validation at creation
        entries: One entry per distinct card
    """

    id: int
    user_id: int
    name: str
    valid: bool
    entries: list[DeckEntry] = field(default_factory=list)

    def total_cards(self) -> int:
        """Total copies across all entries."""
        return sum(entry.number for entry in self.entries)


@dataclass(frozen=True, slots=True)
class DeckSlotStatus:
    """Whether a user may create another deck."""

    can_create: bool
    limit: int
    current: int
