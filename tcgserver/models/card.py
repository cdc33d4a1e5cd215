from dataclasses import dataclass
from enum import Enum


class CardType(str, Enum):
    """Card type as printed on the card."""

    MONSTER = "Monster"
    SPELL = "Spell"
    ENERGY = "Energy"


class CardElement(str, Enum):
    """Card element."""

    FIRE = "Fire"
    WATER = "Water"
    WIND = "Wind"
    EARTH = "Earth"
    NEUTRAL = "Neutral"
    HOLY = "Holy"
    DARK = "Dark"


@dataclass(frozen=True, slots=True)
class Card:
    """
    An immutable catalog entry.

    Attributes:
        id: Catalog identifier
        name: Unique card name
        type: Monster, Spell or Energy
        legend: Free text printed on the card (effects are not interpreted)
        element: Card element
    """

    id: int
    name: str
    type: CardType
    legend: str
    element: CardElement


@dataclass(frozen=True, slots=True)
class Effect:
    """Effect text attached to catalog cards. Never interpreted."""

    id: int
    description: str


@dataclass(frozen=True, slots=True)
class InventoryEntry:
    """Copies of one card owned by a user."""

    card: Card
    amount: int
