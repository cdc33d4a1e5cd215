from dataclasses import dataclass
from enum import Enum


class TableCategory(str, Enum):
    """Stakes tier of a table."""

    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class TablePrivacy(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class TablePrize(str, Enum):
    MONEY = "money"
    CARD = "card"
    AURA = "aura"


# Private table passwords are short numeric codes
MAX_TABLE_PASSWORD_LENGTH = 10


@dataclass
class SeatAssignment:
    """
    Who is seated at a table.

    Attributes:
        table_id: Table identifier
        owner_id: User who created the table
        rival_id: User who joined, None while waiting
        time: Owner's clock value
    """

    table_id: int
    owner_id: int
    rival_id: int | None
    time: int = 0

    @property
    def waiting_for_rival(self) -> bool:
        return self.rival_id is None
