from dataclasses import dataclass

from tcgserver.config import EXPERIENCE_PER_LEVEL, LEVEL_UP_MONEY_PER_LEVEL


@dataclass
class Progression:
    """
    Level, experience and money for a user.

    Attributes:
        user_id: Owner of this progression
        level: Current level (>= 1)
        experience: Accumulated experience (>= 0), never reset on level-up
        money: Spendable currency (>= 0)
    """

    user_id: int
    level: int
    experience: int
    money: int

    def experience_for_next_level(self) -> int:
        """Experience total at which the next level is reached."""
        return self.level * EXPERIENCE_PER_LEVEL

    def apply_experience(self, amount: int) -> bool:
        """
        Add experience and evaluate the level-up threshold once.

        At most one level is gained per call, however far experience
        overshoots. Reaching a level pays new_level * 100 money.

        Returns:
            True if the user levelled up.
        """
        self.experience += amount
        if self.experience < self.experience_for_next_level():
            return False

        self.level += 1
        self.money += self.level * LEVEL_UP_MONEY_PER_LEVEL
        return True
