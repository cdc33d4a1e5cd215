from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "TCG Server"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/tcgserver"

    log_level: str = "INFO"


settings = Settings()


# =============================================================================
# DECK RULES
# =============================================================================

# Minimum number of card copies in a deck
MIN_DECK_SIZE = 40

# Every user may own this many decks, plus one per LEVELS_PER_BONUS_SLOT levels
BASE_DECK_SLOTS = 3
LEVELS_PER_BONUS_SLOT = 25

MAX_DECK_NAME_LENGTH = 100


# =============================================================================
# PROGRESSION RULES
# =============================================================================

# Level-up threshold is level * EXPERIENCE_PER_LEVEL
EXPERIENCE_PER_LEVEL = 1000

# Reaching a level pays new_level * LEVEL_UP_MONEY_PER_LEVEL
LEVEL_UP_MONEY_PER_LEVEL = 100

STARTING_LEVEL = 1
STARTING_EXPERIENCE = 0
STARTING_MONEY = 100


# =============================================================================
# MATCH STATE
# =============================================================================

BENCH_SIZE = 3

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100
