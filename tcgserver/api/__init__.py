from tcgserver.api.cards import router as cards_router
from tcgserver.api.decks import router as decks_router
from tcgserver.api.effects import router as effects_router
from tcgserver.api.health import router as health_router
from tcgserver.api.tables import router as tables_router
from tcgserver.api.users import router as users_router

__all__ = [
    "cards_router",
    "decks_router",
    "effects_router",
    "health_router",
    "tables_router",
    "users_router",
]
