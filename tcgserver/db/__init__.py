from tcgserver.db.cards import (
    card_exists,
    card_to_model,
    create_card,
    get_card,
    get_card_by_name,
    list_cards,
    search_cards,
    upsert_card,
)
from tcgserver.db.database import atomic, get_session, init_db
from tcgserver.db.decks import (
    count_decks,
    deck_to_model,
    delete_deck,
    get_deck,
    list_decks,
)
from tcgserver.db.effects import (
    effect_to_model,
    get_effect,
    get_or_create_effect,
    hard_delete_effect,
    list_card_effects,
    list_effect_cards,
    list_effects,
    set_card_effects,
    soft_delete_effect,
)
from tcgserver.db.inventory import add_copies, get_owned, list_owned, owned_amounts
from tcgserver.db.progression import (
    add_money,
    ensure_default_progression,
    get_progression,
    grant_experience,
    progression_to_model,
    spend_money,
)
from tcgserver.db.table_state import (
    append_snapshot,
    create_initial_state,
    get_current_state,
    get_state_history,
    has_state,
    revise_snapshot,
    snapshot_to_model,
)
from tcgserver.db.tables import (
    create_table,
    get_table,
    get_user_table,
    is_table_owner,
    is_table_participant,
    is_waiting_for_rival,
    join_table,
    list_user_tables,
    seat_to_model,
    update_table,
    update_user_table_time,
)

__all__ = [
    "add_copies",
    "add_money",
    "append_snapshot",
    "atomic",
    "card_exists",
    "card_to_model",
    "count_decks",
    "create_card",
    "create_initial_state",
    "create_table",
    "deck_to_model",
    "delete_deck",
    "effect_to_model",
    "ensure_default_progression",
    "get_card",
    "get_card_by_name",
    "get_current_state",
    "get_deck",
    "get_effect",
    "get_or_create_effect",
    "get_owned",
    "get_progression",
    "get_session",
    "get_state_history",
    "get_table",
    "get_user_table",
    "grant_experience",
    "hard_delete_effect",
    "has_state",
    "init_db",
    "is_table_owner",
    "is_table_participant",
    "is_waiting_for_rival",
    "join_table",
    "list_card_effects",
    "list_cards",
    "list_decks",
    "list_effect_cards",
    "list_effects",
    "list_owned",
    "list_user_tables",
    "owned_amounts",
    "progression_to_model",
    "revise_snapshot",
    "search_cards",
    "seat_to_model",
    "set_card_effects",
    "snapshot_to_model",
    "soft_delete_effect",
    "spend_money",
    "update_table",
    "update_user_table_time",
    "upsert_card",
]
