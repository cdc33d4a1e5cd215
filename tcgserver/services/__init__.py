"""
Game services.

Business rules that span more than one ledger.
"""

from tcgserver.services.deck_validator import (
    check_minimum_size,
    check_slot_available,
    create_validated_deck,
    find_shortfalls,
    get_deck_limit,
    merge_deck_entries,
    validate_composition,
)

__all__ = [
    "check_minimum_size",
    "check_slot_available",
    "create_validated_deck",
    "find_shortfalls",
    "get_deck_limit",
    "merge_deck_entries",
    "validate_composition",
]
