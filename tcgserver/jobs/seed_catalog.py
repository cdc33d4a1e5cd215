"""
Seed the card catalog from a JSON file.

The file holds a list of card definitions:

    [
        {
            "name": "Ember Drake",
            "type": "Monster",
            "element": "Fire",
            "legend": "...",
            "effects": ["Burn: 10 damage at the start of each turn"]
        },
        ...
    ]

Cards are keyed by name and effects by description: re-running the job
updates existing cards in place, never duplicates either, and replaces
each card's effect list with the one in the file.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from tcgserver.config import settings
from tcgserver.db.cards import upsert_card
from tcgserver.db.database import async_session_factory, init_db
from tcgserver.db.effects import get_or_create_effect, set_card_effects
from tcgserver.models.card import CardElement, CardType

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path("data/cards.json")


class CardDefinition(BaseModel):
    """One card as written in the catalog file."""

    name: str
    type: CardType
    element: CardElement
    legend: str = ""
    effects: list[str] = Field(default_factory=list)


_CATALOG = TypeAdapter(list[CardDefinition])


def load_catalog(path: Path) -> list[CardDefinition]:
    """
    Read and validate a catalog file.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If any entry is malformed
    """
    return _CATALOG.validate_json(path.read_bytes())


async def seed_cards(session: AsyncSession, cards: list[CardDefinition]) -> tuple[int, int]:
    """
    Upsert every card with its effects and commit once.

    Returns:
        Tuple of (created, updated) counts.
    """
    created = updated = 0
    for card in cards:
        row, is_new = await upsert_card(
            session, card.name, card.type, card.element, legend=card.legend
        )
        effect_ids = []
        for description in card.effects:
            effect, _ = await get_or_create_effect(session, description)
            effect_ids.append(effect.id)
        await set_card_effects(session, row.id, effect_ids)
        if is_new:
            created += 1
        else:
            updated += 1
    await session.commit()
    return created, updated


async def run_seed(path: Path = DEFAULT_CATALOG_PATH) -> tuple[int, int]:
    """Create tables if needed and seed the catalog from `path`."""
    cards = load_catalog(path)
    logger.info("Loaded %d card definitions from %s", len(cards), path)

    await init_db()
    async with async_session_factory() as session:
        created, updated = await seed_cards(session, cards)

    logger.info("Catalog seeded: %d created, %d updated", created, updated)
    return created, updated


def main() -> None:
    """CLI entry point for seeding the catalog."""
    parser = argparse.ArgumentParser(description="Seed the card catalog")
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=DEFAULT_CATALOG_PATH,
        help=f"Catalog JSON file (default: {DEFAULT_CATALOG_PATH})",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_seed(args.path))


if __name__ == "__main__":
    main()
