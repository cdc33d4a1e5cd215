"""Tests for card catalog operations."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

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
from tcgserver.models.card import Card, CardElement, CardType
from tcgserver.models.failure import InvalidArgumentError


class TestCardLookup:
    async def test_get_card(self, session: AsyncSession, catalog: dict[str, int]) -> None:
        card = await get_card(session, catalog["Ember Drake"])

        assert card is not None
        assert card_to_model(card) == Card(
            id=catalog["Ember Drake"],
            name="Ember Drake",
            type=CardType.MONSTER,
            legend="Breathes sparks.",
            element=CardElement.FIRE,
        )

    async def test_get_missing_card(self, session: AsyncSession) -> None:
        assert await get_card(session, 999) is None

    async def test_get_by_name(self, session: AsyncSession, catalog: dict[str, int]) -> None:
        card = await get_card_by_name(session, "Tidecaller")

        assert card is not None
        assert card.id == catalog["Tidecaller"]

    async def test_card_exists(self, session: AsyncSession, catalog: dict[str, int]) -> None:
        assert await card_exists(session, catalog["Fire Energy"])
        assert not await card_exists(session, 999)


class TestListAndSearch:
    async def test_list_ordered_by_name(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        names = [card.name for card in await list_cards(session)]

        assert names == sorted(catalog)

    async def test_list_filtered(self, session: AsyncSession, catalog: dict[str, int]) -> None:
        monsters = await list_cards(session, card_type=CardType.MONSTER)
        fire = await list_cards(session, element=CardElement.FIRE)
        fire_spells = await list_cards(
            session, card_type=CardType.SPELL, element=CardElement.FIRE
        )

        assert [c.name for c in monsters] == ["Ember Drake", "Stone Warden", "Tidecaller"]
        assert [c.name for c in fire] == ["Ember Drake", "Fire Energy", "Flame Burst"]
        assert [c.name for c in fire_spells] == ["Flame Burst"]

    async def test_search_name_case_insensitive(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        assert [c.name for c in await search_cards(session, "EMBER")] == ["Ember Drake"]

    async def test_search_legend(self, session: AsyncSession, catalog: dict[str, int]) -> None:
        """Legend text is searched too."""
        assert [c.name for c in await search_cards(session, "tide")] == ["Tidecaller"]
        assert [c.name for c in await search_cards(session, "damage")] == ["Flame Burst"]

    async def test_search_no_match(self, session: AsyncSession, catalog: dict[str, int]) -> None:
        assert await search_cards(session, "dragonlord") == []


class TestCatalogWrites:
    async def test_create_card(self, session: AsyncSession) -> None:
        card = await create_card(session, "  Gale Sprite ", CardType.MONSTER, CardElement.WIND)

        assert card.id is not None
        assert card.name == "Gale Sprite"
        assert card.legend == ""

    async def test_create_rejects_empty_name(self, session: AsyncSession) -> None:
        with pytest.raises(InvalidArgumentError):
            await create_card(session, "   ", CardType.SPELL, CardElement.FIRE)

    async def test_create_rejects_duplicate(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            await create_card(session, "Ember Drake", CardType.MONSTER, CardElement.FIRE)

    async def test_upsert_creates(self, session: AsyncSession) -> None:
        card, created = await upsert_card(
            session, "Dawn Seraph", CardType.MONSTER, CardElement.HOLY
        )

        assert created is True
        assert card.element == "Holy"

    async def test_upsert_updates_in_place(
        self, session: AsyncSession, catalog: dict[str, int]
    ) -> None:
        card, created = await upsert_card(
            session, "Stone Warden", CardType.MONSTER, CardElement.EARTH, legend="Never moves."
        )

        assert created is False
        assert card.id == catalog["Stone Warden"]
        assert card.legend == "Never moves."
