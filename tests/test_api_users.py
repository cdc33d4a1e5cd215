"""Tests for progression and inventory endpoints."""

from httpx import AsyncClient


class TestProgressionEndpoints:
    async def test_missing_progression(self, client: AsyncClient) -> None:
        """Progression is never created implicitly by a read."""
        response = await client.get("/users/5/progression")

        assert response.status_code == 404
        assert response.json()["failure"]["kind"] == "not_found"

    async def test_ensure_default(self, client: AsyncClient) -> None:
        response = await client.post("/users/5/progression")

        assert response.status_code == 201
        assert response.json() == {
            "user_id": 5,
            "level": 1,
            "experience": 0,
            "money": 100,
            "next_level_at": 1000,
            "created": True,
        }

    async def test_ensure_default_idempotent(self, client: AsyncClient) -> None:
        await client.post("/users/5/progression")
        await client.post("/users/5/money", json={"amount": 10})

        response = await client.post("/users/5/progression")

        assert response.status_code == 200
        assert response.json()["created"] is False
        assert response.json()["money"] == 110

    async def test_first_level_up(self, client: AsyncClient) -> None:
        """A new user granted 1000 experience is level 2 with 300 money."""
        await client.post("/users/5/progression")

        response = await client.post("/users/5/experience", json={"amount": 1000})

        assert response.status_code == 200
        data = response.json()
        assert (data["level"], data["experience"], data["money"]) == (2, 1000, 300)

        stored = (await client.get("/users/5/progression")).json()
        assert (stored["level"], stored["experience"], stored["money"]) == (2, 1000, 300)

    async def test_negative_experience(self, client: AsyncClient) -> None:
        await client.post("/users/5/progression")

        response = await client.post("/users/5/experience", json={"amount": -1})

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_argument"

    async def test_experience_for_missing_user(self, client: AsyncClient) -> None:
        response = await client.post("/users/5/experience", json={"amount": 10})

        assert response.status_code == 404

    async def test_spend(self, client: AsyncClient) -> None:
        await client.post("/users/5/progression")

        response = await client.post("/users/5/money/spend", json={"amount": 30})

        assert response.status_code == 200
        assert response.json()["money"] == 70

    async def test_insufficient_funds(self, client: AsyncClient) -> None:
        """An unaffordable spend is a 409 and leaves the user untouched."""
        await client.post("/users/5/progression")

        response = await client.post("/users/5/money/spend", json={"amount": 101})

        assert response.status_code == 409
        failure = response.json()["failure"]
        assert failure["kind"] == "insufficient_funds"
        assert failure["detail"] == "required=101 available=100"

        stored = (await client.get("/users/5/progression")).json()
        assert stored["money"] == 100

    async def test_overdraft_with_negative_money(self, client: AsyncClient) -> None:
        await client.post("/users/5/progression")

        response = await client.post("/users/5/money", json={"amount": -101})

        assert response.status_code == 500
        assert response.json()["failure"]["kind"] == "internal"
        assert (await client.get("/users/5/progression")).json()["money"] == 100


class TestInventoryEndpoints:
    async def test_add_and_list_cards(self, client: AsyncClient, catalog: dict[str, int]) -> None:
        first = await client.post(
            "/users/5/cards", json={"card_id": catalog["Tidecaller"], "amount": 2}
        )
        second = await client.post(
            "/users/5/cards", json={"card_id": catalog["Tidecaller"], "amount": 3}
        )
        await client.post("/users/5/cards", json={"card_id": catalog["Ember Drake"], "amount": 1})

        assert first.json()["amount"] == 2
        assert second.json()["amount"] == 5

        response = await client.get("/users/5/cards")

        assert response.status_code == 200
        assert [(e["card"]["name"], e["amount"]) for e in response.json()] == [
            ("Ember Drake", 1),
            ("Tidecaller", 5),
        ]

    async def test_get_owned_amount(self, client: AsyncClient, catalog: dict[str, int]) -> None:
        card_id = catalog["Stone Warden"]
        await client.post("/users/5/cards", json={"card_id": card_id, "amount": 4})

        owned = await client.get(f"/users/5/cards/{card_id}")
        not_owned = await client.get(f"/users/6/cards/{card_id}")

        assert owned.json() == {"user_id": 5, "card_id": card_id, "amount": 4}
        assert not_owned.json()["amount"] == 0

    async def test_add_unknown_card(self, client: AsyncClient) -> None:
        response = await client.post("/users/5/cards", json={"card_id": 999, "amount": 1})

        assert response.status_code == 404

    async def test_add_zero_copies(self, client: AsyncClient, catalog: dict[str, int]) -> None:
        response = await client.post(
            "/users/5/cards", json={"card_id": catalog["Tidecaller"], "amount": 0}
        )

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_argument"
