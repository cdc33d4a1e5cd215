"""Tests for the card-id list codec used by match snapshots."""

import pytest

from tcgserver.models.match_state import SnapshotDecodeError, decode_card_ids, encode_card_ids


class TestEncode:
    def test_encode_list(self) -> None:
        assert encode_card_ids([3, 1, 2]) == "[3,1,2]"

    def test_encode_empty(self) -> None:
        """An empty slot is stored as an empty array."""
        assert encode_card_ids([]) == "[]"

    def test_encode_none_as_empty(self) -> None:
        """A missing list is stored as an empty array, never as null."""
        assert encode_card_ids(None) == "[]"


class TestDecode:
    def test_decode_preserves_order(self) -> None:
        assert decode_card_ids("[7, 7, 2, 9]") == [7, 7, 2, 9]

    @pytest.mark.parametrize("raw", [None, "", b"", "[]", "null", b"null", " null "])
    def test_decode_absent_as_empty(self, raw: str | bytes | None) -> None:
        """NULL, empty text, JSON null and [] all decode to an empty list."""
        assert decode_card_ids(raw) == []

    def test_decode_bytes(self) -> None:
        assert decode_card_ids(b"[1,2]") == [1, 2]

    @pytest.mark.parametrize(
        "raw",
        ["not json", "{}", "[1, \"2\"]", "[1.5]", "[null]", "[true]", "[[1]]"],
    )
    def test_decode_rejects_malformed(self, raw: str) -> None:
        """Anything but a JSON array of integers is a decode error."""
        with pytest.raises(SnapshotDecodeError):
            decode_card_ids(raw)

    def test_empty_round_trip(self) -> None:
        assert decode_card_ids(encode_card_ids([])) == []
