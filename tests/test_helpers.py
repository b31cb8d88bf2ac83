"""Tests for the ChainPoint/BlockRef codec and reference helpers."""

import pytest

from utxorpc_client.proto import query, sync
from utxorpc_client.errors import InvalidArgumentError, InvalidEncodingError
from utxorpc_client.helpers import (
    HASH_SIZE,
    MAX_SLOT,
    ChainPoint,
    as_bytes,
    as_point,
    as_txo_ref,
    hex_to_bytes,
    parse_slot,
    point_to_ref,
    points_to_refs,
    ref_to_point,
    txo_ref,
    txo_ref_text,
)

from .fixtures import NEXT_HASH, POINT_HASH


class TestParseSlot:
    def test_int(self) -> None:
        assert parse_slot(601) == 601

    def test_decimal_string(self) -> None:
        assert parse_slot("60692700") == 60692700

    def test_surrounding_whitespace(self) -> None:
        assert parse_slot(" 42 ") == 42

    def test_max_slot(self) -> None:
        assert parse_slot(str(MAX_SLOT)) == MAX_SLOT

    @pytest.mark.parametrize("bad", ["abc", "0x10", "", "1.5", "6_01", "+601", "-0", "\u0666\u0660"])
    def test_non_numeric_string(self, bad: str) -> None:
        with pytest.raises(InvalidArgumentError):
            parse_slot(bad)

    def test_negative(self) -> None:
        with pytest.raises(InvalidArgumentError):
            parse_slot(-1)

    def test_too_large(self) -> None:
        with pytest.raises(InvalidArgumentError):
            parse_slot(MAX_SLOT + 1)

    @pytest.mark.parametrize("bad", [True, 1.0, None])
    def test_wrong_type(self, bad) -> None:
        with pytest.raises(InvalidArgumentError):
            parse_slot(bad)


class TestHexToBytes:
    def test_decodes(self) -> None:
        assert hex_to_bytes(NEXT_HASH) == b"\xab" * 32

    @pytest.mark.parametrize(
        "bad",
        [
            "zz" * 32,
            " ".join(["ab"] * 32),
            "ab" * 31 + "a b",
            "\n" + "ab" * 32,
        ],
    )
    def test_malformed(self, bad: str) -> None:
        with pytest.raises(InvalidEncodingError):
            hex_to_bytes(bad)

    def test_odd_length(self) -> None:
        with pytest.raises(InvalidEncodingError):
            hex_to_bytes("abc")

    def test_wrong_length(self) -> None:
        with pytest.raises(InvalidEncodingError):
            hex_to_bytes("ab" * 31)

    def test_unchecked_length(self) -> None:
        assert hex_to_bytes("abcd", size=None) == b"\xab\xcd"

    def test_not_a_string(self) -> None:
        with pytest.raises(InvalidEncodingError):
            hex_to_bytes(b"\xab" * 32)


class TestAsBytes:
    def test_bytes_pass_through(self) -> None:
        assert as_bytes(b"\x01\x02") == b"\x01\x02"

    def test_bytearray(self) -> None:
        assert as_bytes(bytearray(b"\x01")) == b"\x01"

    def test_hex_string(self) -> None:
        assert as_bytes("0102") == b"\x01\x02"

    def test_size_checked_for_bytes(self) -> None:
        with pytest.raises(InvalidEncodingError):
            as_bytes(b"\x01", size=HASH_SIZE)


class TestPointToRef:
    def test_converts_slot_and_hash(self) -> None:
        ref = point_to_ref(ChainPoint(slot=601, hash=POINT_HASH))
        assert isinstance(ref, sync.BlockRef)
        assert ref.slot == 601
        assert ref.hash == bytes.fromhex(POINT_HASH)

    def test_string_slot(self) -> None:
        ref = point_to_ref(ChainPoint(slot="601", hash=POINT_HASH))
        assert ref.slot == 601

    def test_accepts_tuple(self) -> None:
        ref = point_to_ref((601, POINT_HASH))
        assert ref.slot == 601

    def test_uppercase_hash(self) -> None:
        ref = point_to_ref(ChainPoint(slot=1, hash=NEXT_HASH.upper()))
        assert ref.hash == b"\xab" * 32

    def test_bad_hash(self) -> None:
        with pytest.raises(InvalidEncodingError):
            point_to_ref(ChainPoint(slot=1, hash="nothex"))

    def test_space_separated_hash(self) -> None:
        with pytest.raises(InvalidEncodingError):
            point_to_ref(ChainPoint(slot=1, hash=" ".join(["ab"] * 32)))

    def test_underscored_slot(self) -> None:
        with pytest.raises(InvalidArgumentError):
            point_to_ref(ChainPoint(slot="6_01", hash=POINT_HASH))

    def test_bad_slot(self) -> None:
        with pytest.raises(InvalidArgumentError):
            point_to_ref(ChainPoint(slot="tip", hash=POINT_HASH))

    def test_not_a_point(self) -> None:
        with pytest.raises(InvalidArgumentError):
            point_to_ref("601")

    def test_points_to_refs_empty(self) -> None:
        assert points_to_refs(None) == []
        assert points_to_refs([]) == []

    def test_points_to_refs(self) -> None:
        refs = points_to_refs([(1, POINT_HASH), (2, NEXT_HASH)])
        assert [r.slot for r in refs] == [1, 2]


class TestRefToPoint:
    def test_renders_decimal_slot_and_lowercase_hex(self) -> None:
        ref = sync.BlockRef(slot=601, hash=bytes.fromhex(POINT_HASH))
        point = ref_to_point(ref)
        assert point.slot == "601"
        assert point.hash == POINT_HASH

    def test_equals_point(self) -> None:
        ref = sync.BlockRef(slot=9, hash=b"\xab" * 32)
        assert ref_to_point(ref) == ChainPoint(slot="9", hash=NEXT_HASH)

    @pytest.mark.parametrize(
        "point",
        [
            ChainPoint(slot=601, hash=POINT_HASH),
            ChainPoint(slot="60692700", hash=NEXT_HASH.upper()),
            ChainPoint(slot=0, hash="00" * 32),
            ChainPoint(slot=MAX_SLOT, hash="ff" * 32),
        ],
    )
    def test_round_trip(self, point: ChainPoint) -> None:
        back = ref_to_point(point_to_ref(point))
        assert back.hash == point.hash.lower()
        assert back.slot_number == point.slot_number
        assert back.same_point(point)


class TestChainPoint:
    def test_slot_number(self) -> None:
        assert ChainPoint(slot="12", hash=POINT_HASH).slot_number == 12

    def test_same_point_ignores_slot_type_and_case(self) -> None:
        a = ChainPoint(slot=12, hash=NEXT_HASH)
        b = ChainPoint(slot="12", hash=NEXT_HASH.upper())
        assert a != b
        assert a.same_point(b)

    def test_str(self) -> None:
        assert str(ChainPoint(slot=1, hash="ab")) == "1/ab"

    def test_as_point_passthrough(self) -> None:
        p = ChainPoint(slot=1, hash=POINT_HASH)
        assert as_point(p) is p


class TestTxoRef:
    def test_from_bytes(self) -> None:
        ref = txo_ref(b"\x01" * 32, 3)
        assert ref == query.TxoRef(hash=b"\x01" * 32, index=3)

    def test_from_hex(self) -> None:
        ref = txo_ref(NEXT_HASH, 0)
        assert ref.hash == b"\xab" * 32

    def test_negative_index(self) -> None:
        with pytest.raises(InvalidArgumentError):
            txo_ref(NEXT_HASH, -1)

    def test_bool_index(self) -> None:
        with pytest.raises(InvalidArgumentError):
            txo_ref(NEXT_HASH, True)

    def test_short_hash(self) -> None:
        with pytest.raises(InvalidEncodingError):
            txo_ref(b"\x01", 0)

    def test_as_txo_ref_tuple(self) -> None:
        assert as_txo_ref((NEXT_HASH, 1)).index == 1

    def test_as_txo_ref_message(self) -> None:
        ref = query.TxoRef(hash=b"\x01" * 32, index=1)
        assert as_txo_ref(ref) is ref

    def test_as_txo_ref_invalid(self) -> None:
        with pytest.raises(InvalidArgumentError):
            as_txo_ref("abc#1")

    def test_text(self) -> None:
        assert txo_ref_text(txo_ref(NEXT_HASH, 2)) == f"{NEXT_HASH}#2"
