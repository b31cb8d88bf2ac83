"""Helper functions for converting between caller values and wire types."""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from .proto import query, sync
from .errors import InvalidArgumentError, InvalidEncodingError

# Cardano block and transaction hashes are blake2b-256 digests.
HASH_SIZE = 32
MAX_SLOT = 2**64 - 1

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


@dataclass(frozen=True)
class ChainPoint:
    """A position in the chain: slot plus hex-encoded block hash.

    ``slot`` keeps whatever representation it was built with; points decoded
    from the wire carry it as a decimal string. Use ``slot_number`` to compare.
    """

    slot: Union[int, str]
    hash: str

    @property
    def slot_number(self) -> int:
        """Return the slot as an integer."""
        return parse_slot(self.slot)

    def same_point(self, other: "ChainPoint") -> bool:
        """Return True if both points name the same slot and hash."""
        return (
            self.slot_number == other.slot_number
            and self.hash.lower() == other.hash.lower()
        )

    def __str__(self) -> str:
        return f"{self.slot}/{self.hash}"


PointLike = Union[ChainPoint, tuple]


def as_point(value: PointLike) -> ChainPoint:
    """Accept a ChainPoint or a ``(slot, hash)`` pair."""
    if isinstance(value, ChainPoint):
        return value
    if isinstance(value, tuple) and len(value) == 2:
        return ChainPoint(slot=value[0], hash=value[1])
    raise InvalidArgumentError(f"not a chain point: {value!r}")


def parse_slot(slot: Union[int, str]) -> int:
    """Coerce a slot given as int or decimal string to a 64-bit integer."""
    if isinstance(slot, bool):
        raise InvalidArgumentError(f"slot must be numeric, got {slot!r}")
    if isinstance(slot, int):
        value = slot
    elif isinstance(slot, str):
        digits = slot.strip()
        if not (digits.isascii() and digits.isdigit()):
            raise InvalidArgumentError(f"slot must be numeric, got {slot!r}")
        value = int(digits)
    else:
        raise InvalidArgumentError(f"slot must be numeric, got {slot!r}")
    if value < 0:
        raise InvalidArgumentError(f"slot must not be negative, got {value}")
    if value > MAX_SLOT:
        raise InvalidArgumentError(f"slot does not fit in 64 bits: {value}")
    return value


def hex_to_bytes(value: str, size: Optional[int] = HASH_SIZE) -> bytes:
    """Decode a hex string, optionally checking the decoded length."""
    if not isinstance(value, str):
        raise InvalidEncodingError(f"expected hex string, got {type(value).__name__}")
    if len(value) % 2 or not _HEX_RE.fullmatch(value):
        raise InvalidEncodingError(f"malformed hex {value!r}")
    raw = bytes.fromhex(value)
    if size is not None and len(raw) != size:
        raise InvalidEncodingError(f"expected {size} bytes, got {len(raw)}")
    return raw


def as_bytes(value: Union[bytes, bytearray, str], size: Optional[int] = None) -> bytes:
    """Accept raw bytes or a hex string."""
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
        if size is not None and len(raw) != size:
            raise InvalidEncodingError(f"expected {size} bytes, got {len(raw)}")
        return raw
    return hex_to_bytes(value, size)


# ChainPoint <-> BlockRef


def point_to_ref(point: PointLike, ref_type: Any = sync.BlockRef) -> Any:
    """Convert a ChainPoint to a wire block reference.

    ``ref_type`` selects the message class; the sync and watch services each
    declare their own ``BlockRef``.
    """
    point = as_point(point)
    return ref_type(slot=parse_slot(point.slot), hash=hex_to_bytes(point.hash))


def points_to_refs(points: Optional[Iterable[PointLike]], ref_type: Any = sync.BlockRef) -> list:
    """Convert an optional sequence of points to block references."""
    if not points:
        return []
    return [point_to_ref(p, ref_type) for p in points]


def ref_to_point(ref: Any) -> ChainPoint:
    """Convert a wire block reference (or query ChainPoint) to a ChainPoint."""
    return ChainPoint(slot=str(ref.slot), hash=bytes(ref.hash).hex())


# Output references


def txo_ref(tx_hash: Union[bytes, str], output_index: int) -> query.TxoRef:
    """Build a wire output reference from a transaction hash and index."""
    if isinstance(output_index, bool) or not isinstance(output_index, int):
        raise InvalidArgumentError(f"output index must be an integer, got {output_index!r}")
    if output_index < 0:
        raise InvalidArgumentError(f"output index must not be negative, got {output_index}")
    return query.TxoRef(hash=as_bytes(tx_hash, HASH_SIZE), index=output_index)


def as_txo_ref(value: Any) -> query.TxoRef:
    """Accept a wire TxoRef or a ``(tx_hash, output_index)`` pair."""
    if isinstance(value, query.TxoRef):
        return value
    if isinstance(value, tuple) and len(value) == 2:
        return txo_ref(value[0], value[1])
    raise InvalidArgumentError(f"not an output reference: {value!r}")


def txo_ref_text(ref: query.TxoRef) -> str:
    """Render an output reference as ``<hash-hex>#<index>``."""
    return f"{bytes(ref.hash).hex()}#{ref.index}"
