"""Unwrapping of "any chain" envelopes.

Every envelope on the wire is a oneof keyed by chain name. This client only
understands Cardano; what happens with any other case (including an unset
oneof) is decided per call site: ``unwrap`` raises, ``try_unwrap`` returns
None so bulk listings can filter.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .proto import cardano, query
from .errors import UnsupportedChainError
from .helpers import ChainPoint, ref_to_point, txo_ref_text

CARDANO = "cardano"

# Oneof group names per envelope message.
BLOCK_CHAIN = "chain"
PARAMS_CHAIN = "params"
UTXO_CHAIN = "parsed_state"
GENESIS_CHAIN = "config"
ERA_SUMMARY_CHAIN = "summary"
MEMPOOL_TX_CHAIN = "parsed_state"
WATCH_TX_CHAIN = "chain"


def chain_of(envelope: Any, oneof: str) -> Optional[str]:
    """Return the populated chain case, or None if the oneof is unset."""
    return envelope.WhichOneof(oneof)


def try_unwrap(envelope: Any, oneof: str) -> Optional[Any]:
    """Return the Cardano payload, or None for any other chain."""
    if chain_of(envelope, oneof) != CARDANO:
        return None
    return getattr(envelope, CARDANO)


def unwrap(envelope: Any, oneof: str, kind: str) -> Any:
    """Return the Cardano payload or raise UnsupportedChainError."""
    chain = chain_of(envelope, oneof)
    if chain != CARDANO:
        raise UnsupportedChainError(kind, chain)
    return getattr(envelope, CARDANO)


@dataclass(frozen=True)
class Block:
    """A Cardano block together with its native (CBOR) bytes."""

    block: cardano.Block
    native_bytes: bytes = b""

    @property
    def slot(self) -> int:
        return self.block.header.slot

    @property
    def hash(self) -> str:
        return bytes(self.block.header.hash).hex()

    @property
    def height(self) -> int:
        return self.block.header.height

    @property
    def point(self) -> ChainPoint:
        return ref_to_point(self.block.header)


def unwrap_block(envelope: Any) -> Block:
    """Unwrap an AnyChainBlock, keeping its native bytes."""
    payload = unwrap(envelope, BLOCK_CHAIN, "block")
    return Block(block=payload, native_bytes=bytes(envelope.native_bytes))


def unwrap_params(envelope: query.AnyChainParams) -> cardano.PParams:
    return unwrap(envelope, PARAMS_CHAIN, "protocol parameters")


@dataclass(frozen=True)
class Utxo:
    """An unspent output.

    ``parsed`` is None when the node returned data for another chain.
    """

    txo_ref: query.TxoRef
    parsed: Optional[cardano.TxOutput] = None
    native_bytes: Optional[bytes] = None

    @property
    def address(self) -> Optional[bytes]:
        if self.parsed is None:
            return None
        return bytes(self.parsed.address)

    def __str__(self) -> str:
        return txo_ref_text(self.txo_ref)


def utxo_from_any(data: query.AnyUtxoData) -> Utxo:
    """Map an AnyUtxoData, leaving ``parsed`` unset for foreign chains."""
    return Utxo(
        txo_ref=data.txo_ref,
        parsed=try_unwrap(data, UTXO_CHAIN),
        native_bytes=bytes(data.native_bytes) if data.native_bytes else None,
    )


def unwrap_utxo(data: query.AnyUtxoData) -> Utxo:
    """Map an AnyUtxoData, raising UnsupportedChainError for foreign chains."""
    parsed = unwrap(data, UTXO_CHAIN, "utxo")
    return Utxo(
        txo_ref=data.txo_ref,
        parsed=parsed,
        native_bytes=bytes(data.native_bytes) if data.native_bytes else None,
    )
