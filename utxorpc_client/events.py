"""Typed stream events and the mappers that build them from wire responses."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional, Union

import structlog

from .proto import cardano, submit, sync, watch
from .errors import UnexpectedChainError, UnknownActionError
from .envelopes import (
    BLOCK_CHAIN,
    CARDANO,
    MEMPOOL_TX_CHAIN,
    WATCH_TX_CHAIN,
    Block,
    chain_of,
    try_unwrap,
    unwrap_block,
)
from .helpers import ChainPoint, ref_to_point

logger = structlog.get_logger(__name__)

ACTION_APPLY = "apply"
ACTION_UNDO = "undo"
ACTION_RESET = "reset"
ACTION_IDLE = "idle"


# Tip events


@dataclass(frozen=True)
class TipApply:
    """The tip advanced onto ``block``."""

    block: Block
    action = ACTION_APPLY


@dataclass(frozen=True)
class TipUndo:
    """``block`` was rolled back."""

    block: Block
    action = ACTION_UNDO


@dataclass(frozen=True)
class TipReset:
    """Following restarts from ``point``."""

    point: ChainPoint
    action = ACTION_RESET


TipEvent = Union[TipApply, TipUndo, TipReset]


def map_tip_event(response: sync.FollowTipResponse) -> Optional[TipEvent]:
    """Map a FollowTipResponse.

    Returns None, after logging, for a response with no recognised action.
    Blocks for a chain other than Cardano raise UnsupportedChainError.
    """
    action = response.WhichOneof("action")
    if action == ACTION_APPLY:
        return TipApply(block=unwrap_block(response.apply))
    if action == ACTION_UNDO:
        return TipUndo(block=unwrap_block(response.undo))
    if action == ACTION_RESET:
        return TipReset(point=ref_to_point(response.reset))
    logger.warning("tip_action_dropped", action=action)
    return None


# Transaction events


@dataclass(frozen=True)
class TxApply:
    """A matching transaction was included in ``block``."""

    tx: cardano.Tx
    block: Optional[Block] = None
    action = ACTION_APPLY


@dataclass(frozen=True)
class TxUndo:
    """A matching transaction was rolled back along with ``block``."""

    tx: cardano.Tx
    block: Optional[Block] = None
    action = ACTION_UNDO


@dataclass(frozen=True)
class TxIdle:
    """The stream caught up with the tip at ``block_ref``."""

    block_ref: Any
    action = ACTION_IDLE

    @property
    def point(self) -> ChainPoint:
        return ref_to_point(self.block_ref)


TxEvent = Union[TxApply, TxUndo, TxIdle]


def _unwrap_watched_tx(any_tx: Any) -> tuple:
    chain = chain_of(any_tx, WATCH_TX_CHAIN)
    if chain != CARDANO:
        raise UnexpectedChainError("tx", chain)
    block = None
    if any_tx.HasField("block"):
        block_chain = chain_of(any_tx.block, BLOCK_CHAIN)
        if block_chain != CARDANO:
            raise UnexpectedChainError("block", block_chain)
        block = Block(block=any_tx.block.cardano, native_bytes=bytes(any_tx.block.native_bytes))
    return any_tx.cardano, block


def map_tx_event(response: watch.WatchTxResponse) -> TxEvent:
    """Map a WatchTxResponse. Every failure is raised."""
    action = response.WhichOneof("action")
    if action == ACTION_APPLY:
        tx, block = _unwrap_watched_tx(response.apply)
        return TxApply(tx=tx, block=block)
    if action == ACTION_UNDO:
        tx, block = _unwrap_watched_tx(response.undo)
        return TxUndo(tx=tx, block=block)
    if action == ACTION_IDLE:
        return TxIdle(block_ref=response.idle)
    raise UnknownActionError("watch tx", action)


# Mempool events


class Stage(IntEnum):
    """Lifecycle stage of a submitted transaction."""

    UNSPECIFIED = submit.STAGE_UNSPECIFIED
    ACKNOWLEDGED = submit.STAGE_ACKNOWLEDGED
    MEMPOOL = submit.STAGE_MEMPOOL
    NETWORK = submit.STAGE_NETWORK
    CONFIRMED = submit.STAGE_CONFIRMED

    @classmethod
    def _missing_(cls, value: object) -> "Stage":
        return cls.UNSPECIFIED


@dataclass(frozen=True)
class MempoolEvent:
    """A transaction seen in the mempool.

    ``tx`` is None when the node parsed it for a chain other than Cardano.
    """

    ref: bytes
    stage: Stage
    native_bytes: bytes
    tx: Optional[cardano.Tx] = None

    @property
    def ref_hex(self) -> str:
        return self.ref.hex()


def map_mempool_event(item: submit.TxInMempool) -> MempoolEvent:
    """Map a TxInMempool, tolerating foreign chains."""
    return MempoolEvent(
        ref=bytes(item.ref),
        stage=Stage(item.stage),
        native_bytes=bytes(item.native_bytes),
        tx=try_unwrap(item, MEMPOOL_TX_CHAIN),
    )
