"""UTxO RPC Python client library for Cardano nodes."""

from .client import (
    SyncClient,
    QueryClient,
    SubmitClient,
    WatchClient,
    Client,
    HistoryPage,
)
from .channel import ClientOptions, create_channel, parse_headers
from .errors import (
    ClientError,
    ConnectionError,
    InvalidEncodingError,
    InvalidArgumentError,
    UnsupportedChainError,
    UnexpectedChainError,
    WrongChainConfigError,
    WrongChainSummaryError,
    NoHistoryFoundError,
    BlockNotFoundError,
    UnknownActionError,
)
from .helpers import (
    ChainPoint,
    as_point,
    parse_slot,
    point_to_ref,
    ref_to_point,
    txo_ref,
    txo_ref_text,
)
from .envelopes import Block, Utxo, unwrap, try_unwrap
from .events import (
    TipApply,
    TipUndo,
    TipReset,
    TipEvent,
    TxApply,
    TxUndo,
    TxIdle,
    TxEvent,
    Stage,
    MempoolEvent,
    map_tip_event,
    map_tx_event,
    map_mempool_event,
)
from .predicates import (
    AddressMatch,
    AssetMatch,
    Pattern,
    Predicate,
    Match,
    Not,
    AllOf,
    AnyOf,
    match_all,
    by_address,
    by_payment_part,
    by_delegation_part,
    by_asset,
    by_address_with_asset,
    by_payment_part_with_asset,
    by_delegation_part_with_asset,
    compile_predicate,
    compile_utxo_predicate,
    compile_watch_predicate,
    compile_mempool_predicate,
)
from .log import configure_logging

__all__ = [
    # Clients
    "SyncClient",
    "QueryClient",
    "SubmitClient",
    "WatchClient",
    "Client",
    "HistoryPage",
    # Connection
    "ClientOptions",
    "create_channel",
    "parse_headers",
    # Errors
    "ClientError",
    "ConnectionError",
    "InvalidEncodingError",
    "InvalidArgumentError",
    "UnsupportedChainError",
    "UnexpectedChainError",
    "WrongChainConfigError",
    "WrongChainSummaryError",
    "NoHistoryFoundError",
    "BlockNotFoundError",
    "UnknownActionError",
    # Helpers
    "ChainPoint",
    "as_point",
    "parse_slot",
    "point_to_ref",
    "ref_to_point",
    "txo_ref",
    "txo_ref_text",
    # Envelopes
    "Block",
    "Utxo",
    "unwrap",
    "try_unwrap",
    # Events
    "TipApply",
    "TipUndo",
    "TipReset",
    "TipEvent",
    "TxApply",
    "TxUndo",
    "TxIdle",
    "TxEvent",
    "Stage",
    "MempoolEvent",
    "map_tip_event",
    "map_tx_event",
    "map_mempool_event",
    # Predicates
    "AddressMatch",
    "AssetMatch",
    "Pattern",
    "Predicate",
    "Match",
    "Not",
    "AllOf",
    "AnyOf",
    "match_all",
    "by_address",
    "by_payment_part",
    "by_delegation_part",
    "by_asset",
    "by_address_with_asset",
    "by_payment_part_with_asset",
    "by_delegation_part_with_asset",
    "compile_predicate",
    "compile_utxo_predicate",
    "compile_watch_predicate",
    "compile_mempool_predicate",
    # Logging
    "configure_logging",
]
