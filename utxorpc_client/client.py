"""Client implementations for the UTxO RPC services.

Each client wraps one service stub. Streaming methods return generators that
open their RPC on first iteration and cancel it when the generator is closed,
exhausted or abandoned with an exception. ``grpc.RpcError`` from the stub is
propagated unchanged.
"""

from typing import Any, Iterable, Iterator, Mapping, NamedTuple, Optional, Union

import grpc
import structlog

from .proto import (
    QueryServiceStub,
    SubmitServiceStub,
    SyncServiceStub,
    WatchServiceStub,
    cardano,
    query,
    submit,
    sync,
    watch,
)
from .channel import ClientOptions, create_channel, URI_ENV_VAR, HEADERS_ENV_VAR, DEFAULT_URI
from .envelopes import (
    CARDANO,
    ERA_SUMMARY_CHAIN,
    GENESIS_CHAIN,
    Block,
    Utxo,
    chain_of,
    unwrap_block,
    unwrap_params,
    unwrap_utxo,
    utxo_from_any,
)
from .errors import (
    BlockNotFoundError,
    NoHistoryFoundError,
    WrongChainConfigError,
    WrongChainSummaryError,
)
from .events import (
    MempoolEvent,
    Stage,
    TipEvent,
    TxEvent,
    map_mempool_event,
    map_tip_event,
    map_tx_event,
)
from .helpers import (
    ChainPoint,
    PointLike,
    as_bytes,
    as_point,
    as_txo_ref,
    point_to_ref,
    points_to_refs,
    ref_to_point,
)
from .predicates import (
    Predicate,
    by_address,
    by_address_with_asset,
    by_asset,
    by_delegation_part,
    by_delegation_part_with_asset,
    by_payment_part,
    by_payment_part_with_asset,
    compile_mempool_predicate,
    compile_utxo_predicate,
    compile_watch_predicate,
)

logger = structlog.get_logger(__name__)

BytesLike = Union[bytes, bytearray, str]


def _add_refs(field: Any, points: Optional[Iterable[PointLike]]) -> None:
    """Append block references for ``points`` to a repeated BlockRef field."""
    for ref in points_to_refs(points):
        field.add(slot=ref.slot, hash=ref.hash)


def _stream(call_fn, request, name: str, mapper) -> Iterator[Any]:
    """Iterate a server-streaming RPC through ``mapper``.

    Items mapped to None are skipped. The call is cancelled on every exit
    path, including the consumer closing the generator early.
    """
    call = call_fn(request)
    logger.debug("stream_opened", stream=name)
    try:
        for item in call:
            mapped = mapper(item)
            if mapped is not None:
                yield mapped
    finally:
        cancel = getattr(call, "cancel", None)
        if cancel is not None:
            cancel()
        logger.debug("stream_closed", stream=name)


def _stage_of(response: submit.WaitForTxResponse) -> Stage:
    return Stage(response.stage)


def _mempool_event_of(response: submit.WatchMempoolResponse) -> Optional[MempoolEvent]:
    if not response.HasField("tx"):
        logger.debug("mempool_item_without_tx")
        return None
    return map_mempool_event(response.tx)


class _ServiceClient:
    """Channel ownership and construction shared by all clients."""

    _stub_type: Any = None

    def __init__(self, channel: grpc.Channel):
        self._stub = self._stub_type(channel)
        self._channel = channel

    @classmethod
    def connect(cls, uri: str, headers: Optional[Mapping[str, str]] = None):
        """Connect to a UTxO RPC node at the given URI."""
        return cls(create_channel(uri, headers))

    @classmethod
    def from_options(cls, options: ClientOptions):
        """Connect using a ClientOptions value."""
        return cls.connect(options.uri, options.headers)

    @classmethod
    def from_env(
        cls,
        uri_var: str = URI_ENV_VAR,
        headers_var: str = HEADERS_ENV_VAR,
        default_uri: str = DEFAULT_URI,
    ):
        """Connect using environment variables with fallback."""
        return cls.from_options(ClientOptions.from_env(uri_var, headers_var, default_uri))

    def close(self) -> None:
        """Close the underlying channel."""
        self._channel.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class HistoryPage(NamedTuple):
    """One page of a history dump."""

    blocks: list[Block]
    next_token: Optional[ChainPoint]


class SyncClient(_ServiceClient):
    """Client for the SyncService: tip following and block retrieval."""

    _stub_type = SyncServiceStub

    def follow_tip(self, intersect: Optional[Iterable[PointLike]] = None) -> Iterator[TipEvent]:
        """Follow the chain tip, starting from the first known intersect point.

        The returned iterator is unbounded; it ends only when the node closes
        the stream or the caller stops consuming it.
        """
        request = sync.FollowTipRequest()
        _add_refs(request.intersect, intersect)
        return _stream(self._stub.FollowTip, request, "follow_tip", map_tip_event)

    def read_tip(self) -> ChainPoint:
        """Return the node's current tip."""
        response = self._stub.ReadTip(sync.ReadTipRequest())
        return ref_to_point(response.tip)

    def fetch_block(self, point: PointLike) -> Block:
        """Fetch the block at ``point``."""
        request = sync.FetchBlockRequest(ref=[point_to_ref(point)])
        response = self._stub.FetchBlock(request)
        if not response.block:
            raise BlockNotFoundError(as_point(point))
        return unwrap_block(response.block[0])

    def dump_history(self, start: Optional[PointLike] = None, max_items: int = 1) -> HistoryPage:
        """Return one page of history starting at ``start`` (or genesis)."""
        request = sync.DumpHistoryRequest(max_items=max_items)
        if start is not None:
            request.start_token.CopyFrom(point_to_ref(start))
        response = self._stub.DumpHistory(request)
        next_token = None
        if response.HasField("next_token"):
            next_token = ref_to_point(response.next_token)
        return HistoryPage(
            blocks=[unwrap_block(b) for b in response.block],
            next_token=next_token,
        )

    def fetch_history(self, point: Optional[PointLike] = None, max_items: int = 1) -> list[Block]:
        """Return up to ``max_items`` blocks starting at ``point``.

        Raises NoHistoryFoundError when the node returns no blocks.
        """
        page = self.dump_history(point, max_items)
        if not page.blocks:
            raise NoHistoryFoundError(as_point(point) if point is not None else None)
        return page.blocks

    def iter_history(self, start: Optional[PointLike] = None, page_size: int = 100) -> Iterator[Block]:
        """Crawl history page by page, following the continuation token."""
        token = as_point(start) if start is not None else None
        while True:
            page = self.dump_history(token, page_size)
            yield from page.blocks
            if page.next_token is None:
                return
            token = page.next_token


class QueryClient(_ServiceClient):
    """Client for the QueryService: ledger state lookups."""

    _stub_type = QueryServiceStub

    def read_params(self) -> cardano.PParams:
        """Return the current protocol parameters."""
        response = self._stub.ReadParams(query.ReadParamsRequest())
        return unwrap_params(response.values)

    def read_utxos_by_output_ref(self, refs: Iterable[Any]) -> list[Utxo]:
        """Read outputs by ``(tx_hash, output_index)`` reference.

        A foreign-chain entry raises UnsupportedChainError.
        """
        request = query.ReadUtxosRequest(keys=[as_txo_ref(r) for r in refs])
        response = self._stub.ReadUtxos(request)
        return [unwrap_utxo(item) for item in response.items]

    def search_utxos(self, predicate: Optional[Predicate] = None) -> list[Utxo]:
        """Search outputs matching ``predicate``.

        Entries for other chains are dropped from the result.
        """
        request = query.SearchUtxosRequest(predicate=compile_utxo_predicate(predicate))
        response = self._stub.SearchUtxos(request)
        utxos = [utxo_from_any(item) for item in response.items]
        found = [u for u in utxos if u.parsed is not None]
        if len(found) != len(utxos):
            logger.debug("utxo_dropped_unsupported_chain", dropped=len(utxos) - len(found))
        return found

    def search_utxos_by_address(self, address: BytesLike) -> list[Utxo]:
        return self.search_utxos(by_address(address))

    def search_utxos_by_payment_part(self, payment_part: BytesLike) -> list[Utxo]:
        return self.search_utxos(by_payment_part(payment_part))

    def search_utxos_by_delegation_part(self, delegation_part: BytesLike) -> list[Utxo]:
        return self.search_utxos(by_delegation_part(delegation_part))

    def search_utxos_by_asset(
        self, policy_id: Optional[BytesLike] = None, asset_name: Optional[BytesLike] = None
    ) -> list[Utxo]:
        return self.search_utxos(by_asset(policy_id, asset_name))

    def search_utxos_by_address_with_asset(
        self,
        address: BytesLike,
        policy_id: Optional[BytesLike] = None,
        asset_name: Optional[BytesLike] = None,
    ) -> list[Utxo]:
        return self.search_utxos(by_address_with_asset(address, policy_id, asset_name))

    def search_utxos_by_payment_part_with_asset(
        self,
        payment_part: BytesLike,
        policy_id: Optional[BytesLike] = None,
        asset_name: Optional[BytesLike] = None,
    ) -> list[Utxo]:
        return self.search_utxos(by_payment_part_with_asset(payment_part, policy_id, asset_name))

    def search_utxos_by_delegation_part_with_asset(
        self,
        delegation_part: BytesLike,
        policy_id: Optional[BytesLike] = None,
        asset_name: Optional[BytesLike] = None,
    ) -> list[Utxo]:
        return self.search_utxos(
            by_delegation_part_with_asset(delegation_part, policy_id, asset_name)
        )

    def read_genesis(self) -> cardano.Genesis:
        """Return the chain's genesis configuration."""
        response = self._stub.ReadGenesis(query.ReadGenesisRequest())
        chain = chain_of(response, GENESIS_CHAIN)
        if chain != CARDANO:
            raise WrongChainConfigError(chain)
        return response.cardano

    def read_era_summary(self) -> cardano.EraSummaries:
        """Return the era history summary."""
        response = self._stub.ReadEraSummary(query.ReadEraSummaryRequest())
        chain = chain_of(response, ERA_SUMMARY_CHAIN)
        if chain != CARDANO:
            raise WrongChainSummaryError(chain)
        return response.cardano


class SubmitClient(_ServiceClient):
    """Client for the SubmitService: submission and mempool monitoring."""

    _stub_type = SubmitServiceStub

    def submit_tx(self, tx: Union[BytesLike, str]) -> bytes:
        """Submit a signed transaction (CBOR bytes or hex) and return its ref."""
        request = submit.SubmitTxRequest(tx=submit.AnyChainTx(raw=as_bytes(tx)))
        response = self._stub.SubmitTx(request)
        return bytes(response.ref)

    def eval_tx(self, tx: Union[BytesLike, str]) -> Any:
        """Evaluate a transaction without submitting it; returns the node's report."""
        request = submit.EvalTxRequest(tx=submit.AnyChainTx(raw=as_bytes(tx)))
        response = self._stub.EvalTx(request)
        return response.report

    def wait_for_tx(self, ref: Union[BytesLike, str]) -> Iterator[Stage]:
        """Stream stage changes for a submitted transaction."""
        request = submit.WaitForTxRequest(ref=[as_bytes(ref)])
        return _stream(self._stub.WaitForTx, request, "wait_for_tx", _stage_of)

    def read_mempool(self) -> list[MempoolEvent]:
        """Return a snapshot of the node's mempool."""
        response = self._stub.ReadMempool(submit.ReadMempoolRequest())
        return [map_mempool_event(item) for item in response.items]

    def watch_mempool(self, predicate: Optional[Predicate] = None) -> Iterator[MempoolEvent]:
        """Stream mempool transactions matching ``predicate`` (default: all)."""
        request = submit.WatchMempoolRequest()
        if predicate is not None:
            request.predicate.CopyFrom(compile_mempool_predicate(predicate))
        return _stream(self._stub.WatchMempool, request, "watch_mempool", _mempool_event_of)

    def watch_mempool_for_address(self, address: BytesLike) -> Iterator[MempoolEvent]:
        return self.watch_mempool(by_address(address))

    def watch_mempool_for_payment_part(self, payment_part: BytesLike) -> Iterator[MempoolEvent]:
        return self.watch_mempool(by_payment_part(payment_part))

    def watch_mempool_for_delegation_part(self, delegation_part: BytesLike) -> Iterator[MempoolEvent]:
        return self.watch_mempool(by_delegation_part(delegation_part))

    def watch_mempool_for_asset(
        self, policy_id: Optional[BytesLike] = None, asset_name: Optional[BytesLike] = None
    ) -> Iterator[MempoolEvent]:
        return self.watch_mempool(by_asset(policy_id, asset_name))


class WatchClient(_ServiceClient):
    """Client for the WatchService: transaction-level subscriptions."""

    _stub_type = WatchServiceStub

    def watch_tx(
        self,
        predicate: Optional[Predicate] = None,
        intersect: Optional[Iterable[PointLike]] = None,
    ) -> Iterator[TxEvent]:
        """Stream apply/undo/idle events for transactions matching ``predicate``.

        A malformed or foreign-chain item ends the stream with an error.
        """
        request = watch.WatchTxRequest()
        if predicate is not None:
            request.predicate.CopyFrom(compile_watch_predicate(predicate))
        _add_refs(request.intersect, intersect)
        return _stream(self._stub.WatchTx, request, "watch_tx", map_tx_event)

    def watch_tx_for_address(
        self, address: BytesLike, intersect: Optional[Iterable[PointLike]] = None
    ) -> Iterator[TxEvent]:
        return self.watch_tx(by_address(address), intersect)

    def watch_tx_for_payment_part(
        self, payment_part: BytesLike, intersect: Optional[Iterable[PointLike]] = None
    ) -> Iterator[TxEvent]:
        return self.watch_tx(by_payment_part(payment_part), intersect)

    def watch_tx_for_delegation_part(
        self, delegation_part: BytesLike, intersect: Optional[Iterable[PointLike]] = None
    ) -> Iterator[TxEvent]:
        return self.watch_tx(by_delegation_part(delegation_part), intersect)

    def watch_tx_for_asset(
        self,
        policy_id: Optional[BytesLike] = None,
        asset_name: Optional[BytesLike] = None,
        intersect: Optional[Iterable[PointLike]] = None,
    ) -> Iterator[TxEvent]:
        return self.watch_tx(by_asset(policy_id, asset_name), intersect)


class Client:
    """Combined client for sync, query, submit and watch over one channel."""

    def __init__(self, channel: grpc.Channel):
        self.sync = SyncClient(channel)
        self.query = QueryClient(channel)
        self.submit = SubmitClient(channel)
        self.watch = WatchClient(channel)
        self._channel = channel

    @classmethod
    def connect(cls, uri: str, headers: Optional[Mapping[str, str]] = None) -> "Client":
        """Connect to a node providing all services."""
        return cls(create_channel(uri, headers))

    @classmethod
    def from_options(cls, options: ClientOptions) -> "Client":
        return cls.connect(options.uri, options.headers)

    @classmethod
    def from_env(
        cls,
        uri_var: str = URI_ENV_VAR,
        headers_var: str = HEADERS_ENV_VAR,
        default_uri: str = DEFAULT_URI,
    ) -> "Client":
        """Connect using environment variables with fallback."""
        return cls.from_options(ClientOptions.from_env(uri_var, headers_var, default_uri))

    def close(self) -> None:
        """Close the underlying channel."""
        self._channel.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
