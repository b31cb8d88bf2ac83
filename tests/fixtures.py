"""Shared test fixtures: wire message factories and fake streaming calls."""

import grpc

from utxorpc_client.proto import cardano, sync

POINT_HASH = "f215" + "00" * 28 + "3123"
NEXT_HASH = "ab" * 32


class FakeStreamCall:
    """Stands in for a grpc server-streaming call object.

    Iterates the given items (raising any item that is an exception) and
    records cancellation.
    """

    def __init__(self, items):
        self._items = list(items)
        self.cancelled = False
        self.consumed = 0

    def __iter__(self):
        for item in self._items:
            if isinstance(item, Exception):
                raise item
            self.consumed += 1
            yield item

    def cancel(self) -> bool:
        self.cancelled = True
        return True


class MockRpcError(grpc.RpcError):
    """Mock RpcError carrying a status code."""

    def __init__(self, code: grpc.StatusCode, details: str = ""):
        super().__init__()
        self._code = code
        self._details = details

    def code(self) -> grpc.StatusCode:
        return self._code

    def details(self) -> str:
        return self._details


def make_block(slot: int, hash_hex: str, height: int = 0) -> cardano.Block:
    block = cardano.Block()
    block.header.slot = slot
    block.header.hash = bytes.fromhex(hash_hex)
    block.header.height = height
    return block


def make_any_block(slot: int, hash_hex: str, height: int = 0, native: bytes = b"\x82") -> sync.AnyChainBlock:
    return sync.AnyChainBlock(native_bytes=native, cardano=make_block(slot, hash_hex, height))


class ForeignEnvelope:
    """An envelope whose populated chain case is not Cardano.

    The generated bindings only declare a ``cardano`` case, so another chain
    can only be simulated.
    """

    def __init__(self, chain: str = "bitcoin", native_bytes: bytes = b"\x00"):
        self._chain = chain
        self.native_bytes = native_bytes

    def WhichOneof(self, group: str):
        return self._chain

    def HasField(self, name: str) -> bool:
        return False


def with_empty_cardano(envelope):
    """Mark the (empty) ``cardano`` case of an envelope as populated."""
    envelope.cardano.SetInParent()
    return envelope
