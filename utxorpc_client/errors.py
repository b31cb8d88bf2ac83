"""Error types for the UTxO RPC client library.

Transport failures are not represented here: ``grpc.RpcError`` raised by a
stub propagates to the caller unchanged.
"""

from typing import Optional


class ClientError(Exception):
    """Base class for client errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class ConnectionError(ClientError):
    """Connection options cannot be turned into a channel."""

    def __init__(self, message: str):
        super().__init__(f"connection failed: {message}")


class InvalidEncodingError(ClientError):
    """Malformed hex or byte input (e.g. a block hash)."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(f"invalid encoding: {message}", cause)


class InvalidArgumentError(ClientError):
    """Invalid argument provided by caller."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(f"invalid argument: {message}", cause)


class UnsupportedChainError(ClientError):
    """An envelope carried a payload for a chain other than Cardano.

    ``chain`` is the oneof case that was populated, or ``None`` when the
    envelope was empty.
    """

    def __init__(self, kind: str, chain: Optional[str]):
        super().__init__(f"unsupported chain for {kind}: {chain or 'unset'}")
        self.kind = kind
        self.chain = chain


class UnexpectedChainError(ClientError):
    """A watched transaction, or its block, was tagged for another chain."""

    def __init__(self, side: str, chain: Optional[str]):
        super().__init__(f"unexpected chain on {side}: {chain or 'unset'}")
        self.side = side
        self.chain = chain


class WrongChainConfigError(UnsupportedChainError):
    """The genesis configuration returned by the node is not for Cardano."""

    def __init__(self, chain: Optional[str]):
        super().__init__("genesis", chain)
        self.message = f"genesis config is not for cardano: {chain or 'unset'}"


class WrongChainSummaryError(UnsupportedChainError):
    """The era summary returned by the node is not for Cardano."""

    def __init__(self, chain: Optional[str]):
        super().__init__("era summary", chain)
        self.message = f"era summary is not for cardano: {chain or 'unset'}"


class NoHistoryFoundError(ClientError):
    """A history dump returned no blocks."""

    def __init__(self, start: Optional[object] = None):
        if start is None:
            super().__init__("no history found")
        else:
            super().__init__(f"no history found from {start}")
        self.start = start


class UnknownActionError(ClientError):
    """A stream item carried no recognised action."""

    def __init__(self, stream: str, action: Optional[str]):
        super().__init__(f"unknown {stream} action: {action or 'unset'}")
        self.stream = stream
        self.action = action


class BlockNotFoundError(ClientError):
    """The node answered a block fetch with no block."""

    def __init__(self, point: object):
        super().__init__(f"block not found at {point}")
        self.point = point
