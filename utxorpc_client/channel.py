"""Connection options and gRPC channel construction.

Supports ``https://`` (TLS), ``http://`` and bare ``host:port`` (plaintext)
endpoints, and Unix Domain Sockets. Configured headers are attached to every
call through client interceptors.
"""

import collections
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import urlsplit

import grpc
import structlog

from .errors import ConnectionError

logger = structlog.get_logger(__name__)

DEFAULT_URI = "localhost:50051"
URI_ENV_VAR = "UTXORPC_URI"
HEADERS_ENV_VAR = "UTXORPC_HEADERS"


@dataclass(frozen=True)
class ClientOptions:
    """Options every client is constructed from."""

    uri: str
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(
        cls,
        uri_var: str = URI_ENV_VAR,
        headers_var: str = HEADERS_ENV_VAR,
        default_uri: str = DEFAULT_URI,
    ) -> "ClientOptions":
        """Read options from the environment.

        Headers are ``key=value`` pairs separated by commas, e.g.
        ``dmtr-api-key=abc,x-trace=1``.
        """
        uri = os.environ.get(uri_var, default_uri)
        headers = parse_headers(os.environ.get(headers_var, ""))
        return cls(uri=uri, headers=headers)


def parse_headers(raw: str) -> dict[str, str]:
    """Parse ``k=v,k2=v2`` into a dict. Blank entries are ignored."""
    headers: dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        key, sep, value = entry.partition("=")
        if not sep or not key.strip():
            raise ConnectionError(f"malformed header entry {entry!r}")
        headers[key.strip()] = value.strip()
    return headers


class _CallDetails(
    collections.namedtuple(
        "_CallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


class HeaderInterceptor(
    grpc.UnaryUnaryClientInterceptor, grpc.UnaryStreamClientInterceptor
):
    """Adds fixed metadata to every unary and server-streaming call."""

    def __init__(self, headers: Mapping[str, str]):
        # gRPC metadata keys must be lower case.
        self._metadata = tuple((k.lower(), v) for k, v in headers.items())

    def _details(self, details: grpc.ClientCallDetails) -> _CallDetails:
        metadata = list(details.metadata or [])
        metadata.extend(self._metadata)
        return _CallDetails(
            details.method,
            details.timeout,
            metadata,
            details.credentials,
            getattr(details, "wait_for_ready", None),
            getattr(details, "compression", None),
        )

    def intercept_unary_unary(self, continuation, client_call_details, request):
        return continuation(self._details(client_call_details), request)

    def intercept_unary_stream(self, continuation, client_call_details, request):
        return continuation(self._details(client_call_details), request)


def _base_channel(uri: str) -> grpc.Channel:
    if not uri:
        raise ConnectionError("empty uri")
    if uri.startswith("./"):
        return grpc.insecure_channel(f"unix:{uri}")
    if uri.startswith("/"):
        return grpc.insecure_channel(f"unix://{uri}")
    if uri.startswith("unix:"):
        return grpc.insecure_channel(uri)
    if "://" not in uri:
        return grpc.insecure_channel(uri)

    parts = urlsplit(uri)
    if not parts.hostname:
        raise ConnectionError(f"no host in {uri!r}")
    if parts.scheme == "https":
        target = f"{parts.hostname}:{parts.port or 443}"
        return grpc.secure_channel(target, grpc.ssl_channel_credentials())
    if parts.scheme == "http":
        target = f"{parts.hostname}:{parts.port or 80}"
        return grpc.insecure_channel(target)
    raise ConnectionError(f"unsupported scheme {parts.scheme!r} in {uri!r}")


def create_channel(uri: str, headers: Optional[Mapping[str, str]] = None) -> grpc.Channel:
    """Create a channel for ``uri`` that sends ``headers`` on every call."""
    channel = _base_channel(uri)
    logger.debug("channel_created", uri=uri, headers=sorted(headers or {}))
    if headers:
        return grpc.intercept_channel(channel, HeaderInterceptor(headers))
    return channel
