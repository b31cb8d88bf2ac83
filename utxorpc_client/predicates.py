"""Composable match predicates and their compilation into wire predicates.

A predicate is a small tree::

    Match(Pattern)          leaf, one address criterion and/or one asset criterion
    Not(p, ...)             none of the children match
    AllOf(p, ...)           every child matches (AllOf() is true)
    AnyOf(p, ...)           at least one child matches (AnyOf() is false)

Trees are chain-agnostic. ``compile_predicate`` turns a tree into one of the
wire dialects, tagging each leaf with the Cardano namespace:

    UTXO_DIALECT     query.UtxoPredicate over cardano.TxOutputPattern
    WATCH_DIALECT    watch.TxPredicate over cardano.TxPattern
    MEMPOOL_DIALECT  submit.TxPredicate over cardano.TxPattern

``None`` compiles to the empty wire predicate, which the node treats as
"match everything". The wire format cannot tell an empty ``any_of`` from an
absent one, so ``AnyOf()`` is emitted as ``not [match-everything]``.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .proto import cardano, query, submit, watch
from .errors import InvalidArgumentError
from .helpers import as_bytes

BytesLike = Union[bytes, bytearray, str]


@dataclass(frozen=True)
class AddressMatch:
    """Address criterion. Set exactly one field for a meaningful match."""

    exact_address: bytes = b""
    payment_part: bytes = b""
    delegation_part: bytes = b""

    def to_proto(self) -> cardano.AddressPattern:
        msg = cardano.AddressPattern()
        if self.exact_address:
            msg.exact_address = bytes(self.exact_address)
        if self.payment_part:
            msg.payment_part = bytes(self.payment_part)
        if self.delegation_part:
            msg.delegation_part = bytes(self.delegation_part)
        return msg


@dataclass(frozen=True)
class AssetMatch:
    """Native asset criterion: policy id, asset name, or both."""

    policy_id: bytes = b""
    asset_name: bytes = b""

    def to_proto(self) -> cardano.AssetPattern:
        msg = cardano.AssetPattern()
        if self.policy_id:
            msg.policy_id = bytes(self.policy_id)
        if self.asset_name:
            msg.asset_name = bytes(self.asset_name)
        return msg


@dataclass(frozen=True)
class Pattern:
    """Leaf pattern. An empty pattern matches everything."""

    address: Optional[AddressMatch] = None
    asset: Optional[AssetMatch] = None

    @property
    def is_empty(self) -> bool:
        return self.address is None and self.asset is None


class Predicate:
    """Base class for predicate tree nodes.

    Supports ``a & b`` (AllOf), ``a | b`` (AnyOf) and ``~a`` (Not).
    """

    def __and__(self, other: "Predicate") -> "AllOf":
        return AllOf(self, other)

    def __or__(self, other: "Predicate") -> "AnyOf":
        return AnyOf(self, other)

    def __invert__(self) -> "Not":
        return Not(self)


class Match(Predicate):
    """Leaf node wrapping a single Pattern."""

    __slots__ = ("pattern",)

    def __init__(self, pattern: Optional[Pattern] = None):
        self.pattern = pattern if pattern is not None else Pattern()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Match) and self.pattern == other.pattern

    def __hash__(self) -> int:
        return hash(("match", self.pattern))

    def __repr__(self) -> str:
        return f"Match({self.pattern!r})"


class _Combinator(Predicate):
    __slots__ = ("children",)

    def __init__(self, *children: Predicate):
        for child in children:
            if not isinstance(child, Predicate):
                raise InvalidArgumentError(f"not a predicate: {child!r}")
        self.children = tuple(children)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.children == other.children

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.children))

    def __repr__(self) -> str:
        inner = ", ".join(repr(c) for c in self.children)
        return f"{type(self).__name__}({inner})"


class Not(_Combinator):
    """Matches when none of the children match."""


class AllOf(_Combinator):
    """Matches when every child matches."""


class AnyOf(_Combinator):
    """Matches when at least one child matches."""


# Convenience constructors


def match_all() -> Match:
    """Match every transaction or output."""
    return Match(Pattern())


def by_address(address: BytesLike) -> Match:
    return Match(Pattern(address=AddressMatch(exact_address=as_bytes(address))))


def by_payment_part(payment_part: BytesLike) -> Match:
    return Match(Pattern(address=AddressMatch(payment_part=as_bytes(payment_part))))


def by_delegation_part(delegation_part: BytesLike) -> Match:
    return Match(Pattern(address=AddressMatch(delegation_part=as_bytes(delegation_part))))


def asset_match(
    policy_id: Optional[BytesLike] = None, asset_name: Optional[BytesLike] = None
) -> AssetMatch:
    """Build an asset criterion from whichever of policy id / name is given."""
    return AssetMatch(
        policy_id=as_bytes(policy_id) if policy_id else b"",
        asset_name=as_bytes(asset_name) if asset_name else b"",
    )


def by_asset(
    policy_id: Optional[BytesLike] = None, asset_name: Optional[BytesLike] = None
) -> Match:
    return Match(Pattern(asset=asset_match(policy_id, asset_name)))


def by_address_with_asset(
    address: BytesLike,
    policy_id: Optional[BytesLike] = None,
    asset_name: Optional[BytesLike] = None,
) -> Match:
    return Match(
        Pattern(
            address=AddressMatch(exact_address=as_bytes(address)),
            asset=asset_match(policy_id, asset_name),
        )
    )


def by_payment_part_with_asset(
    payment_part: BytesLike,
    policy_id: Optional[BytesLike] = None,
    asset_name: Optional[BytesLike] = None,
) -> Match:
    return Match(
        Pattern(
            address=AddressMatch(payment_part=as_bytes(payment_part)),
            asset=asset_match(policy_id, asset_name),
        )
    )


def by_delegation_part_with_asset(
    delegation_part: BytesLike,
    policy_id: Optional[BytesLike] = None,
    asset_name: Optional[BytesLike] = None,
) -> Match:
    return Match(
        Pattern(
            address=AddressMatch(delegation_part=as_bytes(delegation_part)),
            asset=asset_match(policy_id, asset_name),
        )
    )


# Wire dialects


def _set(field: Any, value: Any) -> None:
    # Empty criteria must still be marked present.
    field.CopyFrom(value)
    field.SetInParent()


def _output_pattern(pattern: Pattern) -> query.AnyUtxoPattern:
    out = query.AnyUtxoPattern()
    leaf = out.cardano
    leaf.SetInParent()
    if pattern.address is not None:
        _set(leaf.address, pattern.address.to_proto())
    if pattern.asset is not None:
        _set(leaf.asset, pattern.asset.to_proto())
    return out


def _fill_tx_pattern(leaf: cardano.TxPattern, pattern: Pattern) -> None:
    leaf.SetInParent()
    if pattern.address is not None:
        _set(leaf.has_address, pattern.address.to_proto())
    if pattern.asset is not None:
        _set(leaf.moves_asset, pattern.asset.to_proto())


def _watch_pattern(pattern: Pattern) -> watch.AnyChainTxPattern:
    out = watch.AnyChainTxPattern()
    _fill_tx_pattern(out.cardano, pattern)
    return out


def _mempool_pattern(pattern: Pattern) -> submit.AnyChainTxPattern:
    out = submit.AnyChainTxPattern()
    _fill_tx_pattern(out.cardano, pattern)
    return out


@dataclass(frozen=True)
class Dialect:
    """A wire predicate message type plus the way its leaves are built."""

    name: str
    predicate_type: Any
    leaf: Callable[[Pattern], Any]


UTXO_DIALECT = Dialect("utxo", query.UtxoPredicate, _output_pattern)
WATCH_DIALECT = Dialect("watch", watch.TxPredicate, _watch_pattern)
MEMPOOL_DIALECT = Dialect("mempool", submit.TxPredicate, _mempool_pattern)


def compile_predicate(predicate: Any, dialect: Dialect) -> Any:
    """Compile a predicate tree into ``dialect``'s wire predicate.

    A wire predicate of the dialect's own type is returned as a copy, so
    compiling twice is a no-op.
    """
    wire = dialect.predicate_type
    if predicate is None:
        return wire()
    if isinstance(predicate, wire):
        out = wire()
        out.CopyFrom(predicate)
        return out
    if isinstance(predicate, Match):
        return wire(match=dialect.leaf(predicate.pattern))
    if isinstance(predicate, Not):
        out = wire()
        getattr(out, "not").extend(compile_predicate(c, dialect) for c in predicate.children)
        return out
    if isinstance(predicate, AllOf):
        out = wire()
        out.all_of.extend(compile_predicate(c, dialect) for c in predicate.children)
        return out
    if isinstance(predicate, AnyOf):
        if not predicate.children:
            return wire(**{"not": [wire()]})
        out = wire()
        out.any_of.extend(compile_predicate(c, dialect) for c in predicate.children)
        return out
    raise InvalidArgumentError(
        f"cannot compile {type(predicate).__name__} into {dialect.name} predicate"
    )


def compile_utxo_predicate(predicate: Any) -> query.UtxoPredicate:
    return compile_predicate(predicate, UTXO_DIALECT)


def compile_watch_predicate(predicate: Any) -> watch.TxPredicate:
    return compile_predicate(predicate, WATCH_DIALECT)


def compile_mempool_predicate(predicate: Any) -> submit.TxPredicate:
    return compile_predicate(predicate, MEMPOOL_DIALECT)
