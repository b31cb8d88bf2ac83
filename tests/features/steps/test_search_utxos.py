"""UTxO search step definitions."""

from unittest.mock import Mock

import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from utxorpc_client.proto import query
from utxorpc_client.client import QueryClient


# Link to feature file
scenarios("../../../features/search_utxos.feature")

TX_HASH = b"\x07" * 32


@pytest.fixture
def utxo_pool():
    """Outputs the fake node holds."""
    return []


def _search(pool, request: query.SearchUtxosRequest) -> query.SearchUtxosResponse:
    wanted = request.predicate.match.cardano.address.exact_address
    items = [item for item in pool if not wanted or item.cardano.address == wanted]
    return query.SearchUtxosResponse(items=items)


@given(parsers.parse('the node holds an output at address "{address}" with index {index:d}'))
def given_output(utxo_pool, address, index):
    item = query.AnyUtxoData(native_bytes=b"\x82", txo_ref=query.TxoRef(hash=TX_HASH, index=index))
    item.cardano.address = bytes.fromhex(address)
    utxo_pool.append(item)


@when(parsers.parse('I search outputs by address "{address}"'))
def when_search(context, mock_channel, utxo_pool, address):
    client = QueryClient(mock_channel)
    client._stub = Mock()
    client._stub.SearchUtxos = Mock(side_effect=lambda request: _search(utxo_pool, request))
    context["utxos"] = client.search_utxos_by_address(bytes.fromhex(address))


@then(parsers.parse("{count:d} outputs are returned"))
def then_count(context, count):
    assert len(context["utxos"]) == count


@then(parsers.parse('every returned output is at address "{address}"'))
def then_all_at_address(context, address):
    assert all(u.address == bytes.fromhex(address) for u in context["utxos"])


@then(parsers.parse("the returned output indexes are {first:d} and {second:d}"))
def then_indexes(context, first, second):
    assert [u.txo_ref.index for u in context["utxos"]] == [first, second]
