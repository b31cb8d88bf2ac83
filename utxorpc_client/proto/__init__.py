"""UTxO RPC wire contract (v1alpha).

Re-exports the generated protobuf/gRPC bindings shipped by the
``utxorpc-spec`` distribution.
"""

from utxorpc_spec.utxorpc.v1alpha.cardano import cardano_pb2 as cardano
from utxorpc_spec.utxorpc.v1alpha.query import query_pb2 as query
from utxorpc_spec.utxorpc.v1alpha.submit import submit_pb2 as submit
from utxorpc_spec.utxorpc.v1alpha.sync import sync_pb2 as sync
from utxorpc_spec.utxorpc.v1alpha.watch import watch_pb2 as watch
from utxorpc_spec.utxorpc.v1alpha.query.query_pb2_grpc import QueryServiceStub
from utxorpc_spec.utxorpc.v1alpha.submit.submit_pb2_grpc import SubmitServiceStub
from utxorpc_spec.utxorpc.v1alpha.sync.sync_pb2_grpc import SyncServiceStub
from utxorpc_spec.utxorpc.v1alpha.watch.watch_pb2_grpc import WatchServiceStub

__all__ = [
    # Messages
    "cardano",
    "query",
    "submit",
    "sync",
    "watch",
    # Stubs
    "QueryServiceStub",
    "SubmitServiceStub",
    "SyncServiceStub",
    "WatchServiceStub",
]
