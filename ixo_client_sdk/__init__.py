"""
ixo client SDK.

Wallet management, CellNode RPC and chain transactions for agents on the
ixo network.
"""
from .client import IxoClient, make_client
from .config import ClientConfig
from .encoding import canonical_json
from .exceptions import (
    IxoClientError, MalformedSourceError, CellNodeNotFoundError, DecryptionError,
    TransportError, RemoteRpcError, UninitializedSignerError, BroadcastTxError
)
from .models import ProjectHead, WalletPlainState, BroadcastTxResult
from .resolver import endpoint_from_record
from .wallet import Wallet, make_wallet
from .version import __version__

__all__ = [
    "IxoClient",
    "make_client",
    "ClientConfig",
    "Wallet",
    "make_wallet",
    "endpoint_from_record",
    "canonical_json",
    "ProjectHead",
    "WalletPlainState",
    "BroadcastTxResult",
    "IxoClientError",
    "MalformedSourceError",
    "CellNodeNotFoundError",
    "DecryptionError",
    "TransportError",
    "RemoteRpcError",
    "UninitializedSignerError",
    "BroadcastTxError",
    "__version__",
]
