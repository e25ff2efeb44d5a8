"""
Exceptions for the ixo client SDK.
"""
from typing import Any, Optional


class IxoClientError(Exception):
    """Base exception for all ixo client errors."""
    pass


class MalformedSourceError(IxoClientError, ValueError):
    """Raised when a mnemonic, serialized wallet, plain state or record can't be used."""
    pass


class CellNodeNotFoundError(MalformedSourceError):
    """Raised when an entity record has no node of type CellNode."""
    pass


class DecryptionError(IxoClientError):
    """Raised when an encrypted wallet can't be decrypted with the given password."""
    pass


class TransportError(IxoClientError):
    """
    Raised when an HTTP call fails.

    Carries the same shape a successful call resolves with, so callers can
    inspect what the server sent back. ``status`` is None for network-level
    failures where no response was received.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        headers: Optional[Any] = None,
        body: Any = None
    ):
        self.status = status
        self.headers = headers
        self.body = body
        super().__init__(message)


class RemoteRpcError(IxoClientError):
    """
    Raised when a CellNode answers with an ``error`` member.

    The remote error value is kept verbatim in ``error``; no interpretation
    is imposed on it.
    """

    def __init__(self, error: Any):
        self.error = error
        super().__init__(f"Remote RPC error: {error!r}")


class UninitializedSignerError(IxoClientError):
    """Raised when a signing operation is used on a client without a wallet."""

    MESSAGE = (
        "The client needs to be initialized with a wallet / signer in order "
        "for this method to be used"
    )

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.MESSAGE)


class BroadcastTxError(IxoClientError):
    """Raised when the chain rejects a broadcast transaction."""

    def __init__(
        self,
        code: int,
        raw_log: str = "",
        tx_hash: Optional[str] = None,
        height: Optional[str] = None
    ):
        self.code = code
        self.raw_log = raw_log
        self.tx_hash = tx_hash
        self.height = height
        super().__init__(
            f"Error when broadcasting tx {tx_hash} at height {height}. "
            f"Code: {code}; Raw log: {raw_log}"
        )
