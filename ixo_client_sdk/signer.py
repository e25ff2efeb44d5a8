"""
Signer state of a client: either it holds a wallet or it doesn't.
"""
from dataclasses import dataclass
from typing import Optional, Union

from .exceptions import UninitializedSignerError
from .wallet import Wallet


@dataclass(frozen=True)
class InitializedSigner:
    wallet: Wallet


@dataclass(frozen=True)
class UninitializedSigner:
    pass


Signer = Union[InitializedSigner, UninitializedSigner]


def make_signer(wallet: Optional[Wallet]) -> Signer:
    return InitializedSigner(wallet) if wallet is not None else UninitializedSigner()


def require_wallet(signer: Signer) -> Wallet:
    """
    Get the wallet of an initialized signer.

    Raises:
        UninitializedSignerError: If the signer holds no wallet
    """
    if isinstance(signer, InitializedSigner):
        return signer.wallet
    raise UninitializedSignerError()
