"""
Wallet source variants.

A wallet can be built from exactly one of these. The variant is decided once,
by the caller or by classify_source(), and each one has its own constructor.
"""
from dataclasses import dataclass
from typing import Optional, Union

from ..models import WalletPlainState


@dataclass(frozen=True)
class PlainStateSource:
    """Previously exported plain state; restored without re-derivation"""
    state: WalletPlainState


@dataclass(frozen=True)
class SerializedSource:
    """
    Combined encrypted serialization.

    Attributes:
        serialization: JSON text starting with '{"'
        password: Password the serialization was encrypted with
    """
    serialization: str
    password: Optional[str] = None


@dataclass(frozen=True)
class MnemonicSource:
    """BIP-39 mnemonic phrase"""
    mnemonic: str


@dataclass(frozen=True)
class EmptySource:
    """No source: a fresh mnemonic is generated"""
    num_words: int = 12


WalletSource = Union[PlainStateSource, SerializedSource, MnemonicSource, EmptySource]
