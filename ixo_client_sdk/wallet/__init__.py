"""
Wallet module for the ixo client SDK.

A wallet holds two independent keypairs: the secp256k1 chain account that
pays for and signs chain transactions, and the ed25519 Agent Identity that
owns a DID and signs CellNode requests.
"""
import json
import time
import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..config import ADDRESS_PREFIX
from ..exceptions import MalformedSourceError
from ..models import WalletPlainState
from .agent import AgentWallet
from .crypto import make_cosmoshub_path
from .secp import Secp256k1HdWallet
from .types import EmptySource, MnemonicSource, PlainStateSource, SerializedSource, WalletSource

__all__ = [
    'Wallet',
    'make_wallet',
    'classify_source',
    'wallet_from_plain_state',
    'wallet_from_serialized',
    'wallet_from_mnemonic',
    'generate_wallet',
    'AgentWallet',
    'Secp256k1HdWallet',
    'PlainStateSource',
    'SerializedSource',
    'MnemonicSource',
    'EmptySource',
    'WalletSource',
]

logger = logging.getLogger(__name__)

# Account index used for both keypairs when deriving from a mnemonic
ACCOUNT_INDEX = 0


class Wallet:
    """
    Pair of chain-account and agent keypairs.

    Attributes:
        secp: Chain-account keypair
        agent: Agent Identity keypair
    """

    def __init__(self, secp: Secp256k1HdWallet, agent: AgentWallet):
        self._secp = secp
        self._agent = agent

    @property
    def secp(self) -> Secp256k1HdWallet:
        return self._secp

    @property
    def agent(self) -> AgentWallet:
        return self._agent

    def to_plain_state(self) -> Dict[str, Any]:
        """
        Export both keypairs as a JSON-safe dictionary.

        The result contains private key material and can be fed back to
        make_wallet() to restore an identical wallet.
        """
        state = WalletPlainState(secp=self._secp.to_plain_state(), agent=self._agent.to_plain_state())
        return state.model_dump(by_alias=True)

    # Mirrors the JSON hook name of the JavaScript wallets
    to_json = to_plain_state

    @classmethod
    def from_plain_state(cls, state: Union[WalletPlainState, Mapping]) -> "Wallet":
        return wallet_from_plain_state(state)

    def serialize(self, password: str, kdf_params: Optional[Dict[str, int]] = None) -> str:
        """
        Encrypt both keypairs into the combined serialization format.

        Args:
            password: Password used to derive the encryption key
            kdf_params: Optional argon2id parameters (outputLength, opsLimit, memLimitKib)

        Returns:
            JSON text accepted by make_wallet(serialization, password)
        """
        return json.dumps({
            "secp": self._secp.serialize(password, kdf_params),
            "agent": self._agent.serialize(password, kdf_params),
        })

    def __repr__(self) -> str:
        return f"Wallet(address={self._secp.address!r}, did={self._agent.did!r})"


def classify_source(source: Any = None, password: Optional[str] = None) -> WalletSource:
    """
    Decide which kind of wallet source a value is.

    Args:
        source: Plain-state mapping, serialization string, mnemonic or None
        password: Password for serialized sources

    Returns:
        One of PlainStateSource, SerializedSource, MnemonicSource, EmptySource

    Raises:
        MalformedSourceError: If the value can't be any kind of source
    """
    if isinstance(source, (PlainStateSource, SerializedSource, MnemonicSource, EmptySource)):
        return source

    if isinstance(source, WalletPlainState):
        return PlainStateSource(source)

    if isinstance(source, Mapping):
        try:
            return PlainStateSource(WalletPlainState.model_validate(dict(source)))
        except ValidationError as e:
            raise MalformedSourceError(f"Invalid wallet plain state: {e}") from e

    if source is None or source == "":
        return EmptySource()

    if isinstance(source, str):
        if source.startswith('{"'):
            return SerializedSource(source, password)
        return MnemonicSource(source)

    raise MalformedSourceError(f"Unsupported wallet source type: {type(source).__name__}")


def wallet_from_plain_state(state: Union[WalletPlainState, Mapping]) -> Wallet:
    """
    Rebuild a wallet from its plain state without re-deriving any key.

    Raises:
        MalformedSourceError: If the state doesn't have the expected shape
    """
    if not isinstance(state, WalletPlainState):
        try:
            state = WalletPlainState.model_validate(dict(state))
        except (ValidationError, TypeError, ValueError) as e:
            raise MalformedSourceError(f"Invalid wallet plain state: {e}") from e

    return Wallet(
        Secp256k1HdWallet.from_plain_state(state.secp),
        AgentWallet.from_plain_state(state.agent),
    )


def wallet_from_serialized(serialization: str, password: Optional[str]) -> Wallet:
    """
    Decrypt a combined serialization.

    Raises:
        MalformedSourceError: If the text can't be parsed
        DecryptionError: If the password is wrong or the data is corrupt
    """
    start_time = time.time()

    try:
        parsed = json.loads(serialization)
        secp_data, agent_data = parsed["secp"], parsed["agent"]
    except (ValueError, KeyError, TypeError) as e:
        raise MalformedSourceError(f"Failed to parse serialized wallet: {e}") from e

    secp = Secp256k1HdWallet.deserialize(secp_data, password)
    agent = AgentWallet.deserialize(agent_data, password)

    elapsed_ms = (time.time() - start_time) * 1000
    logger.debug("Deserialized wallet for DID %s… in %.2f ms", agent.did[:6], elapsed_ms)

    return Wallet(secp, agent)


def wallet_from_mnemonic(mnemonic: str) -> Wallet:
    """
    Derive both keypairs from a mnemonic.

    Raises:
        MalformedSourceError: If the mnemonic is invalid
    """
    hd_path = make_cosmoshub_path(ACCOUNT_INDEX)
    secp = Secp256k1HdWallet.from_mnemonic(mnemonic, hd_path, ADDRESS_PREFIX)
    agent = AgentWallet.from_mnemonic(secp.secret, hd_path, ADDRESS_PREFIX)
    return Wallet(secp, agent)


def generate_wallet(num_words: int = 12) -> Wallet:
    """Create a wallet from a freshly generated mnemonic."""
    secp = Secp256k1HdWallet.generate(num_words, make_cosmoshub_path(ACCOUNT_INDEX), ADDRESS_PREFIX)
    agent = AgentWallet.from_mnemonic(secp.secret, secp.hd_path, ADDRESS_PREFIX)
    logger.info("Generated new wallet with DID %s…", agent.did[:6])
    return Wallet(secp, agent)


def make_wallet(source: Any = None, password: Optional[str] = None) -> Wallet:
    """
    Build a wallet from any supported source.

    Args:
        source: A plain-state mapping, a combined serialization string, a
            mnemonic, an explicit WalletSource, or None for a new wallet
        password: Password for serialized sources

    Returns:
        Wallet instance

    Raises:
        MalformedSourceError: If the source is invalid
        DecryptionError: If a serialized source can't be decrypted
    """
    src = classify_source(source, password)

    if isinstance(src, PlainStateSource):
        return wallet_from_plain_state(src.state)
    if isinstance(src, SerializedSource):
        return wallet_from_serialized(src.serialization, src.password)
    if isinstance(src, MnemonicSource):
        return wallet_from_mnemonic(src.mnemonic)
    return generate_wallet(src.num_words)
