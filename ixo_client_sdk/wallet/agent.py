"""
Agent Identity (ed25519) wallet.

The agent keypair is what signs CellNode requests. Its DID is the base58
encoding of the first 16 bytes of the verify key, and the signing seed is
sha256 of the wallet mnemonic, so a mnemonic always maps to the same DID.
"""
import base64
import hashlib
import logging
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from ..encoding import (
    b58decode, b58encode, canonical_json_bytes, ed25519_address, from_hex, to_hex
)
from ..exceptions import MalformedSourceError
from ..models import AgentPlainState, StdSignature
from .crypto import decrypt_wallet_data, encrypt_wallet_data, make_cosmoshub_path, seed_from_mnemonic

logger = logging.getLogger(__name__)


class AgentWallet:
    """Ed25519 keypair bound to the agent's DID."""

    SERIALIZATION_TYPE = "ixo-agent-wallet-v1"
    PUBKEY_TYPE = "tendermint/PubKeyEd25519"

    def __init__(
        self,
        secret: str,
        hd_path: str,
        privkey: str,
        pubkey: str,
        signkey: str,
        verifykey: str,
        did: str,
        prefix: str,
        address: Optional[str] = None
    ):
        self._secret = secret
        self._hd_path = hd_path
        self._privkey = privkey
        self._pubkey = pubkey
        self._signkey = signkey
        self._verifykey = verifykey
        self._did = did
        self._prefix = prefix
        self._address = address or ed25519_address(from_hex(pubkey), prefix)

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        hd_path: str = make_cosmoshub_path(0),
        prefix: str = "ixo"
    ) -> "AgentWallet":
        """
        Derive the agent keypair from a mnemonic.

        Raises:
            MalformedSourceError: If the mnemonic is invalid
        """
        # Validates the words; the seed itself is not used for the agent key
        seed_from_mnemonic(mnemonic)

        seed = hashlib.sha256(mnemonic.encode("utf-8")).digest()
        private_key = Ed25519PrivateKey.from_private_bytes(seed)
        public_key = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

        did = b58encode(public_key[:16])
        logger.debug("Derived agent DID %s…", did[:6])

        return cls(
            secret=mnemonic,
            hd_path=hd_path,
            privkey=to_hex(seed),
            pubkey=to_hex(public_key),
            signkey=b58encode(seed + public_key),
            verifykey=b58encode(public_key),
            did=did,
            prefix=prefix,
        )

    @classmethod
    def from_plain_state(cls, state: AgentPlainState) -> "AgentWallet":
        """Restore the agent verbatim from its plain state."""
        return cls(
            secret=state.secret,
            hd_path=state.hd_path,
            privkey=state.privkey,
            pubkey=state.pubkey,
            signkey=state.signkey,
            verifykey=state.verifykey,
            did=state.did,
            prefix=state.prefix,
            address=state.address,
        )

    @classmethod
    def deserialize(cls, serialization: str, password: str) -> "AgentWallet":
        """
        Decrypt a serialization produced by serialize().

        Raises:
            MalformedSourceError: If the serialization can't be parsed
            DecryptionError: If the password is wrong
        """
        data = decrypt_wallet_data(serialization, password, cls.SERIALIZATION_TYPE)
        try:
            account = data["accounts"][0]
            return cls.from_mnemonic(data["mnemonic"], account["hdPath"], account["prefix"])
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedSourceError(f"Invalid agent wallet data: {e}") from e

    def serialize(self, password: str, kdf_params: Optional[Dict[str, int]] = None) -> str:
        """Encrypt the mnemonic and account settings with a password."""
        return encrypt_wallet_data(
            {"mnemonic": self._secret, "accounts": [{"hdPath": self._hd_path, "prefix": self._prefix}]},
            password,
            self.SERIALIZATION_TYPE,
            kdf_params,
        )

    def to_plain_state(self) -> AgentPlainState:
        return AgentPlainState(
            secret=self._secret,
            hd_path=self._hd_path,
            prefix=self._prefix,
            privkey=self._privkey,
            pubkey=self._pubkey,
            signkey=self._signkey,
            verifykey=self._verifykey,
            did=self._did,
            address=self._address,
        )

    @property
    def secret(self) -> str:
        return self._secret

    @property
    def hd_path(self) -> str:
        return self._hd_path

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def privkey(self) -> str:
        return self._privkey

    @property
    def pubkey(self) -> str:
        return self._pubkey

    @property
    def signkey(self) -> str:
        return self._signkey

    @property
    def verifykey(self) -> str:
        return self._verifykey

    @property
    def did(self) -> str:
        return self._did

    @property
    def address(self) -> str:
        return self._address

    def _private_key(self) -> Ed25519PrivateKey:
        try:
            seed = b58decode(self._signkey)[:32]
        except ValueError as e:
            raise MalformedSourceError(f"Invalid agent sign key: {e}") from e
        return Ed25519PrivateKey.from_private_bytes(seed)

    def sign_bytes(self, message: bytes) -> bytes:
        """Raw 64-byte ed25519 signature of a message."""
        return self._private_key().sign(message)

    def sign(self, data: Any) -> str:
        """
        Sign a JSON-compatible value.

        Args:
            data: The value to sign; its canonical JSON bytes are what gets signed

        Returns:
            Base64 encoded ed25519 signature
        """
        return base64.b64encode(self.sign_bytes(canonical_json_bytes(data))).decode("ascii")

    def sign_amino(self, sign_doc: Dict[str, Any]) -> StdSignature:
        """Sign an amino StdSignDoc with the agent key."""
        return StdSignature(
            pub_key={
                "type": self.PUBKEY_TYPE,
                "value": base64.b64encode(from_hex(self._pubkey)).decode("ascii"),
            },
            signature=base64.b64encode(self.sign_bytes(canonical_json_bytes(sign_doc))).decode("ascii"),
        )

    def __repr__(self) -> str:
        return f"AgentWallet(did={self._did!r})"
