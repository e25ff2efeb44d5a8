"""
Chain-account (secp256k1) HD wallet.
"""
import base64
import hashlib
import logging
from typing import Any, Dict, Optional

from eth_keys import keys

from ..encoding import canonical_json_bytes, from_hex, secp256k1_address, to_hex
from ..exceptions import MalformedSourceError
from ..models import SecpPlainState, StdSignature
from .crypto import (
    decrypt_wallet_data, derive_secp256k1_key, encrypt_wallet_data,
    generate_mnemonic, make_cosmoshub_path, seed_from_mnemonic
)

logger = logging.getLogger(__name__)


class Secp256k1HdWallet:
    """
    Keypair of the chain account, derived from a BIP-39 mnemonic.

    Instances are immutable once built; the same object can be shared
    between threads.
    """

    SERIALIZATION_TYPE = "secp256k1wallet-v1"
    PUBKEY_TYPE = "tendermint/PubKeySecp256k1"

    def __init__(
        self,
        secret: str,
        hd_path: str,
        privkey: bytes,
        pubkey: bytes,
        prefix: str,
        address: Optional[str] = None
    ):
        self._secret = secret
        self._hd_path = hd_path
        self._privkey = privkey
        self._pubkey = pubkey
        self._prefix = prefix
        self._address = address or secp256k1_address(pubkey, prefix)

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        hd_path: str = make_cosmoshub_path(0),
        prefix: str = "ixo"
    ) -> "Secp256k1HdWallet":
        """
        Derive the wallet from a mnemonic.

        Raises:
            MalformedSourceError: If the mnemonic or path is invalid
        """
        seed = seed_from_mnemonic(mnemonic)
        privkey = derive_secp256k1_key(seed, hd_path)
        pubkey = keys.PrivateKey(privkey).public_key.to_compressed_bytes()
        return cls(mnemonic, hd_path, privkey, pubkey, prefix)

    @classmethod
    def generate(
        cls,
        num_words: int = 12,
        hd_path: str = make_cosmoshub_path(0),
        prefix: str = "ixo"
    ) -> "Secp256k1HdWallet":
        """Create a wallet from a freshly generated mnemonic."""
        return cls.from_mnemonic(generate_mnemonic(num_words), hd_path, prefix)

    @classmethod
    def from_plain_state(cls, state: SecpPlainState) -> "Secp256k1HdWallet":
        """
        Restore the wallet verbatim from its plain state; nothing is re-derived.

        Raises:
            MalformedSourceError: If a key field is not valid hex
        """
        try:
            privkey = from_hex(state.privkey)
            pubkey = from_hex(state.pubkey)
        except ValueError as e:
            raise MalformedSourceError(f"Invalid secp key material: {e}") from e
        return cls(state.secret, state.hd_path, privkey, pubkey, state.prefix, state.address)

    @classmethod
    def deserialize(cls, serialization: str, password: str) -> "Secp256k1HdWallet":
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
            raise MalformedSourceError(f"Invalid secp wallet data: {e}") from e

    def serialize(self, password: str, kdf_params: Optional[Dict[str, int]] = None) -> str:
        """Encrypt the mnemonic and account settings with a password."""
        return encrypt_wallet_data(
            {"mnemonic": self._secret, "accounts": [{"hdPath": self._hd_path, "prefix": self._prefix}]},
            password,
            self.SERIALIZATION_TYPE,
            kdf_params,
        )

    def to_plain_state(self) -> SecpPlainState:
        return SecpPlainState(
            secret=self._secret,
            hd_path=self._hd_path,
            prefix=self._prefix,
            privkey=to_hex(self._privkey),
            pubkey=to_hex(self._pubkey),
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
    def privkey(self) -> bytes:
        return self._privkey

    @property
    def pubkey(self) -> bytes:
        return self._pubkey

    @property
    def address(self) -> str:
        return self._address

    def sign_amino(self, sign_doc: Dict[str, Any]) -> StdSignature:
        """
        Sign an amino StdSignDoc.

        The canonical sign doc bytes are hashed with sha256 and signed with a
        low-s secp256k1 signature, encoded as r || s.
        """
        digest = hashlib.sha256(canonical_json_bytes(sign_doc)).digest()
        signature = keys.PrivateKey(self._privkey).sign_msg_hash(digest)
        raw = signature.r.to_bytes(32, "big") + signature.s.to_bytes(32, "big")
        return StdSignature(
            pub_key={"type": self.PUBKEY_TYPE, "value": base64.b64encode(self._pubkey).decode("ascii")},
            signature=base64.b64encode(raw).decode("ascii"),
        )

    def __repr__(self) -> str:
        return f"Secp256k1HdWallet(address={self._address!r})"
