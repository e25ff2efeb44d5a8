"""
Cryptographic operations for the wallet module.

Covers mnemonic handling, HD key derivation and the password-based
encryption used by wallet serializations.
"""
import re
import base64
import json
import logging
from typing import Dict, Any, Optional

import nacl.bindings
import nacl.pwhash
import nacl.utils
from nacl.exceptions import CryptoError
from eth_account.hdaccount import generate_mnemonic as _generate_mnemonic
from eth_account.hdaccount import key_from_seed, seed_from_mnemonic as _seed_from_mnemonic
from eth_account.hdaccount.mnemonic import Mnemonic
from eth_account.types import Language
from eth_utils.exceptions import ValidationError

from ..exceptions import DecryptionError, MalformedSourceError

logger = logging.getLogger(__name__)

# Fixed salt shared with the JavaScript wallets so serializations stay portable
SERIALIZATION_SALT = b"The CosmJS salt."

DEFAULT_KDF_PARAMS: Dict[str, int] = {
    "outputLength": 32,
    "opsLimit": 24,
    "memLimitKib": 12 * 1024,
}

# Lowercase words separated by single spaces, the only form the JavaScript wallets accept
MNEMONIC_PATTERN = re.compile(r"^[a-z]+( [a-z]+)*$")

KDF_ALGORITHM = "argon2id"
ENCRYPTION_ALGORITHM = "xchacha20poly1305-ietf"


def make_cosmoshub_path(index: int) -> str:
    """BIP-44 path of the Cosmos Hub coin type for the given account index."""
    return f"m/44'/118'/0'/0/{index}"


def generate_mnemonic(num_words: int = 12) -> str:
    """Generate a fresh English BIP-39 mnemonic."""
    return _generate_mnemonic(num_words=num_words, lang=Language.ENGLISH)


def seed_from_mnemonic(mnemonic: str) -> bytes:
    """
    Turn a BIP-39 mnemonic into its 64-byte seed.

    Abbreviated or differently cased words are rejected rather than
    expanded, so the stored secret is exactly the phrase the keys derive from.

    Raises:
        MalformedSourceError: If the words are not a valid BIP-39 mnemonic
    """
    if not MNEMONIC_PATTERN.match(mnemonic) or Mnemonic(Language.ENGLISH).expand(mnemonic) != mnemonic:
        raise MalformedSourceError(
            "Invalid mnemonic: expected complete lowercase English words separated by single spaces"
        )
    try:
        return _seed_from_mnemonic(mnemonic, passphrase="")
    except (ValidationError, ValueError) as e:
        raise MalformedSourceError(f"Invalid mnemonic: {e}") from e


def derive_secp256k1_key(seed: bytes, hd_path: str) -> bytes:
    """
    Derive a secp256k1 private key from a seed along a BIP-32 path.

    Raises:
        MalformedSourceError: If the path can't be parsed
    """
    try:
        return key_from_seed(seed, hd_path)
    except (ValidationError, ValueError) as e:
        raise MalformedSourceError(f"Invalid HD path {hd_path!r}: {e}") from e


def derive_encryption_key(password: str, kdf_params: Dict[str, int]) -> bytes:
    """
    Stretch a password into a symmetric key with argon2id.

    Args:
        password: Serialization password
        kdf_params: Dictionary with outputLength, opsLimit and memLimitKib

    Returns:
        Raw key bytes
    """
    return nacl.pwhash.argon2id.kdf(
        kdf_params["outputLength"],
        password.encode("utf-8"),
        SERIALIZATION_SALT,
        opslimit=kdf_params["opsLimit"],
        memlimit=kdf_params["memLimitKib"] * 1024,
    )


def encrypt_wallet_data(
    data: Dict[str, Any],
    password: str,
    wallet_type: str,
    kdf_params: Optional[Dict[str, int]] = None
) -> str:
    """
    Encrypt wallet data into a self-describing serialization string.

    Args:
        data: Dictionary with sensitive wallet data
        password: Password to derive the encryption key from
        wallet_type: Type tag written into the serialization
        kdf_params: Optional KDF parameters (defaults to DEFAULT_KDF_PARAMS)

    Returns:
        JSON string holding the KDF settings and the encrypted data
    """
    kdf_params = dict(kdf_params or DEFAULT_KDF_PARAMS)
    key = derive_encryption_key(password, kdf_params)

    nonce = nacl.utils.random(nacl.bindings.crypto_aead_xchacha20poly1305_ietf_NPUBBYTES)
    plaintext = json.dumps(data).encode("utf-8")
    ciphertext = nacl.bindings.crypto_aead_xchacha20poly1305_ietf_encrypt(
        plaintext, None, nonce, key
    )

    # The nonce travels in front of the ciphertext
    return json.dumps({
        "type": wallet_type,
        "kdf": {"algorithm": KDF_ALGORITHM, "params": kdf_params},
        "encryption": {"algorithm": ENCRYPTION_ALGORITHM},
        "data": base64.b64encode(nonce + ciphertext).decode("ascii"),
    })


def decrypt_wallet_data(serialization: str, password: str, wallet_type: str) -> Dict[str, Any]:
    """
    Decrypt a serialization produced by encrypt_wallet_data.

    Raises:
        MalformedSourceError: If the serialization is not parseable or has the wrong type
        DecryptionError: If the password is wrong or the data was tampered with
    """
    try:
        doc = json.loads(serialization)
        if doc["type"] != wallet_type:
            raise MalformedSourceError(
                f"Unsupported serialization type {doc['type']!r}, expected {wallet_type!r}"
            )
        if doc["kdf"]["algorithm"] != KDF_ALGORITHM:
            raise MalformedSourceError(f"Unsupported KDF {doc['kdf']['algorithm']!r}")
        if doc["encryption"]["algorithm"] != ENCRYPTION_ALGORITHM:
            raise MalformedSourceError(
                f"Unsupported encryption algorithm {doc['encryption']['algorithm']!r}"
            )
        kdf_params = doc["kdf"]["params"]
        encrypted = base64.b64decode(doc["data"])
    except MalformedSourceError:
        raise
    except (ValueError, KeyError, TypeError) as e:
        raise MalformedSourceError(f"Failed to parse wallet serialization: {e}") from e

    if password is None:
        raise DecryptionError("A password is required to decrypt a serialized wallet")

    key = derive_encryption_key(password, kdf_params)
    nonce_size = nacl.bindings.crypto_aead_xchacha20poly1305_ietf_NPUBBYTES
    nonce, ciphertext = encrypted[:nonce_size], encrypted[nonce_size:]

    try:
        plaintext = nacl.bindings.crypto_aead_xchacha20poly1305_ietf_decrypt(
            ciphertext, None, nonce, key
        )
    except CryptoError as e:
        logger.debug("Decryption of %s serialization failed", wallet_type)
        raise DecryptionError(f"Failed to decrypt wallet data: {e}") from e

    return json.loads(plaintext.decode("utf-8"))
