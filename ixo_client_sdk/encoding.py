"""
Encoding helpers shared by the wallet, RPC and chain modules.

The canonical JSON form is RFC 8785 (JSON Canonicalization Scheme): keys sorted
by UTF-16 code units, no whitespace, numbers written the way JavaScript writes
them. It is what gets signed and what goes over the wire, so the bytes match
what a JavaScript verifier recomputes with a sorted JSON.stringify.
"""
import hashlib
from typing import Any

import base58
import bech32
import jcs
from Crypto.Hash import RIPEMD160


def canonical_json(obj: Any) -> str:
    """
    Serialize an object to canonical JSON.

    Args:
        obj: JSON-compatible object

    Returns:
        Compact JSON string with keys sorted at every level

    Raises:
        ValueError: If the object holds NaN or an infinite float
    """
    return canonical_json_bytes(obj).decode("utf-8")


def canonical_json_bytes(obj: Any) -> bytes:
    """Same as canonical_json, but UTF-8 encoded and ready for signing."""
    return jcs.canonicalize(obj)


def to_hex(data: bytes) -> str:
    return data.hex()


def from_hex(value: str) -> bytes:
    """
    Decode a hex string, tolerating a 0x prefix.

    Raises:
        ValueError: If the string is not valid hex
    """
    if value.startswith("0x"):
        value = value[2:]
    return bytes.fromhex(value)


def b58encode(data: bytes) -> str:
    return base58.b58encode(data).decode("ascii")


def b58decode(value: str) -> bytes:
    return base58.b58decode(value)


def ripemd160(data: bytes) -> bytes:
    return RIPEMD160.new(data).digest()


def to_bech32(prefix: str, data: bytes) -> str:
    """
    Encode raw address bytes with a human-readable prefix.

    Raises:
        ValueError: If the data can't be converted to 5-bit groups
    """
    words = bech32.convertbits(data, 8, 5)
    if words is None:
        raise ValueError("Could not convert address bytes to bech32 words")
    return bech32.bech32_encode(prefix, words)


def secp256k1_address(pubkey: bytes, prefix: str) -> str:
    """Address of a compressed secp256k1 public key: ripemd160(sha256(pubkey))."""
    return to_bech32(prefix, ripemd160(hashlib.sha256(pubkey).digest()))


def ed25519_address(pubkey: bytes, prefix: str) -> str:
    """Address of an ed25519 public key: the first 20 bytes of sha256(pubkey)."""
    return to_bech32(prefix, hashlib.sha256(pubkey).digest()[:20])
