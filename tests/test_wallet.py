"""
Tests for the wallet module.
"""
import base64
import json
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from eth_account.types import Language

from ixo_client_sdk import (
    DecryptionError, MalformedSourceError, Wallet, WalletPlainState, make_wallet
)
from ixo_client_sdk.encoding import b58encode, canonical_json_bytes
from ixo_client_sdk.wallet import (
    AgentWallet, EmptySource, MnemonicSource, PlainStateSource, Secp256k1HdWallet,
    SerializedSource, classify_source
)
from ixo_client_sdk.wallet.crypto import generate_mnemonic, make_cosmoshub_path, seed_from_mnemonic
from tests.test_helpers import LIGHT_KDF_PARAMS, TEST_MNEMONIC

SECP256K1_HALF_N = 0x7FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF5D576E7357A4501DDFE92F46681B20A0


class TestMnemonicWallet:
    """Wallets derived from a mnemonic."""

    def test_known_address(self):
        """The chain account follows the Cosmos Hub derivation path."""
        secp = Secp256k1HdWallet.from_mnemonic(TEST_MNEMONIC, make_cosmoshub_path(0), "cosmos")
        assert secp.address == "cosmos19rl4cm2hmr8afy4kldpxz3fka4jguq0auqdal4"

    def test_deterministic(self, wallet):
        again = make_wallet(TEST_MNEMONIC)
        assert again.secp.address == wallet.secp.address
        assert again.agent.did == wallet.agent.did
        assert again.agent.verifykey == wallet.agent.verifykey

    def test_uses_ixo_prefix_and_cosmoshub_path(self, wallet):
        assert wallet.secp.address.startswith("ixo1")
        assert wallet.agent.address.startswith("ixo1")
        assert wallet.secp.hd_path == "m/44'/118'/0'/0/0"
        assert wallet.secp.prefix == "ixo"

    def test_agent_keys_are_consistent(self, wallet):
        agent = wallet.agent
        pubkey = bytes.fromhex(agent.pubkey)
        assert len(pubkey) == 32
        assert agent.verifykey == b58encode(pubkey)
        assert agent.did == b58encode(pubkey[:16])
        assert agent.signkey == b58encode(bytes.fromhex(agent.privkey) + pubkey)

    def test_keypairs_are_independent(self, wallet):
        assert wallet.secp.address != wallet.agent.address
        assert wallet.secp.pubkey.hex() != wallet.agent.pubkey

    def test_invalid_mnemonic(self):
        with pytest.raises(MalformedSourceError, match="Invalid mnemonic"):
            make_wallet("not a real mnemonic phrase at all")

    def test_bad_checksum(self):
        words = TEST_MNEMONIC.replace("about", "abandon")
        with pytest.raises(MalformedSourceError):
            make_wallet(words)

    def test_generated_wallet(self):
        w = make_wallet()
        assert len(w.secp.secret.split()) == 12
        assert w.agent.secret == w.secp.secret
        assert make_wallet(w.secp.secret).agent.did == w.agent.did

    def test_generated_wallets_differ(self):
        assert make_wallet().agent.did != make_wallet("").agent.did

    @pytest.mark.parametrize("num_words", [12, 24])
    def test_generated_mnemonic_is_valid(self, num_words):
        mnemonic = generate_mnemonic(num_words)
        assert len(mnemonic.split(" ")) == num_words
        assert len(seed_from_mnemonic(mnemonic)) == 64

    def test_generated_mnemonic_is_english(self):
        with patch("ixo_client_sdk.wallet.crypto._generate_mnemonic", return_value=TEST_MNEMONIC) as gen:
            assert make_wallet().secp.secret == TEST_MNEMONIC
        gen.assert_called_once_with(num_words=12, lang=Language.ENGLISH)

    @pytest.mark.parametrize("words", [
        "aban " * 11 + "abou",
        TEST_MNEMONIC.upper(),
        TEST_MNEMONIC.replace(" ", "  "),
        " " + TEST_MNEMONIC,
        TEST_MNEMONIC + "\n",
    ])
    def test_non_canonical_mnemonic_rejected(self, words):
        """Only the exact phrase the keys derive from is accepted as a secret."""
        with pytest.raises(MalformedSourceError, match="Invalid mnemonic"):
            make_wallet(words)
        with pytest.raises(MalformedSourceError):
            AgentWallet.from_mnemonic(words)


class TestPlainState:
    """Export to and import from plain state."""

    def test_shape(self, wallet):
        state = wallet.to_plain_state()
        assert set(state) == {"secp", "agent"}
        assert set(state["secp"]) == {"secret", "hdPath", "prefix", "privkey", "pubkey", "address"}
        assert set(state["agent"]) == {
            "secret", "hdPath", "prefix", "privkey", "pubkey", "signkey", "verifykey", "did", "address"
        }
        assert state["secp"]["pubkey"] == wallet.secp.pubkey.hex()
        assert state["secp"]["privkey"] == wallet.secp.privkey.hex()
        json.dumps(state)

    def test_round_trip(self, wallet):
        restored = make_wallet(wallet.to_plain_state())
        assert restored.to_plain_state() == wallet.to_plain_state()
        assert restored.secp.address == wallet.secp.address
        assert restored.secp.privkey == wallet.secp.privkey
        assert restored.agent.did == wallet.agent.did
        assert restored.agent.signkey == wallet.agent.signkey

    def test_round_trip_through_json(self, wallet):
        text = json.dumps(wallet.to_json())
        restored = Wallet.from_plain_state(json.loads(text))
        assert restored.to_plain_state() == wallet.to_plain_state()

    def test_import_restores_verbatim(self, wallet):
        """Imported fields are taken as-is, not re-derived."""
        state = wallet.to_plain_state()
        state["agent"]["did"] = "CustomDid123"
        state["secp"]["address"] = "ixo1custom"
        restored = make_wallet(state)
        assert restored.agent.did == "CustomDid123"
        assert restored.secp.address == "ixo1custom"

    def test_accepts_model(self, wallet):
        model = WalletPlainState.model_validate(wallet.to_plain_state())
        assert make_wallet(model).agent.did == wallet.agent.did

    def test_missing_field(self, wallet):
        state = wallet.to_plain_state()
        del state["agent"]["verifykey"]
        with pytest.raises(MalformedSourceError, match="Invalid wallet plain state"):
            make_wallet(state)

    def test_invalid_hex(self, wallet):
        state = wallet.to_plain_state()
        state["secp"]["privkey"] = "zz"
        with pytest.raises(MalformedSourceError):
            make_wallet(state)


class TestSerialization:
    """Password-encrypted serialization."""

    def test_round_trip(self, wallet):
        serialized = wallet.serialize("correct horse", LIGHT_KDF_PARAMS)
        assert serialized.startswith('{"')
        restored = make_wallet(serialized, "correct horse")
        assert restored.to_plain_state() == wallet.to_plain_state()

    def test_document_format(self, wallet):
        serialized = json.loads(wallet.serialize("pw", LIGHT_KDF_PARAMS))
        secp_doc = json.loads(serialized["secp"])
        agent_doc = json.loads(serialized["agent"])
        assert secp_doc["type"] == "secp256k1wallet-v1"
        assert agent_doc["type"] == "ixo-agent-wallet-v1"
        assert secp_doc["kdf"] == {"algorithm": "argon2id", "params": LIGHT_KDF_PARAMS}
        assert secp_doc["encryption"] == {"algorithm": "xchacha20poly1305-ietf"}
        assert TEST_MNEMONIC not in serialized["secp"]

    def test_wrong_password(self, wallet):
        serialized = wallet.serialize("right", LIGHT_KDF_PARAMS)
        with pytest.raises(DecryptionError):
            make_wallet(serialized, "wrong")

    def test_missing_password(self, wallet):
        serialized = wallet.serialize("right", LIGHT_KDF_PARAMS)
        with pytest.raises(DecryptionError):
            make_wallet(serialized)

    def test_tampered_data(self, wallet):
        outer = json.loads(wallet.serialize("pw", LIGHT_KDF_PARAMS))
        doc = json.loads(outer["secp"])
        raw = bytearray(base64.b64decode(doc["data"]))
        raw[-1] ^= 0x01
        doc["data"] = base64.b64encode(bytes(raw)).decode("ascii")
        outer["secp"] = json.dumps(doc)
        with pytest.raises(DecryptionError):
            make_wallet(json.dumps(outer), "pw")

    def test_unparsable(self):
        with pytest.raises(MalformedSourceError):
            make_wallet('{"secp": ', "pw")

    def test_wrong_type(self, wallet):
        outer = json.loads(wallet.serialize("pw", LIGHT_KDF_PARAMS))
        outer["secp"], outer["agent"] = outer["agent"], outer["secp"]
        with pytest.raises(MalformedSourceError, match="Unsupported serialization type"):
            make_wallet(json.dumps(outer), "pw")


class TestClassifySource:
    """Source classification."""

    def test_variants(self, wallet):
        assert isinstance(classify_source(None), EmptySource)
        assert isinstance(classify_source(""), EmptySource)
        assert classify_source(TEST_MNEMONIC) == MnemonicSource(TEST_MNEMONIC)
        assert classify_source('{"secp": "x"}', "pw") == SerializedSource('{"secp": "x"}', "pw")
        assert isinstance(classify_source(wallet.to_plain_state()), PlainStateSource)

    def test_explicit_source_passes_through(self):
        source = MnemonicSource(TEST_MNEMONIC)
        assert classify_source(source) is source

    def test_unsupported_type(self):
        with pytest.raises(MalformedSourceError, match="Unsupported wallet source type"):
            classify_source(42)


class TestSigning:
    """Signing with both keypairs."""

    def test_agent_signature_verifies(self, wallet):
        data = {"b": 2, "a": [1, {"y": None, "x": "z"}]}
        signature = base64.b64decode(wallet.agent.sign(data))
        assert len(signature) == 64

        public_key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(wallet.agent.pubkey))
        public_key.verify(signature, canonical_json_bytes(data))

    def test_agent_signature_independent_of_key_order(self, wallet):
        assert wallet.agent.sign({"a": 1, "b": 2}) == wallet.agent.sign({"b": 2, "a": 1})

    def test_agent_amino_signature(self, wallet):
        sign_doc = {"chain_id": "test", "msgs": []}
        sig = wallet.agent.sign_amino(sign_doc)
        assert sig.pub_key["type"] == AgentWallet.PUBKEY_TYPE
        assert base64.b64decode(sig.pub_key["value"]) == bytes.fromhex(wallet.agent.pubkey)

        public_key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(wallet.agent.pubkey))
        public_key.verify(base64.b64decode(sig.signature), canonical_json_bytes(sign_doc))

    def test_secp_amino_signature(self, wallet):
        sig = wallet.secp.sign_amino({"chain_id": "test", "msgs": []})
        raw = base64.b64decode(sig.signature)
        assert len(raw) == 64
        assert int.from_bytes(raw[32:], "big") <= SECP256K1_HALF_N
        assert sig.pub_key == {
            "type": "tendermint/PubKeySecp256k1",
            "value": base64.b64encode(wallet.secp.pubkey).decode("ascii"),
        }

    def test_secp_signature_is_deterministic(self, wallet):
        doc = {"chain_id": "test", "memo": "hi"}
        assert wallet.secp.sign_amino(doc) == wallet.secp.sign_amino(doc)
