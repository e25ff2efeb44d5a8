"""
Tests for chain accounts and transactions.
"""
import base64
import hashlib

import pytest
from eth_keys import keys
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from ixo_client_sdk import BroadcastTxError, BroadcastTxResult, UninitializedSignerError
from ixo_client_sdk.chain import (
    DEFAULT_GAS_LIMIT, SEND_GAS_LIMIT, ChainClient, calculate_fee, make_sign_doc
)
from ixo_client_sdk.client import REGISTER_FEE
from ixo_client_sdk.encoding import canonical_json_bytes
from ixo_client_sdk.transport import Fetcher
from tests.test_helpers import TEST_CHAIN_URL, create_test_client, mock_json

CHAIN_ID = "pandora-4"


def account_body(address, account_number="12", sequence="3"):
    return {
        "height": "100",
        "result": {
            "type": "cosmos-sdk/Account",
            "value": {
                "address": address,
                "coins": [{"denom": "uixo", "amount": "1000000"}],
                "public_key": None,
                "account_number": account_number,
                "sequence": sequence,
            },
        },
    }


def mock_account(requests_mock, address, account_number="12", sequence="3"):
    return mock_json(requests_mock, "GET", f"{TEST_CHAIN_URL}/auth/accounts/{address}",
                     account_body(address, account_number, sequence))


@pytest.fixture
def chain(requests_mock):
    """Chain REST API; returns the matcher of the broadcast endpoint"""
    mock_json(requests_mock, "GET", f"{TEST_CHAIN_URL}/node_info", {"node_info": {"network": CHAIN_ID}})
    return mock_json(requests_mock, "POST", f"{TEST_CHAIN_URL}/txs",
                     {"height": "101", "txhash": "ABCDEF", "raw_log": "[]", "logs": []})


def sent_tx(adapter):
    body = adapter.last_request.json()
    assert body["mode"] == "block"
    return body["tx"]


class TestFees:

    def test_send_fee(self):
        assert calculate_fee(SEND_GAS_LIMIT, "0.025uixo") == {
            "amount": [{"amount": "2000", "denom": "uixo"}],
            "gas": "80000",
        }

    def test_default_fee(self):
        assert calculate_fee(DEFAULT_GAS_LIMIT, "0.025uixo") == {
            "amount": [{"amount": "5000", "denom": "uixo"}],
            "gas": "200000",
        }

    def test_fee_rounds_up(self):
        assert calculate_fee(3, "0.5uixo")["amount"] == [{"amount": "2", "denom": "uixo"}]

    def test_invalid_gas_price(self):
        with pytest.raises(ValueError):
            calculate_fee(1000, "uixo")

    def test_sign_doc_keys(self):
        doc = make_sign_doc([], REGISTER_FEE, CHAIN_ID, "", "1", "0")
        assert list(doc) == sorted(doc)


class TestAccounts:

    def test_get_secp_account(self, client, wallet, chain, requests_mock):
        mock_account(requests_mock, wallet.secp.address)
        account = client.get_secp_account()
        assert account["address"] == wallet.secp.address
        assert account["account_number"] == "12"

    def test_get_agent_account(self, client, wallet, chain, requests_mock):
        mock_account(requests_mock, wallet.agent.address, "7", "0")
        assert client.get_agent_account()["account_number"] == "7"

    def test_unknown_account(self, client, wallet, requests_mock):
        mock_json(requests_mock, "GET", f"{TEST_CHAIN_URL}/auth/accounts/{wallet.secp.address}",
                  {"height": "0", "result": {"type": "cosmos-sdk/Account", "value": {
                      "address": "", "coins": [], "public_key": None,
                      "account_number": "0", "sequence": "0"}}})
        assert client.get_secp_account() is None

    def test_requires_wallet(self, readonly_client, requests_mock):
        with pytest.raises(UninitializedSignerError):
            readonly_client.get_secp_account()
        assert not requests_mock.called


class TestTransactions:

    def test_send_tokens(self, client, wallet, chain, requests_mock):
        mock_account(requests_mock, wallet.secp.address)

        result = client.send_tokens("ixo1recipient", 1500)

        assert isinstance(result, BroadcastTxResult)
        assert result.transaction_hash == "ABCDEF"
        assert result.height == "101"

        tx = sent_tx(chain)
        assert tx["msg"] == [{
            "type": "cosmos-sdk/MsgSend",
            "value": {
                "from_address": wallet.secp.address,
                "to_address": "ixo1recipient",
                "amount": [{"amount": "1500", "denom": "uixo"}],
            },
        }]
        assert tx["fee"] == calculate_fee(SEND_GAS_LIMIT, "0.025uixo")
        assert tx["memo"] == ""

    def test_send_tokens_signature(self, client, wallet, chain, requests_mock):
        mock_account(requests_mock, wallet.secp.address, "12", "3")

        client.send_tokens("ixo1recipient", 10, "uatom")

        tx = sent_tx(chain)
        sign_doc = make_sign_doc(tx["msg"], tx["fee"], CHAIN_ID, "", "12", "3")
        sig = tx["signatures"][0]
        assert sig["pub_key"]["type"] == "tendermint/PubKeySecp256k1"

        raw = base64.b64decode(sig["signature"])
        digest = hashlib.sha256(canonical_json_bytes(sign_doc)).digest()
        public_key = keys.PublicKey.from_compressed_bytes(wallet.secp.pubkey)
        r, s = int.from_bytes(raw[:32], "big"), int.from_bytes(raw[32:], "big")
        for v in (0, 1):
            if keys.Signature(vrs=(v, r, s)).verify_msg_hash(digest, public_key):
                break
        else:
            pytest.fail("secp256k1 signature does not verify")

    def test_register(self, client, wallet, chain, requests_mock):
        mock_account(requests_mock, wallet.agent.address, "4", "0")

        client.register()

        tx = sent_tx(chain)
        assert tx["msg"] == [{
            "type": "did/AddDid",
            "value": {"did": f"did:ixo:{wallet.agent.did}", "pubKey": wallet.agent.verifykey},
        }]
        assert tx["fee"] == REGISTER_FEE

        sig = tx["signatures"][0]
        assert sig["pub_key"] == {
            "type": "tendermint/PubKeyEd25519",
            "value": base64.b64encode(bytes.fromhex(wallet.agent.pubkey)).decode("ascii"),
        }
        sign_doc = make_sign_doc(tx["msg"], REGISTER_FEE, CHAIN_ID, "", "4", "0")
        Ed25519PublicKey.from_public_bytes(bytes.fromhex(wallet.agent.pubkey)).verify(
            base64.b64decode(sig["signature"]), canonical_json_bytes(sign_doc)
        )

    def test_new_account_signs_with_zero_numbers(self, client, wallet, chain, requests_mock):
        mock_json(requests_mock, "GET", f"{TEST_CHAIN_URL}/auth/accounts/{wallet.agent.address}",
                  {"height": "0", "result": {}})

        client.register()

        tx = sent_tx(chain)
        sign_doc = make_sign_doc(tx["msg"], REGISTER_FEE, CHAIN_ID, "", "0", "0")
        Ed25519PublicKey.from_public_bytes(bytes.fromhex(wallet.agent.pubkey)).verify(
            base64.b64decode(tx["signatures"][0]["signature"]), canonical_json_bytes(sign_doc)
        )

    def test_custom_message(self, client, wallet, chain, requests_mock):
        mock_account(requests_mock, wallet.agent.address)
        msg = {"type": "project/CreateProject", "value": {"txHash": "x"}}

        client.custom("agent", msg)

        tx = sent_tx(chain)
        assert tx["msg"] == [msg]
        assert tx["fee"] == calculate_fee(DEFAULT_GAS_LIMIT, "0.025uixo")

    def test_custom_gas_price(self, wallet, chain, requests_mock):
        mock_account(requests_mock, wallet.secp.address)
        create_test_client(wallet, gas_price="0.1uixo").send_tokens("ixo1recipient", 1)

        assert sent_tx(chain)["fee"]["amount"] == [{"amount": "8000", "denom": "uixo"}]

    def test_unknown_key_type(self, client, requests_mock):
        with pytest.raises(ValueError, match="Unknown key type"):
            client.custom("ed25519", {"type": "x", "value": {}})
        assert not requests_mock.called

    def test_broadcast_rejected(self, client, wallet, chain, requests_mock):
        mock_account(requests_mock, wallet.secp.address)
        mock_json(requests_mock, "POST", f"{TEST_CHAIN_URL}/txs", {
            "height": "0", "txhash": "BAD", "code": 5, "raw_log": "insufficient funds",
        })

        with pytest.raises(BroadcastTxError) as exc_info:
            client.send_tokens("ixo1recipient", 10 ** 12)

        err = exc_info.value
        assert err.code == 5
        assert err.raw_log == "insufficient funds"
        assert err.tx_hash == "BAD"
        assert "insufficient funds" in str(err)

    @pytest.mark.parametrize("call", [
        lambda c: c.register(),
        lambda c: c.send_tokens("ixo1recipient", 1),
        lambda c: c.custom("secp", {"type": "x", "value": {}}),
    ])
    def test_requires_wallet(self, readonly_client, requests_mock, call):
        with pytest.raises(UninitializedSignerError):
            call(readonly_client)
        assert not requests_mock.called


def test_chain_client_get_account_for_other_address(wallet, chain, requests_mock):
    mock_account(requests_mock, "ixo1someoneelse")
    client = ChainClient(Fetcher(TEST_CHAIN_URL), wallet.secp, "0.025uixo")
    assert client.get_account("ixo1someoneelse")["address"] == "ixo1someoneelse"
