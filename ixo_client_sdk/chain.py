"""
Chain client for the legacy (amino JSON / REST) ixo API.

Only the few operations the SDK needs are supported: account lookups and
signing + broadcasting a list of messages in block mode.
"""
import logging
from decimal import Decimal, ROUND_CEILING
from typing import Any, Dict, List, Optional, Protocol

from .config import parse_gas_price
from .exceptions import BroadcastTxError
from .models import BroadcastTxResult, StdSignature
from .transport import Fetcher

logger = logging.getLogger(__name__)

# Default gas limits per transaction kind
SEND_GAS_LIMIT = 80000
DEFAULT_GAS_LIMIT = 200000


class AminoSigner(Protocol):
    """Protocol for keys that can sign amino sign docs"""
    address: str

    def sign_amino(self, sign_doc: Dict[str, Any]) -> StdSignature:
        """Sign a StdSignDoc and return the signature with its public key"""
        ...


def coins(amount: int, denom: str) -> List[Dict[str, str]]:
    return [{"amount": str(amount), "denom": denom}]


def calculate_fee(gas_limit: int, gas_price: str) -> Dict[str, Any]:
    """
    Fee for a gas limit at the given gas price, rounded up to whole units.

    Args:
        gas_limit: Gas limit of the transaction
        gas_price: Gas price as "<amount><denom>"
    """
    price, denom = parse_gas_price(gas_price)
    amount = (price * Decimal(gas_limit)).to_integral_value(rounding=ROUND_CEILING)
    return {"amount": coins(int(amount), denom), "gas": str(gas_limit)}


def make_sign_doc(
    msgs: List[Dict[str, Any]],
    fee: Dict[str, Any],
    chain_id: str,
    memo: str,
    account_number: str,
    sequence: str
) -> Dict[str, Any]:
    return {
        "account_number": account_number,
        "chain_id": chain_id,
        "fee": fee,
        "memo": memo,
        "msgs": msgs,
        "sequence": sequence,
    }


class ChainClient:
    """
    Signs and broadcasts transactions with one key.

    Args:
        api: Fetcher bound to the chain REST API
        key: Wallet key that signs and pays for transactions
        gas_price: Gas price used for default fees
    """

    def __init__(self, api: Fetcher, key: AminoSigner, gas_price: str):
        self.api = api
        self.key = key
        self.gas_price = gas_price

    def get_chain_id(self) -> str:
        body = self.api.fetch("/node_info").body
        return body["node_info"]["network"]

    def get_account(self, address: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Look up an account.

        Args:
            address: Account address, defaults to the signing key's

        Returns:
            The account value, or None if the chain doesn't know the account
        """
        address = address or self.key.address
        body = self.api.fetch(f"/auth/accounts/{address}").body
        value = body.get("result", {}).get("value") or {}
        if not value.get("address"):
            return None
        return value

    def sign_and_broadcast(
        self,
        msgs: List[Dict[str, Any]],
        fee: Optional[Dict[str, Any]] = None,
        memo: str = ""
    ) -> BroadcastTxResult:
        """
        Sign messages and broadcast them in block mode.

        Args:
            msgs: Amino JSON messages
            fee: Optional fee, defaults to the default gas limit at the gas price
            memo: Optional memo

        Returns:
            Broadcast result

        Raises:
            BroadcastTxError: If the chain rejected the transaction
            TransportError: If the HTTP call failed
        """
        fee = fee or calculate_fee(DEFAULT_GAS_LIMIT, self.gas_price)

        account = self.get_account()
        account_number = str((account or {}).get("account_number", 0))
        sequence = str((account or {}).get("sequence", 0))
        chain_id = self.get_chain_id()

        sign_doc = make_sign_doc(msgs, fee, chain_id, memo, account_number, sequence)
        signature = self.key.sign_amino(sign_doc)

        tx = {
            "msg": msgs,
            "fee": fee,
            "signatures": [signature.model_dump()],
            "memo": memo,
        }
        body = self.api.fetch("/txs", method="POST", body={"tx": tx, "mode": "block"}).body
        result = BroadcastTxResult.model_validate(body)

        if result.code:
            logger.error(f"Transaction {result.transaction_hash} failed with code {result.code}")
            raise BroadcastTxError(result.code, result.raw_log, result.transaction_hash, result.height)

        logger.info("Transaction %s included at height %s", result.transaction_hash, result.height)
        return result

    def send_tokens(
        self,
        recipient: str,
        amount: int,
        denom: str = "uixo",
        memo: str = ""
    ) -> BroadcastTxResult:
        msg = {
            "type": "cosmos-sdk/MsgSend",
            "value": {
                "from_address": self.key.address,
                "to_address": recipient,
                "amount": coins(amount, denom),
            },
        }
        return self.sign_and_broadcast([msg], calculate_fee(SEND_GAS_LIMIT, self.gas_price), memo)
