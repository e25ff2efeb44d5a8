"""
Client configuration for the ixo network endpoints.
"""
import os
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

DEFAULT_BLOCKCHAIN_URL = "https://ixo-testnet-validator-mt.simply-vc.com.mt/api"
DEFAULT_BLOCKSYNC_URL = "https://block-sync-pandora.ixo.world"
DEFAULT_CELLNODE_URL = "https://pds-pandora.ixo.world"
DEFAULT_GAS_PRICE = "0.025uixo"

# Prefix prepended to agent DIDs on the wire
DID_PREFIX = "did:ixo:"
ADDRESS_PREFIX = "ixo"


class ClientConfig(BaseModel):
    """
    Endpoints and chain parameters used by IxoClient.

    Attributes:
        blockchain_url: REST API of a chain node, used for account lookups and broadcasts
        blocksync_url: Directory (block-sync) service used to look up entities and DID docs
        cellnode_url: CellNode that receives newly created entities
        gas_price: Gas price as "<amount><denom>", used to compute default fees
        timeout: Optional HTTP timeout in seconds; None waits indefinitely
    """
    blockchain_url: str = DEFAULT_BLOCKCHAIN_URL
    blocksync_url: str = DEFAULT_BLOCKSYNC_URL
    cellnode_url: str = DEFAULT_CELLNODE_URL
    gas_price: str = DEFAULT_GAS_PRICE
    timeout: Optional[float] = None

    @field_validator("blockchain_url", "blocksync_url", "cellnode_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https:// (got: {v})")
        return v.rstrip("/")

    @field_validator("gas_price")
    @classmethod
    def _validate_gas_price(cls, v: str) -> str:
        parse_gas_price(v)
        return v

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """
        Build a config from IXO_* environment variables.

        Explicit keyword overrides win over the environment, which wins over
        the defaults.
        """
        env_map = {
            "blockchain_url": "IXO_BLOCKCHAIN_URL",
            "blocksync_url": "IXO_BLOCKSYNC_URL",
            "cellnode_url": "IXO_CELLNODE_URL",
            "gas_price": "IXO_GAS_PRICE",
            "timeout": "IXO_HTTP_TIMEOUT",
        }
        values = {}
        for field, var in env_map.items():
            value = os.environ.get(var)
            if value:
                values[field] = value
                logger.debug("Using %s from environment", var)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def parse_gas_price(gas_price: str) -> Tuple[Decimal, str]:
    """
    Split a gas price such as "0.025uixo" into amount and denom.

    Raises:
        ValueError: If the string is not a decimal amount followed by a denom
    """
    idx = 0
    while idx < len(gas_price) and (gas_price[idx].isdigit() or gas_price[idx] == "."):
        idx += 1
    amount, denom = gas_price[:idx], gas_price[idx:]
    if not amount or not denom:
        raise ValueError(f"Invalid gas price string: {gas_price}")
    try:
        return Decimal(amount), denom
    except InvalidOperation:
        raise ValueError(f"Invalid gas price amount: {amount}")
