#!/usr/bin/env python3
"""
Example of creating, exporting and restoring an ixo wallet, then
registering its agent DID on chain.
"""
import os
import sys
import logging
from ixo_client_sdk import (
    BroadcastTxError, ClientConfig, DecryptionError, make_client, make_wallet
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def main():
    password = os.environ.get("IXO_WALLET_PASSWORD", "change me")

    # A fresh wallet with a new 12-word mnemonic
    wallet = make_wallet()
    print(f"Mnemonic:  {wallet.secp.secret}")
    print(f"Address:   {wallet.secp.address}")
    print(f"Agent DID: did:ixo:{wallet.agent.did}")

    # Encrypted export; only the mnemonic and account settings are stored
    serialized = wallet.serialize(password)
    print(f"Serialized wallet is {len(serialized)} bytes")

    try:
        restored = make_wallet(serialized, password)
    except DecryptionError as e:
        print(f"Could not decrypt wallet: {e}")
        sys.exit(1)
    assert restored.agent.did == wallet.agent.did

    # Registration needs the agent account to hold funds on chain
    if os.environ.get("IXO_REGISTER") != "1":
        print("Set IXO_REGISTER=1 to register the DID on chain")
        return

    client = make_client(restored, ClientConfig.from_env())
    try:
        result = client.register()
        print(f"DID registered in tx {result.transaction_hash} at height {result.height}")
    except BroadcastTxError as e:
        print(f"Registration rejected (code {e.code}): {e.raw_log}")
        sys.exit(1)


if __name__ == "__main__":
    main()
