#!/usr/bin/env python3
"""
Simple example of using the ixo client SDK.
"""
import os
import json
from ixo_client_sdk import ClientConfig, IxoClientError, make_client, make_wallet


def main():
    """
    Demonstrate basic usage of the IxoClient.

    This example shows how to:
    1. Restore a wallet from a mnemonic
    2. Look up an entity in the directory
    3. List the entity's claims on its CellNode
    """
    # Read configuration from environment
    MNEMONIC = os.environ.get("IXO_MNEMONIC")
    PROJECT_DID = os.environ.get("IXO_PROJECT_DID")

    # Verify configuration
    if not MNEMONIC:
        print("ERROR: IXO_MNEMONIC environment variable is required")
        return

    if not PROJECT_DID:
        print("ERROR: IXO_PROJECT_DID environment variable is required")
        return

    wallet = make_wallet(MNEMONIC)
    print(f"Chain address: {wallet.secp.address}")
    print(f"Agent DID:     did:ixo:{wallet.agent.did}")

    # Endpoints come from IXO_* environment variables or the defaults
    client = make_client(wallet, ClientConfig.from_env())

    try:
        entity = client.get_entity(PROJECT_DID)
        print(f"Entity title: {entity.get('data', {}).get('title')}")

        claims = client.list_claims(PROJECT_DID)
        print("Claims:")
        print(json.dumps(claims, indent=2))

    except IxoClientError as e:
        print(f"Error talking to the ixo network: {str(e)}")


if __name__ == "__main__":
    main()
