from .client_creator import (
    create_test_client, mock_json, project_record, JSON_HEADERS,
    TEST_MNEMONIC, TEST_BLOCKSYNC_URL, TEST_CHAIN_URL, TEST_CELLNODE_URL,
    TEST_PROJECT_DID, TEST_PROJECT_CELLNODE, LIGHT_KDF_PARAMS
)
