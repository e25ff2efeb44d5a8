"""
Pytest fixtures for the ixo client SDK tests.
"""
import pytest

from ixo_client_sdk import make_wallet
from tests.test_helpers import (
    create_test_client, mock_json, project_record,
    TEST_MNEMONIC, TEST_BLOCKSYNC_URL, TEST_PROJECT_DID
)


@pytest.fixture(scope="session")
def wallet():
    """Deterministic wallet derived from the test mnemonic"""
    return make_wallet(TEST_MNEMONIC)


@pytest.fixture
def client(wallet):
    """Client with a wallet, pointed at the test endpoints"""
    return create_test_client(wallet)


@pytest.fixture
def readonly_client():
    """Client without a wallet"""
    return create_test_client()


@pytest.fixture
def record():
    return project_record()


@pytest.fixture
def mock_directory(requests_mock, record):
    """Directory service answering lookups of the test project"""
    return mock_json(
        requests_mock,
        "GET",
        f"{TEST_BLOCKSYNC_URL}/api/project/getByProjectDid/{TEST_PROJECT_DID}",
        record,
    )
