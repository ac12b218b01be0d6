"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest

from multisend.config import MultiSendConfig
from multisend.core.assembler import BatchAssembler
from multisend.tx.signer import generate_test_key

from mocks import CONTRACT_ADDRESS, MockLedgerClient, MockTokenClient


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> MultiSendConfig:
    """Create a test configuration."""
    return MultiSendConfig(
        _env_file=None,
        rpc_url="http://localhost:8545",
        contract_address=CONTRACT_ADDRESS,
        approve_gas_limit=80_000,
        log_level="DEBUG",
    )


# ============================================================================
# Mock Collaborators
# ============================================================================

@pytest.fixture
def mock_client() -> MockLedgerClient:
    """Create a recording ledger client."""
    return MockLedgerClient()


@pytest.fixture
def mock_tokens() -> MockTokenClient:
    """Create a token client with zero allowance everywhere."""
    return MockTokenClient()


@pytest.fixture
def test_signer():
    """Create a test signer with a random key."""
    return generate_test_key()


# ============================================================================
# Assemblers
# ============================================================================

@pytest.fixture
def assembler(test_config, mock_client, mock_tokens) -> BatchAssembler:
    """Read-only assembler wired to the mocks."""
    return BatchAssembler(
        contract_address=CONTRACT_ADDRESS,
        client=mock_client,
        config=test_config,
        token_client=mock_tokens,
    )


@pytest.fixture
def signing_assembler(assembler, test_signer):
    """Send-capable assembler wired to the mocks."""
    return assembler.connect(test_signer)
