"""
Pytest configuration and shared fixtures for airdrop pipeline tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_holders = _common.make_holders
make_scenario_holders = _common.make_scenario_holders
make_allocation = _common.make_allocation
make_commitment = _common.make_commitment
make_network = _common.make_network
make_config = _common.make_config


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def holders():
    """Provide a default holder list for tests."""
    return make_holders()


@pytest.fixture
def scenario_holders():
    """Provide the 100/300 two-holder scenario."""
    return make_scenario_holders()


@pytest.fixture
def allocation():
    """Provide a default AllocationResult."""
    return make_allocation()


@pytest.fixture
def commitment():
    """Provide a MerkleCommitment over the default allocation."""
    return make_commitment()


@pytest.fixture
def airdrop_config(tmp_path):
    """Provide an AirdropConfig with a 'testnet' network writing under tmp_path."""
    return make_config(tmp_path)


@pytest.fixture(autouse=True)
def _clear_airdrop_env(monkeypatch):
    """Keep AIRDROP_* variables from the developer's shell out of tests."""
    import os
    for name in list(os.environ):
        if name.startswith("AIRDROP_"):
            monkeypatch.delenv(name, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
