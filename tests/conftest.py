"""
Shared fixtures
"""

import pytest
from unittest.mock import MagicMock
from web3 import Web3
from loguru import logger

from tests.addresses import MINER, DONUT, PROVIDER


@pytest.fixture
def w3():
    """Mock Web3 instance with real unit conversion"""
    mock_w3 = MagicMock()
    mock_w3.to_wei = Web3.to_wei
    mock_w3.from_wei = Web3.from_wei
    mock_w3.eth.chain_id = 8453
    mock_w3.eth.get_code.return_value = b'\x60\x80\x60\x40'
    return mock_w3


@pytest.fixture
def config():
    """Test configuration"""
    return {
        'network': {
            'chain_id': None,
            'rpc_url_envs': ['RPC_URL', 'FALLBACK_RPC_URL']
        },
        'deployment': {
            'default_gas_limit': 3000000,
            'helper_gas_limit': 3500000,
            'gas_buffer_multiplier': 1.2,
            'priority_fee_gwei': 0.01,
            'receipt_timeout_seconds': 60,
            'min_balance_eth': 0.001
        },
        'artifacts': {
            'donuettes_comining': 'artifacts/DonuettesComining.json'
        },
        'env_file': '.env'
    }


@pytest.fixture
def addresses():
    """Output of load_deployment_addresses()"""
    return {
        'miner': MINER,
        'donut': DONUT,
        'provider': PROVIDER,
        'helper': None
    }


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test"""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record['message']), level="DEBUG")
    yield messages
    logger.remove(handler_id)
