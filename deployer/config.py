"""
Deployment Configuration
Loads JSON settings and constructor addresses from the environment
"""

import os
import json
from typing import Dict, Optional
from web3 import Web3
from loguru import logger
from dotenv import load_dotenv

load_dotenv()

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Placeholder left in .env.example
ADDRESS_PLACEHOLDER = "0x..."

REQUIRED_ADDRESS_VARS = ['DONUETTE_MINER_ADDRESS', 'DONUT_ADDRESS']


def load_config(config_path: str = "config/deploy_config.json") -> Dict:
    """
    Load deployment settings

    Args:
        config_path: Path to JSON settings file

    Returns:
        Settings dict
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    logger.debug(f"Loaded deployment config from {config_path}")
    return config


def normalize_address(name: str, value: Optional[str]) -> str:
    """
    Validate an address and return it in checksum format

    Args:
        name: Environment variable the value came from (for error messages)
        value: Raw address string

    Returns:
        EIP-55 checksum address
    """
    if value is None:
        raise ValueError(f"{name} must be set")

    value = value.strip()

    if not value or value == ADDRESS_PLACEHOLDER:
        raise ValueError(f"{name} must be set (still contains placeholder)")

    if not Web3.is_address(value):
        raise ValueError(f"{name} is not a valid address: {value}")

    return Web3.to_checksum_address(value)


def load_deployment_addresses(env: Optional[Dict[str, str]] = None) -> Dict[str, Optional[str]]:
    """
    Read constructor inputs from the environment

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        Dict with miner, donut, provider and helper addresses
    """
    if env is None:
        env = os.environ

    addresses = {
        'miner': normalize_address('DONUETTE_MINER_ADDRESS', env.get('DONUETTE_MINER_ADDRESS')),
        'donut': normalize_address('DONUT_ADDRESS', env.get('DONUT_ADDRESS')),
    }

    provider = (env.get('PROVIDER_ADDRESS') or '').strip()
    if provider:
        addresses['provider'] = normalize_address('PROVIDER_ADDRESS', provider)
    else:
        logger.info("PROVIDER_ADDRESS not set, using zero address")
        addresses['provider'] = ZERO_ADDRESS

    helper = (env.get('DEPLOY_HELPER_ADDRESS') or '').strip()
    addresses['helper'] = normalize_address('DEPLOY_HELPER_ADDRESS', helper) if helper else None

    return addresses
