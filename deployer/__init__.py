"""
DonuettesComining Deployer Package
Handles configuration, deployer wallet and the deployment flow
"""

from .config import load_config, load_deployment_addresses
from .deployment_engine import DonuettesCominingDeployer
from .wallet_manager import WalletManager

__all__ = [
    'load_config',
    'load_deployment_addresses',
    'DonuettesCominingDeployer',
    'WalletManager'
]
