"""
Utilities Package
RPC connection management and .env maintenance
"""

from .rpc_manager import RPCManager
from .env_file import update_env_file

__all__ = ['RPCManager', 'update_env_file']
