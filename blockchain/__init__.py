"""
Blockchain Interaction Package
Handles contract calls and deployment transaction building
"""

from .contract_manager import ContractManager
from .transaction_builder import TransactionBuilder, encode_constructor_args

__all__ = ['ContractManager', 'TransactionBuilder', 'encode_constructor_args']
