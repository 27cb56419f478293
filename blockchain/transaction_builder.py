"""
Transaction Builder
Constructs DonuettesComining deployment transactions
"""

from decimal import Decimal
from typing import Dict, Sequence
from web3 import Web3
from eth_abi import encode
from loguru import logger

CONSTRUCTOR_ARG_TYPES = ['address', 'address', 'address', 'address']


def encode_constructor_args(miner: str, donuette: str, donut: str, provider: str) -> bytes:
    """
    ABI-encode DonuettesComining constructor arguments

    The hex form is what block explorers ask for when verifying source.
    """
    return encode(
        CONSTRUCTOR_ARG_TYPES,
        [
            Web3.to_checksum_address(miner),
            Web3.to_checksum_address(donuette),
            Web3.to_checksum_address(donut),
            Web3.to_checksum_address(provider)
        ]
    )


class TransactionBuilder:
    """
    Builds signed-ready transactions for direct and helper deployments
    """

    def __init__(self, w3: Web3, wallet_manager, config: Dict):
        """
        Initialize Transaction Builder

        Args:
            w3: Web3 instance
            wallet_manager: Wallet manager holding the deployer address
            config: Deployment configuration
        """
        self.w3 = w3
        self.wallet_manager = wallet_manager

        deployment = config.get('deployment', {})
        self.default_gas_limit = deployment.get('default_gas_limit', 3000000)
        self.helper_gas_limit = deployment.get('helper_gas_limit', self.default_gas_limit)
        self.gas_buffer_multiplier = deployment.get('gas_buffer_multiplier', 1.2)
        self.priority_fee_gwei = deployment.get('priority_fee_gwei', 1)

    def build_constructor_tx(self, factory, args: Sequence[str]) -> Dict:
        """
        Build direct deployment transaction

        Args:
            factory: Contract factory with abi and bytecode
            args: Constructor arguments (_miner, _donuette, _donut, _provider)

        Returns:
            Transaction dict
        """
        constructor = factory.constructor(*args)
        gas_limit = self._estimate_gas_limit(constructor, self.default_gas_limit)

        logger.info("Building deployment transaction...")
        return constructor.build_transaction(self._tx_params(gas_limit))

    def build_helper_deploy_tx(self, helper_contract, args: Sequence[str]) -> Dict:
        """
        Build DeployDonuettesComining.deploy(...) transaction

        Args:
            helper_contract: Helper contract instance
            args: deploy() arguments (_miner, _donuette, _donut, _provider)

        Returns:
            Transaction dict
        """
        deploy_fn = helper_contract.functions.deploy(*args)
        gas_limit = self._estimate_gas_limit(deploy_fn, self.helper_gas_limit)

        logger.info("Building helper deploy() transaction...")
        return deploy_fn.build_transaction(self._tx_params(gas_limit))

    def estimate_cost_wei(self, tx: Dict) -> int:
        """Upper bound on transaction cost in wei"""
        price = tx.get('maxFeePerGas', tx.get('gasPrice', 0))
        return int(tx['gas']) * int(price)

    def _estimate_gas_limit(self, call, default: int) -> int:
        """Estimate gas with buffer, falling back to default"""
        try:
            gas_estimate = call.estimate_gas({'from': self.wallet_manager.address})
            gas_limit = int(gas_estimate * self.gas_buffer_multiplier)
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            gas_limit = default

        logger.info(f"Gas limit: {gas_limit}")
        return gas_limit

    def _tx_params(self, gas_limit: int) -> Dict:
        """Common transaction fields with EIP-1559 or legacy fees"""
        params = {
            'from': self.wallet_manager.address,
            'nonce': self.w3.eth.get_transaction_count(self.wallet_manager.address, 'pending'),
            'gas': gas_limit,
            'chainId': self.w3.eth.chain_id
        }
        params.update(self._fee_params())
        return params

    def _fee_params(self) -> Dict[str, int]:
        """
        Fee fields for the next block

        EIP-1559 chains: maxFeePerGas = 2 * baseFee + tip
        """
        latest = self.w3.eth.get_block('latest')
        base_fee = latest.get('baseFeePerGas')

        if base_fee is None:
            gas_price = self.w3.eth.gas_price
            logger.info(f"Gas price: {self.w3.from_wei(gas_price, 'gwei')} gwei (legacy)")
            return {'gasPrice': gas_price}

        priority_fee = int(self.w3.to_wei(Decimal(str(self.priority_fee_gwei)), 'gwei'))
        max_fee = base_fee * 2 + priority_fee

        logger.info(
            f"Base fee: {self.w3.from_wei(base_fee, 'gwei')} gwei, "
            f"tip: {self.priority_fee_gwei} gwei"
        )
        return {
            'maxFeePerGas': max_fee,
            'maxPriorityFeePerGas': priority_fee
        }
