"""
Deployment Engine
Resolves DonuettesComining constructor arguments and deploys or
prints manual Remix instructions
"""

from decimal import Decimal
from typing import Callable, Dict, List, Optional
from web3 import Web3
from loguru import logger

from blockchain.contract_manager import ContractManager
from blockchain.transaction_builder import TransactionBuilder, encode_constructor_args

MODES = ('instructions', 'helper', 'direct')

# Constructor / deploy() parameter names, in call order
PARAMETER_NAMES = ('_miner', '_donuette', '_donut', '_provider')


class DonuettesCominingDeployer:
    """
    One-shot DonuettesComining deployment flow
    """

    def __init__(
        self,
        w3: Web3,
        config: Dict,
        addresses: Dict,
        contract_manager: Optional[ContractManager] = None,
        confirm_fn: Callable[[str], str] = input
    ):
        """
        Initialize deployer

        Args:
            w3: Web3 instance
            config: Deployment configuration
            addresses: Output of load_deployment_addresses()
            contract_manager: Optional pre-built ContractManager
            confirm_fn: Prompt function used before sending transactions
        """
        self.w3 = w3
        self.config = config
        self.addresses = addresses
        self.contract_manager = contract_manager or ContractManager(w3, config)
        self.confirm_fn = confirm_fn

        deployment = config.get('deployment', {})
        self.receipt_timeout = deployment.get('receipt_timeout_seconds', 300)
        self.min_balance_eth = Decimal(str(deployment.get('min_balance_eth', 0)))

    def resolve_addresses(self) -> Dict[str, str]:
        """
        Resolve all constructor arguments

        Returns:
            Ordered dict of parameter name -> address
        """
        logger.info("Getting Donuette token address from DonuetteMiner...")

        donuette = self.contract_manager.get_donuette_address(self.addresses['miner'])

        return {
            '_miner': self.addresses['miner'],
            '_donuette': donuette,
            '_donut': self.addresses['donut'],
            '_provider': self.addresses['provider']
        }

    def log_configuration(self, resolved: Dict[str, str]):
        """Log resolved configuration values"""
        logger.info(f"DonuetteMiner address: {resolved['_miner']}")
        logger.info(f"Donuette token address: {resolved['_donuette']}")
        logger.info(f"DONUT token address: {resolved['_donut']}")
        logger.info(f"Provider address: {resolved['_provider']}")

        if self.addresses.get('helper'):
            logger.info(f"DeployDonuettesComining helper: {self.addresses['helper']}")

    def build_instructions(self, resolved: Dict[str, str]) -> List[str]:
        """Manual Remix deployment steps"""
        lines = [
            "=== Deployment Instructions ===",
            "1. Compile DonuettesComining.sol in Remix",
            "2. Go to Deploy & Run Transactions",
            "3. Select your environment (JavaScript VM or Injected Web3)",
            "4. Select 'DonuettesComining' from the contract dropdown",
            "5. Fill in the constructor parameters:",
        ]
        lines.extend(f"   - {name}: {resolved[name]}" for name in PARAMETER_NAMES)
        lines.append("6. Click 'Deploy'")
        lines.append("")
        lines.append("Or use the DeployDonuettesComining helper contract for easier deployment!")

        if self.addresses.get('helper'):
            lines.append(
                f"   Helper at {self.addresses['helper']}: call deploy("
                + ", ".join(resolved[name] for name in PARAMETER_NAMES) + ")"
            )

        lines.append("")
        lines.append("ABI-encoded constructor arguments (for source verification):")
        lines.append("   " + self.encoded_constructor_args(resolved))

        return lines

    def print_instructions(self, resolved: Dict[str, str]):
        print()
        print("\n".join(self.build_instructions(resolved)))

    def encoded_constructor_args(self, resolved: Dict[str, str]) -> str:
        return encode_constructor_args(*self._args(resolved)).hex()

    def deploy_via_helper(self, resolved: Dict[str, str], wallet_manager, confirm: bool = True) -> Optional[str]:
        """
        Deploy through the DeployDonuettesComining helper contract

        Args:
            resolved: Output of resolve_addresses()
            wallet_manager: Deployer wallet
            confirm: Ask before sending

        Returns:
            Pool address, or None if cancelled
        """
        helper_address = self.addresses.get('helper')
        if not helper_address:
            raise ValueError("DEPLOY_HELPER_ADDRESS must be set for helper deployment")

        logger.info("Deploying DonuettesComining via helper contract...")

        helper = self.contract_manager.load_deployer_contract(helper_address)
        args = self._args(resolved)

        # Static call gives the address deploy() will return
        expected_pool = helper.functions.deploy(*args).call({'from': wallet_manager.address})
        logger.info(f"Expected pool address: {expected_pool}")

        tx_builder = TransactionBuilder(self.w3, wallet_manager, self.config)
        transaction = tx_builder.build_helper_deploy_tx(helper, args)

        receipt = self._send(transaction, tx_builder, wallet_manager, confirm)
        if receipt is None:
            return None

        pool_address = Web3.to_checksum_address(expected_pool)

        if not self.contract_manager.has_code(pool_address):
            raise RuntimeError(f"Helper transaction succeeded but no code at {pool_address}")

        logger.success(f"DonuettesComining deployed at: {pool_address}")
        return pool_address

    def deploy_direct(self, resolved: Dict[str, str], wallet_manager, confirm: bool = True) -> Optional[str]:
        """
        Deploy DonuettesComining from compiled bytecode

        Args:
            resolved: Output of resolve_addresses()
            wallet_manager: Deployer wallet
            confirm: Ask before sending

        Returns:
            Contract address, or None if cancelled
        """
        logger.info("Deploying DonuettesComining contract...")

        factory = self.contract_manager.load_comining_factory()

        tx_builder = TransactionBuilder(self.w3, wallet_manager, self.config)
        transaction = tx_builder.build_constructor_tx(factory, self._args(resolved))

        receipt = self._send(transaction, tx_builder, wallet_manager, confirm)
        if receipt is None:
            return None

        contract_address = receipt['contractAddress']
        logger.success(f"DonuettesComining deployed at: {contract_address}")
        return contract_address

    def run(self, mode: str = 'instructions', wallet_manager=None, confirm: bool = True) -> Optional[str]:
        """
        Run the deployment flow

        Args:
            mode: 'instructions', 'helper' or 'direct'
            wallet_manager: Deployer wallet (execution modes only)
            confirm: Ask before sending

        Returns:
            Deployed address for execution modes, None otherwise
        """
        if mode not in MODES:
            raise ValueError(f"Invalid mode: {mode} (expected one of {', '.join(MODES)})")

        resolved = self.resolve_addresses()
        self.log_configuration(resolved)

        if mode == 'instructions':
            self.print_instructions(resolved)
            return None

        if wallet_manager is None:
            raise ValueError(f"Mode '{mode}' requires a deployer wallet")

        if mode == 'helper':
            return self.deploy_via_helper(resolved, wallet_manager, confirm)

        return self.deploy_direct(resolved, wallet_manager, confirm)

    def _args(self, resolved: Dict[str, str]) -> List[str]:
        return [resolved[name] for name in PARAMETER_NAMES]

    def _check_balance(self, wallet_manager, cost_wei: int):
        """Refuse to send when the deployer cannot pay"""
        balance = wallet_manager.get_balance(self.w3)
        cost = Decimal(str(self.w3.from_wei(cost_wei, 'ether')))

        logger.info(f"Account balance: {balance} ETH")
        logger.info(f"Estimated max cost: {cost} ETH")

        required = max(self.min_balance_eth, cost)
        if balance < required:
            raise RuntimeError(
                f"Insufficient balance for deployment: {balance} ETH (need {required} ETH)"
            )

    def _send(self, transaction: Dict, tx_builder: TransactionBuilder, wallet_manager, confirm: bool):
        """Confirm, sign, send and wait for a successful receipt"""
        self._check_balance(wallet_manager, tx_builder.estimate_cost_wei(transaction))

        if confirm:
            answer = self.confirm_fn("\nProceed with deployment? (yes/no): ")
            if answer.strip().lower() != 'yes':
                logger.info("Deployment cancelled")
                return None

        logger.info("Signing transaction...")
        signed_tx = wallet_manager.sign_transaction(transaction)

        logger.info("Sending deployment transaction...")
        tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

        logger.info(f"Transaction sent: {tx_hash.hex()}")
        logger.info("Waiting for confirmation...")

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)

        if receipt['status'] != 1:
            raise RuntimeError(f"Deployment transaction failed: {tx_hash.hex()}")

        logger.success(f"Transaction confirmed in block {receipt['blockNumber']}")
        logger.info(f"Gas used: {receipt['gasUsed']}")
        return receipt
