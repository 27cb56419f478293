"""
Contract Manager
Handles DonuetteMiner, deploy helper and DonuettesComining contract access
"""

import os
import json
from typing import Dict, List, Tuple
from web3 import Web3
from loguru import logger

DEFAULT_ARTIFACT_PATH = "artifacts/contracts/DonuettesComining.sol/DonuettesComining.json"


class ContractManager:
    """
    Creates contract instances and performs read-only calls
    """

    def __init__(self, w3: Web3, config: Dict):
        """
        Initialize Contract Manager

        Args:
            w3: Web3 instance
            config: Deployment configuration
        """
        self.w3 = w3
        self.config = config

        self.artifact_path = artifact_path_from_config(config)

        logger.info("Contract Manager initialized")

    def has_code(self, address: str) -> bool:
        """Check whether a contract is deployed at address"""
        code = self.w3.eth.get_code(Web3.to_checksum_address(address))
        return len(code) > 0

    def load_miner_contract(self, miner_address: str):
        """Load DonuetteMiner contract instance (view ABI only)"""
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(miner_address),
            abi=self.get_miner_abi()
        )

    def get_donuette_address(self, miner_address: str) -> str:
        """
        Read the Donuette token address from DonuetteMiner

        Args:
            miner_address: DonuetteMiner contract address

        Returns:
            Donuette token checksum address
        """
        if not self.has_code(miner_address):
            raise RuntimeError(f"No contract deployed at DonuetteMiner address {miner_address}")

        miner = self.load_miner_contract(miner_address)
        donuette = miner.functions.donuette().call()

        if not donuette or is_zero_address(donuette):
            raise RuntimeError(
                f"DonuetteMiner at {miner_address} returned the zero address for donuette()"
            )

        return Web3.to_checksum_address(donuette)

    def load_deployer_contract(self, helper_address: str):
        """Load DeployDonuettesComining helper contract instance"""
        if not self.has_code(helper_address):
            raise RuntimeError(f"No contract deployed at helper address {helper_address}")

        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(helper_address),
            abi=self.get_deployer_abi()
        )

        logger.success(f"DeployDonuettesComining helper loaded at {helper_address}")
        return contract

    def load_comining_artifact(self) -> Tuple[List[Dict], str]:
        """
        Load compiled DonuettesComining artifact

        Accepts Hardhat artifacts (bytecode as hex string) and Remix
        artifacts (bytecode under {"object": ...}).

        Returns:
            (abi, bytecode)
        """
        if not os.path.exists(self.artifact_path):
            raise FileNotFoundError(
                f"Contract artifact not found: {self.artifact_path} "
                "(compile DonuettesComining.sol first)"
            )

        with open(self.artifact_path, 'r') as f:
            artifact = json.load(f)

        abi = artifact.get('abi') or self.get_comining_constructor_abi()

        bytecode = artifact.get('bytecode') or artifact.get('data', {}).get('bytecode', '')
        if isinstance(bytecode, dict):
            bytecode = bytecode.get('object', '')

        if bytecode and not bytecode.startswith('0x'):
            bytecode = '0x' + bytecode

        if not bytecode or bytecode == '0x':
            raise ValueError(f"Artifact {self.artifact_path} has no bytecode")

        logger.info(f"Loaded DonuettesComining artifact ({(len(bytecode) - 2) // 2} bytes)")
        return abi, bytecode

    def load_comining_factory(self):
        """Contract factory for direct DonuettesComining deployment"""
        abi, bytecode = self.load_comining_artifact()
        return self.w3.eth.contract(abi=abi, bytecode=bytecode)

    def get_miner_abi(self) -> List[Dict]:
        """Minimal DonuetteMiner ABI"""
        return [
            {
                "inputs": [],
                "name": "donuette",
                "outputs": [{"internalType": "address", "name": "", "type": "address"}],
                "stateMutability": "view",
                "type": "function"
            }
        ]

    def get_deployer_abi(self) -> List[Dict]:
        """Minimal DeployDonuettesComining helper ABI"""
        return [
            {
                "inputs": [
                    {"internalType": "address", "name": "_miner", "type": "address"},
                    {"internalType": "address", "name": "_donuette", "type": "address"},
                    {"internalType": "address", "name": "_donut", "type": "address"},
                    {"internalType": "address", "name": "_provider", "type": "address"}
                ],
                "name": "deploy",
                "outputs": [{"internalType": "address", "name": "pool", "type": "address"}],
                "stateMutability": "nonpayable",
                "type": "function"
            }
        ]

    def get_comining_constructor_abi(self) -> List[Dict]:
        """DonuettesComining constructor ABI"""
        return [
            {
                "inputs": [
                    {"internalType": "address", "name": "_miner", "type": "address"},
                    {"internalType": "address", "name": "_donuette", "type": "address"},
                    {"internalType": "address", "name": "_donut", "type": "address"},
                    {"internalType": "address", "name": "_provider", "type": "address"}
                ],
                "stateMutability": "nonpayable",
                "type": "constructor"
            }
        ]


def is_zero_address(address: str) -> bool:
    return int(address, 16) == 0


def artifact_path_from_config(config: Dict) -> str:
    """Compiled DonuettesComining artifact path, with the Hardhat default"""
    return config.get('artifacts', {}).get('donuettes_comining', DEFAULT_ARTIFACT_PATH)
