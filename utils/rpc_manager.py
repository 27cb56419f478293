"""
RPC Manager
Connects to the first reachable endpoint from an ordered fallback list
"""

import os
from typing import Dict, List, Optional
from web3 import Web3
from loguru import logger
from dotenv import load_dotenv

load_dotenv()


class RPCManager:
    """
    Ordered RPC endpoint list

    Endpoint URLs are read from the environment variables listed in
    config['network']['rpc_url_envs']; the first one is primary.
    """

    def __init__(self, config: Dict):
        """
        Initialize RPC Manager

        Args:
            config: Deployment configuration
        """
        network = config.get('network', {})

        self.expected_chain_id = network.get('chain_id')
        self.request_timeout = network.get('request_timeout_seconds', 30)

        self.endpoints = self._init_endpoints(network.get('rpc_url_envs', ['RPC_URL']))

        # Web3 instances for endpoints that answered
        self.w3_instances = {}
        self._create_web3_instances()

        logger.info(
            f"RPC Manager initialized with {len(self.endpoints)} endpoints "
            f"({len(self.w3_instances)} connected)"
        )

    def _init_endpoints(self, env_names: List[str]) -> List[Dict]:
        """Resolve endpoint URLs from environment variable names"""
        endpoints = []

        for env_name in env_names:
            url = os.getenv(env_name)

            if url:
                endpoints.append({'name': env_name, 'http_url': url})
            else:
                logger.debug(f"{env_name} not set, skipping")

        return endpoints

    def _create_web3_instances(self):
        """Create Web3 instances for each endpoint"""
        for endpoint in self.endpoints:
            name = endpoint['name']

            try:
                w3 = Web3(Web3.HTTPProvider(
                    endpoint['http_url'],
                    request_kwargs={'timeout': self.request_timeout}
                ))

                if w3.is_connected():
                    self.w3_instances[name] = w3
                    logger.success(f"Connected to {name}")
                else:
                    logger.warning(f"Failed to connect to {name}")

            except Exception as e:
                logger.error(f"Error creating Web3 for {name}: {e}")

    def get_web3(self) -> Web3:
        """
        Get Web3 instance for the highest-priority connected endpoint

        Returns:
            Web3 instance
        """
        for endpoint in self.endpoints:
            w3 = self.w3_instances.get(endpoint['name'])

            if w3 is None:
                continue

            if self.expected_chain_id is not None:
                node_chain_id = w3.eth.chain_id

                if node_chain_id != self.expected_chain_id:
                    raise RuntimeError(
                        f"{endpoint['name']} is on chain {node_chain_id}, "
                        f"expected {self.expected_chain_id}"
                    )

            return w3

        raise RuntimeError("No RPC endpoint available - set RPC_URL in .env")

    def is_healthy(self) -> bool:
        """Check if any endpoint is reachable"""
        try:
            return self.get_web3().is_connected()
        except Exception:
            return False

    def get_endpoint_status(self) -> Dict:
        """Get connection status of all endpoints"""
        status = {}

        for endpoint in self.endpoints:
            name = endpoint['name']
            w3 = self.w3_instances.get(name)

            status[name] = {
                'connected': w3 is not None,
                'block': None
            }

            if w3 is not None:
                try:
                    status[name]['block'] = w3.eth.block_number
                except Exception as e:
                    logger.warning(f"Could not read block number from {name}: {e}")

        return status

    def get_primary_name(self) -> Optional[str]:
        """Name of the endpoint get_web3() would use"""
        for endpoint in self.endpoints:
            if endpoint['name'] in self.w3_instances:
                return endpoint['name']
        return None
