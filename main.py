"""
DonuettesComining Deployment - Main Entry Point
Resolves constructor arguments and prints Remix instructions or deploys
"""

import argparse
import sys
from loguru import logger

from deployer.config import load_config, load_deployment_addresses
from deployer.deployment_engine import DonuettesCominingDeployer, MODES
from deployer.wallet_manager import WalletManager
from utils.rpc_manager import RPCManager
from utils.env_file import update_env_file

DEPLOYED_ADDRESS_KEY = 'DONUETTES_COMINING_ADDRESS'


def configure_logging(log_file: str = "data/logs/deploy.log"):
    """Console INFO sink plus rotating DEBUG file sink"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="INFO"
    )
    logger.add(
        log_file,
        rotation="1 day",
        retention="7 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        level="DEBUG"
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Deploy the DonuettesComining contract")
    parser.add_argument(
        '--mode',
        choices=MODES,
        default='instructions',
        help="instructions: print Remix steps (default); helper: deploy via "
             "DeployDonuettesComining; direct: deploy from compiled bytecode"
    )
    parser.add_argument('--config', default="config/deploy_config.json", help="Settings file")
    parser.add_argument('--yes', action='store_true', help="Skip the confirmation prompt")
    parser.add_argument('--no-env-update', action='store_true', help="Do not write the deployed address to .env")
    return parser.parse_args(argv)


def run(args) -> int:
    """Run one deployment flow, returning the process exit code"""
    config = load_config(args.config)
    addresses = load_deployment_addresses()

    w3 = RPCManager(config).get_web3()

    wallet_manager = WalletManager() if args.mode != 'instructions' else None

    deployer = DonuettesCominingDeployer(w3, config, addresses)
    deployed_address = deployer.run(args.mode, wallet_manager=wallet_manager, confirm=not args.yes)

    if deployed_address and not args.no_env_update:
        env_path = config.get('env_file', '.env')
        if not update_env_file(DEPLOYED_ADDRESS_KEY, deployed_address, env_path):
            logger.warning(f"Deployed at {deployed_address} but {env_path} was not updated - record {DEPLOYED_ADDRESS_KEY} manually")

    return 0


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    configure_logging()

    logger.info("=" * 70)
    logger.info("DonuettesComining Deployment")
    logger.info("=" * 70)

    try:
        return run(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"Deployment failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
