"""
System Check Script
Verifies configuration and on-chain prerequisites before deploying

Run: python -m scripts.check_system [--config config/deploy_config.json]
"""

import os
import sys
import argparse
import json
from loguru import logger
from dotenv import load_dotenv

from blockchain.contract_manager import ContractManager, artifact_path_from_config
from deployer.config import load_config, load_deployment_addresses, REQUIRED_ADDRESS_VARS
from utils.rpc_manager import RPCManager

load_dotenv()

DEFAULT_CONFIG_PATH = "config/deploy_config.json"


def check_environment_variables():
    """Check if all required environment variables are set and valid"""
    logger.info("Checking environment variables...")

    missing = [var for var in REQUIRED_ADDRESS_VARS if not os.getenv(var)]

    if missing:
        logger.error(f"Missing environment variables: {', '.join(missing)}")
        return False

    try:
        load_deployment_addresses()
    except ValueError as e:
        logger.error(f"  ✗ {e}")
        return False

    if not os.getenv('DEPLOYER_PRIVATE_KEY'):
        logger.warning("  DEPLOYER_PRIVATE_KEY not set - only --mode instructions available")

    logger.success("✓ All environment variables set")
    return True


def check_configuration_file(config_path=DEFAULT_CONFIG_PATH):
    """Check that the settings file exists and parses"""
    logger.info("Checking configuration file...")

    if not os.path.exists(config_path):
        logger.error(f"  ✗ {config_path} not found")
        return False

    try:
        with open(config_path, 'r') as f:
            json.load(f)
    except ValueError as e:
        logger.error(f"  ✗ {config_path}: {e}")
        return False

    logger.success(f"  ✓ {config_path}")
    return True


def check_rpc_connection(config_path=DEFAULT_CONFIG_PATH):
    """Check RPC endpoint connections"""
    logger.info("Checking RPC connections...")

    rpc_manager = RPCManager(load_config(config_path))
    status = rpc_manager.get_endpoint_status()

    if not status:
        logger.error("No RPC endpoints configured (set RPC_URL)")
        return False

    for name, endpoint in status.items():
        if endpoint['connected']:
            logger.success(f"  ✓ {name}: Connected (Block: {endpoint['block']})")
        else:
            logger.error(f"  ✗ {name}: Connection failed")

    if not rpc_manager.is_healthy():
        logger.error("No RPC connections available!")
        return False

    logger.success(f"✓ Using {rpc_manager.get_primary_name()}")
    return True


def check_contract_deployments(config_path=DEFAULT_CONFIG_PATH):
    """Check that referenced contracts exist on-chain"""
    logger.info("Checking referenced contracts...")

    config = load_config(config_path)
    addresses = load_deployment_addresses()
    contract_manager = ContractManager(RPCManager(config).get_web3(), config)

    targets = [
        ('DonuetteMiner', addresses['miner']),
        ('DONUT token', addresses['donut'])
    ]
    if addresses['helper']:
        targets.append(('DeployDonuettesComining helper', addresses['helper']))

    ok = True
    for name, address in targets:
        if contract_manager.has_code(address):
            logger.success(f"  ✓ {name} deployed at {address}")
        else:
            logger.error(f"  ✗ No contract at {address} ({name})")
            ok = False

    if ok:
        donuette = contract_manager.get_donuette_address(addresses['miner'])
        logger.success(f"  ✓ Donuette token: {donuette}")

    return ok


def check_artifact(config_path=DEFAULT_CONFIG_PATH):
    """Check compiled artifact (needed for --mode direct only)"""
    logger.info("Checking compiled artifact...")

    artifact_path = artifact_path_from_config(load_config(config_path))

    if not os.path.exists(artifact_path):
        logger.warning(f"  Artifact not found: {artifact_path}")
        logger.info("  Only needed for --mode direct")
    else:
        logger.success(f"  ✓ {artifact_path}")

    return True


def log_summary(results) -> bool:
    """Log PASS/FAIL per check, returning True when every check passed"""
    logger.info("")
    logger.info("=" * 70)
    logger.info("Deployment readiness")
    logger.info("=" * 70)

    for name, result in results:
        logger.info(f"  {'✓ PASS' if result else '✗ FAIL'}: {name}")

    passed = sum(1 for _, result in results if result)
    logger.info(f"{passed}/{len(results)} checks passed")

    return passed == len(results)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Check DonuettesComining deployment prerequisites")
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH, help="Settings file used by main.py")
    return parser.parse_args(argv)


def main(argv=None):
    """Run all system checks against the given settings file"""
    args = parse_args(argv)

    logger.info("=" * 70)
    logger.info(f"DonuettesComining Deployment System Check ({args.config})")
    logger.info("=" * 70)

    checks = [
        ("Environment Variables", lambda config_path: check_environment_variables()),
        ("Configuration File", check_configuration_file),
        ("RPC Connection", check_rpc_connection),
        ("Referenced Contracts", check_contract_deployments),
        ("Compiled Artifact", check_artifact)
    ]

    results = []

    for name, check_func in checks:
        logger.info("")
        try:
            results.append((name, bool(check_func(args.config))))
        except Exception as e:
            logger.error(f"Error in {name}: {e}")
            results.append((name, False))

    if log_summary(results):
        logger.success("✅ Ready to deploy!")
        logger.info(f"Print instructions: python main.py --config {args.config}")
        return 0

    logger.error("❌ Not ready - fix issues above")
    return 1


if __name__ == "__main__":
    sys.exit(main())
