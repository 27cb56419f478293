"""
Deployment Engine Tests
"""

import pytest
from decimal import Decimal
from unittest.mock import Mock, patch

from deployer.deployment_engine import DonuettesCominingDeployer

from tests.addresses import MINER, DONUETTE, DONUT, PROVIDER, HELPER, DEPLOYER_ADDRESS

DEPLOYED = '0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174'


@pytest.fixture
def contract_manager():
    manager = Mock()
    manager.get_donuette_address.return_value = DONUETTE
    manager.has_code.return_value = True
    return manager


@pytest.fixture
def wallet_manager():
    wallet = Mock()
    wallet.address = DEPLOYER_ADDRESS
    wallet.get_balance.return_value = Decimal('1')
    wallet.sign_transaction.return_value.raw_transaction = b'\x02\xf8'
    return wallet


@pytest.fixture
def chain(w3):
    """Web3 mock that accepts and mines transactions"""
    w3.eth.send_raw_transaction.return_value = b'\xab\xcd'
    w3.eth.wait_for_transaction_receipt.return_value = {
        'status': 1,
        'contractAddress': DEPLOYED,
        'blockNumber': 123,
        'gasUsed': 900000
    }
    return w3


@pytest.fixture
def tx_builder():
    with patch('deployer.deployment_engine.TransactionBuilder') as builder_cls:
        builder = builder_cls.return_value
        builder.build_constructor_tx.return_value = {'gas': 1000000, 'maxFeePerGas': 2000000000}
        builder.build_helper_deploy_tx.return_value = {'gas': 1000000, 'maxFeePerGas': 2000000000}
        builder.estimate_cost_wei.return_value = 2 * 10**15
        yield builder


def make_deployer(w3, config, addresses, contract_manager, answer='yes'):
    return DonuettesCominingDeployer(
        w3, config, addresses,
        contract_manager=contract_manager,
        confirm_fn=lambda prompt: answer
    )


class TestResolveAndInstructions:
    """Test address resolution and manual instructions"""

    def test_resolve_addresses(self, w3, config, addresses, contract_manager):
        deployer = make_deployer(w3, config, addresses, contract_manager)

        resolved = deployer.resolve_addresses()

        contract_manager.get_donuette_address.assert_called_once_with(MINER)
        assert list(resolved.items()) == [
            ('_miner', MINER),
            ('_donuette', DONUETTE),
            ('_donut', DONUT),
            ('_provider', PROVIDER)
        ]

    def test_view_call_failure_propagates(self, w3, config, addresses, contract_manager):
        contract_manager.get_donuette_address.side_effect = RuntimeError("No contract deployed")
        deployer = make_deployer(w3, config, addresses, contract_manager)

        with pytest.raises(RuntimeError):
            deployer.run('instructions')

    def test_build_instructions(self, w3, config, addresses, contract_manager):
        deployer = make_deployer(w3, config, addresses, contract_manager)
        resolved = deployer.resolve_addresses()

        lines = deployer.build_instructions(resolved)

        assert lines[:6] == [
            "=== Deployment Instructions ===",
            "1. Compile DonuettesComining.sol in Remix",
            "2. Go to Deploy & Run Transactions",
            "3. Select your environment (JavaScript VM or Injected Web3)",
            "4. Select 'DonuettesComining' from the contract dropdown",
            "5. Fill in the constructor parameters:",
        ]
        assert lines[6:11] == [
            f"   - _miner: {MINER}",
            f"   - _donuette: {DONUETTE}",
            f"   - _donut: {DONUT}",
            f"   - _provider: {PROVIDER}",
            "6. Click 'Deploy'",
        ]
        assert "Or use the DeployDonuettesComining helper contract for easier deployment!" in lines
        assert lines[-1] == "   " + deployer.encoded_constructor_args(resolved)

    def test_helper_hint_when_configured(self, w3, config, addresses, contract_manager):
        addresses['helper'] = HELPER
        deployer = make_deployer(w3, config, addresses, contract_manager)

        lines = deployer.build_instructions(deployer.resolve_addresses())

        assert any(line.startswith(f"   Helper at {HELPER}: call deploy({MINER}") for line in lines)

    def test_run_instructions_prints(self, w3, config, addresses, contract_manager, capsys):
        deployer = make_deployer(w3, config, addresses, contract_manager)

        assert deployer.run('instructions') is None

        out = capsys.readouterr().out
        assert "=== Deployment Instructions ===" in out
        assert f"   - _donuette: {DONUETTE}" in out
        w3.eth.send_raw_transaction.assert_not_called()

    def test_invalid_mode(self, w3, config, addresses, contract_manager):
        deployer = make_deployer(w3, config, addresses, contract_manager)

        with pytest.raises(ValueError, match='Invalid mode'):
            deployer.run('upgrade')

    def test_execution_mode_requires_wallet(self, w3, config, addresses, contract_manager):
        deployer = make_deployer(w3, config, addresses, contract_manager)

        with pytest.raises(ValueError, match='deployer wallet'):
            deployer.run('direct')


class TestDirectDeployment:
    """Test deployment from compiled bytecode"""

    def test_deploy_direct(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder):
        deployer = make_deployer(chain, config, addresses, contract_manager)

        address = deployer.run('direct', wallet_manager=wallet_manager)

        assert address == DEPLOYED
        tx_builder.build_constructor_tx.assert_called_once_with(
            contract_manager.load_comining_factory.return_value,
            [MINER, DONUETTE, DONUT, PROVIDER]
        )
        wallet_manager.sign_transaction.assert_called_once_with(tx_builder.build_constructor_tx.return_value)
        chain.eth.send_raw_transaction.assert_called_once_with(b'\x02\xf8')
        chain.eth.wait_for_transaction_receipt.assert_called_once_with(b'\xab\xcd', timeout=60)

    def test_cancelled(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder, log_messages):
        deployer = make_deployer(chain, config, addresses, contract_manager, answer='no')

        assert deployer.run('direct', wallet_manager=wallet_manager) is None
        assert "Deployment cancelled" in log_messages
        chain.eth.send_raw_transaction.assert_not_called()
        wallet_manager.sign_transaction.assert_not_called()

    def test_skip_confirmation(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder):
        deployer = make_deployer(chain, config, addresses, contract_manager, answer='no')

        assert deployer.run('direct', wallet_manager=wallet_manager, confirm=False) == DEPLOYED

    def test_failed_receipt(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder):
        chain.eth.wait_for_transaction_receipt.return_value = {'status': 0, 'blockNumber': 1, 'gasUsed': 1}
        deployer = make_deployer(chain, config, addresses, contract_manager)

        with pytest.raises(RuntimeError, match='abcd'):
            deployer.run('direct', wallet_manager=wallet_manager)

    def test_insufficient_balance(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder):
        wallet_manager.get_balance.return_value = Decimal('0.001')
        deployer = make_deployer(chain, config, addresses, contract_manager)

        with pytest.raises(RuntimeError, match='Insufficient balance'):
            deployer.run('direct', wallet_manager=wallet_manager)
        chain.eth.send_raw_transaction.assert_not_called()

    def test_balance_below_minimum_floor(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder):
        # Balance covers the 0.002 ETH cost but not the 0.01 ETH floor
        config['deployment']['min_balance_eth'] = 0.01
        wallet_manager.get_balance.return_value = Decimal('0.005')
        deployer = make_deployer(chain, config, addresses, contract_manager)

        with pytest.raises(RuntimeError, match='need 0.01 ETH'):
            deployer.run('direct', wallet_manager=wallet_manager)
        chain.eth.send_raw_transaction.assert_not_called()


class TestHelperDeployment:
    """Test deployment through DeployDonuettesComining"""

    def test_deploy_via_helper(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder):
        addresses['helper'] = HELPER
        helper = contract_manager.load_deployer_contract.return_value
        helper.functions.deploy.return_value.call.return_value = DEPLOYED.lower()
        deployer = make_deployer(chain, config, addresses, contract_manager)

        address = deployer.run('helper', wallet_manager=wallet_manager)

        assert address == DEPLOYED
        contract_manager.load_deployer_contract.assert_called_once_with(HELPER)
        helper.functions.deploy.assert_called_with(MINER, DONUETTE, DONUT, PROVIDER)
        tx_builder.build_helper_deploy_tx.assert_called_once_with(helper, [MINER, DONUETTE, DONUT, PROVIDER])
        contract_manager.has_code.assert_called_with(DEPLOYED)

    def test_helper_not_configured(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder):
        deployer = make_deployer(chain, config, addresses, contract_manager)

        with pytest.raises(ValueError, match='DEPLOY_HELPER_ADDRESS'):
            deployer.run('helper', wallet_manager=wallet_manager)

    def test_no_code_at_pool(self, chain, config, addresses, contract_manager, wallet_manager, tx_builder):
        addresses['helper'] = HELPER
        helper = contract_manager.load_deployer_contract.return_value
        helper.functions.deploy.return_value.call.return_value = DEPLOYED
        contract_manager.has_code.return_value = False
        deployer = make_deployer(chain, config, addresses, contract_manager)

        with pytest.raises(RuntimeError, match='no code'):
            deployer.run('helper', wallet_manager=wallet_manager)
