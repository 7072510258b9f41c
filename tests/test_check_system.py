"""
Unit Tests for the preflight System Check
"""

import pytest
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

from deployer.settings import DeploymentConfig, NetworkConfig, NetworkTable
from scripts import check_system

ROOT = Path(__file__).resolve().parent.parent
HARDHAT_MNEMONIC = "test test test test test test test test test test test junk"


@pytest.fixture
def network():
    return NetworkConfig(
        chain_id=31337,
        name='hardhat',
        rpc_url='http://127.0.0.1:8545',
        mnemonic=HARDHAT_MNEMONIC
    )


@pytest.fixture
def config(network, tmp_path):
    svg = tmp_path / 'triangle.svg'
    svg.write_text('<svg/>')
    return DeploymentConfig(networks=NetworkTable({31337: network}), chain_id=31337, svg_path=str(svg))


class TestChecks:
    """Test individual checks"""
    
    def test_configuration_files(self, monkeypatch):
        """Test shipped config files parse"""
        monkeypatch.chdir(ROOT)
        
        assert check_system.check_configuration_files() is True
    
    def test_missing_configuration_files(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        
        assert check_system.check_configuration_files() is False
    
    def test_network_settings(self, network):
        assert check_system.check_environment_variables(network) is True
    
    def test_network_without_account(self):
        """Test missing RPC URL and mnemonic fail the check"""
        network = NetworkConfig(chain_id=4, name='rinkeby', rpc_url=None)
        
        assert check_system.check_environment_variables(network) is False
    
    def test_svg_asset(self, config, tmp_path):
        assert check_system.check_svg_asset(config) is True
        
        missing = DeploymentConfig(networks=config.networks, chain_id=31337, svg_path=str(tmp_path / 'none.svg'))
        assert check_system.check_svg_asset(missing) is False
    
    def test_funded_deployer(self, network, config):
        """Test RPC check passes with a funded deployer"""
        with patch.object(check_system, 'RPCManager'), \
                patch.object(check_system.WalletManager, 'get_balance', return_value=Decimal('10')):
            assert check_system.check_rpc_and_balance(network, config) is True
    
    def test_unfunded_deployer(self, network, config):
        with patch.object(check_system, 'RPCManager'), \
                patch.object(check_system.WalletManager, 'get_balance', return_value=Decimal('0')):
            assert check_system.check_rpc_and_balance(network, config) is False
    
    def test_unreachable_node(self, network, config):
        """Test connection errors are reported as a failed check"""
        with patch.object(check_system, 'RPCManager') as rpc_manager:
            rpc_manager.return_value.connect.side_effect = ConnectionError('Failed to connect to hardhat')
            
            assert check_system.check_rpc_and_balance(network, config) is False
