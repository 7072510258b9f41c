"""
Smart Contract Tests
Deploys SVGNFT on a local development node and mints from the SVG asset
"""

import os
import pytest
from pathlib import Path
from web3 import Web3

from blockchain.compiler import ContractCompiler
from blockchain.contract_manager import SVGNFTContract
from blockchain.deployment_store import DeploymentStore
from deployer.deploy_engine import SVGNFTDeployer
from deployer.framework import Web3Framework
from deployer.settings import CompilerSettings, DeploymentConfig, NetworkTable, load_network_table
from deployer.wallet_manager import WalletManager
from utils.rpc_manager import RPCManager
from utils.token_uri import decode_svg_image, parse_token_uri

# Note: These tests require a local Hardhat node
# Run: npx hardhat node
# Then: pytest tests/test_contracts.py

ROOT = Path(__file__).resolve().parent.parent
SVG_PATH = ROOT / 'img' / 'triangle.svg'


@pytest.fixture(scope='module')
def network():
    """Local network from the shipped table, skipped when no node is running"""
    network = load_network_table(str(ROOT / 'config' / 'network_config.json')).get(31337)
    
    try:
        RPCManager(network, request_timeout=5).connect()
    except (ConnectionError, OSError) as e:
        pytest.skip(f"Local node not available: {e}")
    
    return network


@pytest.fixture
def w3(network):
    return RPCManager(network).connect()


@pytest.fixture
def deployer(w3, network, tmp_path):
    """Deployer writing artifacts and records under tmp_path"""
    compiler = ContractCompiler(CompilerSettings(
        versions=('0.8.2',),
        sources_dir=str(ROOT / 'contracts'),
        artifacts_dir=str(tmp_path / 'artifacts')
    ))
    
    config = DeploymentConfig(
        networks=NetworkTable({31337: network}, default_network='hardhat'),
        chain_id=31337,
        svg_path=str(SVG_PATH),
        confirmation_timeout=60,
        poll_interval=0.2,
        deployments_dir=str(tmp_path / 'deployments')
    )
    
    framework = Web3Framework(
        w3,
        network,
        compiler,
        store=DeploymentStore(config.deployments_dir),
        confirmation_timeout=config.confirmation_timeout,
        poll_interval=config.poll_interval
    )
    
    return SVGNFTDeployer(config, framework, WalletManager(network, config.named_accounts), w3)


def client_for(w3, result):
    """Read-only SVGNFT client for a finished run"""
    return SVGNFTContract(w3, result.deployment.address, None, None, abi=result.deployment.abi)


@pytest.mark.asyncio
async def test_deploy_and_mint(deployer, w3):
    """Test contract deployment and minting from the SVG file"""
    result = await deployer.run()
    
    address = result.deployment.address
    assert Web3.is_checksum_address(address)
    assert int(address, 16) != 0
    assert w3.eth.get_code(address) != b''
    assert result.receipt.status == 1


@pytest.mark.asyncio
async def test_token_uri_embeds_svg(deployer):
    """Test token URI decodes back to the source SVG"""
    result = await deployer.run()
    
    metadata = parse_token_uri(result.token_uri)
    assert metadata['name']
    assert decode_svg_image(metadata['image']) == SVG_PATH.read_text()


@pytest.mark.asyncio
async def test_token_uri_is_stable(deployer, w3):
    """Test repeated reads return the same URI"""
    result = await deployer.run()
    
    nft = client_for(w3, result)
    first = nft.token_uri(result.token_id)
    second = nft.token_uri(result.token_id)
    
    assert first == second == result.token_uri


@pytest.mark.asyncio
async def test_minted_to_deployer(deployer, w3):
    """Test the minted token belongs to the deployer"""
    result = await deployer.run()
    
    nft = client_for(w3, result)
    assert nft.owner_of(result.token_id) == result.deployment.deployer
    assert nft.token_counter() == result.token_id + 1


@pytest.mark.asyncio
async def test_each_run_deploys_new_contract(deployer):
    """Test repeated runs deploy distinct contracts"""
    first = await deployer.run()
    second = await deployer.run()
    
    assert first.deployment.address != second.deployment.address


@pytest.mark.asyncio
async def test_deployment_record_written(deployer, tmp_path):
    """Test the record is persisted per network"""
    result = await deployer.run()
    
    record = DeploymentStore(str(tmp_path / 'deployments')).load('hardhat', 'SVGNFT')
    assert record.address == result.deployment.address
    assert os.path.exists(tmp_path / 'artifacts' / 'contracts' / 'SVGNFT.sol' / 'SVGNFT.json')
