"""
System Check Script
Verifies configuration, assets and the node connection before deploying

Run from the project root:
    python -m scripts.check_system [network]
"""

import os
import sys
import json
from loguru import logger

from deployer.settings import NetworkConfigError, load_network_table, load_deployment_config
from deployer.wallet_manager import WalletManager
from utils.rpc_manager import RPCManager

CONFIG_FILES = [
    'config/network_config.json',
    'config/compiler_config.json',
    'config/deploy_config.json'
]


def check_configuration_files():
    """Check if all configuration files exist and parse"""
    logger.info("Checking configuration files...")
    
    missing = []
    for file_path in CONFIG_FILES:
        if not os.path.exists(file_path):
            missing.append(file_path)
            continue
        
        try:
            with open(file_path, 'r') as f:
                json.load(f)
            logger.success(f"  ✓ {file_path}")
        except ValueError as e:
            logger.error(f"  ✗ {file_path}: {e}")
            missing.append(file_path)
    
    if missing:
        logger.error(f"Missing/invalid config files: {', '.join(missing)}")
        return False
    
    logger.success("✓ All configuration files valid")
    return True


def check_environment_variables(network):
    """Check the network's RPC URL and account source"""
    logger.info(f"Checking settings for {network.name}...")
    
    ok = True
    if not network.rpc_url:
        logger.error("  ✗ RPC URL not set")
        ok = False
    if not network.mnemonic:
        logger.error("  ✗ No mnemonic (set MNEMONIC)")
        ok = False
    if network.explorer_api_key_env and not network.explorer_api_key:
        logger.warning(f"  {network.explorer_api_key_env} not set - source verification unavailable")
    
    if ok:
        logger.success("✓ Network settings complete")
    return ok


def check_svg_asset(config):
    """Check the SVG payload exists"""
    logger.info("Checking SVG asset...")
    
    if not os.path.isfile(config.svg_path):
        logger.error(f"  ✗ {config.svg_path} not found")
        return False
    
    logger.success(f"  ✓ {config.svg_path} ({os.path.getsize(config.svg_path)} bytes)")
    return True


def check_contract_sources():
    """Check contract sources exist"""
    logger.info("Checking contract sources...")
    
    if not os.path.isfile('contracts/SVGNFT.sol'):
        logger.error("  ✗ contracts/SVGNFT.sol not found")
        return False
    
    logger.success("  ✓ contracts/SVGNFT.sol")
    return True


def check_rpc_and_balance(network, config):
    """Check node connection and deployer balance"""
    logger.info("Checking RPC connection...")
    
    try:
        w3 = RPCManager(network).connect()
        wallet_manager = WalletManager(network, config.named_accounts)
        deployer = wallet_manager.get_named_account('deployer')
        balance = wallet_manager.get_balance(w3, deployer.address)
    except Exception as e:
        logger.error(f"  ✗ {e}")
        return False
    
    logger.info(f"  Deployer {deployer.address}: {balance:.4f}")
    
    if balance <= 0:
        logger.warning("  ⚠ Deployer has no funds")
        return False
    
    logger.success("  ✓ Deployer funded")
    return True


def main(network_name=None):
    """Run all system checks"""
    logger.info("=" * 70)
    logger.info("SVGNFT Deployer System Check")
    logger.info("=" * 70)
    
    if not check_configuration_files():
        return 1
    
    table = load_network_table()
    
    try:
        network = table.by_name(network_name or table.default_network)
    except NetworkConfigError as e:
        logger.error(str(e))
        return 1
    
    config = load_deployment_config(table, network.chain_id)
    
    checks = [
        ("Network Settings", lambda: check_environment_variables(network)),
        ("SVG Asset", lambda: check_svg_asset(config)),
        ("Contract Sources", check_contract_sources),
        ("RPC Connection", lambda: check_rpc_and_balance(network, config))
    ]
    
    results = []
    
    for name, check_func in checks:
        logger.info("")
        try:
            result = check_func()
            results.append((name, result))
        except Exception as e:
            logger.error(f"Error in {name}: {e}")
            results.append((name, False))
    
    # Summary
    logger.info("")
    logger.info("=" * 70)
    logger.info("Summary")
    logger.info("=" * 70)
    
    passed = sum(1 for _, result in results if result)
    total = len(results)
    
    for name, result in results:
        status = "✓ PASS" if result else "✗ FAIL"
        logger.info(f"  {status}: {name}")
    
    logger.info("")
    logger.info(f"Total: {passed}/{total} checks passed")
    
    if passed == total:
        logger.success("✅ Ready to deploy")
        logger.info(f"Deploy: python main.py --network {network.name} deploy")
        return 0
    
    logger.error("❌ Not ready - fix issues above")
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
