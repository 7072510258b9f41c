"""
SVGNFT Deployer - Main Entry Point
Deploys the SVGNFT contract and mints one token from img/triangle.svg
"""

import argparse
import asyncio
import sys
from typing import Optional
from loguru import logger

from blockchain.compiler import ContractCompiler
from blockchain.deployment_store import DeploymentStore
from deployer.deploy_engine import SVGNFTDeployer
from deployer.framework import Web3Framework
from deployer.settings import (
    NetworkConfig,
    NetworkTable,
    load_compiler_settings,
    load_deployment_config,
    load_network_table,
)
from deployer.wallet_manager import WalletManager
from utils.rpc_manager import RPCManager


def configure_logging(level: str = "INFO"):
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level
    )
    logger.add(
        "data/logs/deploy.log",
        rotation="1 day",
        retention="7 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        level="DEBUG"
    )


def resolve_network(table: NetworkTable, name: Optional[str], chain_id: Optional[int]) -> NetworkConfig:
    """--chain-id wins over --network; falls back to the default network"""
    if chain_id is not None:
        return table.get(chain_id)
    return table.by_name(name or table.default_network)


async def deploy(args) -> int:
    """Deploy SVGNFT and mint one token"""
    table = load_network_table(args.network_config)
    network = resolve_network(table, args.network, args.chain_id)
    config = load_deployment_config(table, network.chain_id, args.deploy_config)
    
    # Account problems surface before we touch the network
    wallet_manager = WalletManager(network, config.named_accounts)
    wallet_manager.get_named_account('deployer')
    
    w3 = RPCManager(network).connect()
    
    framework = Web3Framework(
        w3,
        network,
        ContractCompiler(load_compiler_settings(args.compiler_config)),
        store=DeploymentStore(config.deployments_dir),
        confirmation_timeout=config.confirmation_timeout,
        poll_interval=config.poll_interval,
        simulate_before_send=config.simulate_before_send
    )
    
    deployer = SVGNFTDeployer(config, framework, wallet_manager, w3)
    result = await deployer.run()
    
    logger.success(f"Contract: {result.deployment.address}")
    logger.success(f"Token {result.token_id}: {result.token_uri[:64]}...")
    return 0


def list_accounts(args) -> int:
    """Print the derived accounts for a network"""
    table = load_network_table(args.network_config)
    network = resolve_network(table, args.network, args.chain_id)
    
    wallet_manager = WalletManager(network, table.named_accounts)
    for account in wallet_manager.get_accounts(args.count):
        print(account.address)
    
    return 0


def compile_contracts(args) -> int:
    """Compile everything under contracts/"""
    compiler = ContractCompiler(load_compiler_settings(args.compiler_config))
    artifacts = compiler.compile_all()
    
    for name, artifact in sorted(artifacts.items()):
        logger.info(f"  {name} (solc {artifact['compiler']})")
    
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser, suppress: bool = False):
    # Subcommands accept the same options; SUPPRESS keeps them from resetting top-level values
    default = (lambda value: argparse.SUPPRESS) if suppress else (lambda value: value)
    
    parser.add_argument('--network', default=default(None), help="Network name or alias (default from config)")
    parser.add_argument('--chain-id', type=int, default=default(None), help="Select network by chain ID")
    parser.add_argument('--network-config', default=default("config/network_config.json"))
    parser.add_argument('--compiler-config', default=default("config/compiler_config.json"))
    parser.add_argument('--deploy-config', default=default("config/deploy_config.json"))
    parser.add_argument('--log-level', default=default("INFO"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SVGNFT deployment tool")
    _add_common_arguments(parser)
    
    subparsers = parser.add_subparsers(dest='command')
    
    deploy_parser = subparsers.add_parser('deploy', help="Deploy SVGNFT and mint one token")
    _add_common_arguments(deploy_parser, suppress=True)
    
    accounts_parser = subparsers.add_parser('accounts', help="Print the list of accounts")
    _add_common_arguments(accounts_parser, suppress=True)
    accounts_parser.add_argument('--count', type=int, default=10)
    
    compile_parser = subparsers.add_parser('compile', help="Compile contracts")
    _add_common_arguments(compile_parser, suppress=True)
    
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    
    command = args.command or 'deploy'
    
    try:
        if command == 'accounts':
            return list_accounts(args)
        if command == 'compile':
            return compile_contracts(args)
        return asyncio.run(deploy(args))
    
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.opt(exception=e).error(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
