"""
SVGNFT Deploy Engine
Deploys SVGNFT, mints one token from the SVG asset and reads its URI back
"""

import os
from dataclasses import dataclass
from typing import Optional
from web3 import Web3
from loguru import logger

from blockchain.contract_manager import SVGNFTContract
from blockchain.deployment_store import DeploymentRecord
from utils.token_uri import is_json_data_uri, parse_token_uri

from .framework import DeploymentFramework, TransactionReceipt
from .settings import DeploymentConfig
from .wallet_manager import WalletManager


@dataclass(frozen=True)
class MintResult:
    """Outcome of one deploy-and-mint run"""
    deployment: DeploymentRecord
    receipt: TransactionReceipt
    token_id: int
    token_uri: str


class SVGNFTDeployer:
    """
    Runs the deployment procedure in a fixed order:
    identity -> payload -> deploy -> bind -> mint -> confirm -> read back
    
    Nothing is caught here; any failure aborts the run and whatever was
    already deployed stays on-chain.
    """
    
    def __init__(
        self,
        config: DeploymentConfig,
        framework: DeploymentFramework,
        wallet_manager: WalletManager,
        w3: Web3
    ):
        """
        Initialize deployer
        
        Args:
            config: Deployment configuration
            framework: Deploy/send/confirm primitives
            wallet_manager: Source of the named deployer account
            w3: Web3 instance used to bind the contract client
        """
        self.config = config
        self.framework = framework
        self.wallet_manager = wallet_manager
        self.w3 = w3
    
    def load_svg(self) -> str:
        """
        Read the SVG payload
        
        Raises:
            FileNotFoundError: asset missing
        """
        path = self.config.svg_path
        
        if not os.path.isfile(path):
            raise FileNotFoundError(f"SVG asset not found: {path}")
        
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    
    async def run(self) -> MintResult:
        """
        Deploy and mint
        
        Returns:
            MintResult with the deployment, mint receipt and token URI
        """
        # Identity: unknown chain fails here, before any RPC call
        network = self.config.networks.get(self.config.chain_id)
        deployer = self.wallet_manager.get_named_account('deployer')
        
        logger.info("=" * 40)
        logger.info(f"Network: {network.name} (chain {network.chain_id})")
        logger.info(f"Deployer: {deployer.address}")
        
        svg = self.load_svg()
        logger.info(f"Loaded {len(svg)} bytes of SVG from {self.config.svg_path}")
        
        deployment = await self.framework.deploy_contract(self.config.contract_name, deployer)
        logger.info(f"{self.config.contract_name}: {deployment.address}")
        
        self._log_verify_hint(network, deployment.address)
        
        nft = SVGNFTContract(
            self.w3,
            deployment.address,
            deployer,
            self.framework,
            abi=deployment.abi or None
        )
        
        tx = await nft.create(svg)
        logger.info(f"Transaction hash: {tx.hash}")
        
        receipt = await self.framework.await_confirmation(tx, self.config.confirmations)
        logger.info(f"Confirmed in block {receipt.block_number} ({receipt.confirmations} confirmations)")
        
        token_id = nft.minted_token_id(receipt.raw)
        token_uri = nft.token_uri(token_id)
        logger.info(f"TokenURI: {token_uri}")
        
        # Off-chain metadata is only logged, not fetched
        if is_json_data_uri(token_uri):
            metadata = parse_token_uri(token_uri)
            if isinstance(metadata, dict):
                logger.info(f"Token {token_id} metadata name: {metadata.get('name')}")
        
        logger.success(f"Minted token {token_id} on {deployment.address}")
        
        return MintResult(
            deployment=deployment,
            receipt=receipt,
            token_id=token_id,
            token_uri=token_uri
        )
    
    def _log_verify_hint(self, network, address: str):
        explorer_url: Optional[str] = network.address_url(address)
        
        if not network.explorer_api_key_env:
            logger.info(f"No block explorer configured for {network.name}, skipping verification hint")
            return
        
        key_state = "set" if network.explorer_api_key else "not set"
        logger.info(
            f"Verify source for {address} on {network.name}:\n {explorer_url}#code"
            f"\n ({network.explorer_api_key_env} {key_state})"
        )
