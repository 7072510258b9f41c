"""
Contract Manager
Client for the deployed SVGNFT contract
"""

from typing import Dict, List, Optional
from web3 import Web3
from web3.logs import DISCARD
from eth_account.signers.local import LocalAccount
from loguru import logger

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class SVGNFTContract:
    """
    Typed handle on a deployed SVGNFT contract
    
    Reads go straight to the node; writes are submitted through the
    deployment framework so they share its nonce and confirmation handling.
    """
    
    def __init__(
        self,
        w3: Web3,
        address: str,
        signer: LocalAccount,
        framework,
        abi: Optional[List[Dict]] = None
    ):
        """
        Initialize SVGNFT client (no network call)
        
        Args:
            w3: Web3 instance
            address: Deployed contract address
            signer: Account that signs writes
            framework: DeploymentFramework used to submit transactions
            abi: Compiled ABI, minimal ABI if None
        """
        self.w3 = w3
        self.signer = signer
        self.framework = framework
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=abi or self._get_minimal_svgnft_abi()
        )
    
    @property
    def address(self) -> str:
        return self.contract.address
    
    async def create(self, svg: str):
        """
        Submit create(svg)
        
        Args:
            svg: SVG markup
        
        Returns:
            PendingTransaction
        """
        return await self.framework.send_transaction(
            self.contract, 'create', [svg], self.signer
        )
    
    def token_uri(self, token_id: int) -> str:
        return self.contract.functions.tokenURI(token_id).call()
    
    def token_counter(self) -> int:
        return self.contract.functions.tokenCounter().call()
    
    def owner_of(self, token_id: int) -> str:
        return self.contract.functions.ownerOf(token_id).call()
    
    def minted_token_id(self, receipt) -> int:
        """
        Token ID minted by a create() receipt
        
        Args:
            receipt: Raw transaction receipt
        
        Raises:
            RuntimeError: receipt carries no mint Transfer event
        """
        events = self.contract.events.Transfer().process_receipt(receipt, errors=DISCARD)
        
        for event in events:
            if Web3.to_checksum_address(event['address']) != self.address:
                continue
            
            if event['args']['from'] == ZERO_ADDRESS:
                token_id = int(event['args']['tokenId'])
                logger.debug(f"Mint event: token {token_id} -> {event['args']['to']}")
                return token_id
        
        raise RuntimeError(
            f"No mint Transfer event in transaction {Web3.to_hex(receipt['transactionHash'])}"
        )
    
    def _get_minimal_svgnft_abi(self) -> List[Dict]:
        """
        Get minimal ABI for SVGNFT contract
        Used when compiled artifacts are not available
        """
        return [
            {
                "inputs": [{"name": "svg", "type": "string"}],
                "name": "create",
                "outputs": [{"name": "", "type": "uint256"}],
                "stateMutability": "nonpayable",
                "type": "function"
            },
            {
                "inputs": [{"name": "tokenId", "type": "uint256"}],
                "name": "tokenURI",
                "outputs": [{"name": "", "type": "string"}],
                "stateMutability": "view",
                "type": "function"
            },
            {
                "inputs": [],
                "name": "tokenCounter",
                "outputs": [{"name": "", "type": "uint256"}],
                "stateMutability": "view",
                "type": "function"
            },
            {
                "inputs": [{"name": "tokenId", "type": "uint256"}],
                "name": "ownerOf",
                "outputs": [{"name": "", "type": "address"}],
                "stateMutability": "view",
                "type": "function"
            },
            {
                "anonymous": False,
                "inputs": [
                    {"indexed": True, "name": "from", "type": "address"},
                    {"indexed": True, "name": "to", "type": "address"},
                    {"indexed": True, "name": "tokenId", "type": "uint256"}
                ],
                "name": "Transfer",
                "type": "event"
            }
        ]
