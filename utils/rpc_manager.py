"""
RPC Manager
Builds the Web3 connection for the selected network
"""

from typing import Optional
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware
from loguru import logger

from deployer.settings import NetworkConfig


class RPCManager:
    """
    One HTTP provider per network, created lazily
    - POA chains get the extraData middleware
    - connect() refuses a node serving a different chain
    """
    
    def __init__(self, network: NetworkConfig, request_timeout: int = 30):
        """
        Initialize RPC Manager
        
        Args:
            network: Network to connect to
            request_timeout: HTTP request timeout in seconds
        """
        self.network = network
        self.request_timeout = request_timeout
        self._w3: Optional[Web3] = None
    
    def get_web3(self) -> Web3:
        """
        Get Web3 instance for the network (no request is made)
        
        Raises:
            ValueError: network has no RPC URL configured
        """
        if self._w3 is not None:
            return self._w3
        
        if not self.network.rpc_url:
            raise ValueError(f"No RPC URL configured for network {self.network.name}")
        
        w3 = Web3(Web3.HTTPProvider(
            self.network.rpc_url,
            request_kwargs={'timeout': self.request_timeout}
        ))
        
        if self.network.poa:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        
        self._w3 = w3
        return w3
    
    def connect(self) -> Web3:
        """
        Connect and check the node serves the configured chain
        
        Raises:
            ConnectionError: node unreachable or on another chain
        """
        w3 = self.get_web3()
        
        if not w3.is_connected():
            raise ConnectionError(f"Failed to connect to {self.network.name}")
        
        chain_id = w3.eth.chain_id
        if chain_id != self.network.chain_id:
            raise ConnectionError(
                f"RPC for {self.network.name} reports chain ID {chain_id}, "
                f"expected {self.network.chain_id}"
            )
        
        logger.success(f"Connected to {self.network.name} (chain {chain_id}, block {w3.eth.block_number})")
        return w3
