"""
Nonce Manager
Hands out sequential nonces per signer so deploy and mint never collide
"""

import asyncio
from typing import Dict, Set
from web3 import Web3
from loguru import logger


class NonceManager:
    """
    Tracks the next nonce for each signing address
    Nonces are handed out under a lock and resynced from the node after a failed broadcast
    """
    
    def __init__(self, w3: Web3):
        """
        Initialize Nonce Manager
        
        Args:
            w3: Web3 instance
        """
        self.w3 = w3
        
        self.current_nonces: Dict[str, int] = {}
        self.pending_nonces: Dict[str, Set[int]] = {}
        self.lock = asyncio.Lock()
    
    def _sync_nonce(self, address: str) -> int:
        """Sync nonce with blockchain (confirmed + pending)"""
        nonce = self.w3.eth.get_transaction_count(address, 'pending')
        self.current_nonces[address] = nonce
        logger.debug(f"Nonce synced for {address}: {nonce}")
        return nonce
    
    async def get_nonce(self, address: str) -> int:
        """
        Allocate the next nonce for an address
        
        Args:
            address: Signer address
        
        Returns:
            Nonce to use
        """
        address = Web3.to_checksum_address(address)
        
        async with self.lock:
            if address not in self.current_nonces:
                self._sync_nonce(address)
            
            nonce = self.current_nonces[address]
            self.current_nonces[address] = nonce + 1
            self.pending_nonces.setdefault(address, set()).add(nonce)
            
            logger.debug(f"Allocated nonce {nonce} for {address}")
            return nonce
    
    async def confirm_nonce(self, address: str, nonce: int):
        """Mark a nonce as mined"""
        address = Web3.to_checksum_address(address)
        
        async with self.lock:
            self.pending_nonces.get(address, set()).discard(nonce)
    
    async def reset_nonce(self, address: str):
        """Resync from chain after a failed broadcast"""
        address = Web3.to_checksum_address(address)
        
        async with self.lock:
            self._sync_nonce(address)
            self.pending_nonces.pop(address, None)
            logger.warning(f"Nonce reset for {address}: {self.current_nonces[address]}")
    
    def get_pending_count(self, address: str) -> int:
        return len(self.pending_nonces.get(Web3.to_checksum_address(address), ()))
