"""
Transaction Simulator
Dry-runs contract calls with eth_call before they are broadcast
"""

from typing import Dict, Optional
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3RPCError
from loguru import logger


class TransactionSimulator:
    """
    Simulates transactions to predict reverts
    Uses eth_call for free simulation
    Only revert errors are reported; anything else from the node propagates
    """
    
    def __init__(self, w3: Web3):
        """
        Initialize Transaction Simulator
        
        Args:
            w3: Web3 instance
        """
        self.w3 = w3
    
    def simulate_transaction(self, tx: Dict) -> Optional[str]:
        """
        Simulate transaction execution
        
        Args:
            tx: Transaction dict
        
        Returns:
            None if the call succeeds, otherwise the revert reason
        """
        call = {k: v for k, v in tx.items() if k in ('from', 'to', 'data', 'value', 'gas')}
        
        try:
            result = self.w3.eth.call(call)
            logger.debug(f"Simulation successful: {Web3.to_hex(result)[:20]}...")
            return None
        
        except ContractLogicError as e:
            logger.warning(f"Simulation reverted: {e}")
            return str(e) or "execution reverted"
        
        except (Web3RPCError, ValueError) as e:
            # Nodes that do not decode reverts report them as RPC errors
            if 'revert' in str(e).lower():
                logger.warning(f"Simulation reverted: {e}")
                return str(e)
            raise
