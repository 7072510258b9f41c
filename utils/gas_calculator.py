"""
Gas Calculator
Fee parameters and gas limits for deployment and mint transactions
"""

from typing import Dict, Optional
from web3 import Web3
from loguru import logger

DEFAULT_GAS_LIMIT = 3_000_000
GAS_LIMIT_BUFFER = 1.2


class GasCalculator:
    """
    Picks EIP-1559 fees when the chain reports a base fee, legacy gasPrice otherwise
    Estimates gas limits with a 20% buffer and falls back to a fixed default
    """
    
    def __init__(self, w3: Web3, max_fee_multiplier: int = 2):
        """
        Initialize Gas Calculator
        
        Args:
            w3: Web3 instance
            max_fee_multiplier: Base fee multiplier for maxFeePerGas
        """
        self.w3 = w3
        self.max_fee_multiplier = max_fee_multiplier
    
    def get_fee_params(self) -> Dict[str, int]:
        """
        Get fee fields for a transaction dict
        
        Returns:
            {'maxFeePerGas', 'maxPriorityFeePerGas'} or {'gasPrice'}
        """
        latest_block = self.w3.eth.get_block('latest')
        base_fee_wei = latest_block.get('baseFeePerGas')
        
        if base_fee_wei is None:
            gas_price_wei = self.w3.eth.gas_price
            logger.debug(f"Legacy gas price: {self.w3.from_wei(gas_price_wei, 'gwei')} gwei")
            return {'gasPrice': int(gas_price_wei)}
        
        priority_fee_wei = self.w3.eth.max_priority_fee
        
        # Max fee = base fee * 2 + priority fee (buffer for fluctuations)
        max_fee_wei = (base_fee_wei * self.max_fee_multiplier) + priority_fee_wei
        
        logger.debug(
            f"EIP-1559 fees: max {self.w3.from_wei(max_fee_wei, 'gwei')} gwei, "
            f"tip {self.w3.from_wei(priority_fee_wei, 'gwei')} gwei"
        )
        
        return {
            'maxFeePerGas': int(max_fee_wei),
            'maxPriorityFeePerGas': int(priority_fee_wei)
        }
    
    def estimate_gas_limit(self, tx: Dict, default: int = DEFAULT_GAS_LIMIT) -> int:
        """
        Estimate gas with a 20% buffer
        
        Args:
            tx: Transaction dict (without 'gas')
            default: Limit used when estimation fails
        
        Returns:
            Gas limit
        """
        try:
            gas_estimate = self.w3.eth.estimate_gas(tx)
            return int(gas_estimate * GAS_LIMIT_BUFFER)
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            return default
    
    def max_cost_wei(self, tx: Dict) -> Optional[int]:
        """Upper bound of the fee a transaction can pay"""
        price = tx.get('maxFeePerGas', tx.get('gasPrice'))
        if price is None or 'gas' not in tx:
            return None
        return int(tx['gas']) * int(price)
