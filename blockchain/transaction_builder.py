"""
Transaction Builder
Constructs deployment and contract-call transactions
"""

from typing import Dict, List, Optional
from web3 import Web3
from web3.contract import Contract
from loguru import logger

from utils.gas_calculator import GasCalculator, DEFAULT_GAS_LIMIT


class TransactionBuilder:
    """
    Builds unsigned transaction dicts with nonce, gas and fee fields filled in
    Gas limits come from a node estimate plus buffer, fees from the GasCalculator
    """
    
    def __init__(self, w3: Web3, gas_calculator: GasCalculator):
        """
        Initialize Transaction Builder
        
        Args:
            w3: Web3 instance
            gas_calculator: Fee and gas limit source
        """
        self.w3 = w3
        self.gas_calculator = gas_calculator
        self._chain_id: Optional[int] = None
    
    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = self.w3.eth.chain_id
        return self._chain_id
    
    def _base_tx(self, sender: str, nonce: int) -> Dict:
        tx = {
            'from': sender,
            'nonce': nonce,
            'value': 0,
            'chainId': self.chain_id,
            # Placeholder so build_transaction skips its own estimate
            'gas': DEFAULT_GAS_LIMIT
        }
        tx.update(self.gas_calculator.get_fee_params())
        return tx
    
    def build_deploy_tx(
        self,
        abi: List[Dict],
        bytecode: str,
        sender: str,
        nonce: int,
        constructor_args: Optional[list] = None
    ) -> Dict:
        """
        Build contract creation transaction
        
        Args:
            abi: Contract ABI
            bytecode: Creation bytecode (0x-prefixed)
            sender: Deployer address
            nonce: Deployer nonce
            constructor_args: Constructor arguments
        
        Returns:
            Transaction dict
        """
        factory = self.w3.eth.contract(abi=abi, bytecode=bytecode)
        constructor = factory.constructor(*(constructor_args or []))
        
        tx = constructor.build_transaction(self._base_tx(sender, nonce))
        tx['gas'] = self.gas_calculator.estimate_gas_limit(
            {'from': sender, 'data': tx['data']}
        )
        
        logger.debug(f"Deploy tx built: nonce={nonce}, gas={tx['gas']}")
        return tx
    
    def build_call_tx(
        self,
        contract: Contract,
        method: str,
        args: list,
        sender: str,
        nonce: int
    ) -> Dict:
        """
        Build state-changing contract call
        
        Args:
            contract: Bound contract
            method: Function name
            args: Function arguments
            sender: Signer address
            nonce: Signer nonce
        
        Returns:
            Transaction dict
        """
        function = getattr(contract.functions, method)(*args)
        
        tx = function.build_transaction(self._base_tx(sender, nonce))
        tx['gas'] = self.gas_calculator.estimate_gas_limit(
            {'from': sender, 'to': tx['to'], 'data': tx['data']}
        )
        
        logger.debug(f"{method} tx built: nonce={nonce}, gas={tx['gas']}")
        return tx
