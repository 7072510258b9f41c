"""
Wallet Manager
Derives the named accounts (deployer, ...) for the active network
"""

from typing import Dict, List, Optional
from decimal import Decimal
from web3 import Web3
from eth_account import Account
from eth_account.signers.local import LocalAccount
from loguru import logger

from .settings import NetworkConfig

Account.enable_unaudited_hdwallet_features()

DERIVATION_PATH = "m/44'/60'/0'/0/{index}"


class WalletManager:
    """
    Manages signing accounts derived from the network's mnemonic
    - Accounts are addressed by index (BIP-44, Ethereum coin type)
    - Named accounts map a role ("deployer") to an index
    """
    
    def __init__(self, network: NetworkConfig, named_accounts: Optional[Dict[str, int]] = None):
        """
        Initialize wallet manager
        
        Args:
            network: Active network configuration
            named_accounts: Account name -> account index
        """
        self.network = network
        self.named_accounts = dict(named_accounts or {'deployer': 0})
        self._accounts: Dict[int, LocalAccount] = {}
        
        if not network.mnemonic:
            logger.warning(f"No mnemonic configured for network {network.name}")
    
    def get_account(self, index: int = 0) -> LocalAccount:
        """
        Get account by derivation index
        
        Raises:
            ValueError: no mnemonic configured for the network
        """
        if not self.network.mnemonic:
            raise ValueError(
                f"No account configured for network {self.network.name} "
                f"(set MNEMONIC in .env)"
            )
        
        if index not in self._accounts:
            self._accounts[index] = Account.from_mnemonic(
                self.network.mnemonic,
                account_path=DERIVATION_PATH.format(index=index)
            )
        
        return self._accounts[index]
    
    def get_named_account(self, name: str) -> LocalAccount:
        """
        Get a named account (e.g. 'deployer')
        
        Raises:
            ValueError: name is not a configured named account
        """
        if name not in self.named_accounts:
            raise ValueError(f"Unknown named account: {name}")
        
        account = self.get_account(self.named_accounts[name])
        logger.debug(f"Named account {name}: {account.address}")
        return account
    
    def get_accounts(self, count: int = 10) -> List[LocalAccount]:
        """Get the first `count` derived accounts"""
        return [self.get_account(i) for i in range(count)]
    
    def get_balance(self, w3: Web3, address: str) -> Decimal:
        """Native balance in ether"""
        balance_wei = w3.eth.get_balance(Web3.to_checksum_address(address))
        return Decimal(str(w3.from_wei(balance_wei, 'ether')))
