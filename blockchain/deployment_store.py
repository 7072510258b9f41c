"""
Deployment Store
Persists deployment records under deployments/<network>/
"""

import os
import json
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional
from loguru import logger


@dataclass(frozen=True)
class DeploymentRecord:
    """Result of one contract deployment"""
    contract_name: str
    address: str
    transaction_hash: str
    network: str
    chain_id: int
    block_number: Optional[int] = None
    deployer: Optional[str] = None
    gas_used: Optional[int] = None
    abi: List[Dict] = field(default_factory=list, compare=False)


class DeploymentStore:
    """
    One JSON file per contract and network, overwritten on redeploy
    """
    
    def __init__(self, deployments_dir: str = "deployments"):
        """
        Initialize Deployment Store
        
        Args:
            deployments_dir: Root directory for deployment files
        """
        self.deployments_dir = deployments_dir
    
    def _network_dir(self, network: str) -> str:
        return os.path.join(self.deployments_dir, network)
    
    def path_for(self, network: str, contract_name: str) -> str:
        return os.path.join(self._network_dir(network), f"{contract_name}.json")
    
    def save(self, record: DeploymentRecord) -> str:
        """
        Write deployment record
        
        Returns:
            Path written
        """
        network_dir = self._network_dir(record.network)
        os.makedirs(network_dir, exist_ok=True)
        
        with open(os.path.join(network_dir, '.chainId'), 'w') as f:
            f.write(str(record.chain_id))
        
        path = self.path_for(record.network, record.contract_name)
        with open(path, 'w') as f:
            json.dump(asdict(record), f, indent=2)
        
        logger.debug(f"Saved deployment {record.contract_name} to {path}")
        return path
    
    def load(self, network: str, contract_name: str) -> Optional[DeploymentRecord]:
        """Load the last deployment of a contract on a network, if any"""
        path = self.path_for(network, contract_name)
        
        if not os.path.exists(path):
            return None
        
        with open(path, 'r') as f:
            return DeploymentRecord(**json.load(f))
