"""
Deployment Settings
Loads the network table, compiler settings and deployment settings from config/
"""

import os
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from loguru import logger
from dotenv import load_dotenv

load_dotenv()


class NetworkConfigError(KeyError):
    """Raised when a chain ID or network name has no configuration entry"""
    
    def __str__(self):
        return str(self.args[0]) if self.args else "missing network configuration"


@dataclass(frozen=True)
class NetworkConfig:
    """
    One row of the network table
    
    URLs and keys are resolved from the environment when the table is loaded.
    """
    chain_id: int
    name: str
    rpc_url: Optional[str]
    explorer_api_key: str = ""
    explorer: Optional[str] = None
    explorer_api_key_env: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    poa: bool = False
    mnemonic: Optional[str] = None
    
    def matches(self, name: str) -> bool:
        return name == self.name or name in self.aliases
    
    def address_url(self, address: str) -> Optional[str]:
        if self.explorer:
            return f"{self.explorer.rstrip('/')}/address/{address}"
        return None


@dataclass(frozen=True)
class CompilerSettings:
    """Compiler versions and optimizer block handed to solc unchanged"""
    versions: Tuple[str, ...]
    optimizer_enabled: bool = True
    optimizer_runs: int = 200
    sources_dir: str = "contracts"
    artifacts_dir: str = "artifacts"
    
    def solc_settings(self) -> Dict:
        return {
            'optimizer': {
                'enabled': self.optimizer_enabled,
                'runs': self.optimizer_runs
            }
        }


class NetworkTable:
    """
    Immutable chain ID -> NetworkConfig lookup
    """
    
    def __init__(
        self,
        networks: Dict[int, NetworkConfig],
        default_network: Optional[str] = None,
        named_accounts: Optional[Dict[str, int]] = None
    ):
        """
        Initialize Network Table
        
        Args:
            networks: Network configs keyed by chain ID
            default_network: Network used when none is selected
            named_accounts: Account name -> account index
        """
        self._networks = dict(networks)
        self.default_network = default_network
        self.named_accounts = dict(named_accounts or {})
    
    def get(self, chain_id: int) -> NetworkConfig:
        """
        Get network configuration for a chain ID
        
        Raises:
            NetworkConfigError: chain ID is not in the table
        """
        try:
            return self._networks[int(chain_id)]
        except (KeyError, TypeError, ValueError):
            raise NetworkConfigError(
                f"missing network configuration for chain ID {chain_id}"
            ) from None
    
    def by_name(self, name: str) -> NetworkConfig:
        """Resolve a network name or alias"""
        for network in self._networks.values():
            if network.matches(name):
                return network
        
        raise NetworkConfigError(f"missing network configuration for network '{name}'")
    
    def chain_ids(self) -> List[int]:
        return sorted(self._networks)
    
    def __contains__(self, chain_id) -> bool:
        try:
            return int(chain_id) in self._networks
        except (TypeError, ValueError):
            return False
    
    def __len__(self):
        return len(self._networks)


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Everything the deployment driver needs, passed in explicitly
    """
    networks: NetworkTable
    chain_id: int
    contract_name: str = "SVGNFT"
    svg_path: str = "img/triangle.svg"
    confirmations: int = 1
    confirmation_timeout: Optional[float] = 300
    poll_interval: float = 1.0
    simulate_before_send: bool = True
    deployments_dir: str = "deployments"
    named_accounts: Dict[str, int] = field(default_factory=lambda: {'deployer': 0})


def _read_json(path: str) -> Dict:
    with open(path, 'r') as f:
        return json.load(f)


def _env(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    value = os.getenv(name)
    return value if value else None


def _parse_network(chain_id: str, entry: Dict) -> NetworkConfig:
    accounts = entry.get('accounts', {})
    
    return NetworkConfig(
        chain_id=int(chain_id),
        name=entry['name'],
        rpc_url=_env(entry.get('rpc_url_env')) or entry.get('rpc_url_default'),
        explorer_api_key=_env(entry.get('explorer_api_key_env')) or "",
        explorer=entry.get('explorer'),
        explorer_api_key_env=entry.get('explorer_api_key_env'),
        aliases=tuple(entry.get('aliases', [])),
        poa=bool(entry.get('poa', False)),
        mnemonic=_env(accounts.get('mnemonic_env')) or accounts.get('mnemonic')
    )


def load_network_table(path: str = "config/network_config.json") -> NetworkTable:
    """
    Load the network table
    
    Args:
        path: Network config JSON path
    
    Returns:
        NetworkTable with environment values resolved
    """
    data = _read_json(path)
    
    networks = {}
    for chain_id, entry in data['networks'].items():
        network = _parse_network(chain_id, entry)
        networks[network.chain_id] = network
    
    named_accounts = {
        name: int(account.get('default', 0))
        for name, account in data.get('named_accounts', {}).items()
    }
    
    logger.debug(f"Loaded {len(networks)} networks from {path}")
    
    return NetworkTable(
        networks,
        default_network=data.get('default_network'),
        named_accounts=named_accounts
    )


def load_compiler_settings(path: str = "config/compiler_config.json") -> CompilerSettings:
    """Load compiler versions and optimizer settings"""
    data = _read_json(path)
    
    optimizer = data.get('settings', {}).get('optimizer', {})
    
    return CompilerSettings(
        versions=tuple(c['version'] for c in data['compilers']),
        optimizer_enabled=bool(optimizer.get('enabled', False)),
        optimizer_runs=int(optimizer.get('runs', 200)),
        sources_dir=data.get('sources_dir', 'contracts'),
        artifacts_dir=data.get('artifacts_dir', 'artifacts')
    )


def load_deployment_config(
    networks: NetworkTable,
    chain_id: int,
    path: str = "config/deploy_config.json"
) -> DeploymentConfig:
    """
    Build the driver configuration for the selected chain
    
    Args:
        networks: Loaded network table
        chain_id: Active chain ID
        path: Deployment settings JSON path
    """
    data = _read_json(path)
    
    return DeploymentConfig(
        networks=networks,
        chain_id=int(chain_id),
        contract_name=data.get('contract_name', 'SVGNFT'),
        svg_path=data.get('svg_path', 'img/triangle.svg'),
        confirmations=int(data.get('confirmations', 1)),
        confirmation_timeout=data.get('confirmation_timeout', 300),
        poll_interval=float(data.get('poll_interval', 1.0)),
        simulate_before_send=bool(data.get('simulate_before_send', True)),
        deployments_dir=data.get('deployments_dir', 'deployments'),
        named_accounts=networks.named_accounts or {'deployer': 0}
    )
