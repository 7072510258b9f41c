"""
SVGNFT Deployer Package
Deployment driver, framework, settings and accounts
"""

from .settings import (
    NetworkConfig,
    NetworkConfigError,
    NetworkTable,
    CompilerSettings,
    DeploymentConfig,
)
from .wallet_manager import WalletManager

__all__ = [
    'NetworkConfig',
    'NetworkConfigError',
    'NetworkTable',
    'CompilerSettings',
    'DeploymentConfig',
    'WalletManager'
]
