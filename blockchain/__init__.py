"""
Blockchain Interaction Package
Handles contract compilation, the SVGNFT client, transaction building, nonces and deployment records
"""

from .compiler import ContractCompiler, CompilationError
from .contract_manager import SVGNFTContract
from .transaction_builder import TransactionBuilder
from .nonce_manager import NonceManager
from .deployment_store import DeploymentRecord, DeploymentStore

__all__ = [
    'ContractCompiler',
    'CompilationError',
    'SVGNFTContract',
    'TransactionBuilder',
    'NonceManager',
    'DeploymentRecord',
    'DeploymentStore'
]
