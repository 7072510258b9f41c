"""
Deployment Framework
Compile, deploy, sign, broadcast and confirm on top of web3.py
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import TimeExhausted, TransactionNotFound
from eth_account.signers.local import LocalAccount
from loguru import logger

from blockchain.compiler import ContractCompiler
from blockchain.deployment_store import DeploymentRecord, DeploymentStore
from blockchain.nonce_manager import NonceManager
from blockchain.transaction_builder import TransactionBuilder
from utils.gas_calculator import GasCalculator
from utils.simulation import TransactionSimulator

from .settings import NetworkConfig


class TransactionReverted(RuntimeError):
    """Raised when a mined transaction has status 0 or a call simulation reverts"""
    
    def __init__(self, tx_hash: Optional[str], reason: str = "transaction reverted"):
        self.tx_hash = tx_hash
        self.reason = reason
        super().__init__(f"{reason}: {tx_hash}" if tx_hash else reason)


@dataclass(frozen=True)
class PendingTransaction:
    """Broadcast, not yet confirmed"""
    hash: str
    sender: str
    nonce: int


@dataclass(frozen=True)
class TransactionReceipt:
    """Mined transaction with its confirmation depth"""
    hash: str
    block_number: int
    status: int
    gas_used: int
    confirmations: int
    contract_address: Optional[str] = None
    raw: Any = None


class DeploymentFramework(ABC):
    """
    Narrow interface the deployment driver depends on
    """
    
    @abstractmethod
    async def deploy_contract(self, name: str, signer: LocalAccount) -> DeploymentRecord:
        """Compile and deploy a contract, returning its record"""
    
    @abstractmethod
    def contract_at(self, name: str, address: str) -> Contract:
        """Bind the compiled interface of `name` to an address"""
    
    @abstractmethod
    async def send_transaction(
        self,
        contract: Contract,
        method: str,
        args: list,
        signer: LocalAccount
    ) -> PendingTransaction:
        """Sign and broadcast a contract call"""
    
    @abstractmethod
    async def await_confirmation(
        self,
        tx: PendingTransaction,
        confirmations: int = 1
    ) -> TransactionReceipt:
        """Wait until `tx` is `confirmations` blocks deep"""


class Web3Framework(DeploymentFramework):
    """
    DeploymentFramework backed by a JSON-RPC node
    """
    
    def __init__(
        self,
        w3: Web3,
        network: NetworkConfig,
        compiler: ContractCompiler,
        store: Optional[DeploymentStore] = None,
        confirmation_timeout: Optional[float] = 300,
        poll_interval: float = 1.0,
        simulate_before_send: bool = True
    ):
        """
        Initialize Web3 framework
        
        Args:
            w3: Connected Web3 instance
            network: Active network
            compiler: Compiler providing ABI and bytecode
            store: Deployment record store
            confirmation_timeout: Seconds to wait for confirmations (None = forever)
            poll_interval: Seconds between receipt polls
            simulate_before_send: eth_call contract calls before broadcasting
        """
        self.w3 = w3
        self.network = network
        self.compiler = compiler
        self.store = store or DeploymentStore()
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self.simulate_before_send = simulate_before_send
        
        self.gas_calculator = GasCalculator(w3)
        self.tx_builder = TransactionBuilder(w3, self.gas_calculator)
        self.nonce_manager = NonceManager(w3)
        self.simulator = TransactionSimulator(w3)
    
    async def deploy_contract(self, name: str, signer: LocalAccount) -> DeploymentRecord:
        """
        Compile (if needed) and deploy a contract
        
        Args:
            name: Contract name
            signer: Deployer account
        
        Returns:
            DeploymentRecord for the mined contract
        """
        artifact = self.compiler.get_artifact(name)
        
        nonce = await self.nonce_manager.get_nonce(signer.address)
        
        try:
            tx = self.tx_builder.build_deploy_tx(
                artifact['abi'], artifact['bytecode'], signer.address, nonce
            )
        except Exception:
            await self.nonce_manager.reset_nonce(signer.address)
            raise
        
        max_cost = self.gas_calculator.max_cost_wei(tx)
        if max_cost is not None:
            logger.info(f"Deploying {name} (max cost {self.w3.from_wei(max_cost, 'ether')} ETH)")
        
        pending = await self._broadcast(tx, signer)
        logger.info(f"Deploying {name} in transaction {pending.hash}")
        
        receipt = await self.await_confirmation(pending, 1)
        
        record = DeploymentRecord(
            contract_name=name,
            address=receipt.contract_address,
            transaction_hash=pending.hash,
            network=self.network.name,
            chain_id=self.network.chain_id,
            block_number=receipt.block_number,
            deployer=signer.address,
            gas_used=receipt.gas_used,
            abi=artifact['abi']
        )
        self.store.save(record)
        
        logger.success(f"Deployed {name} at {record.address} with {receipt.gas_used} gas")
        return record
    
    def contract_at(self, name: str, address: str) -> Contract:
        artifact = self.compiler.get_artifact(name)
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=artifact['abi'])
    
    async def send_transaction(
        self,
        contract: Contract,
        method: str,
        args: list,
        signer: LocalAccount
    ) -> PendingTransaction:
        """
        Sign and broadcast a contract call
        
        Raises:
            TransactionReverted: simulation reverted (nothing is broadcast)
        """
        nonce = await self.nonce_manager.get_nonce(signer.address)
        
        try:
            tx = self.tx_builder.build_call_tx(contract, method, args, signer.address, nonce)
            
            if self.simulate_before_send:
                reason = self.simulator.simulate_transaction(tx)
                if reason is not None:
                    raise TransactionReverted(None, f"{method} would revert: {reason}")
        
        except Exception:
            await self.nonce_manager.reset_nonce(signer.address)
            raise
        
        return await self._broadcast(tx, signer)
    
    async def _broadcast(self, tx: Dict, signer: LocalAccount) -> PendingTransaction:
        signed_tx = signer.sign_transaction(tx)
        
        try:
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception:
            await self.nonce_manager.reset_nonce(signer.address)
            raise
        
        return PendingTransaction(
            hash=Web3.to_hex(tx_hash),
            sender=signer.address,
            nonce=tx['nonce']
        )
    
    async def await_confirmation(
        self,
        tx: PendingTransaction,
        confirmations: int = 1
    ) -> TransactionReceipt:
        """
        Poll until the transaction is mined and `confirmations` blocks deep
        
        Raises:
            TransactionReverted: receipt status is 0
            TimeExhausted: confirmation_timeout elapsed
        """
        if confirmations < 1:
            raise ValueError("confirmations must be at least 1")
        
        started = time.monotonic()
        receipt = None
        
        while True:
            if receipt is None:
                try:
                    receipt = self.w3.eth.get_transaction_receipt(tx.hash)
                except TransactionNotFound:
                    receipt = None
                
                if receipt is not None:
                    await self.nonce_manager.confirm_nonce(tx.sender, tx.nonce)
                    
                    if receipt['status'] == 0:
                        raise TransactionReverted(tx.hash)
            
            if receipt is not None:
                depth = self.w3.eth.block_number - receipt['blockNumber'] + 1
                
                if depth >= confirmations:
                    logger.debug(f"{tx.hash} confirmed ({depth} blocks)")
                    return TransactionReceipt(
                        hash=tx.hash,
                        block_number=receipt['blockNumber'],
                        status=receipt['status'],
                        gas_used=receipt['gasUsed'],
                        confirmations=depth,
                        contract_address=receipt.get('contractAddress'),
                        raw=receipt
                    )
            
            elapsed = time.monotonic() - started
            if self.confirmation_timeout is not None and elapsed >= self.confirmation_timeout:
                raise TimeExhausted(
                    f"Transaction {tx.hash} not confirmed after {self.confirmation_timeout} seconds"
                )
            
            await asyncio.sleep(self.poll_interval)
