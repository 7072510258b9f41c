"""
Unit Tests for the SVGNFT Contract Client
"""

import pytest
from unittest.mock import AsyncMock, Mock
from hexbytes import HexBytes
from web3 import Web3
from eth_account import Account

from blockchain.contract_manager import SVGNFTContract, ZERO_ADDRESS

CONTRACT_ADDRESS = '0x5FbDB2315678afecb367f032d93F642f64180aa3'
OWNER = '0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266'
TX_HASH = HexBytes('0x' + 'cd' * 32)
TRANSFER_TOPIC = Web3.keccak(text='Transfer(address,address,uint256)')


def address_topic(address):
    return HexBytes(b'\x00' * 12 + bytes.fromhex(address[2:]))


def transfer_log(from_address, to_address, token_id, address=CONTRACT_ADDRESS, log_index=0):
    return {
        'address': address,
        'topics': [
            TRANSFER_TOPIC,
            address_topic(from_address),
            address_topic(to_address),
            HexBytes(token_id.to_bytes(32, 'big'))
        ],
        'data': HexBytes(b''),
        'blockNumber': 2,
        'blockHash': HexBytes('0x' + 'ee' * 32),
        'transactionHash': TX_HASH,
        'transactionIndex': 0,
        'logIndex': log_index,
        'removed': False
    }


def mint_receipt(logs):
    return {
        'transactionHash': TX_HASH,
        'blockNumber': 2,
        'status': 1,
        'logs': logs
    }


@pytest.fixture
def signer():
    return Account.create()


@pytest.fixture
def framework():
    framework = Mock()
    framework.send_transaction = AsyncMock(return_value='pending')
    return framework


@pytest.fixture
def nft(signer, framework):
    """Client with the minimal ABI on an offline Web3"""
    return SVGNFTContract(Web3(), CONTRACT_ADDRESS.lower(), signer, framework)


class TestSVGNFTContract:
    """Test the contract client"""
    
    def test_binds_checksum_address(self, nft):
        """Test address is normalised on construction"""
        assert nft.address == CONTRACT_ADDRESS
    
    @pytest.mark.asyncio
    async def test_create_goes_through_framework(self, nft, framework, signer):
        """Test create() is submitted by the framework with the SVG argument"""
        result = await nft.create('<svg/>')
        
        assert result == 'pending'
        contract, method, args, sent_by = framework.send_transaction.call_args[0]
        assert contract is nft.contract
        assert method == 'create'
        assert args == ['<svg/>']
        assert sent_by is signer
    
    def test_minted_token_id_from_event(self, nft):
        """Test token ID is read from the mint Transfer event"""
        receipt = mint_receipt([transfer_log(ZERO_ADDRESS, OWNER, 41)])
        
        assert nft.minted_token_id(receipt) == 41
    
    def test_ignores_non_mint_transfers(self, nft):
        """Test transfers between holders are skipped"""
        receipt = mint_receipt([
            transfer_log(OWNER, '0x70997970C51812dc3A010C7d01b50e0d17dc79C8', 3, log_index=0),
            transfer_log(ZERO_ADDRESS, OWNER, 4, log_index=1)
        ])
        
        assert nft.minted_token_id(receipt) == 4
    
    def test_ignores_mints_from_other_contracts(self, nft):
        """Test a mint emitted by another contract in the same transaction is skipped"""
        other = '0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512'
        receipt = mint_receipt([
            transfer_log(ZERO_ADDRESS, OWNER, 9, address=other, log_index=0),
            transfer_log(ZERO_ADDRESS, OWNER, 2, log_index=1)
        ])
        
        assert nft.minted_token_id(receipt) == 2
    
    def test_only_foreign_mint(self, nft):
        """Test receipts whose only mint is from another contract raise"""
        other = '0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512'
        
        with pytest.raises(RuntimeError):
            nft.minted_token_id(mint_receipt([transfer_log(ZERO_ADDRESS, OWNER, 9, address=other)]))
    
    def test_reads(self, nft):
        """Test view calls go to the bound contract"""
        nft.contract = Mock()
        functions = nft.contract.functions
        functions.ownerOf.return_value.call.return_value = OWNER
        functions.tokenCounter.return_value.call.return_value = 3
        functions.tokenURI.return_value.call.return_value = 'ipfs://Qm'
        
        assert nft.owner_of(2) == OWNER
        assert nft.token_counter() == 3
        assert nft.token_uri(2) == 'ipfs://Qm'
        functions.ownerOf.assert_called_once_with(2)
        functions.tokenURI.assert_called_once_with(2)
    
    def test_no_mint_event(self, nft):
        """Test receipts without a mint event raise"""
        with pytest.raises(RuntimeError, match='No mint Transfer event'):
            nft.minted_token_id(mint_receipt([]))
    
    def test_minimal_abi_has_required_entries(self, nft):
        """Test fallback ABI exposes create, tokenURI and Transfer"""
        names = {entry['name'] for entry in nft._get_minimal_svgnft_abi()}
        
        assert {'create', 'tokenURI', 'tokenCounter', 'Transfer'} <= names
