"""
Utilities Package
RPC connection, gas pricing, call simulation and token URI helpers
"""

from .gas_calculator import GasCalculator
from .simulation import TransactionSimulator
from .rpc_manager import RPCManager
from .token_uri import parse_token_uri, decode_svg_image, is_json_data_uri

__all__ = [
    'GasCalculator',
    'TransactionSimulator',
    'RPCManager',
    'parse_token_uri',
    'decode_svg_image',
    'is_json_data_uri'
]
