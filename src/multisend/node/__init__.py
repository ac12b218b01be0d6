"""
Ledger Integration Layer.

Provides abstracted access to EVM chain data, contract calls and
transaction submission, plus ERC-20 token helpers.
"""

from multisend.node.interface import (
    CallReverted,
    ContractBinding,
    InvalidContractCall,
    LedgerClient,
    NoSignerAttached,
    TransportFailure,
)
from multisend.node.erc20 import Erc20TokenClient, TokenClient, TokenInfo
from multisend.node.web3_client import Web3LedgerClient

__all__ = [
    "CallReverted",
    "ContractBinding",
    "InvalidContractCall",
    "LedgerClient",
    "NoSignerAttached",
    "TransportFailure",
    "Erc20TokenClient",
    "TokenClient",
    "TokenInfo",
    "Web3LedgerClient",
]
