"""
Multi-send client

Assembles, validates and prices batched native coin and ERC-20 transfers
against a deployed multi-send contract, and submits them with an attached
signer.
"""

__version__ = "0.1.0"

from multisend.exceptions import MultiSendError
from multisend.core.request import (
    EmptyRecipientSet,
    EthBatch,
    EthEqualBatch,
    GasEstimation,
    GasPriceTiers,
    InvalidAddress,
    MixedBatch,
    MixedEqualBatch,
    MixedRecipient,
    Recipient,
    TokenBatch,
    TokenEqualBatch,
    TransactionOptions,
)
from multisend.core.amounts import InvalidAmount
from multisend.core.allowance import InsufficientAllowance
from multisend.core.assembler import BatchAssembler, SigningBatchAssembler
from multisend.node.interface import NoSignerAttached, TransportFailure
from multisend.tx.gas import EstimationFailed
from multisend.tx.signer import TransactionSigner

__all__ = [
    "MultiSendError",
    "EmptyRecipientSet",
    "EthBatch",
    "EthEqualBatch",
    "GasEstimation",
    "GasPriceTiers",
    "InvalidAddress",
    "MixedBatch",
    "MixedEqualBatch",
    "MixedRecipient",
    "Recipient",
    "TokenBatch",
    "TokenEqualBatch",
    "TransactionOptions",
    "InvalidAmount",
    "InsufficientAllowance",
    "BatchAssembler",
    "SigningBatchAssembler",
    "NoSignerAttached",
    "TransportFailure",
    "EstimationFailed",
    "TransactionSigner",
]
