"""
Core batch components.

This module contains the batch request models, amount aggregation, the
allowance guard and the batch assembler.
"""

from multisend.core.request import (
    BatchKind,
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
    TransactionEnvelope,
    TransactionOptions,
)
from multisend.core.amounts import AmountAggregator, InvalidAmount
from multisend.core.allowance import AllowanceGuard, InsufficientAllowance
from multisend.core.assembler import BatchAssembler, CallPlan, SigningBatchAssembler, build_call_plan

__all__ = [
    "BatchKind",
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
    "TransactionEnvelope",
    "TransactionOptions",
    "AmountAggregator",
    "InvalidAmount",
    "AllowanceGuard",
    "InsufficientAllowance",
    "BatchAssembler",
    "CallPlan",
    "SigningBatchAssembler",
    "build_call_plan",
]
