"""
Transaction module.

Handles gas estimation and transaction signing.
"""

from multisend.tx.gas import EstimationFailed, GasEstimator
from multisend.tx.signer import TransactionSigner

__all__ = [
    "EstimationFailed",
    "GasEstimator",
    "TransactionSigner",
]
