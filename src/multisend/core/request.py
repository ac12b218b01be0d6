"""
Batch request models.

Describes the six batch shapes accepted by the multi-send contract, the
per-call transaction options, and the values produced by estimation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Sequence, Tuple, Union

from web3 import Web3

from multisend.exceptions import MultiSendError


Amount = Union[int, str]


class EmptyRecipientSet(MultiSendError, ValueError):
    """Raised when a batch has no recipients."""
    pass


class InvalidAddress(MultiSendError, ValueError):
    """Raised when an address is not a valid 20-byte hex address."""
    
    def __init__(self, address: object):
        super().__init__(f"Invalid address: {address!r}")
        self.address = address


def normalize_address(address: str) -> str:
    """
    Validate an address and return its EIP-55 checksum form.
    
    Raises:
        InvalidAddress: If the value is not a hex address
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidAddress(address)
    return Web3.to_checksum_address(address)


class BatchKind(str, Enum):
    """Batch shapes supported by the multi-send contract."""
    ETH_VARIABLE = "eth"                  # Native coin, amount per recipient
    ETH_EQUAL = "eth_equal"               # Native coin, same amount for everyone
    TOKEN_VARIABLE = "token"              # ERC-20, amount per recipient
    TOKEN_EQUAL = "token_equal"           # ERC-20, same amount for everyone
    MIXED_VARIABLE = "mixed"              # ERC-20 and native coin per recipient
    MIXED_EQUAL = "mixed_equal"           # ERC-20 and native coin, same for everyone
    
    @property
    def uses_token(self) -> bool:
        """Whether the shape moves an ERC-20 token (and so needs an allowance)."""
        return self not in (BatchKind.ETH_VARIABLE, BatchKind.ETH_EQUAL)


@dataclass(frozen=True)
class Recipient:
    """
    A single payment recipient.
    
    Attributes:
        address: Recipient address
        amount: Amount in the asset's smallest unit (wei or token base unit)
    """
    address: str
    amount: Amount


@dataclass(frozen=True)
class MixedRecipient:
    """A recipient receiving both a token amount and a native coin amount."""
    address: str
    token_amount: Amount
    eth_amount: Amount


def _freeze(items: Sequence) -> Tuple:
    return tuple(items) if items is not None else ()


class _AddressBatch:
    """Shared validation for batches carrying an ``addresses`` list."""
    
    kind: ClassVar[BatchKind]
    
    def __post_init__(self):
        object.__setattr__(self, "addresses", _freeze(self.addresses))
    
    @property
    def count(self) -> int:
        return len(self.addresses)
    
    def validate(self) -> None:
        if not self.addresses:
            raise EmptyRecipientSet(f"{self.kind.value} batch has no addresses")


class _RecipientBatch:
    """Shared validation for batches carrying a ``recipients`` list."""
    
    kind: ClassVar[BatchKind]
    
    def __post_init__(self):
        object.__setattr__(self, "recipients", _freeze(self.recipients))
    
    @property
    def count(self) -> int:
        return len(self.recipients)
    
    def validate(self) -> None:
        if not self.recipients:
            raise EmptyRecipientSet(f"{self.kind.value} batch has no recipients")


@dataclass(frozen=True)
class EthBatch(_RecipientBatch):
    """Native coin sent in a different amount to each recipient."""
    kind: ClassVar[BatchKind] = BatchKind.ETH_VARIABLE
    recipients: Tuple[Recipient, ...]


@dataclass(frozen=True)
class EthEqualBatch(_AddressBatch):
    """Native coin sent in the same amount to every address."""
    kind: ClassVar[BatchKind] = BatchKind.ETH_EQUAL
    addresses: Tuple[str, ...]
    amount: Amount


@dataclass(frozen=True)
class TokenBatch(_RecipientBatch):
    """ERC-20 token sent in a different amount to each recipient."""
    kind: ClassVar[BatchKind] = BatchKind.TOKEN_VARIABLE
    token: str
    recipients: Tuple[Recipient, ...]


@dataclass(frozen=True)
class TokenEqualBatch(_AddressBatch):
    """ERC-20 token sent in the same amount to every address."""
    kind: ClassVar[BatchKind] = BatchKind.TOKEN_EQUAL
    token: str
    addresses: Tuple[str, ...]
    amount: Amount


@dataclass(frozen=True)
class MixedBatch(_RecipientBatch):
    """Token and native coin sent in per-recipient amounts."""
    kind: ClassVar[BatchKind] = BatchKind.MIXED_VARIABLE
    token: str
    recipients: Tuple[MixedRecipient, ...]


@dataclass(frozen=True)
class MixedEqualBatch(_AddressBatch):
    """Token and native coin sent in the same amounts to every address."""
    kind: ClassVar[BatchKind] = BatchKind.MIXED_EQUAL
    token: str
    addresses: Tuple[str, ...]
    token_amount: Amount
    eth_amount: Amount


BatchRequest = Union[
    EthBatch,
    EthEqualBatch,
    TokenBatch,
    TokenEqualBatch,
    MixedBatch,
    MixedEqualBatch,
]


@dataclass(frozen=True)
class TransactionOptions:
    """
    Per-call overrides.
    
    Attributes:
        gas_limit: Gas limit override
        gas_price: Gas price override in wei
        nonce: Nonce override (never defaulted by the assembler)
        from_address: Sender used for read-only simulation when no signer is attached
    """
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    nonce: Optional[int] = None
    from_address: Optional[str] = None


@dataclass(frozen=True)
class TransactionEnvelope:
    """
    Value and gas parameters attached to a contract call.
    
    ``value`` is always derived from the aggregated native coin amounts.
    Unset gas fields are filled by the ledger client.
    """
    value: int = 0
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    nonce: Optional[int] = None
    
    def to_tx_params(self) -> dict:
        """Convert to a web3 transaction parameter dict, omitting unset fields."""
        params = {"value": self.value}
        if self.gas_limit is not None:
            params["gas"] = self.gas_limit
        if self.gas_price is not None:
            params["gasPrice"] = self.gas_price
        if self.nonce is not None:
            params["nonce"] = self.nonce
        return params


@dataclass(frozen=True)
class GasEstimation:
    """Point-in-time gas cost of a call."""
    gas_limit: int
    gas_price: int
    total_cost: int = field(init=False)
    
    def __post_init__(self):
        object.__setattr__(self, "total_cost", self.gas_limit * self.gas_price)


@dataclass(frozen=True)
class GasPriceTiers:
    """Advisory gas prices derived from the current network price."""
    slow: int
    average: int
    fast: int
