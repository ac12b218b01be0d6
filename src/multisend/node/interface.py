"""
Abstract interface for ledger access.

Defines the contract for blockchain access that all ledger clients must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from multisend.exceptions import MultiSendError

if TYPE_CHECKING:
    from multisend.core.request import TransactionEnvelope
    from multisend.tx.signer import TransactionSigner


class TransportFailure(MultiSendError):
    """Raised when the network or the JSON-RPC endpoint fails."""
    pass


class CallReverted(MultiSendError):
    """Raised when the contract rejects a call during simulation or execution."""
    
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NoSignerAttached(MultiSendError):
    """Raised when an operation needs a signing identity and none is connected."""
    pass


class InvalidContractCall(MultiSendError, ValueError):
    """Raised when a method or its arguments do not match the contract interface."""
    pass


@dataclass(frozen=True)
class ContractBinding:
    """
    A contract address and interface, optionally bound to a signer.
    
    Bindings are immutable. Attaching a signer returns a new binding.
    """
    address: str
    abi: List[dict]
    signer: Optional["TransactionSigner"] = None
    
    def connect(self, signer: "TransactionSigner") -> "ContractBinding":
        """Return a copy of this binding that sends with ``signer``."""
        if signer is None:
            raise NoSignerAttached("Cannot connect without a signer")
        return replace(self, signer=signer)
    
    @property
    def has_signer(self) -> bool:
        return self.signer is not None
    
    def require_signer(self) -> "TransactionSigner":
        """
        Get the attached signer.
        
        Raises:
            NoSignerAttached: If the binding is read-only
        """
        if self.signer is None:
            raise NoSignerAttached(
                f"No signer attached to contract {self.address}; call connect(signer) first"
            )
        return self.signer


class LedgerClient(ABC):
    """
    Abstract interface for ledger access.
    
    This interface defines every network operation needed by the assembler:
    - Balance and gas price queries
    - Read-only contract calls
    - Gas simulation
    - Signing and broadcasting contract calls
    
    Implementations own connection handling, nonce management and signing
    mechanics. They report network problems as TransportFailure and
    contract rejections as CallReverted.
    """
    
    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the endpoint.
        
        Raises:
            TransportFailure: If connection cannot be established
        """
        pass
    
    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the endpoint."""
        pass
    
    @abstractmethod
    async def get_chain_id(self) -> int:
        """Get the chain id of the connected network."""
        pass
    
    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """
        Get the native coin balance of an address.
        
        Args:
            address: Account address
            
        Returns:
            Balance in wei
        """
        pass
    
    @abstractmethod
    async def get_gas_price(self) -> int:
        """
        Get the current network gas price.
        
        Returns:
            Gas price in wei
        """
        pass
    
    @abstractmethod
    async def call(
        self,
        binding: ContractBinding,
        method: str,
        args: Sequence[Any],
        from_address: Optional[str] = None,
    ) -> Any:
        """
        Execute a read-only contract call.
        
        Args:
            binding: Contract to call
            method: Contract function name
            args: Positional arguments
            from_address: Optional caller address
            
        Returns:
            Decoded return value
        """
        pass
    
    @abstractmethod
    async def estimate_gas(
        self,
        binding: ContractBinding,
        method: str,
        args: Sequence[Any],
        value: int = 0,
        from_address: Optional[str] = None,
    ) -> int:
        """
        Simulate a contract call and return the gas it would use.
        
        Does not change chain state.
        
        Raises:
            CallReverted: If the simulated call reverts
        """
        pass
    
    @abstractmethod
    async def send_transaction(
        self,
        binding: ContractBinding,
        method: str,
        args: Sequence[Any],
        envelope: "TransactionEnvelope",
    ) -> str:
        """
        Sign and broadcast a state-changing contract call.
        
        Args:
            binding: Contract to call; must carry a signer
            method: Contract function name
            args: Positional arguments
            envelope: Value and gas parameters
            
        Returns:
            Transaction hash as a 0x-prefixed hex string
            
        Raises:
            NoSignerAttached: If the binding carries no signer
            CallReverted: If the node rejects the call
        """
        pass
