"""
web3.py adapter for ledger access.

Provides blockchain access through an EVM JSON-RPC endpoint using AsyncWeb3.
"""

import asyncio
from typing import Any, Awaitable, Optional, Sequence

import structlog
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import ContractLogicError, Web3Exception, Web3RPCError

from multisend.config import MultiSendConfig, get_config
from multisend.core.request import TransactionEnvelope
from multisend.node.interface import (
    CallReverted,
    ContractBinding,
    InvalidContractCall,
    LedgerClient,
    TransportFailure,
)

logger = structlog.get_logger(__name__)


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error)


# JSON-RPC error messages that mean the call itself cannot execute
_EXECUTION_FAILURES = ("execution reverted", "insufficient funds")


def _is_execution_failure(error: Web3RPCError) -> bool:
    """
    Whether a JSON-RPC error response reports a failed execution.
    
    Code 3 is the standard revert code; many nodes report reverts and
    unaffordable calls as a generic -32000 error. Every other response
    (rate limits, missing headers, overload) is a transport problem.
    """
    response = getattr(error, "rpc_response", None)
    if not isinstance(response, dict):
        return False
    rpc_error = response.get("error")
    if not isinstance(rpc_error, dict):
        return False
    
    code = rpc_error.get("code")
    if code == 3:
        return True
    message = str(rpc_error.get("message", "")).lower()
    return code == -32000 and any(m in message for m in _EXECUTION_FAILURES)


class Web3LedgerClient(LedgerClient):
    """
    web3.py adapter.
    
    Implements the LedgerClient using an AsyncWeb3 instance, either built
    from the configured RPC URL or supplied by the caller.
    """
    
    def __init__(
        self,
        config: Optional[MultiSendConfig] = None,
        w3: Optional[AsyncWeb3] = None,
    ):
        """
        Initialize the adapter.
        
        Args:
            config: Client configuration. Uses global config if not provided.
            w3: Pre-built AsyncWeb3 instance. Takes precedence over config.rpc_url.
        """
        self.config = config or get_config()
        self.rpc_url = self.config.rpc_url
        self._w3: Optional[AsyncWeb3] = w3
        # Caller-supplied instances are never closed by this adapter
        self._owns_w3 = w3 is None
    
    async def connect(self) -> None:
        """Create the AsyncWeb3 instance and check the endpoint responds."""
        if self._w3 is not None:
            return
        
        if not self.rpc_url:
            raise TransportFailure("RPC URL not configured")
        
        w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        try:
            connected = await w3.is_connected()
        except (Web3Exception, OSError, asyncio.TimeoutError) as e:
            raise TransportFailure(f"Failed to connect to {self.rpc_url}: {e}") from e
        
        if not connected:
            raise TransportFailure(f"Endpoint not reachable: {self.rpc_url}")
        
        self._w3 = w3
        logger.info("web3_connected", rpc_url=self.rpc_url)
    
    async def disconnect(self) -> None:
        """Close the provider session if this adapter created it."""
        if self._w3 is None or not self._owns_w3:
            return
        provider = self._w3.provider
        if hasattr(provider, "disconnect"):
            await provider.disconnect()
        self._w3 = None
        logger.info("web3_disconnected")
    
    async def _web3(self) -> AsyncWeb3:
        if self._w3 is None:
            await self.connect()
        return self._w3
    
    async def _request(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        """Await a web3 call, translating its errors."""
        try:
            return await awaitable
        except ContractLogicError as e:
            raise self._rejected(operation, e) from e
        except Web3RPCError as e:
            if _is_execution_failure(e):
                raise self._rejected(operation, e) from e
            logger.error("web3_request_failed", operation=operation, error=str(e))
            raise TransportFailure(f"{operation} failed: {e}") from e
        except (Web3Exception, OSError, asyncio.TimeoutError) as e:
            logger.error("web3_request_failed", operation=operation, error=str(e))
            raise TransportFailure(f"{operation} failed: {e}") from e
    
    def _rejected(self, operation: str, error: Exception) -> CallReverted:
        reason = _error_message(error)
        logger.warning("call_rejected", operation=operation, reason=reason)
        return CallReverted(reason)
    
    async def _function(self, binding: ContractBinding, method: str, args: Sequence[Any]):
        w3 = await self._web3()
        try:
            contract = w3.eth.contract(address=binding.address, abi=binding.abi)
            return getattr(contract.functions, method)(*args)
        except Web3Exception as e:
            logger.warning("contract_call_invalid", method=method, error=str(e))
            raise InvalidContractCall(f"Cannot call {method}: {e}") from e
    
    async def get_chain_id(self) -> int:
        w3 = await self._web3()
        return await self._request("eth_chainId", w3.eth.chain_id)
    
    async def get_balance(self, address: str) -> int:
        w3 = await self._web3()
        return await self._request("eth_getBalance", w3.eth.get_balance(address))
    
    async def get_gas_price(self) -> int:
        w3 = await self._web3()
        return await self._request("eth_gasPrice", w3.eth.gas_price)
    
    async def call(
        self,
        binding: ContractBinding,
        method: str,
        args: Sequence[Any],
        from_address: Optional[str] = None,
    ) -> Any:
        fn = await self._function(binding, method, args)
        tx = {"from": from_address} if from_address else {}
        return await self._request(f"call:{method}", fn.call(tx))
    
    async def estimate_gas(
        self,
        binding: ContractBinding,
        method: str,
        args: Sequence[Any],
        value: int = 0,
        from_address: Optional[str] = None,
    ) -> int:
        fn = await self._function(binding, method, args)
        tx = {"value": value}
        if from_address:
            tx["from"] = from_address
        return await self._request(f"estimate:{method}", fn.estimate_gas(tx))
    
    async def send_transaction(
        self,
        binding: ContractBinding,
        method: str,
        args: Sequence[Any],
        envelope: TransactionEnvelope,
    ) -> str:
        signer = binding.require_signer()
        w3 = await self._web3()
        fn = await self._function(binding, method, args)
        
        params = envelope.to_tx_params()
        params["from"] = signer.address
        if "nonce" not in params:
            params["nonce"] = await self._request(
                "eth_getTransactionCount",
                w3.eth.get_transaction_count(signer.address, "pending"),
            )
        
        # Fills chainId, gas and fee fields left unset by the envelope
        tx = await self._request(
            f"build:{method}",
            fn.build_transaction(params),
        )
        raw = signer.sign_transaction(tx)
        tx_hash = await self._request(
            "eth_sendRawTransaction",
            w3.eth.send_raw_transaction(raw),
        )
        
        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(
            "transaction_broadcast",
            method=method,
            tx_hash=tx_hash_hex[:18] + "...",
            value=envelope.value,
        )
        return tx_hash_hex
