"""
ERC-20 token helpers.

Allowance, approval and metadata access for fungible tokens, plus
conversion between base units and human-readable decimal strings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Optional

import structlog

from multisend.abi import ERC20_ABI
from multisend.core.amounts import InvalidAmount, parse_amount
from multisend.core.request import TransactionEnvelope, normalize_address
from multisend.node.interface import ContractBinding, LedgerClient

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TokenInfo:
    """Metadata of an ERC-20 token."""
    address: str
    name: str
    symbol: str
    decimals: int
    total_supply: int


def format_amount(amount: int, decimals: int) -> str:
    """
    Format a base-unit amount as a decimal string.
    
    Args:
        amount: Amount in the token's smallest unit
        decimals: Token decimals
        
    Returns:
        Decimal representation without trailing zeros, e.g. "1.5"
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    value = parse_amount(amount)
    whole, fraction = divmod(value, 10**decimals)
    if decimals == 0 or fraction == 0:
        return f"{whole}.0"
    digits = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{digits}"


def parse_units(text: str, decimals: int) -> int:
    """
    Parse a human-readable decimal string into base units.
    
    Args:
        text: Decimal amount, e.g. "1.5"
        decimals: Token decimals
        
    Returns:
        Amount in the token's smallest unit
        
    Raises:
        InvalidAmount: If the text is not a non-negative number or has
            more fractional digits than the token supports
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    try:
        value = Decimal(str(text).strip())
    except InvalidOperation:
        raise InvalidAmount(text)
    
    if not value.is_finite() or value < 0:
        raise InvalidAmount(text)
    
    with localcontext() as ctx:
        ctx.prec = 120
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidAmount(text, f"more than {decimals} decimal places")
    return parse_amount(int(scaled))


class TokenClient(ABC):
    """
    Abstract interface for token access.
    
    Used by the allowance guard and the approval helper.
    """
    
    @abstractmethod
    async def allowance(self, token: str, owner: str, spender: str) -> int:
        """Get the amount ``spender`` may transfer on behalf of ``owner``."""
        pass
    
    @abstractmethod
    async def approve(
        self,
        token: str,
        spender: str,
        amount: int,
        binding: ContractBinding,
        envelope: TransactionEnvelope,
    ) -> str:
        """
        Submit an approve(spender, amount) call signed by the binding's signer.
        
        Returns:
            Transaction hash
        """
        pass
    
    @abstractmethod
    async def balance_of(self, token: str, owner: str) -> int:
        pass
    
    @abstractmethod
    async def decimals(self, token: str) -> int:
        pass
    
    @abstractmethod
    async def get_token_info(self, token: str) -> TokenInfo:
        pass


class Erc20TokenClient(TokenClient):
    """
    Token client built on the generic ledger client.
    
    Every query is a read-only contract call through the ledger client, so
    its errors propagate unchanged.
    """
    
    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger
    
    def _binding(self, token: str, signer=None) -> ContractBinding:
        return ContractBinding(normalize_address(token), ERC20_ABI, signer)
    
    async def allowance(self, token: str, owner: str, spender: str) -> int:
        value = await self.ledger.call(
            self._binding(token),
            "allowance",
            [normalize_address(owner), normalize_address(spender)],
        )
        return int(value)
    
    async def approve(
        self,
        token: str,
        spender: str,
        amount: int,
        binding: ContractBinding,
        envelope: TransactionEnvelope,
    ) -> str:
        signer = binding.require_signer()
        token_binding = self._binding(token, signer)
        spender = normalize_address(spender)
        
        logger.info(
            "token_approval_submitting",
            token=token_binding.address[:10] + "...",
            spender=spender[:10] + "...",
            amount=amount,
        )
        return await self.ledger.send_transaction(
            token_binding,
            "approve",
            [spender, amount],
            envelope,
        )
    
    async def balance_of(self, token: str, owner: str) -> int:
        value = await self.ledger.call(
            self._binding(token), "balanceOf", [normalize_address(owner)]
        )
        return int(value)
    
    async def decimals(self, token: str) -> int:
        return int(await self.ledger.call(self._binding(token), "decimals", []))
    
    async def get_token_info(self, token: str) -> TokenInfo:
        binding = self._binding(token)
        name = await self.ledger.call(binding, "name", [])
        symbol = await self.ledger.call(binding, "symbol", [])
        decimals = await self.ledger.call(binding, "decimals", [])
        total_supply = await self.ledger.call(binding, "totalSupply", [])
        return TokenInfo(
            address=binding.address,
            name=name,
            symbol=symbol,
            decimals=int(decimals),
            total_supply=int(total_supply),
        )
    
    async def format_balance(self, token: str, owner: str, decimals: Optional[int] = None) -> str:
        """Get an owner's balance as a decimal string."""
        if decimals is None:
            decimals = await self.decimals(token)
        return format_amount(await self.balance_of(token, owner), decimals)
