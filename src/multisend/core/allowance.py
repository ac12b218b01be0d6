"""
Allowance guard.

Checks that the multi-send contract may pull the aggregated token total
from the sender before a token batch is dispatched. Insufficient
allowance is reported, never remedied automatically.
"""

import structlog

from multisend.exceptions import MultiSendError
from multisend.node.erc20 import TokenClient

logger = structlog.get_logger(__name__)


class InsufficientAllowance(MultiSendError):
    """
    Raised when a token batch needs more allowance than the owner granted.
    
    The message carries the exact required total so the caller can submit
    a matching approval.
    """
    
    def __init__(self, token: str, owner: str, spender: str, required: int, allowance: int):
        super().__init__(
            f"Insufficient allowance for token {token}: spender {spender} may transfer "
            f"{allowance} from {owner} but the batch requires {required}. "
            f"Approve at least {required} before sending."
        )
        self.token = token
        self.owner = owner
        self.spender = spender
        self.required = required
        self.allowance = allowance
    
    @property
    def shortfall(self) -> int:
        return self.required - self.allowance


class AllowanceGuard:
    """Compares on-chain allowance with the amount a batch will transfer."""
    
    def __init__(self, token_client: TokenClient):
        self.token_client = token_client
    
    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        """Query the current allowance. Transport errors propagate unchanged."""
        return await self.token_client.allowance(token, owner, spender)
    
    async def check_sufficient(self, token: str, owner: str, spender: str, required: int) -> bool:
        """
        Check whether ``spender`` may transfer ``required`` of ``token`` from ``owner``.
        
        Returns:
            True if the current allowance is at least ``required``
        """
        allowance = await self.get_allowance(token, owner, spender)
        sufficient = allowance >= required
        logger.debug(
            "allowance_checked",
            token=token[:10] + "...",
            required=required,
            allowance=allowance,
            sufficient=sufficient,
        )
        return sufficient
    
    async def ensure_sufficient(self, token: str, owner: str, spender: str, required: int) -> int:
        """
        Require enough allowance for ``required``.
        
        Returns:
            The current allowance
            
        Raises:
            InsufficientAllowance: If the allowance is below ``required``
        """
        allowance = await self.get_allowance(token, owner, spender)
        if allowance < required:
            logger.warning(
                "allowance_insufficient",
                token=token[:10] + "...",
                required=required,
                allowance=allowance,
            )
            raise InsufficientAllowance(token, owner, spender, required, allowance)
        return allowance
