"""
Gas estimation.

Simulates contract calls to obtain a gas limit and prices them at either
a caller-supplied or the live network gas price. Results are never cached.
"""

from typing import Any, Optional, Sequence

import structlog

from multisend.core.request import GasEstimation, GasPriceTiers, TransactionOptions
from multisend.exceptions import MultiSendError
from multisend.node.interface import CallReverted, ContractBinding, LedgerClient

logger = structlog.get_logger(__name__)


# Advisory tiers as percentages of the current network price
SLOW_PERCENT = 90
AVERAGE_PERCENT = 100
FAST_PERCENT = 120


class EstimationFailed(MultiSendError):
    """Raised when gas simulation reverts."""
    
    def __init__(self, method: str, reason: str):
        super().__init__(f"Gas estimation for {method} failed: {reason}")
        self.method = method
        self.reason = reason


def gas_price_tiers(gas_price: int) -> GasPriceTiers:
    """Derive slow/average/fast prices from a network price using integer math."""
    return GasPriceTiers(
        slow=gas_price * SLOW_PERCENT // 100,
        average=gas_price * AVERAGE_PERCENT // 100,
        fast=gas_price * FAST_PERCENT // 100,
    )


class GasEstimator:
    """
    Prices contract calls against the current network state.
    
    Each estimate issues one simulation and, unless a price is supplied,
    one gas price query, in that order.
    """
    
    def __init__(self, client: LedgerClient, binding: ContractBinding):
        """
        Initialize the estimator.
        
        Args:
            client: Ledger client used for simulation and price queries
            binding: Contract the estimated calls target
        """
        self.client = client
        self.binding = binding
    
    async def estimate(
        self,
        method: str,
        args: Sequence[Any],
        value: int = 0,
        options: Optional[TransactionOptions] = None,
        from_address: Optional[str] = None,
    ) -> GasEstimation:
        """
        Estimate the cost of a contract call.
        
        Args:
            method: Contract function name
            args: Positional arguments, in contract order
            value: Native coin attached to the call, in wei
            options: Per-call options; only gas_price is used
            from_address: Simulated sender
            
        Returns:
            GasEstimation with total_cost = gas_limit * gas_price
            
        Raises:
            EstimationFailed: If the simulated call reverts
        """
        try:
            gas_limit = await self.client.estimate_gas(
                self.binding, method, args, value=value, from_address=from_address
            )
        except CallReverted as e:
            logger.warning("gas_estimation_failed", method=method, reason=e.reason)
            raise EstimationFailed(method, e.reason) from e
        
        if options is not None and options.gas_price is not None:
            gas_price = options.gas_price
        else:
            gas_price = await self.client.get_gas_price()
        
        estimation = GasEstimation(gas_limit=int(gas_limit), gas_price=int(gas_price))
        logger.info(
            "gas_estimated",
            method=method,
            gas_limit=estimation.gas_limit,
            gas_price=estimation.gas_price,
            total_cost=estimation.total_cost,
        )
        return estimation
    
    async def get_gas_price_tiers(self) -> GasPriceTiers:
        """Get advisory slow/average/fast gas prices."""
        return gas_price_tiers(await self.client.get_gas_price())
