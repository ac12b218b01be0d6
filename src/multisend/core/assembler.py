"""
Batch assembler.

Turns batch requests into calls on the multi-send contract: validates the
request, aggregates amounts, checks token allowance, builds the value and
gas envelope, then either submits the call or prices it.

Two handles are exposed. A ``BatchAssembler`` is read-only and can only
estimate; ``BatchAssembler.connect(signer)`` returns a
``SigningBatchAssembler`` that can also send.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import structlog

from multisend.abi import MULTI_SEND_ABI
from multisend.config import MultiSendConfig, get_config
from multisend.core.allowance import AllowanceGuard
from multisend.core.amounts import AmountAggregator, UINT256_MAX, InvalidAmount, parse_amount
from multisend.core.request import (
    Amount,
    BatchKind,
    BatchRequest,
    EthBatch,
    EthEqualBatch,
    GasEstimation,
    GasPriceTiers,
    MixedBatch,
    MixedEqualBatch,
    MixedRecipient,
    Recipient,
    TokenBatch,
    TokenEqualBatch,
    TransactionEnvelope,
    TransactionOptions,
    normalize_address,
)
from multisend.node.erc20 import Erc20TokenClient, TokenClient
from multisend.node.interface import ContractBinding, LedgerClient, NoSignerAttached
from multisend.node.web3_client import Web3LedgerClient
from multisend.tx.gas import GasEstimator
from multisend.tx.signer import TransactionSigner

logger = structlog.get_logger(__name__)


# Contract method invoked for each batch shape
METHOD_NAMES: Dict[BatchKind, str] = {
    BatchKind.ETH_VARIABLE: "multiTransfer",
    BatchKind.ETH_EQUAL: "multiTransferEqual",
    BatchKind.TOKEN_VARIABLE: "multiTransferToken",
    BatchKind.TOKEN_EQUAL: "multiTransferTokenEqual",
    BatchKind.MIXED_VARIABLE: "multiTransferTokenEther",
    BatchKind.MIXED_EQUAL: "multiTransferTokenEtherEqual",
}

SEND_TO_TWO_METHOD = "sendToTwo"


@dataclass(frozen=True)
class CallPlan:
    """
    A fully resolved contract call.
    
    Attributes:
        method: Contract function name
        args: Positional arguments in contract order
        value: Native coin attached to the call, in wei
        recipient_count: Number of recipients paid by the call
        token: Token moved by the call, if any
        token_total: Total token amount the contract will pull from the sender
    """
    method: str
    args: Tuple[Any, ...]
    value: int
    recipient_count: int
    token: Optional[str] = None
    token_total: int = 0


def _addresses(addresses: Sequence[str]) -> List[str]:
    return [normalize_address(a) for a in addresses]


def _plan_eth(request: EthBatch, aggregator: AmountAggregator) -> CallPlan:
    addresses = _addresses([r.address for r in request.recipients])
    amounts, total = aggregator.parse([r.amount for r in request.recipients])
    return CallPlan(
        method=METHOD_NAMES[request.kind],
        args=(addresses, amounts),
        value=total,
        recipient_count=request.count,
    )


def _plan_eth_equal(request: EthEqualBatch, aggregator: AmountAggregator) -> CallPlan:
    addresses = _addresses(request.addresses)
    amount = parse_amount(request.amount)
    return CallPlan(
        method=METHOD_NAMES[request.kind],
        args=(addresses, amount),
        value=aggregator.multiply(amount, request.count),
        recipient_count=request.count,
    )


def _plan_token(request: TokenBatch, aggregator: AmountAggregator) -> CallPlan:
    token = normalize_address(request.token)
    addresses = _addresses([r.address for r in request.recipients])
    amounts, total = aggregator.parse([r.amount for r in request.recipients])
    return CallPlan(
        method=METHOD_NAMES[request.kind],
        args=(token, addresses, amounts, total),
        value=0,
        recipient_count=request.count,
        token=token,
        token_total=total,
    )


def _plan_token_equal(request: TokenEqualBatch, aggregator: AmountAggregator) -> CallPlan:
    token = normalize_address(request.token)
    addresses = _addresses(request.addresses)
    amount = parse_amount(request.amount)
    return CallPlan(
        method=METHOD_NAMES[request.kind],
        args=(token, addresses, amount),
        value=0,
        recipient_count=request.count,
        token=token,
        token_total=aggregator.multiply(amount, request.count),
    )


def _plan_mixed(request: MixedBatch, aggregator: AmountAggregator) -> CallPlan:
    token = normalize_address(request.token)
    addresses = _addresses([r.address for r in request.recipients])
    token_amounts, token_total = aggregator.parse([r.token_amount for r in request.recipients])
    eth_amounts, eth_total = aggregator.parse([r.eth_amount for r in request.recipients])
    return CallPlan(
        method=METHOD_NAMES[request.kind],
        args=(token, addresses, token_amounts, token_total, eth_amounts),
        value=eth_total,
        recipient_count=request.count,
        token=token,
        token_total=token_total,
    )


def _plan_mixed_equal(request: MixedEqualBatch, aggregator: AmountAggregator) -> CallPlan:
    token = normalize_address(request.token)
    addresses = _addresses(request.addresses)
    token_amount = parse_amount(request.token_amount)
    eth_amount = parse_amount(request.eth_amount)
    return CallPlan(
        method=METHOD_NAMES[request.kind],
        args=(token, addresses, token_amount, eth_amount),
        value=aggregator.multiply(eth_amount, request.count),
        recipient_count=request.count,
        token=token,
        token_total=aggregator.multiply(token_amount, request.count),
    )


_PLANNERS: Dict[BatchKind, Callable[[Any, AmountAggregator], CallPlan]] = {
    BatchKind.ETH_VARIABLE: _plan_eth,
    BatchKind.ETH_EQUAL: _plan_eth_equal,
    BatchKind.TOKEN_VARIABLE: _plan_token,
    BatchKind.TOKEN_EQUAL: _plan_token_equal,
    BatchKind.MIXED_VARIABLE: _plan_mixed,
    BatchKind.MIXED_EQUAL: _plan_mixed_equal,
}

# A new BatchKind must come with a planner
_unplanned = set(BatchKind) - set(_PLANNERS)
if _unplanned:
    raise RuntimeError(f"No call planner for batch kinds: {sorted(k.value for k in _unplanned)}")


def build_call_plan(
    request: BatchRequest,
    aggregator: Optional[AmountAggregator] = None,
) -> CallPlan:
    """
    Validate a batch request and resolve it into a contract call.
    
    Pure: performs no network access.
    
    Raises:
        EmptyRecipientSet: If the request has no recipients
        InvalidAddress: If any address is malformed
        InvalidAmount: If any amount or total is not a valid uint256
    """
    request.validate()
    return _PLANNERS[request.kind](request, aggregator or AmountAggregator())


def build_send_to_two_plan(
    recipient1: str,
    amount1: Amount,
    recipient2: str,
    amount2: Amount,
) -> CallPlan:
    """Resolve a two-recipient native coin transfer."""
    address1 = normalize_address(recipient1)
    address2 = normalize_address(recipient2)
    value1 = parse_amount(amount1)
    value2 = parse_amount(amount2)
    if value1 + value2 > UINT256_MAX:
        raise InvalidAmount(value1 + value2, "batch total exceeds uint256")
    return CallPlan(
        method=SEND_TO_TWO_METHOD,
        args=(address1, value1, address2, value2),
        value=value1 + value2,
        recipient_count=2,
    )


class BatchAssembler:
    """
    Read-only batch assembler.
    
    Validates and prices batch transfers without a signing identity.
    
    Usage:
        ```python
        assembler = BatchAssembler(contract_address="0x...", config=config)
        estimation = await assembler.estimate_eth_batch(recipients)
        
        sending = assembler.connect(TransactionSigner.from_key(key))
        tx_hash = await sending.send_eth_batch(recipients)
        ```
    """
    
    def __init__(
        self,
        contract_address: Optional[str] = None,
        client: Optional[LedgerClient] = None,
        config: Optional[MultiSendConfig] = None,
        token_client: Optional[TokenClient] = None,
        abi: Optional[List[dict]] = None,
    ):
        """
        Initialize the assembler.
        
        Args:
            contract_address: Multi-send contract address (defaults to config)
            client: Ledger client (a web3 client is built from config if not provided)
            config: Client configuration
            token_client: Token client (an ERC-20 client over ``client`` if not provided)
            abi: Contract interface (defaults to the bundled multi-send ABI)
        """
        self.config = config or get_config()
        
        address = contract_address or self.config.contract_address
        if not address:
            raise ValueError("Multi-send contract address not configured")
        
        self.client = client or Web3LedgerClient(self.config)
        self.token_client = token_client or Erc20TokenClient(self.client)
        self.binding = ContractBinding(normalize_address(address), abi or MULTI_SEND_ABI)
        
        self.aggregator = AmountAggregator()
        self.allowance_guard = AllowanceGuard(self.token_client)
        self.gas_estimator = GasEstimator(self.client, self.binding)
    
    def connect(self, signer: TransactionSigner) -> "SigningBatchAssembler":
        """
        Attach a signing identity.
        
        Returns:
            A new send-capable assembler sharing this assembler's collaborators
        """
        return SigningBatchAssembler(
            signer=signer,
            contract_address=self.binding.address,
            client=self.client,
            config=self.config,
            token_client=self.token_client,
            abi=self.binding.abi,
        )
    
    def get_client(self) -> LedgerClient:
        return self.client
    
    def get_contract_address(self) -> str:
        return self.binding.address
    
    @property
    def signer_address(self) -> Optional[str]:
        """Address of the attached signer, or None for a read-only assembler."""
        return self.binding.signer.address if self.binding.has_signer else None
    
    def build_envelope(
        self,
        value: int,
        options: Optional[TransactionOptions] = None,
    ) -> TransactionEnvelope:
        """
        Resolve the value and gas parameters of a call.
        
        Gas fields use the per-call option, else the configured default, else
        are left for the ledger client to fill. The nonce is only ever taken
        from the options.
        """
        options = options or TransactionOptions()
        gas_limit = options.gas_limit
        if gas_limit is None:
            gas_limit = self.config.default_gas_limit
        gas_price = options.gas_price
        if gas_price is None:
            gas_price = self.config.default_gas_price
        return TransactionEnvelope(
            value=value,
            gas_limit=gas_limit,
            gas_price=gas_price,
            nonce=options.nonce,
        )
    
    def _simulation_sender(self, options: Optional[TransactionOptions]) -> Optional[str]:
        if options is not None and options.from_address:
            return normalize_address(options.from_address)
        return self.signer_address
    
    async def _estimate_plan(
        self,
        plan: CallPlan,
        options: Optional[TransactionOptions],
    ) -> GasEstimation:
        sender = self._simulation_sender(options)
        # Without a known sender the simulation itself decides
        if plan.token is not None and sender is not None:
            await self.allowance_guard.ensure_sufficient(
                plan.token, sender, self.binding.address, plan.token_total
            )
        return await self.gas_estimator.estimate(
            plan.method,
            plan.args,
            plan.value,
            options,
            from_address=sender,
        )
    
    async def estimate(
        self,
        request: BatchRequest,
        options: Optional[TransactionOptions] = None,
    ) -> GasEstimation:
        """
        Estimate the gas cost of a batch.
        
        Args:
            request: Any of the six batch shapes
            options: Per-call options (gas_price and from_address are used)
            
        Returns:
            GasEstimation for the matching contract call
            
        Raises:
            EmptyRecipientSet, InvalidAddress, InvalidAmount: Before any network access
            InsufficientAllowance: If the known sender has not approved the token total
            EstimationFailed: If the simulated call reverts
        """
        plan = build_call_plan(request, self.aggregator)
        return await self._estimate_plan(plan, options)
    
    async def estimate_eth_batch(
        self,
        recipients: Sequence[Recipient],
        options: Optional[TransactionOptions] = None,
    ) -> GasEstimation:
        return await self.estimate(EthBatch(recipients=recipients), options)
    
    async def estimate_eth_equal_batch(
        self,
        addresses: Sequence[str],
        amount: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> GasEstimation:
        return await self.estimate(EthEqualBatch(addresses=addresses, amount=amount), options)
    
    async def estimate_token_batch(
        self,
        token: str,
        recipients: Sequence[Recipient],
        options: Optional[TransactionOptions] = None,
    ) -> GasEstimation:
        return await self.estimate(TokenBatch(token=token, recipients=recipients), options)
    
    async def estimate_token_equal_batch(
        self,
        token: str,
        addresses: Sequence[str],
        amount: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> GasEstimation:
        return await self.estimate(
            TokenEqualBatch(token=token, addresses=addresses, amount=amount), options
        )
    
    async def estimate_mixed_batch(
        self,
        token: str,
        recipients: Sequence[MixedRecipient],
        options: Optional[TransactionOptions] = None,
    ) -> GasEstimation:
        return await self.estimate(MixedBatch(token=token, recipients=recipients), options)
    
    async def estimate_mixed_equal_batch(
        self,
        token: str,
        addresses: Sequence[str],
        token_amount: Amount,
        eth_amount: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> GasEstimation:
        return await self.estimate(
            MixedEqualBatch(
                token=token,
                addresses=addresses,
                token_amount=token_amount,
                eth_amount=eth_amount,
            ),
            options,
        )
    
    async def estimate_send_to_two(
        self,
        recipient1: str,
        amount1: Amount,
        recipient2: str,
        amount2: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> GasEstimation:
        plan = build_send_to_two_plan(recipient1, amount1, recipient2, amount2)
        return await self._estimate_plan(plan, options)
    
    async def get_gas_price_tiers(self) -> GasPriceTiers:
        """Get advisory slow/average/fast gas prices."""
        return await self.gas_estimator.get_gas_price_tiers()
    
    async def get_allowance(self, token: str, owner: str) -> int:
        """Get how much of ``token`` the contract may pull from ``owner``."""
        return await self.allowance_guard.get_allowance(
            normalize_address(token), normalize_address(owner), self.binding.address
        )
    
    async def check_allowance(self, token: str, owner: str, required: Amount) -> bool:
        """Check whether ``owner`` has approved at least ``required`` for the contract."""
        return await self.allowance_guard.check_sufficient(
            normalize_address(token),
            normalize_address(owner),
            self.binding.address,
            parse_amount(required),
        )


class SigningBatchAssembler(BatchAssembler):
    """
    Send-capable batch assembler.
    
    Obtained from ``BatchAssembler.connect``; its contract binding carries
    the signer, so every send path has a signing identity.
    """
    
    def __init__(
        self,
        signer: TransactionSigner,
        contract_address: Optional[str] = None,
        client: Optional[LedgerClient] = None,
        config: Optional[MultiSendConfig] = None,
        token_client: Optional[TokenClient] = None,
        abi: Optional[List[dict]] = None,
    ):
        if signer is None:
            raise NoSignerAttached("A signer is required to send batches")
        super().__init__(
            contract_address=contract_address,
            client=client,
            config=config,
            token_client=token_client,
            abi=abi,
        )
        self.binding = self.binding.connect(signer)
        self.gas_estimator = GasEstimator(self.client, self.binding)
    
    @property
    def signer(self) -> TransactionSigner:
        return self.binding.require_signer()
    
    async def _submit_plan(
        self,
        plan: CallPlan,
        options: Optional[TransactionOptions],
    ) -> str:
        signer = self.binding.require_signer()
        
        if plan.token is not None:
            await self.allowance_guard.ensure_sufficient(
                plan.token, signer.address, self.binding.address, plan.token_total
            )
        
        envelope = self.build_envelope(plan.value, options)
        
        logger.info(
            "batch_submitting",
            method=plan.method,
            recipient_count=plan.recipient_count,
            value=envelope.value,
            token_total=plan.token_total,
        )
        
        tx_hash = await self.client.send_transaction(
            self.binding,
            plan.method,
            plan.args,
            envelope,
        )
        
        logger.info(
            "batch_submitted",
            method=plan.method,
            tx_hash=tx_hash[:18] + "...",
        )
        return tx_hash
    
    async def send(
        self,
        request: BatchRequest,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        """
        Submit a batch to the multi-send contract.
        
        Args:
            request: Any of the six batch shapes
            options: Per-call gas limit, gas price and nonce overrides
            
        Returns:
            Transaction hash
            
        Raises:
            EmptyRecipientSet, InvalidAddress, InvalidAmount: Before any network access
            InsufficientAllowance: If the signer has not approved the token total;
                no transaction is submitted
        """
        request.validate()
        self.binding.require_signer()
        plan = build_call_plan(request, self.aggregator)
        return await self._submit_plan(plan, options)
    
    async def send_eth_batch(
        self,
        recipients: Sequence[Recipient],
        options: Optional[TransactionOptions] = None,
    ) -> str:
        return await self.send(EthBatch(recipients=recipients), options)
    
    async def send_eth_equal_batch(
        self,
        addresses: Sequence[str],
        amount: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        return await self.send(EthEqualBatch(addresses=addresses, amount=amount), options)
    
    async def send_token_batch(
        self,
        token: str,
        recipients: Sequence[Recipient],
        options: Optional[TransactionOptions] = None,
    ) -> str:
        return await self.send(TokenBatch(token=token, recipients=recipients), options)
    
    async def send_token_equal_batch(
        self,
        token: str,
        addresses: Sequence[str],
        amount: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        return await self.send(
            TokenEqualBatch(token=token, addresses=addresses, amount=amount), options
        )
    
    async def send_mixed_batch(
        self,
        token: str,
        recipients: Sequence[MixedRecipient],
        options: Optional[TransactionOptions] = None,
    ) -> str:
        return await self.send(MixedBatch(token=token, recipients=recipients), options)
    
    async def send_mixed_equal_batch(
        self,
        token: str,
        addresses: Sequence[str],
        token_amount: Amount,
        eth_amount: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        return await self.send(
            MixedEqualBatch(
                token=token,
                addresses=addresses,
                token_amount=token_amount,
                eth_amount=eth_amount,
            ),
            options,
        )
    
    async def send_to_two(
        self,
        recipient1: str,
        amount1: Amount,
        recipient2: str,
        amount2: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        """Send native coin to exactly two recipients through the cheaper two-party path."""
        plan = build_send_to_two_plan(recipient1, amount1, recipient2, amount2)
        return await self._submit_plan(plan, options)
    
    async def approve_spending(
        self,
        token: str,
        amount: Amount,
        options: Optional[TransactionOptions] = None,
    ) -> str:
        """
        Approve the multi-send contract to transfer ``amount`` of ``token``.
        
        Uses ``config.approve_gas_limit`` unless a gas limit is given.
        
        Returns:
            Transaction hash of the approval
        """
        self.binding.require_signer()
        token = normalize_address(token)
        value = parse_amount(amount)
        options = options or TransactionOptions()
        
        gas_limit = options.gas_limit
        if gas_limit is None:
            gas_limit = self.config.approve_gas_limit
        gas_price = options.gas_price
        if gas_price is None:
            gas_price = self.config.default_gas_price
        envelope = TransactionEnvelope(
            value=0,
            gas_limit=gas_limit,
            gas_price=gas_price,
            nonce=options.nonce,
        )
        
        tx_hash = await self.token_client.approve(
            token,
            self.binding.address,
            value,
            self.binding,
            envelope,
        )
        logger.info("token_approval_submitted", tx_hash=tx_hash[:18] + "...", amount=value)
        return tx_hash
