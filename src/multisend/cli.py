"""
Command-line interface for the multi-send client.

Provides commands for pricing, submitting and approving batch transfers.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import structlog

from multisend import __version__
from multisend.config import MultiSendConfig, set_config
from multisend.core.assembler import BatchAssembler
from multisend.core.loader import load_addresses, load_mixed_recipients, load_recipients
from multisend.core.request import (
    BatchKind,
    BatchRequest,
    EthBatch,
    EthEqualBatch,
    MixedBatch,
    MixedEqualBatch,
    TokenBatch,
    TokenEqualBatch,
    TransactionOptions,
)
from multisend.exceptions import MultiSendError
from multisend.node.erc20 import format_amount
from multisend.tx.signer import TransactionSigner


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint (default: $MULTISEND_RPC_URL)")
    parser.add_argument("--contract", help="Multi-send contract address (default: $MULTISEND_CONTRACT_ADDRESS)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--log-json", action="store_true", help="Output logs in JSON format")


def _add_batch_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "kind",
        choices=[k.value for k in BatchKind],
        help="Batch shape",
    )
    parser.add_argument(
        "--file",
        required=True,
        help="Recipients (CSV/JSON) for variable batches, or an address list for equal batches",
    )
    parser.add_argument("--token", help="ERC-20 token address (token and mixed batches)")
    parser.add_argument("--amount", help="Amount per address in base units (equal batches)")
    parser.add_argument("--token-amount", help="Token amount per address (mixed_equal)")
    parser.add_argument("--eth-amount", help="Wei per address (mixed_equal)")
    parser.add_argument("--gas-limit", type=int, help="Gas limit override")
    parser.add_argument("--gas-price", type=int, help="Gas price override in wei")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="multisend",
        description="Batch native coin and ERC-20 transfers through a multi-send contract",
    )
    
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    
    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    
    # Gas prices
    gas_parser = subparsers.add_parser("gas-prices", help="Show slow/average/fast gas prices")
    _add_common_arguments(gas_parser)
    
    # Estimate
    estimate_parser = subparsers.add_parser("estimate", help="Estimate the gas cost of a batch")
    _add_common_arguments(estimate_parser)
    _add_batch_arguments(estimate_parser)
    estimate_parser.add_argument("--from", dest="from_address", help="Sender to simulate")
    
    # Send
    send_parser = subparsers.add_parser("send", help="Submit a batch (needs $MULTISEND_SIGNING_KEY)")
    _add_common_arguments(send_parser)
    _add_batch_arguments(send_parser)
    send_parser.add_argument("--nonce", type=int, help="Nonce override")
    
    # Approve
    approve_parser = subparsers.add_parser("approve", help="Approve the contract to spend a token")
    _add_common_arguments(approve_parser)
    approve_parser.add_argument("--token", required=True, help="ERC-20 token address")
    approve_parser.add_argument("--amount", required=True, help="Allowance in base units")
    approve_parser.add_argument("--gas-limit", type=int, help="Gas limit override")
    approve_parser.add_argument("--gas-price", type=int, help="Gas price override in wei")
    
    # Allowance
    allowance_parser = subparsers.add_parser("allowance", help="Show the contract's allowance")
    _add_common_arguments(allowance_parser)
    allowance_parser.add_argument("--token", required=True, help="ERC-20 token address")
    allowance_parser.add_argument("--owner", required=True, help="Token owner address")
    
    # Token info
    info_parser = subparsers.add_parser("token-info", help="Show ERC-20 token metadata")
    _add_common_arguments(info_parser)
    info_parser.add_argument("--token", required=True, help="ERC-20 token address")
    
    return parser


def _require_arg(args: argparse.Namespace, name: str) -> str:
    value = getattr(args, name, None)
    if value is None:
        raise SystemExit(f"--{name.replace('_', '-')} is required for {args.kind} batches")
    return value


def build_request(args: argparse.Namespace) -> BatchRequest:
    """Build a batch request from parsed arguments."""
    kind = BatchKind(args.kind)
    
    if kind == BatchKind.ETH_VARIABLE:
        return EthBatch(recipients=load_recipients(args.file))
    if kind == BatchKind.ETH_EQUAL:
        return EthEqualBatch(addresses=load_addresses(args.file), amount=_require_arg(args, "amount"))
    
    token = _require_arg(args, "token")
    if kind == BatchKind.TOKEN_VARIABLE:
        return TokenBatch(token=token, recipients=load_recipients(args.file))
    if kind == BatchKind.TOKEN_EQUAL:
        return TokenEqualBatch(
            token=token,
            addresses=load_addresses(args.file),
            amount=_require_arg(args, "amount"),
        )
    if kind == BatchKind.MIXED_VARIABLE:
        return MixedBatch(token=token, recipients=load_mixed_recipients(args.file))
    return MixedEqualBatch(
        token=token,
        addresses=load_addresses(args.file),
        token_amount=_require_arg(args, "token_amount"),
        eth_amount=_require_arg(args, "eth_amount"),
    )


def build_config(args: argparse.Namespace) -> MultiSendConfig:
    """Create configuration from environment, overridden by flags."""
    overrides = {
        "log_level": args.log_level,
        "log_json": args.log_json,
    }
    if args.rpc_url:
        overrides["rpc_url"] = args.rpc_url
    if args.contract:
        overrides["contract_address"] = args.contract
    return MultiSendConfig(**overrides)


def build_options(args: argparse.Namespace) -> TransactionOptions:
    return TransactionOptions(
        gas_limit=getattr(args, "gas_limit", None),
        gas_price=getattr(args, "gas_price", None),
        nonce=getattr(args, "nonce", None),
        from_address=getattr(args, "from_address", None),
    )


async def run_command(args: argparse.Namespace, config: Optional[MultiSendConfig] = None) -> None:
    """Run a parsed command."""
    config = config or build_config(args)
    set_config(config)
    
    assembler = BatchAssembler(config=config)
    client = assembler.get_client()
    await client.connect()
    
    try:
        if args.command == "gas-prices":
            tiers = await assembler.get_gas_price_tiers()
            print(f"Slow:    {tiers.slow} wei")
            print(f"Average: {tiers.average} wei")
            print(f"Fast:    {tiers.fast} wei")
        
        elif args.command == "estimate":
            estimation = await assembler.estimate(build_request(args), build_options(args))
            print(f"Gas limit:  {estimation.gas_limit}")
            print(f"Gas price:  {estimation.gas_price} wei")
            print(f"Total cost: {estimation.total_cost} wei ({format_amount(estimation.total_cost, 18)} ETH)")
        
        elif args.command == "send":
            sending = assembler.connect(TransactionSigner.from_config(config))
            tx_hash = await sending.send(build_request(args), build_options(args))
            print(f"Submitted: {tx_hash}")
        
        elif args.command == "approve":
            sending = assembler.connect(TransactionSigner.from_config(config))
            tx_hash = await sending.approve_spending(args.token, args.amount, build_options(args))
            print(f"Approval submitted: {tx_hash}")
        
        elif args.command == "allowance":
            allowance = await assembler.get_allowance(args.token, args.owner)
            print(f"Allowance: {allowance}")
        
        elif args.command == "token-info":
            info = await assembler.token_client.get_token_info(args.token)
            print(f"Name:         {info.name}")
            print(f"Symbol:       {info.symbol}")
            print(f"Decimals:     {info.decimals}")
            print(f"Total supply: {format_amount(info.total_supply, info.decimals)}")
    finally:
        await client.disconnect()


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()
    
    if not args.command:
        parser.print_help()
        sys.exit(1)
    
    setup_logging(args.log_level, args.log_json)
    
    try:
        asyncio.run(run_command(args))
    except (MultiSendError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
