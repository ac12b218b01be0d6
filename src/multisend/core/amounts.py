"""
Amount aggregation.

Parses per-recipient amounts into integers in the asset's smallest unit
and computes batch totals. Pure functions, no I/O. Floating point values
are rejected outright.
"""

import re
from typing import Iterable, List, Tuple

from multisend.core.request import Amount
from multisend.exceptions import MultiSendError


UINT256_MAX = 2**256 - 1

_DECIMAL = re.compile(r"[0-9]+")
_HEX = re.compile(r"0[xX][0-9a-fA-F]+")
_MAX_TEXT_LENGTH = 80


class InvalidAmount(MultiSendError, ValueError):
    """Raised when an amount is not a non-negative uint256 integer."""
    
    def __init__(self, amount: object, reason: str = "not a non-negative integer"):
        super().__init__(f"Invalid amount {amount!r}: {reason}")
        self.amount = amount
        self.reason = reason


def parse_amount(amount: Amount) -> int:
    """
    Parse an amount given as an int, a decimal string, or a 0x-prefixed hex string.
    
    Args:
        amount: Amount in the asset's smallest unit
        
    Returns:
        The amount as an int
        
    Raises:
        InvalidAmount: If the value is negative, fractional, too large, or malformed
    """
    # bool is an int subclass
    if isinstance(amount, bool):
        raise InvalidAmount(amount)
    
    if isinstance(amount, int):
        value = amount
    elif isinstance(amount, str):
        text = amount.strip()
        if _DECIMAL.fullmatch(text):
            digits, base = text, 10
        elif _HEX.fullmatch(text):
            digits, base = text[2:], 16
        else:
            raise InvalidAmount(amount)
        # Leading zeros do not count towards the length cap
        digits = digits.lstrip("0") or "0"
        if len(digits) > _MAX_TEXT_LENGTH:
            raise InvalidAmount(amount, "exceeds uint256")
        value = int(digits, base)
    else:
        raise InvalidAmount(amount, f"unsupported type {type(amount).__name__}")
    
    if value < 0:
        raise InvalidAmount(amount, "negative")
    if value > UINT256_MAX:
        raise InvalidAmount(amount, "exceeds uint256")
    return value


def _check_total(total: int) -> int:
    if total > UINT256_MAX:
        raise InvalidAmount(total, "batch total exceeds uint256")
    return total


def parse_amounts(amounts: Iterable[Amount]) -> List[int]:
    """Parse every amount of a sequence, preserving order."""
    return [parse_amount(a) for a in amounts]


def sum_amounts(amounts: Iterable[Amount]) -> int:
    """Sum a sequence of amounts. An empty sequence sums to zero."""
    return _check_total(sum(parse_amounts(amounts)))


def multiply_amount(amount: Amount, count: int) -> int:
    """Total for an equal-amount batch: ``amount * count``."""
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    return _check_total(parse_amount(amount) * count)


class AmountAggregator:
    """
    Normalizes and totals batch amounts.
    
    Thin object wrapper over the module functions so the assembler can
    take it as a collaborator.
    """
    
    def parse(self, amounts: Iterable[Amount]) -> Tuple[List[int], int]:
        """
        Parse a sequence of amounts.
        
        Returns:
            Tuple of (parsed amounts, their sum)
        """
        parsed = parse_amounts(amounts)
        return parsed, _check_total(sum(parsed))
    
    def sum(self, amounts: Iterable[Amount]) -> int:
        return sum_amounts(amounts)
    
    def multiply(self, amount: Amount, count: int) -> int:
        return multiply_amount(amount, count)
