"""
Recipient file loading.

Reads recipient lists from CSV or JSON files. Amounts are kept as the
strings found in the file and are parsed later by the amount aggregator,
so malformed amounts surface as InvalidAmount.

CSV formats:
    address,amount
    0x1111111111111111111111111111111111111111,100000000000000000

    address,token_amount,eth_amount
    0x1111111111111111111111111111111111111111,5000000,100000000000000000

JSON format:
    [{"address": "0x...", "amount": "100"}, ...]
"""

import csv
import json
from pathlib import Path
from typing import Dict, List, Union

from multisend.core.request import Amount, MixedRecipient, Recipient

PathLike = Union[str, Path]


def _read_rows(filepath: PathLike) -> List[Dict[str, str]]:
    """Read rows from a CSV or JSON file as dicts with lowercase keys."""
    filepath = Path(filepath)
    
    if filepath.suffix.lower() == ".json":
        with open(filepath, "r") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError("JSON must contain a list of recipient objects")
        rows = []
        for i, entry in enumerate(data):
            if not isinstance(entry, dict):
                raise ValueError(f"Entry {i}: must be an object")
            rows.append({str(k).strip().lower(): v for k, v in entry.items()})
        return rows
    
    with open(filepath, "r", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError("CSV file is empty or has no headers")
        return [
            {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}
            for row in reader
        ]


def _require(row: Dict[str, str], key: str, index: int) -> Amount:
    value = row.get(key)
    if value is None or value == "":
        raise ValueError(f"Entry {index}: missing '{key}' field")
    return value if isinstance(value, int) else str(value)


def load_recipients(filepath: PathLike) -> List[Recipient]:
    """Load ``address,amount`` recipients."""
    return [
        Recipient(address=_require(row, "address", i), amount=_require(row, "amount", i))
        for i, row in enumerate(_read_rows(filepath))
    ]


def load_mixed_recipients(filepath: PathLike) -> List[MixedRecipient]:
    """Load ``address,token_amount,eth_amount`` recipients."""
    return [
        MixedRecipient(
            address=_require(row, "address", i),
            token_amount=_require(row, "token_amount", i),
            eth_amount=_require(row, "eth_amount", i),
        )
        for i, row in enumerate(_read_rows(filepath))
    ]


def load_addresses(filepath: PathLike) -> List[str]:
    """
    Load a plain address list.
    
    Accepts one address per line, or any of the recipient formats above
    (only the address column is used).
    """
    filepath = Path(filepath)
    if filepath.suffix.lower() in (".json", ".csv"):
        return [_require(row, "address", i) for i, row in enumerate(_read_rows(filepath))]
    
    addresses = []
    for line in filepath.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            addresses.append(line)
    return addresses
