"""
Contract interface descriptions.

Holds the function fragments of the multi-send contract and the ERC-20
subset the token helper relies on. Argument order here is the order the
contract expects and must not be changed.
"""

from typing import List, Tuple


def _function(
    name: str,
    inputs: List[Tuple[str, str]],
    outputs: List[Tuple[str, str]] = (),
    state_mutability: str = "nonpayable",
) -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t, "internalType": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t, "internalType": t} for n, t in outputs],
        "stateMutability": state_mutability,
    }


MULTI_SEND_ABI: List[dict] = [
    _function(
        "multiTransfer",
        [("_addresses", "address[]"), ("_amounts", "uint256[]")],
        state_mutability="payable",
    ),
    _function(
        "multiTransferEqual",
        [("_addresses", "address[]"), ("_amount", "uint256")],
        state_mutability="payable",
    ),
    _function(
        "multiTransferToken",
        [
            ("_token", "address"),
            ("_addresses", "address[]"),
            ("_amounts", "uint256[]"),
            ("_amountSum", "uint256"),
        ],
    ),
    _function(
        "multiTransferTokenEqual",
        [("_token", "address"), ("_addresses", "address[]"), ("_amount", "uint256")],
    ),
    _function(
        "multiTransferTokenEther",
        [
            ("_token", "address"),
            ("_addresses", "address[]"),
            ("_amounts", "uint256[]"),
            ("_amountSum", "uint256"),
            ("_amountsEther", "uint256[]"),
        ],
        state_mutability="payable",
    ),
    _function(
        "multiTransferTokenEtherEqual",
        [
            ("_token", "address"),
            ("_addresses", "address[]"),
            ("_amount", "uint256"),
            ("_amountEther", "uint256"),
        ],
        state_mutability="payable",
    ),
    _function(
        "sendToTwo",
        [
            ("_address1", "address"),
            ("_amount1", "uint256"),
            ("_address2", "address"),
            ("_amount2", "uint256"),
        ],
        state_mutability="payable",
    ),
]


ERC20_ABI: List[dict] = [
    _function("name", [], [("", "string")], "view"),
    _function("symbol", [], [("", "string")], "view"),
    _function("decimals", [], [("", "uint8")], "view"),
    _function("totalSupply", [], [("", "uint256")], "view"),
    _function("balanceOf", [("owner", "address")], [("", "uint256")], "view"),
    _function(
        "allowance",
        [("owner", "address"), ("spender", "address")],
        [("", "uint256")],
        "view",
    ),
    _function("approve", [("spender", "address"), ("amount", "uint256")], [("", "bool")]),
]
