"""
Test suite for ERC-20 helpers.
"""

import pytest

from multisend.abi import MULTI_SEND_ABI
from multisend.core.amounts import InvalidAmount
from multisend.core.request import TransactionEnvelope
from multisend.node.erc20 import Erc20TokenClient, format_amount, parse_units
from multisend.node.interface import ContractBinding, NoSignerAttached

from mocks import ADDRESS_A, CONTRACT_ADDRESS, TOKEN_ADDRESS


# ============================================================================
# Test Unit Conversion
# ============================================================================

class TestFormatting:
    """Tests for base unit ↔ decimal string conversion."""
    
    @pytest.mark.parametrize("amount,decimals,expected", [
        (1_500_000, 6, "1.5"),
        (10**18, 18, "1.0"),
        (1, 18, "0.000000000000000001"),
        (0, 6, "0.0"),
        (42, 0, "42.0"),
        (123_450, 3, "123.45"),
    ])
    def test_format_amount(self, amount, decimals, expected):
        assert format_amount(amount, decimals) == expected
    
    @pytest.mark.parametrize("text,decimals,expected", [
        ("1.5", 6, 1_500_000),
        ("1", 18, 10**18),
        ("0.000000000000000001", 18, 1),
        ("42", 0, 42),
        (" 2.50 ", 2, 250),
    ])
    def test_parse_units(self, text, decimals, expected):
        assert parse_units(text, decimals) == expected
    
    def test_parse_units_keeps_precision(self):
        text = "123456789012345678901234567890.123456789012345678"
        
        assert parse_units(text, 18) == 123456789012345678901234567890123456789012345678
    
    @pytest.mark.parametrize("text", ["-1", "abc", "NaN", "Infinity", ""])
    def test_parse_units_rejects(self, text):
        with pytest.raises(InvalidAmount):
            parse_units(text, 18)
    
    def test_parse_units_rejects_excess_precision(self):
        with pytest.raises(InvalidAmount, match="6 decimal places"):
            parse_units("1.0000001", 6)
    
    def test_negative_decimals(self):
        with pytest.raises(ValueError):
            format_amount(1, -1)


# ============================================================================
# Test Token Client
# ============================================================================

@pytest.fixture
def tokens(mock_client) -> Erc20TokenClient:
    return Erc20TokenClient(mock_client)


class TestErc20TokenClient:
    """Tests for contract calls made by the token client."""
    
    @pytest.mark.asyncio
    async def test_allowance(self, tokens, mock_client):
        mock_client.read_results["allowance"] = 777
        
        allowance = await tokens.allowance(TOKEN_ADDRESS.lower(), ADDRESS_A.lower(), CONTRACT_ADDRESS)
        
        assert allowance == 777
        assert mock_client.operations == [
            ("call", TOKEN_ADDRESS, "allowance", (ADDRESS_A, CONTRACT_ADDRESS)),
        ]
    
    @pytest.mark.asyncio
    async def test_token_info(self, tokens, mock_client):
        mock_client.read_results.update({
            "name": "Tether USD",
            "symbol": "USDT",
            "decimals": 6,
            "totalSupply": 10**15,
        })
        
        info = await tokens.get_token_info(TOKEN_ADDRESS)
        
        assert info.address == TOKEN_ADDRESS
        assert info.symbol == "USDT"
        assert info.decimals == 6
        assert info.total_supply == 10**15
    
    @pytest.mark.asyncio
    async def test_format_balance(self, tokens, mock_client):
        mock_client.read_results.update({"balanceOf": 2_500_000, "decimals": 6})
        
        assert await tokens.format_balance(TOKEN_ADDRESS, ADDRESS_A) == "2.5"
    
    @pytest.mark.asyncio
    async def test_approve_signs_with_binding_signer(self, tokens, mock_client, test_signer):
        binding = ContractBinding(CONTRACT_ADDRESS, MULTI_SEND_ABI).connect(test_signer)
        
        tx_hash = await tokens.approve(
            TOKEN_ADDRESS, CONTRACT_ADDRESS, 150, binding, TransactionEnvelope(gas_limit=80_000)
        )
        
        assert tx_hash.startswith("0x")
        sent = mock_client.sent[0]
        assert sent["address"] == TOKEN_ADDRESS
        assert sent["method"] == "approve"
        assert sent["args"] == (CONTRACT_ADDRESS, 150)
        assert sent["from"] == test_signer.address
    
    @pytest.mark.asyncio
    async def test_approve_without_signer(self, tokens, mock_client):
        binding = ContractBinding(CONTRACT_ADDRESS, MULTI_SEND_ABI)
        
        with pytest.raises(NoSignerAttached):
            await tokens.approve(TOKEN_ADDRESS, CONTRACT_ADDRESS, 1, binding, TransactionEnvelope())
        
        assert mock_client.sent == []
