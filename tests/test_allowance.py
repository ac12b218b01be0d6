"""
Test suite for the allowance guard.
"""

import pytest

from multisend.core.allowance import AllowanceGuard, InsufficientAllowance

from mocks import ADDRESS_A, CONTRACT_ADDRESS, TOKEN_ADDRESS, MockTokenClient


@pytest.fixture
def guard(mock_tokens) -> AllowanceGuard:
    mock_tokens.set_allowance(TOKEN_ADDRESS, ADDRESS_A, CONTRACT_ADDRESS, 150)
    return AllowanceGuard(mock_tokens)


class TestAllowanceGuard:
    """Tests for allowance checks."""
    
    @pytest.mark.asyncio
    async def test_exact_allowance_is_sufficient(self, guard):
        assert await guard.check_sufficient(TOKEN_ADDRESS, ADDRESS_A, CONTRACT_ADDRESS, 150)
    
    @pytest.mark.asyncio
    async def test_one_short_is_insufficient(self, guard):
        assert not await guard.check_sufficient(TOKEN_ADDRESS, ADDRESS_A, CONTRACT_ADDRESS, 151)
    
    @pytest.mark.asyncio
    async def test_ensure_returns_allowance(self, guard):
        allowance = await guard.ensure_sufficient(TOKEN_ADDRESS, ADDRESS_A, CONTRACT_ADDRESS, 100)
        
        assert allowance == 150
    
    @pytest.mark.asyncio
    async def test_ensure_raises_with_required_amount(self, guard):
        with pytest.raises(InsufficientAllowance) as exc_info:
            await guard.ensure_sufficient(TOKEN_ADDRESS, ADDRESS_A, CONTRACT_ADDRESS, 400)
        
        error = exc_info.value
        assert "Approve at least 400" in str(error)
        assert error.token == TOKEN_ADDRESS
        assert error.owner == ADDRESS_A
        assert error.spender == CONTRACT_ADDRESS
        assert error.shortfall == 250
    
    @pytest.mark.asyncio
    async def test_zero_requirement_always_passes(self):
        guard = AllowanceGuard(MockTokenClient(default_allowance=0))
        
        assert await guard.check_sufficient(TOKEN_ADDRESS, ADDRESS_A, CONTRACT_ADDRESS, 0)
    
    @pytest.mark.asyncio
    async def test_query_errors_propagate(self, mock_tokens):
        mock_tokens.error = TimeoutError("rpc timeout")
        guard = AllowanceGuard(mock_tokens)
        
        with pytest.raises(TimeoutError):
            await guard.check_sufficient(TOKEN_ADDRESS, ADDRESS_A, CONTRACT_ADDRESS, 1)
