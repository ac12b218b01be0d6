"""
Test suite for amount parsing and aggregation.
"""

import pytest

from multisend.core.amounts import (
    UINT256_MAX,
    AmountAggregator,
    InvalidAmount,
    multiply_amount,
    parse_amount,
    sum_amounts,
)


# ============================================================================
# Test Parsing
# ============================================================================

class TestParseAmount:
    """Tests for single amount parsing."""
    
    @pytest.mark.parametrize("amount,expected", [
        (0, 0),
        (100, 100),
        ("100", 100),
        (" 42 ", 42),
        ("0x10", 16),
        ("0XfF", 255),
        ("1000000000000000000", 10**18),
        (UINT256_MAX, UINT256_MAX),
        (str(UINT256_MAX), UINT256_MAX),
    ])
    def test_valid_amounts(self, amount, expected):
        assert parse_amount(amount) == expected
    
    @pytest.mark.parametrize("amount", [
        -1,
        "-1",
        "1.5",
        "1e18",
        "",
        "abc",
        "0x",
        "1_000",
    ])
    def test_malformed_amounts(self, amount):
        with pytest.raises(InvalidAmount):
            parse_amount(amount)
    
    def test_float_rejected(self):
        """Test that floats are never accepted, even whole ones."""
        with pytest.raises(InvalidAmount, match="float"):
            parse_amount(1.0)
    
    def test_bool_rejected(self):
        with pytest.raises(InvalidAmount):
            parse_amount(True)
    
    def test_none_rejected(self):
        with pytest.raises(InvalidAmount):
            parse_amount(None)
    
    def test_overflow_rejected(self):
        with pytest.raises(InvalidAmount, match="exceeds uint256"):
            parse_amount(UINT256_MAX + 1)
    
    def test_very_long_string_rejected(self):
        with pytest.raises(InvalidAmount, match="exceeds uint256"):
            parse_amount("9" * 500)
    
    def test_leading_zeros_ignored_by_length_cap(self):
        assert parse_amount("0" * 85 + "1") == 1
        assert parse_amount("0x" + "0" * 5000 + "ff") == 255
    
    def test_invalid_amount_is_value_error(self):
        """Test that callers catching ValueError also see InvalidAmount."""
        with pytest.raises(ValueError):
            parse_amount("nope")


# ============================================================================
# Test Aggregation
# ============================================================================

class TestAggregation:
    """Tests for totals."""
    
    def test_sum_mixed_representations(self):
        assert sum_amounts([100, "200", "0x64"]) == 400
    
    def test_empty_sum_is_zero(self):
        assert sum_amounts([]) == 0
    
    def test_sum_overflow(self):
        with pytest.raises(InvalidAmount, match="batch total"):
            sum_amounts([UINT256_MAX, 1])
    
    def test_multiply(self):
        assert multiply_amount("50", 3) == 150
        assert multiply_amount(50, 0) == 0
    
    def test_multiply_overflow(self):
        with pytest.raises(InvalidAmount, match="batch total"):
            multiply_amount(UINT256_MAX, 2)
    
    def test_multiply_negative_count(self):
        with pytest.raises(ValueError):
            multiply_amount(1, -1)
    
    def test_aggregator_parse_keeps_order(self):
        aggregator = AmountAggregator()
        
        amounts, total = aggregator.parse(["3", 1, "0x2"])
        
        assert amounts == [3, 1, 2]
        assert total == 6
    
    def test_aggregator_delegates(self):
        aggregator = AmountAggregator()
        
        assert aggregator.sum(["1", "2"]) == 3
        assert aggregator.multiply("7", 6) == 42
    
    def test_parse_fails_on_first_bad_amount(self):
        with pytest.raises(InvalidAmount) as exc_info:
            AmountAggregator().parse([1, "bad", -1])
        
        assert exc_info.value.amount == "bad"
