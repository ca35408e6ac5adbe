"""Unit tests for the rounding/allocation primitive"""

import random
import pytest
from decimal import Decimal
from billboard_billing.domain.allocation import allocate, round2, to_money
from billboard_billing.domain.exceptions import InvalidAllocation


def test_allocate_three_way_split():
    """Test 100 / 3 -> last bucket absorbs the cent"""
    amounts = allocate(Decimal("100.00"), [1, 1, 1])

    assert amounts == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(amounts) == Decimal("100.00")


def test_allocate_weighted_split():
    """Test weights are honoured proportionally"""
    amounts = allocate(1000, [1, 3])

    assert amounts == [Decimal("250.00"), Decimal("750")]


def test_allocate_single_bucket_ignores_weight():
    """Test n == 1 returns the total unconditionally"""
    assert allocate(Decimal("123.45"), [0]) == [Decimal("123.45")]
    assert allocate(50, [7]) == [Decimal("50")]


def test_allocate_zero_total():
    """Test zero total yields zero amounts"""
    amounts = allocate(0, [1, 1, 1, 1])

    assert all(a == 0 for a in amounts)
    assert sum(amounts) == 0


def test_allocate_accepts_floats_without_binary_noise():
    """Test 0.1 is treated as exactly one tenth"""
    amounts = allocate(0.1, [1, 1])

    assert amounts == [Decimal("0.05"), Decimal("0.05")]


def test_allocate_sum_is_exact_across_totals_and_counts():
    """Test sum(allocate(total, ones(n))) == total for random totals and n in 1..24"""
    rng = random.Random(20250101)
    for _ in range(500):
        total = Decimal(rng.randint(0, 1_000_000_000)) / 100  # 0 .. 10,000,000.00
        n = rng.randint(1, 24)
        amounts = allocate(total, [1] * n)

        assert len(amounts) == n
        assert sum(amounts) == total


def test_allocate_rejects_empty_weights():
    with pytest.raises(InvalidAllocation):
        allocate(100, [])


def test_allocate_rejects_negative_weight():
    with pytest.raises(InvalidAllocation):
        allocate(100, [1, -1, 1])


def test_allocate_rejects_all_zero_weights():
    with pytest.raises(InvalidAllocation):
        allocate(100, [0, 0])


@pytest.mark.parametrize("total", [float("nan"), float("inf"), "abc", None, True])
def test_allocate_rejects_non_finite_total(total):
    with pytest.raises(InvalidAllocation):
        allocate(total, [1, 1])


def test_round2_half_up():
    assert round2(Decimal("0.005")) == Decimal("0.01")
    assert round2(Decimal("2.344")) == Decimal("2.34")


def test_to_money_parses_strings():
    assert to_money(" 12.50 ") == Decimal("12.50")


def test_allocate_never_leaves_negative_last_bucket():
    """Test 0.05 over 10 buckets, where half-up rounding of every share would overshoot"""
    amounts = allocate(Decimal("0.05"), [1] * 10)

    assert all(a >= 0 for a in amounts)
    assert sum(amounts) == Decimal("0.05")
