"""
Settlement policy tests
"""

import pytest

from launchpad.services.settlement import (
    INVALID,
    NEEDS_PREPAYMENT,
    VALID,
    SettlementPolicy,
    format_ether,
)

ETH = 10 ** 18
GAS = ETH // 100  # 0.01 ETH
PRICE = 10 ** 13  # 0.00001 ETH per token


@pytest.fixture
def policy():
    return SettlementPolicy(GAS, PRICE)


def test_zero_buy_needs_prepayment(policy):
    settlement = policy.settle(0)
    assert settlement.status == NEEDS_PREPAYMENT
    assert settlement.needs_prepayment
    assert settlement.gas_amount == GAS
    assert settlement.remaining_for_tokens == 0


def test_buy_below_cost_is_invalid(policy):
    settlement = policy.settle(GAS // 2)
    assert settlement.status == INVALID
    assert not settlement.valid
    assert '0.0100' in settlement.error
    assert '0.0050' in settlement.error


def test_buy_equal_to_cost_leaves_nothing(policy):
    settlement = policy.settle(GAS)
    assert settlement.status == VALID
    assert settlement.remaining_for_tokens == 0


def test_gas_is_deducted(policy):
    settlement = policy.settle(2 * GAS)
    assert settlement.valid
    assert settlement.gas_amount == GAS
    assert settlement.remaining_for_tokens == GAS


def test_shortfall(policy):
    assert policy.shortfall(0) == GAS
    assert policy.shortfall(GAS // 4) == GAS - GAS // 4
    assert policy.shortfall(2 * GAS) == 0


def test_distribute_all_to_pool(policy):
    assert policy.distribute(1000 * ETH, 0) == (0, 1000 * ETH)


def test_distribute_buys_at_token_price(policy):
    total = 1_000_000_000 * ETH
    to_creator, to_pool = policy.distribute(total, GAS)
    # 0.01 ETH at 0.00001 ETH per token = 1000 tokens
    assert to_creator == 1000 * ETH
    assert to_pool == total - to_creator


def test_distribute_is_capped_at_supply(policy):
    assert policy.distribute(10 * ETH, ETH) == (10 * ETH, 0)


def test_distribute_with_other_decimals(policy):
    to_creator, to_pool = policy.distribute(1_000_000 * 10 ** 6, GAS, unit=10 ** 6)
    assert to_creator == 1000 * 10 ** 6
    assert to_creator + to_pool == 1_000_000 * 10 ** 6


def test_token_price_must_be_positive():
    with pytest.raises(ValueError):
        SettlementPolicy(GAS, 0)


def test_format_ether():
    assert format_ether(GAS) == '0.0100'
    assert format_ether(0) == '0.0000'
    assert format_ether(123 * ETH // 100) == '1.2300'
