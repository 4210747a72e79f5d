"""Dynamic pricing: step function on the session's view count."""

from decimal import Decimal

import pytest

from app.domain.services.pricing import compute_display_price, visit_multiplier


@pytest.mark.parametrize(
    "visits, expected",
    [
        (0, 89.99),
        (1, 89.99),
        (2, 89.99),
        (3, 98.99),    # 89.99 * 1.10 = 98.989
        (5, 98.99),
        (6, 107.99),   # 89.99 * 1.20 = 107.988
        (9, 116.99),   # 89.99 * 1.30 = 116.987
        (12, 125.99),  # 89.99 * 1.40 = 125.986
        (15, 134.99),  # 89.99 * 1.50 = 134.985, half-up
        (30, 134.99),
    ],
)
def test_reference_prices(visits, expected):
    assert compute_display_price(89.99, visits) == expected


def test_no_adjustment_below_three_views():
    for v in range(3):
        assert compute_display_price(19.5, v) == 19.5
        assert visit_multiplier(v) == Decimal(1)


def test_multiplier_is_capped_at_fifty_percent():
    for v in (15, 16, 20, 45, 1000):
        assert visit_multiplier(v) == Decimal("1.5")
        assert compute_display_price(200, v) == 300.0


def test_monotonic_in_visit_count():
    for base in (0, 0.01, 9.99, 89.99, 1234.56):
        prices = [compute_display_price(base, v) for v in range(60)]
        assert prices == sorted(prices)


def test_zero_base_price_stays_zero():
    assert compute_display_price(0, 0) == 0
    assert compute_display_price(0, 30) == 0


def test_rounds_half_up_on_the_cent():
    # 0.05 * 1.1 = 0.055 -> 0.06 (binary float math would give 0.05)
    assert compute_display_price(0.05, 3) == 0.06
    assert compute_display_price(10.005, 0) == 10.01


def test_same_inputs_same_output():
    assert compute_display_price(42.42, 7) == compute_display_price(42.42, 7)
