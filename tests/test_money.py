from decimal import Decimal

import pytest

from walletledger.core.errors import InvalidAmount
from walletledger.utils.money import MAX_AMOUNT, parse_amount


@pytest.mark.parametrize(
    "value, expected",
    [
        ("40", Decimal("40.00")),
        ("0.01", Decimal("0.01")),
        (" 12.5 ", Decimal("12.50")),
        (7, Decimal("7.00")),
        (Decimal("10.000"), Decimal("10.00")),
    ],
)
def test_valid_amounts_are_normalised_to_cents(value, expected):
    amount = parse_amount(value)
    assert amount == expected
    assert amount.as_tuple().exponent == -2


@pytest.mark.parametrize(
    "value",
    ["0", "0.00", "-0.01", "0.001", "1e-9", "Infinity", "sNaN", "", "1,000", 2.5, False, [1]],
)
def test_malformed_or_non_positive_amounts(value):
    with pytest.raises(InvalidAmount):
        parse_amount(value)


def test_amount_must_fit_the_balance_column():
    assert parse_amount(MAX_AMOUNT) == MAX_AMOUNT
    with pytest.raises(InvalidAmount):
        parse_amount(MAX_AMOUNT + Decimal("0.01"))
    with pytest.raises(InvalidAmount):
        parse_amount("1e40")
