from decimal import Decimal, InvalidOperation as DecimalInvalidOperation
from typing import Union

from walletledger.core.errors import InvalidAmount

CENT = Decimal("0.01")
# NUMERIC(15, 2): thirteen integer digits.
MAX_AMOUNT = Decimal("9999999999999.99")

AmountLike = Union[Decimal, int, str]


def parse_amount(value: AmountLike) -> Decimal:
    """Turn caller input into a positive amount with scale 2.

    Floats are refused outright since their binary value rarely matches the
    decimal the caller meant.
    """
    if isinstance(value, (bool, float)) or not isinstance(value, (Decimal, int, str)):
        raise InvalidAmount(f"Amount must be a decimal number, got {type(value).__name__}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except DecimalInvalidOperation as exc:
        raise InvalidAmount(f"Amount {value!r} is not a number") from exc

    if not amount.is_finite():
        raise InvalidAmount(f"Amount {value!r} is not a finite number")
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than zero")
    if amount > MAX_AMOUNT:
        raise InvalidAmount(f"Amount cannot exceed {MAX_AMOUNT}")
    if amount != amount.quantize(CENT):
        raise InvalidAmount("Amount cannot have more than two decimal places")
    return amount.quantize(CENT)
