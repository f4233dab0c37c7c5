"""Integer arithmetic utilities for pence-based auction money.

All prices, bids, fees and payouts use int (pence). Decimal appears only at
the API boundary, where a major-unit amount is parsed once into pence.
"""

from decimal import Decimal, DecimalException, Overflow

from src.am_common.errors import InvalidAmountError

_PENCE_PER_POUND = 100

# Money columns are BIGINT
MAX_PENCE = 2**63 - 1


def to_pence(amount: Decimal, max_pence: int = MAX_PENCE) -> int:
    """Convert a major-unit decimal (12.34) into pence (1234).

    Rejects non-finite, non-positive and sub-penny amounts, and anything
    above `max_pence`.
    """
    try:
        if not amount.is_finite():
            raise InvalidAmountError("amount must be a finite number")
        scaled = amount * _PENCE_PER_POUND
        if scaled != scaled.to_integral_value():
            raise InvalidAmountError("at most two decimal places are allowed")
    except Overflow:
        raise InvalidAmountError("amount too large") from None
    except DecimalException:
        raise InvalidAmountError("amount is not a number") from None
    pence = int(scaled)
    if pence <= 0:
        raise InvalidAmountError("amount must be greater than zero")
    if pence > max_pence:
        raise InvalidAmountError("amount too large")
    return pence


def pence_to_display(pence: int) -> str:
    """Convert pence to display string: 6500 -> '£65.00', -1200 -> '-£12.00'."""
    if pence < 0:
        abs_pence = -pence
        return f"-£{abs_pence // 100:,}.{abs_pence % 100:02d}"
    return f"£{pence // 100:,}.{pence % 100:02d}"


def calculate_fee(amount: int, fee_rate_bps: int) -> int:
    """Calculate platform fee with ceiling division (platform never loses).

    fee = ceil(amount * fee_rate_bps / 10000)
    Using integer ceiling: (a + b - 1) // b
    """
    if amount == 0 or fee_rate_bps == 0:
        return 0
    return (amount * fee_rate_bps + 9999) // 10000
