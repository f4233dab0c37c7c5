"""Bid increment ladder (pence)."""

# (upper bound exclusive, increment), checked in order
_LADDER: tuple[tuple[int, int], ...] = (
    (5_000, 100),    # under £50      → £1
    (10_000, 200),   # £50 – £99.99   → £2
    (50_000, 500),   # £100 – £499.99 → £5
)
_TOP_INCREMENT = 1_000  # £500 and up  → £10


def bid_increment(current_bid: int) -> int:
    """Minimum step above `current_bid`, in pence."""
    for upper, step in _LADDER:
        if current_bid < upper:
            return step
    return _TOP_INCREMENT
