# src/am_bidding/application/schemas.py
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class PlaceBidRequest(BaseModel):
    auction_id: UUID
    # Major units (pounds). Range/precision checks raise InvalidAmountError
    # in the bid rules so the rejection carries its own error code.
    max_bid_amount: Decimal


class PlaceBidResponse(BaseModel):
    success: bool
    current_bid_pence: int | None = None
    current_bid_display: str | None = None
    is_leading: bool | None = None
    reserve_met: bool | None = None
    max_bid_pence: int | None = None
    minimum_bid_pence: int | None = None
    minimum_bid_display: str | None = None
    error: str | None = None
