"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class AuctionStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    ENDED = "ended"
    COMPLETED = "completed"


class ListingStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SOLD = "sold"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class OrderStatus(str, Enum):
    AWAITING_SHIPMENT = "awaiting_shipment"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


class NotificationKind(str, Enum):
    """Events that must reach a user; template rendering lives elsewhere."""
    AUCTION_WON = "AUCTION_WON"
    AUCTION_SOLD = "AUCTION_SOLD"
    RESERVE_NOT_MET = "RESERVE_NOT_MET"
    PAYMENT_ACTION_REQUIRED = "PAYMENT_ACTION_REQUIRED"
    PAYOUT_ACCOUNT_REQUIRED = "PAYOUT_ACCOUNT_REQUIRED"
