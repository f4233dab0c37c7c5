"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  3xxx: Auction
  4xxx: Bid
  6xxx: Settlement/Payment
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired credentials", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Administrator account required", 403)


# --- 3xxx: Auction ---

class AuctionNotFoundError(AppError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(3001, f"Auction not found: {auction_id}", 404)


class AuctionClosedError(AppError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(3002, f"Auction is not open for bidding: {auction_id}", 422)


class InvalidAuctionTransitionError(AppError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            3003, f"Illegal auction transition: {current} -> {target}", 422
        )


# --- 4xxx: Bid ---

class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Invalid bid amount: {detail}", 422)


class BidTooLowError(AppError):
    """Maximum bid below current price + increment.

    Carries the minimum acceptable ceiling so the caller can retry.
    """

    def __init__(self, minimum_bid: int) -> None:
        self.minimum_bid = minimum_bid
        pounds, pence = divmod(minimum_bid, 100)
        super().__init__(
            4002, f"Maximum bid must be at least £{pounds:,}.{pence:02d}", 422
        )


class SelfBidForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "Sellers cannot bid on their own auctions", 403)


class BidNotFoundError(AppError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(4004, f"No bid on auction {auction_id}", 404)


# --- 6xxx: Settlement/Payment ---

class PaymentError(AppError):
    """Base class for typed failures reported by the payment split gateway."""


class NoPaymentMethodError(PaymentError):
    def __init__(self, user_id: str) -> None:
        super().__init__(6001, f"No stored payment method for user {user_id}", 422)


class ChargeDeclinedError(PaymentError):
    def __init__(self, detail: str = "Charge declined") -> None:
        super().__init__(6002, detail, 402)


class DestinationAccountNotReadyError(PaymentError):
    def __init__(self, seller_id: str) -> None:
        super().__init__(
            6003, f"Payout account for seller {seller_id} is not ready", 422
        )


class PaymentGatewayUnavailableError(PaymentError):
    def __init__(self, detail: str = "Payment gateway unavailable") -> None:
        super().__init__(6004, detail, 503)


class SettlementAlreadyRunningError(AppError):
    def __init__(self) -> None:
        super().__init__(6005, "A settlement pass is already running", 409)


# --- 9xxx: System ---

class AuctionBusyError(AppError):
    """Per-auction lock not acquired in time; transient, retry with backoff."""

    def __init__(self, auction_id: str) -> None:
        super().__init__(9003, f"Auction {auction_id} is busy, retry shortly", 409)
