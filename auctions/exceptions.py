"""
Auction workflow errors.

Every error carries the HTTP status it maps to and an ``extra`` payload that
the views merge into the JSON error body (e.g. the minimum acceptable bid).
"""
from rest_framework import status


class AuctionError(Exception):
    """Base class for auction workflow errors"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Auction request failed"

    def __init__(self, message: str = None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def as_payload(self) -> dict:
        return {"error": self.message, **self.extra}


# =============================================================================
# Validation
# =============================================================================


class ValidationError(AuctionError):
    default_message = "Invalid request"


class InvalidAmount(ValidationError):
    default_message = "Invalid bid amount"


class BuyNowUnavailable(ValidationError):
    default_message = "Buy now option not available for this auction"


# =============================================================================
# Lookup
# =============================================================================


class NotFoundError(AuctionError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class AuctionNotFound(NotFoundError):
    default_message = "Auction not found"

    def __init__(self, auction_id=None):
        self.auction_id = auction_id
        super().__init__()


# =============================================================================
# Timing
# =============================================================================


class TimingError(AuctionError):
    default_message = "Auction is not open"


class AuctionNotStarted(TimingError):
    default_message = "Auction has not started yet"


class AuctionPreviewNotStarted(TimingError):
    default_message = "Auction preview has not started yet"


class AuctionEnded(TimingError):
    default_message = "Auction has ended"


class AuctionNotAcceptingBids(TimingError):
    default_message = "Auction is not accepting bids"


class AuctionNotAcceptingPurchases(TimingError):
    default_message = "Auction is not accepting purchases"


# =============================================================================
# Business rules
# =============================================================================


class BusinessRuleViolation(AuctionError):
    default_message = "Request violates auction rules"


class BidTooLow(BusinessRuleViolation):

    def __init__(self, minimum_bid, current_bid):
        self.minimum_bid = minimum_bid
        self.current_bid = current_bid
        super().__init__(
            f"Bid must be at least ${minimum_bid:,.0f}",
            minimumBid=minimum_bid,
            currentBid=current_bid,
        )


class ReserveNotMet(BusinessRuleViolation):
    default_message = "Bid does not meet reserve price"

    def __init__(self):
        super().__init__(isReserveMet=False)


class BidConflict(BusinessRuleViolation):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Auction changed while placing the bid, please retry"


# =============================================================================
# Persistence
# =============================================================================


class PersistenceError(AuctionError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class BidPersistenceError(PersistenceError):
    default_message = "Failed to place bid"


class AuctionUpdateError(PersistenceError):
    default_message = "Failed to update auction"


class PurchaseError(PersistenceError):
    default_message = "Failed to process purchase"
