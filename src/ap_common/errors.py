"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  3xxx: Asset / auction state
  4xxx: Bid
  5xxx: Notification
  9xxx: System

Bid rejections (AuctionClosedError, BidTooLowError) are never raised by the
bidding core itself — the core returns a typed BidRejected result and the
API layer converts it with BidRejected.to_error().
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


# --- 3xxx: Asset / auction state ---

class AssetNotFoundError(AppError):
    def __init__(self, asset_id: str) -> None:
        super().__init__(3001, f"Asset not found: {asset_id}", 404)


class AuctionClosedError(AppError):
    def __init__(self, asset_id: str, current_bid: int, minimum_amount: int) -> None:
        super().__init__(
            3003,
            f"Auction has ended for asset {asset_id}",
            409,
            details={
                "reason": "rejected_closed",
                "current_bid": current_bid,
                "minimum_amount": minimum_amount,
            },
        )


class InvalidAssetError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid asset: {detail}", 422)


# --- 4xxx: Bid ---

class BidTooLowError(AppError):
    def __init__(self, amount: int, current_bid: int, minimum_amount: int) -> None:
        super().__init__(
            4101,
            f"Bid {amount} is below the minimum acceptable bid {minimum_amount}",
            422,
            details={
                "reason": "rejected_low",
                "current_bid": current_bid,
                "minimum_amount": minimum_amount,
            },
        )


# --- 5xxx: Notification ---

class NotificationNotFoundError(AppError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(5001, f"Notification not found: {notification_id}", 404)


class NotificationDeliveryFailure(AppError):
    """Logged by the fan-out, never propagated to the bidder."""

    def __init__(self, recipient_id: str, bid_id: str, cause: str) -> None:
        super().__init__(
            5002,
            f"Failed to deliver notification for bid {bid_id} to {recipient_id}: {cause}",
            500,
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class PersistenceUnavailableError(AppError):
    def __init__(self, detail: str = "Storage backend unavailable") -> None:
        super().__init__(9003, detail, 503)
