# src/core/offers.py
from __future__ import annotations

from datetime import datetime, timezone

from src.core.models import DiscountType, OfferQuote, OfferStatus


class OfferError(ValueError):
    """An offer code that cannot be applied to the current cart."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def compute_discount(
    discount_type: DiscountType | str,
    discount_value: float,
    cart_total: float,
    max_discount: float | None = None,
) -> float:
    if DiscountType(discount_type) == DiscountType.PERCENTAGE:
        discount = cart_total * discount_value / 100
        if max_discount and discount > max_discount:
            discount = max_discount
        return discount
    return discount_value


def quote_offer(offer, cart_total: float, now: datetime | None = None) -> OfferQuote:
    """Check an offer against a cart total and price the discount.

    Rules run in a fixed order and the first failing one raises OfferError:
    status, start date, end date, usage limit (0 means unlimited), then the
    minimum purchase.
    """
    if offer is None:
        raise OfferError("invalid_code", "Invalid offer code")
    now = _as_utc(now or datetime.now(timezone.utc))

    if offer.status != OfferStatus.ACTIVE.value:
        raise OfferError("inactive", "This offer is no longer active")
    if _as_utc(offer.start_date) > now:
        raise OfferError("not_started", "This offer has not started yet")
    if _as_utc(offer.end_date) < now:
        raise OfferError("expired", "This offer has expired")
    if offer.usage_limit > 0 and offer.usage_count >= offer.usage_limit:
        raise OfferError("usage_limit_reached", "This offer has reached its usage limit")
    if cart_total < (offer.min_purchase or 0):
        raise OfferError(
            "min_purchase_not_met",
            f"Minimum purchase of {offer.min_purchase:g} required for this offer",
        )

    discount = compute_discount(offer.discount_type, offer.discount_value, cart_total, offer.max_discount)
    return OfferQuote(
        offer_id=offer.id,
        name=offer.name,
        code=offer.code,
        discount_type=DiscountType(offer.discount_type),
        discount_value=offer.discount_value,
        cart_total=cart_total,
        discount=discount,
        final_amount=max(0.0, cart_total - discount),
    )
