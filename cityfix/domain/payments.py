# SPDX-License-Identifier: Apache-2.0

"""
Payment domain logic: price conversion and side-effect selection.
"""

import math
from typing import Any, Optional

from ..models.enums import PaymentType


class InvalidPriceError(ValueError):
    """Raised when a payment intent price is missing or not positive."""
    pass


def to_minor_units(price: Any) -> int:
    """
    Convert a price in major units to the smallest currency unit.
    
    The result is truncated, not rounded: 10.5 becomes 1050.
    
    Raises:
        InvalidPriceError: If price is absent, not a number or not positive
    """
    if price is None or isinstance(price, bool):
        raise InvalidPriceError("Price is required")
    
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise InvalidPriceError("Price must be a number")
    
    if value <= 0:
        raise InvalidPriceError("Price must be greater than zero")
    
    if not math.isfinite(value * 100):
        raise InvalidPriceError("Price must be a finite number")
    
    amount = int(value * 100)
    if amount <= 0:
        raise InvalidPriceError("Price is below the smallest currency unit")
    
    return amount


def resolve_side_effect(payment_type: str, issue_id: Optional[str]) -> Optional[PaymentType]:
    """
    Decide which side effect a recorded payment triggers.
    
    Returns:
        PaymentType.SUBSCRIPTION to verify the payer, PaymentType.BOOST to
        boost the referenced issue, or None for a ledger-only record
    """
    if payment_type == PaymentType.SUBSCRIPTION.value:
        return PaymentType.SUBSCRIPTION
    
    if payment_type == PaymentType.BOOST.value and issue_id:
        return PaymentType.BOOST
    
    return None
