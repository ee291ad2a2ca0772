"""Sales record rules"""

import math
from typing import Optional

from mining_ledger.domain.exceptions import InvalidSaleError
from mining_ledger.domain.models import SaleSource

MAX_SALE_GRAMS = 1_000_000.0  # one tonne of gold in a single sale
MAX_PRICE_PER_GRAM = 10_000.0


def derive_sale_source(buyer_name: Optional[str]) -> SaleSource:
    """Classify a sale by its buyer name"""
    name = (buyer_name or "").lower()
    if "fidelity" in name:
        return SaleSource.FIDELITY
    if "private" in name:
        return SaleSource.PRIVATE
    return SaleSource.OTHER


def sale_total(quantity: float, price_per_unit: float) -> float:
    """
    Value of a sale, rounded to cents.

    Raises:
        InvalidSaleError: inputs or their product are not finite
    """
    total = round(quantity * price_per_unit, 2)
    if not math.isfinite(total):
        raise InvalidSaleError("Sale total must be a finite amount")
    return total
