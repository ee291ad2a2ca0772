"""Unit tests for sales record rules"""

import pytest
from mining_ledger.domain.exceptions import InvalidSaleError
from mining_ledger.domain.models import SaleSource
from mining_ledger.domain.sales import derive_sale_source, sale_total


@pytest.mark.parametrize(
    "buyer,source",
    [
        ("Fidelity Printers & Refiners", SaleSource.FIDELITY),
        ("private buyer in Kadoma", SaleSource.PRIVATE),
        ("Local dealer", SaleSource.OTHER),
        (None, SaleSource.OTHER),
    ],
)
def test_source_from_buyer_name(buyer, source):
    assert derive_sale_source(buyer) == source


def test_total_rounded_to_cents():
    assert sale_total(12.5, 64.2) == 802.5
    assert sale_total(3, 0.333) == 1.0


@pytest.mark.parametrize(
    "quantity,price",
    [
        (float("inf"), 60.0),
        (10.0, float("nan")),
        (1e308, 60.0),
    ],
)
def test_non_finite_total_rejected(quantity, price):
    with pytest.raises(InvalidSaleError):
        sale_total(quantity, price)
