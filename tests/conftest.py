import pytest
from datetime import datetime, timedelta

from retail_analytics.models.product import Product
from retail_analytics.models.sales import Sale, SaleLineItem


@pytest.fixture
def now():
    """Fixed reference time for period-dependent analyses"""
    return datetime(2024, 1, 31, 12, 0, 0)


@pytest.fixture
def make_sale():
    """Build a sale from (product_id, quantity, price) tuples"""
    counter = {'next_id': 1}

    def _make_sale(created_at, items=(), total=None, payment_method='cash'):
        line_items = [
            SaleLineItem(product_id=product_id, product_name=f"Product {product_id}", quantity=quantity, price=price)
            for product_id, quantity, price in items
        ]
        sale = Sale(
            id=f"S{counter['next_id']}",
            created_at=created_at,
            items=line_items,
            total=total if total is not None else sum(i.line_subtotal for i in line_items),
            payment_method=payment_method
        )
        counter['next_id'] += 1
        return sale

    return _make_sale


@pytest.fixture
def sample_products():
    """Small catalogue across two categories"""
    return [
        Product(id="P1", name="Coffee Beans", sku="COF-001", category="Drinks", price=10.0, cost=6.0, quantity=10),
        Product(id="P2", name="Green Tea", sku="TEA-001", category="Drinks", price=5.0, cost=2.0, quantity=0),
        Product(id="P3", name="Croissant", sku="BAK-001", category="Bakery", price=3.0, cost=1.0, quantity=4),
        Product(id="P4", name="Muffin", sku="BAK-002", category="Bakery", price=2.5, cost=2.75, quantity=50),
    ]


@pytest.fixture
def sample_sales(make_sale, now):
    """Sales spread over the last three weeks before ``now``"""
    return [
        make_sale(now - timedelta(days=20), [("P1", 4, 10.0), ("P3", 2, 3.0)]),
        make_sale(now - timedelta(days=10), [("P1", 6, 10.0)], payment_method='card'),
        make_sale(now - timedelta(days=5), [("P2", 3, 5.0), ("P4", 1, 2.5)]),
        make_sale(now - timedelta(days=1), [("P1", 2, 10.0), ("P4", 4, 2.5)], payment_method=None),
    ]
