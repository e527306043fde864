"""
Sales & Inventory Summary Service

Headline figures for dashboards and reports:
- Report period filtering (today, last week, last month, last year)
- Sales totals, payment method split and best sellers
- Inventory totals, low stock and out of stock products
"""
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Iterable, List, Optional
import logging

import pandas as pd

from retail_analytics.dataset import coerce_products, coerce_sales, line_items_frame, sales_frame
from retail_analytics.models.analytics_models import (
    InventorySummary, PaymentMethodStats, ProductSalesTotal, SalesStats
)
from retail_analytics.models.product import Product
from retail_analytics.models.sales import Sale
from config.settings import settings

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 5


class SalesPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class SalesSummaryService:
    """Sales statistics and inventory position summaries"""

    def __init__(self):
        self.default_payment_method = settings.DEFAULT_PAYMENT_METHOD
        self.low_stock_threshold = settings.LOW_STOCK_THRESHOLD

    def period_start(self, period: SalesPeriod, now: datetime) -> datetime:
        """
        First instant of a report period ending at ``now``

        day: local midnight today; week: 7 days back;
        month and year: one calendar month or year back
        """
        period = SalesPeriod(period)

        if period == SalesPeriod.DAY:
            return now.replace(hour=0, minute=0, second=0, microsecond=0)
        if period == SalesPeriod.WEEK:
            return now - timedelta(days=7)
        if period == SalesPeriod.MONTH:
            return (pd.Timestamp(now) - pd.DateOffset(months=1)).to_pydatetime()
        return (pd.Timestamp(now) - pd.DateOffset(years=1)).to_pydatetime()

    def filter_sales_by_period(
        self,
        sales: Optional[Iterable[Any]],
        period: SalesPeriod,
        now: Optional[datetime] = None
    ) -> List[Sale]:
        """Sales created at or after the start of the period; undated sales are dropped"""
        if now is None:
            now = datetime.now()
        elif now.tzinfo is not None:
            now = now.astimezone().replace(tzinfo=None)

        start = self.period_start(period, now)
        return [
            sale for sale in coerce_sales(sales)
            if sale.created_at is not None and sale.created_at >= start
        ]

    def sales_stats(
        self,
        sales: Optional[Iterable[Any]],
        period: Optional[SalesPeriod] = None,
        now: Optional[datetime] = None
    ) -> SalesStats:
        """
        Totals, average ticket, payment method split and top 5 products

        Sales without a payment method are counted under the configured
        default method. With ``period`` set only sales in that report
        period ending at ``now`` are counted.
        """
        if period is not None:
            sales = self.filter_sales_by_period(sales, period, now=now)
        else:
            sales = coerce_sales(sales)

        if not sales:
            return SalesStats()

        df = sales_frame(sales)
        df['payment_method'] = [m or self.default_payment_method for m in df['payment_method']]

        total_revenue = float(df['total'].sum())
        by_method = df.groupby('payment_method', sort=False)['total'].agg(['count', 'sum'])

        stats = SalesStats(
            total_sales=len(df),
            total_revenue=total_revenue,
            total_items_sold=int(df['items_sold'].sum()),
            average_sale_value=total_revenue / len(df),
            sales_by_payment_method={
                method: PaymentMethodStats(count=int(row['count']), total=float(row['sum']))
                for method, row in by_method.iterrows()
            },
            top_selling_products=self._top_products(sales)
        )

        logger.info(f"Sales stats: {stats.total_sales} sales, revenue={stats.total_revenue:.2f}")
        return stats

    def _top_products(self, sales: List[Sale]) -> List[ProductSalesTotal]:
        items = line_items_frame(sales)
        items = items[items['product_id'].notna()]
        if items.empty:
            return []

        items = items.assign(revenue=items['price'] * items['quantity'])
        totals = items.groupby('product_id', sort=False).agg(
            product_name=('product_name', 'first'),
            quantity=('quantity', 'sum'),
            revenue=('revenue', 'sum')
        )
        # Stable sort keeps first-seen order among equal quantities
        totals = totals.sort_values('quantity', ascending=False, kind='mergesort').head(TOP_PRODUCTS_LIMIT)

        return [
            ProductSalesTotal(
                product_id=product_id,
                product_name=None if pd.isna(row['product_name']) else row['product_name'],
                quantity=int(row['quantity']),
                revenue=float(row['revenue'])
            )
            for product_id, row in totals.iterrows()
        ]

    def low_stock_products(
        self,
        products: Optional[Iterable[Any]],
        threshold: Optional[int] = None
    ) -> List[Product]:
        """Products still in stock but at or below the threshold"""
        if threshold is None:
            threshold = self.low_stock_threshold
        return [p for p in coerce_products(products) if 0 < p.quantity <= threshold]

    def out_of_stock_products(self, products: Optional[Iterable[Any]]) -> List[Product]:
        return [p for p in coerce_products(products) if p.quantity <= 0]

    def inventory_summary(
        self,
        products: Optional[Iterable[Any]],
        low_stock_threshold: Optional[int] = None
    ) -> InventorySummary:
        """Unit totals, stock alerts and inventory value at selling price"""
        products = coerce_products(products)

        summary = InventorySummary(
            total_products=len(products),
            total_items=sum(p.quantity for p in products),
            low_stock_count=len(self.low_stock_products(products, low_stock_threshold)),
            out_of_stock_count=len(self.out_of_stock_products(products)),
            inventory_value=sum(p.stock_value for p in products)
        )

        if summary.out_of_stock_count:
            logger.warning(f"{summary.out_of_stock_count} products are out of stock")
        return summary
