"""
Product Performance Analysis Service

Ranks products by sales volume and profitability within a trailing period:
- Per-product quantity, revenue and profit accumulation
- Profit margin and stock turnover
- Top/bottom ten views with contribution to overall totals
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional
import logging

import pandas as pd

from retail_analytics.dataset import coerce_products, coerce_sales, line_items_frame, timestamped
from retail_analytics.models.analytics_models import (
    PerformanceRecord, PerformanceReport, PerformanceSummary
)
from retail_analytics.models.product import Product
from retail_analytics.models.sales import Sale
from config.settings import settings

logger = logging.getLogger(__name__)

TOP_N = 10


class PerformanceAnalyzer:
    """
    Product volume and profitability rankings
    """

    def __init__(self):
        self.default_period_days = settings.PERFORMANCE_PERIOD_DAYS

    def analyze(
        self,
        products: Optional[Iterable[Any]],
        sales: Optional[Iterable[Any]],
        period: Optional[int] = None,
        category_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> PerformanceReport:
        """
        Rank products over the last ``period`` days

        Args:
            products: Current product snapshot
            sales: Sale records
            period: Trailing window in days (sales at or after now - period count)
            category_id: Only consider products in this category
            now: Reference time for the window; defaults to the current local time

        Returns:
            PerformanceReport with four top-10 views and overall summary.
            Profit uses each product's current cost for every sale.
        """
        if period is None:
            period = self.default_period_days
        if now is None:
            now = datetime.now()
        elif now.tzinfo is not None:
            now = now.astimezone().replace(tzinfo=None)

        products = coerce_products(products)
        sales = coerce_sales(sales)

        if not products or not sales:
            return PerformanceReport()

        cutoff = now - timedelta(days=period)
        records = self._initialize_records(products, category_id)
        self._accumulate_sales(records, products, sales, cutoff)

        for record in records.values():
            self._derive_ratios(record)

        performance = list(records.values())
        summary = self._summarize(performance)

        # sorted() is stable: ties keep product snapshot order
        top_selling = sorted(performance, key=lambda p: p.quantity_sold, reverse=True)[:TOP_N]
        worst_selling = sorted(
            [p for p in performance if p.current_stock > 0],
            key=lambda p: p.quantity_sold
        )[:TOP_N]
        profitable = sorted(performance, key=lambda p: p.profit, reverse=True)[:TOP_N]
        unprofitable = sorted(
            [p for p in performance if p.quantity_sold > 0],
            key=lambda p: p.profit_margin
        )[:TOP_N]

        report = PerformanceReport(
            top_selling=[self._with_contribution(p, summary) for p in top_selling],
            worst_selling=worst_selling,
            profitable=profitable,
            unprofitable=unprofitable,
            summary=summary
        )

        logger.info(
            f"Performance analysis: {len(performance)} products, period={period} days, "
            f"category={category_id}, revenue={summary.total_revenue:.2f}"
        )
        return report

    def _initialize_records(
        self,
        products: List[Product],
        category_id: Optional[str]
    ) -> Dict[str, PerformanceRecord]:
        """Zeroed record per product in the category, so unsold products still rank"""
        records: Dict[str, PerformanceRecord] = {}
        for product in products:
            if category_id and product.category != category_id:
                continue
            if product.id in records:
                continue
            records[product.id] = PerformanceRecord(
                id=product.id,
                name=product.name,
                sku=product.sku,
                category=product.category,
                price=product.price,
                cost=product.cost,
                current_stock=product.quantity
            )
        return records

    def _accumulate_sales(
        self,
        records: Dict[str, PerformanceRecord],
        products: List[Product],
        sales: List[Sale],
        cutoff: datetime
    ) -> None:
        items = timestamped(line_items_frame(sales))
        items = items[items['created_at'] >= pd.Timestamp(cutoff)]
        items = items[items['product_id'].isin(list(records.keys()))]

        if items.empty:
            return

        costs = {}
        for product in products:
            costs.setdefault(product.id, product.cost)

        items = items.assign(
            revenue=items['price'] * items['quantity'],
            profit=(items['price'] - items['product_id'].map(costs)) * items['quantity']
        )

        totals = items.groupby('product_id').agg(
            quantity_sold=('quantity', 'sum'),
            revenue=('revenue', 'sum'),
            profit=('profit', 'sum')
        )

        for product_id, row in totals.iterrows():
            record = records[product_id]
            record.quantity_sold = int(row['quantity_sold'])
            record.revenue = float(row['revenue'])
            record.profit = float(row['profit'])

    def _derive_ratios(self, record: PerformanceRecord) -> None:
        if record.revenue > 0:
            record.profit_margin = record.profit / record.revenue * 100

        total_quantity = record.current_stock + record.quantity_sold
        if total_quantity > 0:
            record.turnover_rate = record.quantity_sold / total_quantity * 100

    def _summarize(self, performance: List[PerformanceRecord]) -> PerformanceSummary:
        total_revenue = sum(p.revenue for p in performance)
        total_profit = sum(p.profit for p in performance)
        total_quantity_sold = sum(p.quantity_sold for p in performance)

        return PerformanceSummary(
            total_revenue=total_revenue,
            total_profit=total_profit,
            total_quantity_sold=total_quantity_sold,
            average_profit_margin=(total_profit / total_revenue * 100) if total_revenue > 0 else 0.0
        )

    def _with_contribution(
        self,
        record: PerformanceRecord,
        summary: PerformanceSummary
    ) -> PerformanceRecord:
        """Copy of a top seller with its share of all filtered products' totals"""
        return record.model_copy(update={
            'contribution_to_sales': (
                record.quantity_sold / summary.total_quantity_sold * 100
                if summary.total_quantity_sold > 0 else 0.0
            ),
            'contribution_to_revenue': (
                record.revenue / summary.total_revenue * 100
                if summary.total_revenue > 0 else 0.0
            ),
            'contribution_to_profit': (
                record.profit / summary.total_profit * 100
                if summary.total_profit > 0 else 0.0
            )
        })
