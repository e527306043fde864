import math
from typing import Any, Iterable, List, Optional
import logging

import pandas as pd

from retail_analytics.dataset import coerce_products, coerce_sales, line_items_frame, sales_frame
from retail_analytics.models.analytics_models import RestockRecommendation, RestockUrgency
from retail_analytics.services.forecasting.forecasting_service import round_half_up
from config.settings import settings

logger = logging.getLogger(__name__)

NOT_AT_RISK_DAYS = 999  # Stand-in for "never runs out" when nothing sells
COVERAGE_DAYS = 30
MEDIUM_URGENCY_DAYS = 7
SECONDS_PER_DAY = 24 * 60 * 60


class RestockAdvisor:
    """Stock depletion projection and reorder suggestions"""

    def __init__(self):
        self.default_threshold_days = settings.RESTOCK_THRESHOLD_DAYS

    def calculate_window_days(self, created_at: pd.Series) -> int:
        """
        Length of the sales history in whole days, at least 1

        Window = max(1, ceil((latest - earliest) / 1 day))

        Sale times are naive local wall-clock times, so the span is taken
        between POSIX instants; across a DST change it differs from the
        wall-clock difference by the shifted hour.
        """
        dated = created_at.dropna()
        if dated.empty:
            return 1

        # datetime.timestamp() reads naive values as local time; Timestamp.timestamp() would assume UTC
        instants = [ts.to_pydatetime().timestamp() for ts in dated]
        span_seconds = max(instants) - min(instants)
        return max(1, math.ceil(span_seconds / SECONDS_PER_DAY))

    def calculate_days_until_out_of_stock(self, current_quantity: int, daily_rate: float) -> int:
        if daily_rate <= 0:
            return NOT_AT_RISK_DAYS
        return math.floor(current_quantity / daily_rate)

    def calculate_recommended_quantity(self, daily_rate: float) -> int:
        """Units needed to cover the next 30 days of demand"""
        return math.ceil(daily_rate * COVERAGE_DAYS)

    def classify_urgency(self, current_quantity: int, days_until_out_of_stock: int) -> RestockUrgency:
        if current_quantity <= 0:
            return RestockUrgency.HIGH
        if days_until_out_of_stock <= MEDIUM_URGENCY_DAYS:
            return RestockUrgency.MEDIUM
        return RestockUrgency.LOW

    def recommend(
        self,
        products: Optional[Iterable[Any]],
        sales: Optional[Iterable[Any]],
        threshold_days: Optional[int] = None
    ) -> List[RestockRecommendation]:
        """
        Flag products at risk of running out

        A product qualifies when it appears in at least one sale line item and
        either runs out within ``threshold_days`` at its historical daily rate
        or is already out of stock. Products that never sold are skipped even
        at zero stock: there is no demand signal to size an order from.

        Returns:
            Recommendations sorted by days until out of stock, soonest first
        """
        if threshold_days is None:
            threshold_days = self.default_threshold_days

        products = coerce_products(products)
        sales = coerce_sales(sales)

        if not products or not sales:
            return []

        window_days = self.calculate_window_days(sales_frame(sales)['created_at'])
        items = line_items_frame(sales)

        if items.empty:
            logger.info("No sale line items, nothing to restock")
            return []

        by_product = items.groupby('product_id', dropna=True).agg(
            total_sold=('quantity', 'sum'),
            last_sold=('created_at', 'max')
        )

        recommendations = []
        for product in products:
            if product.id not in by_product.index:
                continue

            row = by_product.loc[product.id]
            daily_rate = float(row['total_sold']) / window_days
            days_left = self.calculate_days_until_out_of_stock(product.quantity, daily_rate)

            if days_left > threshold_days and product.quantity > 0:
                continue

            last_sold = row['last_sold']
            recommendations.append(RestockRecommendation(
                **product.model_dump(),
                daily_sales_rate=round_half_up(daily_rate, 2),
                days_until_out_of_stock=days_left,
                recommended_quantity=self.calculate_recommended_quantity(daily_rate),
                last_sold=None if pd.isna(last_sold) else last_sold.to_pydatetime(),
                urgency=self.classify_urgency(product.quantity, days_left)
            ))

        recommendations.sort(key=lambda r: r.days_until_out_of_stock)

        logger.info(
            f"Restock check: {len(recommendations)} of {len(products)} products flagged "
            f"(window={window_days} days, threshold={threshold_days} days)"
        )
        return recommendations
