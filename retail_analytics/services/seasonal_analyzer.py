"""
Seasonal Demand Pattern Analysis Service

Provides:
- Month-of-year, weekday and hour-of-day sales profiles
- Peak and low bucket detection relative to the busiest bucket
- High season and staffing recommendations
"""
import pandas as pd
from typing import Any, Iterable, List, Optional, Sequence
import logging

from retail_analytics.dataset import coerce_sales, sales_frame, timestamped
from retail_analytics.models.analytics_models import (
    SeasonalBucket, SeasonalRecommendations, SeasonalityReport
)

logger = logging.getLogger(__name__)

PEAK_RATIO = 0.7
LOW_RATIO = 0.3

INSUFFICIENT_DATA = "Insufficient data"

MONTH_LABELS = (
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
)
# Monday first, matching pandas dayofweek
DAY_LABELS = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')
HOUR_LABELS = tuple(f"{hour}:00" for hour in range(24))


class SeasonalityAnalyzer:
    """
    Recurring temporal demand patterns across month, weekday and hour
    """

    def analyze(self, sales: Optional[Iterable[Any]]) -> SeasonalityReport:
        """
        Bucket every sale by month, weekday and hour

        Returns:
            SeasonalityReport with 12 month, 7 weekday and 24 hour buckets.
            Without sales every bucket is zero and the staffing
            recommendation says there is insufficient data.
        """
        df = sales_frame(coerce_sales(sales))
        dated = timestamped(df)

        skipped = len(df) - len(dated)
        if skipped:
            logger.warning(f"Skipped {skipped} sales without a timestamp in seasonality analysis")

        by_month = self._bucket(dated, dated['created_at'].dt.month - 1, MONTH_LABELS)
        by_day_of_week = self._bucket(dated, dated['created_at'].dt.dayofweek, DAY_LABELS)
        by_hour_of_day = self._bucket(dated, dated['created_at'].dt.hour, HOUR_LABELS)

        recommendations = self._recommend(by_month, by_day_of_week, by_hour_of_day, has_sales=not dated.empty)

        logger.info(
            f"Seasonality analysis: {len(dated)} sales, "
            f"{len(recommendations.high_season_months)} high season months"
        )

        return SeasonalityReport(
            by_month=by_month,
            by_day_of_week=by_day_of_week,
            by_hour_of_day=by_hour_of_day,
            recommendations=recommendations
        )

    def _bucket(
        self,
        df: pd.DataFrame,
        keys: pd.Series,
        labels: Sequence[str]
    ) -> List[SeasonalBucket]:
        """Count, total and average per bucket, then flag peaks and lows"""
        slots = range(len(labels))
        grouped = df.groupby(keys)['total'].agg(['count', 'sum']).reindex(slots, fill_value=0)

        counts = [int(c) for c in grouped['count']]
        totals = [float(t) for t in grouped['sum']]
        max_total = max(totals)

        return [
            SeasonalBucket(
                index=i,
                label=labels[i],
                count=counts[i],
                total=totals[i],
                average=totals[i] / counts[i] if counts[i] > 0 else 0.0,
                is_peak=totals[i] > max_total * PEAK_RATIO,
                is_low=totals[i] < max_total * LOW_RATIO
            )
            for i in slots
        ]

    def _recommend(
        self,
        by_month: List[SeasonalBucket],
        by_day_of_week: List[SeasonalBucket],
        by_hour_of_day: List[SeasonalBucket],
        has_sales: bool
    ) -> SeasonalRecommendations:
        if not has_sales:
            return SeasonalRecommendations(
                staffing_recommendation=f"{INSUFFICIENT_DATA}: no sales recorded to base staffing on."
            )

        peak_days = [b.label for b in by_day_of_week if b.is_peak]
        peak_hours = [b.index for b in by_hour_of_day if b.is_peak]

        if peak_days and peak_hours:
            staffing = (
                f"More staff recommended on {', '.join(peak_days)} between "
                f"{' and '.join(f'{h}:00' for h in peak_hours)} hours."
            )
        else:
            staffing = f"{INSUFFICIENT_DATA}: no peak days or hours detected."

        return SeasonalRecommendations(
            high_season_months=[b.label for b in by_month if b.is_peak],
            peak_days=peak_days,
            peak_hours=[f"{h}:00 - {h + 1}:00" for h in peak_hours],
            staffing_recommendation=staffing
        )
