"""
Daily Sales Aggregation & Forecasting

The forecast is a heuristic extrapolation, not a fitted statistical model:
a recency-weighted moving average of daily totals, scaled by a week-over-week
trend and a fixed day-of-week factor:

    predicted_total(i) = base_average * trend ** (i / 7) * day_factor(weekday)

where ``base_average`` weights the last (up to) 30 days 1..N from oldest to
newest, and ``trend`` is the last 7 days' total over the previous 7 days'
total (1 when fewer than 14 days are available or the previous week is 0).
"""
import math
import numpy as np
from datetime import timedelta, date
from typing import Any, Iterable, List, Optional
import logging

from retail_analytics.dataset import coerce_sales, sales_frame, timestamped
from retail_analytics.models.analytics_models import DailyAggregate, ForecastPoint
from config.settings import settings

logger = logging.getLogger(__name__)

MIN_HISTORY_DAYS = 7
RECENT_WINDOW_DAYS = 30
TREND_MIN_DAYS = 14
WEEK_DAYS = 7

# date.weekday(): Monday == 0
DAY_OF_WEEK_FACTORS = {
    4: 1.2,  # Friday
    5: 1.2,  # Saturday
    6: 0.8,  # Sunday
}


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from -inf, so 0.125 -> 0.13 rather than banker's 0.12"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def day_of_week_factor(day: date) -> float:
    return DAY_OF_WEEK_FACTORS.get(day.weekday(), 1.0)


class DailyAggregator:
    """Groups sales into per-calendar-day totals"""

    def aggregate(self, sales: Optional[Iterable[Any]]) -> List[DailyAggregate]:
        """
        Sum sale totals and count sales per calendar day

        Days without sales are not materialized. Sales without a timestamp
        cannot be placed on a day and are skipped.

        Returns:
            Aggregates in ascending date order
        """
        df = sales_frame(coerce_sales(sales))
        dated = timestamped(df)

        skipped = len(df) - len(dated)
        if skipped:
            logger.warning(f"Skipped {skipped} sales without a timestamp in daily aggregation")

        if dated.empty:
            return []

        daily = dated.groupby(dated['created_at'].dt.date).agg(
            day_total=('total', 'sum'),
            day_count=('total', 'size')
        ).sort_index()

        return [
            DailyAggregate(date=day, total=float(total), count=int(count))
            for day, total, count in zip(daily.index, daily['day_total'], daily['day_count'])
        ]


class SalesForecaster:
    """Weighted moving average forecast with trend and weekday adjustment"""

    def __init__(self, aggregator: Optional[DailyAggregator] = None):
        self.aggregator = aggregator or DailyAggregator()
        self.default_horizon = settings.FORECAST_HORIZON_DAYS

    def calculate_weighted_average(self, totals: np.ndarray) -> float:
        """
        Linearly weighted mean, oldest day weight 1, newest weight N

        Average = Σ(total_i × rank_i) / Σ(rank_i)
        """
        if len(totals) == 0:
            return 0.0

        weights = np.arange(1, len(totals) + 1)
        return float(np.sum(totals * weights) / np.sum(weights))

    def calculate_trend(self, totals: np.ndarray) -> float:
        """Last week's total over the previous week's total"""
        if len(totals) < TREND_MIN_DAYS:
            return 1.0

        last_week = float(np.sum(totals[-WEEK_DAYS:]))
        previous_week = float(np.sum(totals[-2 * WEEK_DAYS:-WEEK_DAYS]))

        if previous_week == 0:
            return 1.0

        trend = last_week / previous_week
        if trend < 0:
            # Only reachable with negative sale totals; a fractional power would be complex
            logger.warning(f"Negative trend ratio {trend:.4f}, falling back to no trend")
            return 1.0

        return trend

    def forecast(
        self,
        sales: Optional[Iterable[Any]],
        days_to_predict: Optional[int] = None
    ) -> List[ForecastPoint]:
        """
        Echo daily history and append projected days

        Args:
            sales: Sale records
            days_to_predict: Days to project past the last sale day

        Returns:
            Historical points (predicted=False) followed by projections
            (predicted=True), dates strictly increasing. With fewer than
            7 distinct sale days only the history is returned.
        """
        if days_to_predict is None:
            days_to_predict = self.default_horizon

        daily = self.aggregator.aggregate(sales)

        history = [
            ForecastPoint(date=d.date, predicted=False, total=d.total, count=d.count)
            for d in daily
        ]

        if len(daily) < MIN_HISTORY_DAYS:
            logger.info(
                f"Insufficient history for forecast: {len(daily)} days, "
                f"need at least {MIN_HISTORY_DAYS}"
            )
            return history

        recent_sales = daily[-RECENT_WINDOW_DAYS:]
        totals = np.array([d.total for d in recent_sales], dtype=float)
        mean_count = float(np.mean([d.count for d in recent_sales]))

        base_average = self.calculate_weighted_average(totals)
        trend = self.calculate_trend(totals)
        last_date = daily[-1].date

        predictions = []
        for i in range(1, days_to_predict + 1):
            prediction_date = last_date + timedelta(days=i)
            predicted_total = base_average * trend ** (i / WEEK_DAYS) * day_of_week_factor(prediction_date)

            if base_average != 0:
                predicted_count = int(round_half_up(predicted_total / base_average * mean_count))
            else:
                predicted_count = 0

            predictions.append(ForecastPoint(
                date=prediction_date,
                predicted=True,
                total=round_half_up(predicted_total, 2),
                count=predicted_count
            ))

        logger.info(
            f"Forecast generated: {len(history)} historical days, {len(predictions)} predicted, "
            f"base={base_average:.2f}, trend={trend:.4f}"
        )
        return history + predictions
