"""
Analytics Facade

Single entry point for the presentation layer. Every call recomputes from the
snapshot it is given; deciding when inputs changed and a refresh is due is
up to the caller.
"""
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional
import logging

from pydantic import ValidationError

from retail_analytics.dataset import coerce_products, coerce_sales
from retail_analytics.exceptions import AnalyticsComputationError
from retail_analytics.models.analytics_models import (
    AnalyticsReport, ForecastPoint, InventorySummary, PerformanceReport,
    RestockRecommendation, SalesStats, SeasonalityReport
)
from retail_analytics.services.forecasting.forecasting_service import SalesForecaster
from retail_analytics.services.performance.performance_service import PerformanceAnalyzer
from retail_analytics.services.reorder.reorder_service import RestockAdvisor
from retail_analytics.services.sales_summary import SalesPeriod, SalesSummaryService
from retail_analytics.services.seasonal_analyzer import SeasonalityAnalyzer

logger = logging.getLogger(__name__)


class AnalyticsFacade:
    """Orchestrates forecasting, restock, performance, seasonality and summaries"""

    def __init__(
        self,
        forecaster: Optional[SalesForecaster] = None,
        restock_advisor: Optional[RestockAdvisor] = None,
        performance_analyzer: Optional[PerformanceAnalyzer] = None,
        seasonality_analyzer: Optional[SeasonalityAnalyzer] = None,
        summary_service: Optional[SalesSummaryService] = None
    ):
        self.forecaster = forecaster or SalesForecaster()
        self.restock_advisor = restock_advisor or RestockAdvisor()
        self.performance_analyzer = performance_analyzer or PerformanceAnalyzer()
        self.seasonality_analyzer = seasonality_analyzer or SeasonalityAnalyzer()
        self.summary_service = summary_service or SalesSummaryService()

        self.last_report: Optional[AnalyticsReport] = None

    def _run(self, component: str, compute: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return compute(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error computing {component}: {e}")
            raise AnalyticsComputationError(component, e) from e

    def compute_forecast(
        self,
        sales: Iterable[Any],
        days_to_predict: Optional[int] = None
    ) -> List[ForecastPoint]:
        """Daily history followed by ``days_to_predict`` projected days"""
        return self._run('forecast', self.forecaster.forecast, sales, days_to_predict)

    def compute_restock_recommendations(
        self,
        products: Iterable[Any],
        sales: Iterable[Any],
        threshold_days: Optional[int] = None
    ) -> List[RestockRecommendation]:
        """Products projected to run out within ``threshold_days`` or already out"""
        return self._run('restock', self.restock_advisor.recommend, products, sales, threshold_days)

    def compute_performance(
        self,
        products: Iterable[Any],
        sales: Iterable[Any],
        period: Optional[int] = None,
        category_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> PerformanceReport:
        """
        Volume and profitability rankings over the trailing ``period`` days

        Pass ``now`` explicitly for reproducible results.
        """
        return self._run(
            'performance', self.performance_analyzer.analyze,
            products, sales, period=period, category_id=category_id, now=now
        )

    def compute_seasonality(self, sales: Iterable[Any]) -> SeasonalityReport:
        return self._run('seasonality', self.seasonality_analyzer.analyze, sales)

    def compute_sales_stats(
        self,
        sales: Iterable[Any],
        period: Optional[SalesPeriod] = None,
        now: Optional[datetime] = None
    ) -> SalesStats:
        """Sales headline figures, optionally limited to a day/week/month/year report period"""
        return self._run('sales_stats', self.summary_service.sales_stats, sales, period=period, now=now)

    def compute_inventory_summary(
        self,
        products: Iterable[Any],
        low_stock_threshold: Optional[int] = None
    ) -> InventorySummary:
        return self._run(
            'inventory_summary', self.summary_service.inventory_summary,
            products, low_stock_threshold
        )

    def compute_all(
        self,
        products: Iterable[Any],
        sales: Iterable[Any],
        days_to_predict: Optional[int] = None,
        threshold_days: Optional[int] = None,
        period: Optional[int] = None,
        category_id: Optional[str] = None,
        now: Optional[datetime] = None,
        stats_period: Optional[SalesPeriod] = None
    ) -> AnalyticsReport:
        """
        Compute every section independently from one snapshot

        A failing section is left as None and its error recorded under the
        component name; the remaining sections are still returned.
        ``stats_period`` limits the sales statistics to a report period
        ending at ``now``; the other sections use the full history.
        """
        if now is None:
            now = datetime.now()

        products = list(products or [])
        sales = list(sales or [])

        # Validate once up front; on failure each section reports the error itself
        try:
            products = coerce_products(products)
        except ValidationError as e:
            logger.warning(f"Product snapshot failed validation ({e.error_count()} errors)")
        try:
            sales = coerce_sales(sales)
        except ValidationError as e:
            logger.warning(f"Sales snapshot failed validation ({e.error_count()} errors)")

        sections: Dict[str, Callable[[], Any]] = {
            'forecast': lambda: self.compute_forecast(sales, days_to_predict),
            'restock_recommendations': lambda: self.compute_restock_recommendations(
                products, sales, threshold_days
            ),
            'performance': lambda: self.compute_performance(
                products, sales, period=period, category_id=category_id, now=now
            ),
            'seasonality': lambda: self.compute_seasonality(sales),
            'sales_stats': lambda: self.compute_sales_stats(sales, period=stats_period, now=now),
            'inventory_summary': lambda: self.compute_inventory_summary(products),
        }

        results: Dict[str, Any] = {}
        errors: Dict[str, str] = {}
        for section, compute in sections.items():
            try:
                results[section] = compute()
            except AnalyticsComputationError as e:
                errors[e.component] = str(e.cause)

        report = AnalyticsReport(generated_at=now, errors=errors, **results)
        self.last_report = report

        logger.info(
            f"Analytics snapshot computed: {len(results)} sections ok, {len(errors)} failed"
        )
        return report
