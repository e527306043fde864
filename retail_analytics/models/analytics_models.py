"""
Analytics Result Models

Derived records produced by the analytics services. They are rebuilt from
scratch on every call and never persisted.
"""
import datetime as dt
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from retail_analytics.models.base import CamelModel, Identifier
from retail_analytics.models.product import Product


class DailyAggregate(CamelModel):
    """Sales total and sale count for one calendar day"""
    date: dt.date
    total: float
    count: int


class ForecastPoint(CamelModel):
    """Actual (predicted=False) or projected (predicted=True) daily sales"""
    date: dt.date
    predicted: bool
    total: float
    count: int


class RestockUrgency(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RestockRecommendation(Product):
    """Product snapshot plus its stock depletion projection"""
    daily_sales_rate: float
    days_until_out_of_stock: int
    recommended_quantity: int
    last_sold: Optional[dt.datetime] = None
    urgency: RestockUrgency


class PerformanceRecord(CamelModel):
    """Sales volume and profitability of one product within a period"""
    id: Identifier = None
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    price: float = 0.0
    cost: float = 0.0
    current_stock: int = 0
    quantity_sold: int = 0
    revenue: float = 0.0
    profit: float = 0.0
    profit_margin: float = 0.0  # percent of revenue
    turnover_rate: float = 0.0  # percent of sold + on hand
    # Only filled on top_selling entries
    contribution_to_sales: Optional[float] = None
    contribution_to_revenue: Optional[float] = None
    contribution_to_profit: Optional[float] = None


class PerformanceSummary(CamelModel):
    total_revenue: float = 0.0
    total_profit: float = 0.0
    total_quantity_sold: int = 0
    average_profit_margin: float = 0.0


class PerformanceReport(CamelModel):
    top_selling: List[PerformanceRecord] = []
    worst_selling: List[PerformanceRecord] = []
    profitable: List[PerformanceRecord] = []
    unprofitable: List[PerformanceRecord] = []
    summary: PerformanceSummary = Field(default_factory=PerformanceSummary)


class SeasonalBucket(CamelModel):
    """One month, weekday or hour slot of the seasonal profile"""
    index: int
    label: str
    count: int = 0
    total: float = 0.0
    average: float = 0.0
    is_peak: bool = False
    is_low: bool = False


class SeasonalRecommendations(CamelModel):
    high_season_months: List[str] = []
    peak_days: List[str] = []
    peak_hours: List[str] = []
    staffing_recommendation: str


class SeasonalityReport(CamelModel):
    by_month: List[SeasonalBucket]
    by_day_of_week: List[SeasonalBucket]
    by_hour_of_day: List[SeasonalBucket]
    recommendations: SeasonalRecommendations


class PaymentMethodStats(CamelModel):
    count: int = 0
    total: float = 0.0


class ProductSalesTotal(CamelModel):
    product_id: Identifier = None
    product_name: Optional[str] = None
    quantity: int = 0
    revenue: float = 0.0


class SalesStats(CamelModel):
    """Headline figures for a batch of sales"""
    total_sales: int = 0
    total_revenue: float = 0.0
    total_items_sold: int = 0
    average_sale_value: float = 0.0
    sales_by_payment_method: Dict[str, PaymentMethodStats] = {}
    top_selling_products: List[ProductSalesTotal] = []


class InventorySummary(CamelModel):
    """Stock position across the whole product snapshot"""
    total_products: int = 0
    total_items: int = 0
    low_stock_count: int = 0
    out_of_stock_count: int = 0
    inventory_value: float = 0.0


class AnalyticsReport(CamelModel):
    """
    Every analytics section computed from one products/sales snapshot.

    A section is None when its computation failed; the failure message is
    kept in ``errors`` under the component name.
    """
    generated_at: dt.datetime
    forecast: Optional[List[ForecastPoint]] = None
    restock_recommendations: Optional[List[RestockRecommendation]] = None
    performance: Optional[PerformanceReport] = None
    seasonality: Optional[SeasonalityReport] = None
    sales_stats: Optional[SalesStats] = None
    inventory_summary: Optional[InventorySummary] = None
    errors: Dict[str, str] = {}

    @property
    def succeeded(self) -> bool:
        return not self.errors
