import pytest
from datetime import datetime

from retail_analytics.exceptions import AnalyticsComputationError
from retail_analytics.services.analytics_facade import AnalyticsFacade
from retail_analytics.services.forecasting.forecasting_service import SalesForecaster
from retail_analytics.services.sales_summary import SalesPeriod


class BrokenForecaster(SalesForecaster):
    def forecast(self, sales, days_to_predict=None):
        raise RuntimeError("forecast backend unavailable")


@pytest.fixture
def facade():
    return AnalyticsFacade()


def test_compute_all_sections(facade, sample_products, sample_sales, now):
    report = facade.compute_all(sample_products, sample_sales, days_to_predict=7, now=now)

    assert report.succeeded
    assert report.errors == {}
    assert report.generated_at == now
    # Only four sale days, so the forecast is history only
    assert len(report.forecast) == 4
    assert [r.id for r in report.restock_recommendations] == ["P2"]
    assert report.performance.summary.total_quantity_sold == 22
    assert sum(b.count for b in report.seasonality.by_month) == 4
    assert report.sales_stats.total_sales == 4
    assert report.inventory_summary.total_products == 4
    assert facade.last_report is report


def test_failing_component_does_not_block_others(sample_products, sample_sales, now):
    facade = AnalyticsFacade(forecaster=BrokenForecaster())

    report = facade.compute_all(sample_products, sample_sales, now=now)

    assert not report.succeeded
    assert report.forecast is None
    assert report.errors == {'forecast': "forecast backend unavailable"}
    assert report.restock_recommendations is not None
    assert report.performance is not None
    assert report.seasonality is not None


def test_invalid_sales_fail_sales_sections_only(facade, sample_products, now):
    sales = [{
        "id": "S1",
        "createdAt": "2024-01-30T10:00:00",
        "items": [{"productId": "P1", "quantity": 1, "price": "not a price"}],
        "total": 10,
    }]

    report = facade.compute_all(sample_products, sales, now=now)

    assert set(report.errors) == {'forecast', 'restock', 'performance', 'seasonality', 'sales_stats'}
    assert report.restock_recommendations is None
    assert report.inventory_summary is not None
    assert report.inventory_summary.total_items == 64


def test_single_computation_wraps_errors(sample_sales):
    facade = AnalyticsFacade(forecaster=BrokenForecaster())

    with pytest.raises(AnalyticsComputationError) as exc_info:
        facade.compute_forecast(sample_sales)

    assert exc_info.value.component == 'forecast'
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert "forecast computation failed" in str(exc_info.value)


def test_accepts_camel_case_dicts(facade, now):
    products = [{"id": 1, "name": "Bread", "price": 2.0, "cost": 1.0, "quantity": 0}]
    sales = [{
        "id": 10,
        "createdAt": datetime(2024, 1, 30, 8, 0),
        "items": [{"productId": 1, "productName": "Bread", "quantity": 3, "price": 2.0}],
        "total": 6.0,
        "paymentMethod": "card",
    }]

    report = facade.compute_all(products, sales, now=now)

    assert report.succeeded
    assert report.restock_recommendations[0].id == "1"
    assert report.sales_stats.sales_by_payment_method["card"].total == pytest.approx(6.0)
    assert report.performance.top_selling[0].quantity_sold == 3


def test_empty_snapshot(facade, now):
    report = facade.compute_all([], [], now=now)

    assert report.succeeded
    assert report.forecast == []
    assert report.restock_recommendations == []
    assert report.performance.top_selling == []
    assert report.sales_stats.total_sales == 0
    assert report.inventory_summary.total_products == 0


def test_sales_stats_period_reaches_summary(facade, sample_products, sample_sales, now):
    report = facade.compute_all(sample_products, sample_sales, now=now, stats_period=SalesPeriod.WEEK)

    assert report.sales_stats.total_sales == 2
    # Other sections still see the full history
    assert report.performance.summary.total_quantity_sold == 22

    assert facade.compute_sales_stats(sample_sales, period="day", now=now).total_sales == 0
    assert facade.compute_sales_stats(sample_sales).total_sales == 4
