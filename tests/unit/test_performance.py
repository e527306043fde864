import pytest
from datetime import datetime, timedelta, timezone

from retail_analytics.models.product import Product
from retail_analytics.services.performance.performance_service import TOP_N, PerformanceAnalyzer


@pytest.fixture
def analyzer():
    return PerformanceAnalyzer()


def test_summary_totals_match_records(analyzer, sample_products, sample_sales, now):
    report = analyzer.analyze(sample_products, sample_sales, period=30, now=now)

    # All four products fit in the top ten
    assert len(report.top_selling) == len(sample_products)
    assert sum(p.quantity_sold for p in report.top_selling) == report.summary.total_quantity_sold
    assert report.summary.total_quantity_sold == 22
    assert report.summary.total_revenue == pytest.approx(153.5)


def test_profit_and_ratios(analyzer, sample_products, sample_sales, now):
    report = analyzer.analyze(sample_products, sample_sales, period=30, now=now)
    by_id = {p.id: p for p in report.top_selling}

    coffee = by_id["P1"]
    assert coffee.quantity_sold == 12
    assert coffee.revenue == pytest.approx(120.0)
    assert coffee.profit == pytest.approx(48.0)
    assert coffee.profit_margin == pytest.approx(40.0)
    # 12 sold, 10 on hand
    assert coffee.turnover_rate == pytest.approx(12 / 22 * 100)

    muffin = by_id["P4"]
    assert muffin.profit == pytest.approx(-1.25)
    assert muffin.profit_margin == pytest.approx(-10.0)


def test_rankings(analyzer, sample_products, sample_sales, now):
    report = analyzer.analyze(sample_products, sample_sales, period=30, now=now)

    assert [p.id for p in report.top_selling] == ["P1", "P4", "P2", "P3"]
    # Out of stock products are not "worst sellers"
    assert [p.id for p in report.worst_selling] == ["P3", "P4", "P1"]
    assert [p.id for p in report.profitable] == ["P1", "P2", "P3", "P4"]
    assert [p.id for p in report.unprofitable] == ["P4", "P1", "P2", "P3"]


def test_contribution_only_on_top_selling(analyzer, sample_products, sample_sales, now):
    report = analyzer.analyze(sample_products, sample_sales, period=30, now=now)

    coffee = report.top_selling[0]
    assert coffee.contribution_to_sales == pytest.approx(12 / 22 * 100)
    assert coffee.contribution_to_revenue == pytest.approx(120 / 153.5 * 100)
    assert coffee.contribution_to_profit == pytest.approx(48 / report.summary.total_profit * 100)

    assert all(p.contribution_to_sales is None for p in report.profitable)


def test_period_cutoff(analyzer, sample_products, sample_sales, now):
    """Only the last 7 days count"""
    report = analyzer.analyze(sample_products, sample_sales, period=7, now=now)
    by_id = {p.id: p for p in report.top_selling}

    assert by_id["P1"].quantity_sold == 2
    assert by_id["P2"].quantity_sold == 3
    assert by_id["P3"].quantity_sold == 0
    assert by_id["P4"].quantity_sold == 5
    assert report.summary.total_quantity_sold == 10


def test_category_filter(analyzer, sample_products, sample_sales, now):
    report = analyzer.analyze(sample_products, sample_sales, period=30, category_id="Bakery", now=now)

    assert {p.id for p in report.top_selling} == {"P3", "P4"}
    assert report.summary.total_quantity_sold == 7
    assert report.summary.total_revenue == pytest.approx(18.5)


def test_aware_reference_time(analyzer, sample_products, sample_sales, now):
    aware_now = now.astimezone(timezone.utc)
    naive_report = analyzer.analyze(sample_products, sample_sales, period=7, now=now)
    aware_report = analyzer.analyze(sample_products, sample_sales, period=7, now=aware_now)

    assert aware_report.summary == naive_report.summary


def test_empty_inputs_give_empty_report(analyzer, sample_products, sample_sales, now):
    for products, sales in (([], sample_sales), (sample_products, []), (None, None)):
        report = analyzer.analyze(products, sales, now=now)
        assert report.top_selling == []
        assert report.summary.total_revenue == 0.0
        assert report.summary.average_profit_margin == 0.0


def test_top_lists_capped(analyzer, make_sale, now):
    products = [Product(id=f"P{i}", price=1.0, cost=0.5, quantity=1) for i in range(15)]
    sales = [make_sale(now - timedelta(days=1), [(f"P{i}", i + 1, 1.0) for i in range(15)])]

    report = analyzer.analyze(products, sales, now=now)

    assert len(report.top_selling) == TOP_N
    assert report.top_selling[0].id == "P14"
    assert len(report.worst_selling) == TOP_N
    assert report.worst_selling[0].id == "P0"


def test_duplicate_product_ids_first_wins(analyzer, make_sale, now):
    products = [
        Product(id="P1", name="First", cost=1.0, price=2.0, quantity=3),
        Product(id="P1", name="Second", cost=5.0, price=2.0, quantity=9),
    ]
    sales = [make_sale(now - timedelta(days=1), [("P1", 1, 2.0)])]

    report = analyzer.analyze(products, sales, now=now)

    assert len(report.top_selling) == 1
    assert report.top_selling[0].name == "First"
    assert report.top_selling[0].profit == pytest.approx(1.0)


def test_contribution_uses_all_filtered_products(analyzer, make_sale, now):
    """Twelve sellers: shares are against all twelve, not the ten listed"""
    products = [Product(id=f"P{i}", price=1.0, cost=0.5, quantity=5) for i in range(12)]
    sales = [make_sale(now - timedelta(days=1), [(f"P{i}", 1, 1.0) for i in range(12)])]

    report = analyzer.analyze(products, sales, now=now)

    assert len(report.top_selling) == TOP_N
    assert report.summary.total_quantity_sold == 12
    top = report.top_selling[0]
    assert top.contribution_to_sales == pytest.approx(100 / 12)
    assert top.contribution_to_revenue == pytest.approx(100 / 12)
    assert top.contribution_to_profit == pytest.approx(100 / 12)
