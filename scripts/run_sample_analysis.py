import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import datetime, timedelta
import logging
import random

from config.settings import settings
from retail_analytics.models.product import Product
from retail_analytics.models.sales import Sale, SaleLineItem
from retail_analytics.services.analytics_facade import AnalyticsFacade

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)

PRODUCT_DATA = [
    {"id": "WDG-001", "name": "Premium Widget A", "category": "Widgets", "cost": 15.50, "price": 29.99},
    {"id": "WDG-002", "name": "Standard Widget B", "category": "Widgets", "cost": 10.25, "price": 19.99},
    {"id": "GAD-001", "name": "Ultra Gadget Pro", "category": "Gadgets", "cost": 45.00, "price": 89.99},
    {"id": "GAD-002", "name": "Basic Gadget Lite", "category": "Gadgets", "cost": 22.50, "price": 44.99},
    {"id": "ACC-001", "name": "Universal Adapter", "category": "Accessories", "cost": 5.75, "price": 12.99},
    {"id": "ACC-002", "name": "Premium Cable Pack", "category": "Accessories", "cost": 8.50, "price": 17.99},
    {"id": "TOL-001", "name": "Professional Tool Set", "category": "Tools", "cost": 120.00, "price": 249.99},
    {"id": "ELC-001", "name": "Smart Controller", "category": "Electronics", "cost": 75.00, "price": 149.99},
]

PAYMENT_METHODS = ['cash', 'card', 'transfer']


def generate_snapshot(days: int = 90, seed: int = 42):
    """Synthetic products and sales with weekend and evening peaks"""
    rng = random.Random(seed)
    now = datetime.now().replace(minute=0, second=0, microsecond=0)

    products = [
        Product(sku=p["id"], quantity=rng.randint(0, 120), **p)
        for p in PRODUCT_DATA
    ]

    sales = []
    start_date = now - timedelta(days=days)
    for day in range(days):
        current_date = start_date + timedelta(days=day)

        # Add weekly pattern (busier on Friday and Saturday)
        weekly_factor = 1.6 if current_date.weekday() in [4, 5] else 1.0
        tickets = max(1, int(rng.gauss(12 * weekly_factor, 3)))

        for _ in range(tickets):
            hour = rng.choice([10, 11, 12, 13, 17, 18, 18, 19, 19, 20])
            items = []
            for product in rng.sample(products, rng.randint(1, 3)):
                quantity = rng.randint(1, 4)
                items.append(SaleLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    price=product.price
                ))

            sales.append(Sale(
                id=f"S-{len(sales) + 1:05d}",
                created_at=current_date.replace(hour=hour, minute=rng.randint(0, 59)),
                items=items,
                total=round(sum(i.line_subtotal for i in items), 2),
                payment_method=rng.choice(PAYMENT_METHODS)
            ))

    return products, sales, now


def print_report(report):
    print("=" * 70)
    print(f"{settings.APP_NAME.upper()} - SAMPLE REPORT")
    print("=" * 70)
    print()

    if report.forecast:
        predicted = [p for p in report.forecast if p.predicted]
        print(f"Forecast: {len(report.forecast) - len(predicted)} historical days, {len(predicted)} predicted")
        for point in predicted[:7]:
            print(f"  {point.date.isoformat()}  {point.total:>10.2f}  ({point.count} sales)")
        print()

    if report.restock_recommendations is not None:
        print(f"Restock recommendations: {len(report.restock_recommendations)}")
        for rec in report.restock_recommendations:
            print(
                f"  [{rec.urgency.value:<6}] {rec.name:<24} stock={rec.quantity:<4} "
                f"days_left={rec.days_until_out_of_stock:<4} reorder={rec.recommended_quantity}"
            )
        print()

    if report.performance:
        summary = report.performance.summary
        print(
            f"Performance: revenue={summary.total_revenue:.2f} profit={summary.total_profit:.2f} "
            f"margin={summary.average_profit_margin:.1f}%"
        )
        for record in report.performance.top_selling[:5]:
            print(f"  {record.name:<24} sold={record.quantity_sold:<5} share={record.contribution_to_sales:.1f}%")
        print()

    if report.seasonality:
        rec = report.seasonality.recommendations
        print(f"High season months: {', '.join(rec.high_season_months) or '-'}")
        print(f"Peak hours: {', '.join(rec.peak_hours) or '-'}")
        print(rec.staffing_recommendation)
        print()

    if report.inventory_summary:
        inventory = report.inventory_summary
        print(
            f"Inventory: {inventory.total_products} products, {inventory.total_items} units, "
            f"{inventory.low_stock_count} low, {inventory.out_of_stock_count} out, "
            f"value={inventory.inventory_value:.2f}"
        )
        print()

    for component, error in report.errors.items():
        print(f"[FAIL] {component}: {error}")


def main():
    products, sales, now = generate_snapshot()
    logger.info(f"Generated {len(products)} products and {len(sales)} sales")

    facade = AnalyticsFacade()
    report = facade.compute_all(products, sales, now=now)
    print_report(report)

    return 0 if report.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
