"""
In-memory dataset helpers

The data-access layer hands the engine plain collections: model instances,
dicts with camelCase or snake_case keys, or attribute objects such as ORM
rows. Everything is coerced to pydantic models first and then flattened into
pandas frames for grouping.
"""
from typing import Any, Iterable, List, Optional, Type, TypeVar

import pandas as pd

from retail_analytics.models.base import CamelModel
from retail_analytics.models.product import Product
from retail_analytics.models.sales import Sale

ModelT = TypeVar("ModelT", bound=CamelModel)

SALE_COLUMNS = ['sale_id', 'created_at', 'total', 'payment_method', 'items_sold']
LINE_ITEM_COLUMNS = ['sale_id', 'created_at', 'product_id', 'product_name', 'quantity', 'price']


def _coerce(records: Optional[Iterable[Any]], model: Type[ModelT]) -> List[ModelT]:
    if records is None:
        return []
    return [
        record if isinstance(record, model) else model.model_validate(record)
        for record in records
    ]


def coerce_sales(sales: Optional[Iterable[Any]]) -> List[Sale]:
    """Validate raw sales; raises pydantic.ValidationError on uncoercible values"""
    return _coerce(sales, Sale)


def coerce_products(products: Optional[Iterable[Any]]) -> List[Product]:
    """Validate raw products; raises pydantic.ValidationError on uncoercible values"""
    return _coerce(products, Product)


def sales_frame(sales: List[Sale]) -> pd.DataFrame:
    """One row per sale"""
    df = pd.DataFrame([{
        'sale_id': s.id,
        'created_at': s.created_at,
        'total': s.total,
        'payment_method': s.payment_method,
        'items_sold': s.items_sold
    } for s in sales], columns=SALE_COLUMNS)

    df['created_at'] = pd.to_datetime(df['created_at'])
    df['total'] = df['total'].astype(float)
    return df


def line_items_frame(sales: List[Sale]) -> pd.DataFrame:
    """One row per sale line item, carrying the parent sale's timestamp"""
    df = pd.DataFrame([{
        'sale_id': s.id,
        'created_at': s.created_at,
        'product_id': item.product_id,
        'product_name': item.product_name,
        'quantity': item.quantity,
        'price': item.price
    } for s in sales for item in s.items], columns=LINE_ITEM_COLUMNS)

    df['created_at'] = pd.to_datetime(df['created_at'])
    df['quantity'] = df['quantity'].astype('int64')
    df['price'] = df['price'].astype(float)
    return df


def timestamped(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows whose sale carries no timestamp"""
    return df[df['created_at'].notna()]
