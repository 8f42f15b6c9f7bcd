"""Stock queries and movements shared by the product, dashboard, procurement and transfer views."""
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from petcare.core.counters import next_id
from petcare.core.exceptions import ValidationError
from petcare.models.product import Product
from petcare.models.stock import Stock


async def active_products_by_id() -> Dict[int, Product]:
    products = await Product.find(Product.is_active == True).to_list()  # noqa: E712
    return {p.id: p for p in products}


def _branch_query(branch_id: Optional[int], *conditions):
    if branch_id is not None:
        return Stock.find(Stock.branch_id == branch_id, *conditions)
    return Stock.find(*conditions)


async def low_stock_rows(branch_id: Optional[int] = None) -> List[Tuple[Stock, Product]]:
    """Rows with 0 < quantity <= product.min_stock, lowest first. Empty rows are out of stock, not low."""
    products = await active_products_by_id()
    rows = await _branch_query(branch_id, Stock.quantity > 0).sort("+quantity").to_list()
    return [
        (row, products[row.product_id])
        for row in rows
        if row.product_id in products and row.quantity <= products[row.product_id].min_stock
    ]


def start_of_day(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.utcnow()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


async def expiring_rows(branch_id: Optional[int] = None, days: int = 30) -> List[Tuple[Stock, Product]]:
    """In-stock rows expiring between today and today + days, soonest first."""
    today = start_of_day()
    horizon = today + timedelta(days=days + 1)
    products = await active_products_by_id()
    rows = await _branch_query(
        branch_id,
        Stock.quantity > 0,
        Stock.expiry_date >= today,
        Stock.expiry_date < horizon,
    ).sort("+expiry_date").to_list()
    return [(row, products[row.product_id]) for row in rows if row.product_id in products]


def days_until(expiry: datetime, now: Optional[datetime] = None) -> int:
    return (start_of_day(expiry) - start_of_day(now)).days


async def rows_for(product_id: int, branch_id: int) -> List[Stock]:
    return await Stock.find(
        Stock.product_id == product_id,
        Stock.branch_id == branch_id,
    ).sort("_id").to_list()


async def on_hand(product_id: int, branch_id: int) -> int:
    """Units of a product at a branch, summed over its batch rows."""
    return sum(row.quantity for row in await rows_for(product_id, branch_id))


async def add_to_stock(product_id: int, branch_id: int, quantity: int,
                       batch_number: Optional[str] = None,
                       expiry_date: Optional[datetime] = None) -> Stock:
    """
    Put received units on the shelf.

    With a batch number the matching batch row is topped up, or a new
    row is opened for that batch. Without one the lowest-ID row for the
    product at the branch takes the units, or a new row is opened.
    """
    rows = await rows_for(product_id, branch_id)
    if batch_number:
        row = next((r for r in rows if r.batch_number == batch_number), None)
    else:
        row = rows[0] if rows else None

    if row is None:
        row = Stock(
            id=await next_id(Stock.Settings.name),
            product_id=product_id,
            branch_id=branch_id,
            quantity=quantity,
            batch_number=batch_number,
            expiry_date=expiry_date,
        )
        await row.insert()
        return row

    row.quantity += quantity
    if expiry_date:
        row.expiry_date = expiry_date
    row.updated_at = datetime.utcnow()
    await row.save()
    return row


async def take_from_stock(product_id: int, branch_id: int, quantity: int) -> None:
    """Remove units across batch rows, lowest ID first. Fails before writing if the branch is short."""
    rows = await rows_for(product_id, branch_id)
    available = sum(row.quantity for row in rows)
    if available < quantity:
        raise ValidationError(
            f"Insufficient stock for product {product_id} at branch {branch_id}. Available: {available}"
        )

    remaining = quantity
    for row in rows:
        if remaining == 0:
            break
        taken = min(row.quantity, remaining)
        if taken:
            row.quantity -= taken
            row.updated_at = datetime.utcnow()
            await row.save()
            remaining -= taken
