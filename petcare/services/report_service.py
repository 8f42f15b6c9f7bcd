"""
Sales, GST, stock and expiry reports.

Only completed sales count. Dates are UTC calendar days; a range
includes both end days.
"""
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from petcare.models.branch import Branch
from petcare.models.category import Category
from petcare.models.product import Product
from petcare.models.sale import Sale, SaleItem, SaleStatus
from petcare.models.stock import Stock
from petcare.services.stock_service import low_stock_rows, expiring_rows, start_of_day, days_until

PERIOD_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%Y-W%W",
    "month": "%Y-%m",
}


async def completed_sales(start: date, end: date, branch_id: Optional[int] = None) -> List[Sale]:
    filters = [
        Sale.status == SaleStatus.COMPLETED,
        Sale.created_at >= datetime.combine(start, time.min),
        Sale.created_at < datetime.combine(end, time.min) + timedelta(days=1),
    ]
    if branch_id:
        filters.append(Sale.branch_id == branch_id)
    return await Sale.find(*filters).sort("+created_at").to_list()


async def items_of(sales: List[Sale]) -> List[SaleItem]:
    if not sales:
        return []
    return await SaleItem.find({"sale_id": {"$in": [s.id for s in sales]}}).to_list()


def summarize(sales: List[Sale]) -> dict:
    total = sum(s.grand_total for s in sales)
    return {
        "total_transactions": len(sales),
        "total_sales": total,
        "subtotal": sum(s.subtotal for s in sales),
        "total_gst": sum(s.gst_amount for s in sales),
        "total_discount": sum(s.discount for s in sales),
        "average_transaction": total / len(sales) if sales else 0,
    }


def group_sales(sales: List[Sale], key) -> Dict[str, dict]:
    groups: Dict[str, dict] = {}
    for sale in sales:
        row = groups.setdefault(key(sale), {"transactions": 0, "total": 0.0})
        row["transactions"] += 1
        row["total"] += sale.grand_total
    return groups


async def daily_sales_report(day: date, branch_id: Optional[int] = None) -> dict:
    sales = await completed_sales(day, day, branch_id)
    items = await items_of(sales)
    products = {p.id: p for p in await Product.find_all().to_list()}
    categories = {c.id: c for c in await Category.find_all().to_list()}

    payments = group_sales(sales, lambda s: s.payment_method.value)
    hours = group_sales(sales, lambda s: f"{s.created_at:%H}")

    by_category: Dict[int, dict] = {}
    by_product: Dict[int, dict] = {}
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            continue

        top = by_product.setdefault(product.id, {
            "name": product.name, "sku": product.sku, "quantity_sold": 0, "revenue": 0.0,
        })
        top["quantity_sold"] += item.quantity
        top["revenue"] += item.total

        category = categories.get(product.category_id)
        if category is None:
            continue
        row = by_category.setdefault(category.id, {
            "category": category.name, "icon": category.icon, "sales": set(), "quantity_sold": 0, "total": 0.0,
        })
        row["sales"].add(item.sale_id)
        row["quantity_sold"] += item.quantity
        row["total"] += item.total

    category_sales = [
        {**{k: v for k, v in row.items() if k != "sales"}, "orders": len(row["sales"])}
        for row in by_category.values()
    ]

    return {
        "date": day.isoformat(),
        "summary": summarize(sales),
        "payment_breakdown": [{"payment_method": m, "count": r["transactions"], "total": r["total"]}
                              for m, r in payments.items()],
        "category_sales": sorted(category_sales, key=lambda r: r["total"], reverse=True),
        "top_products": sorted(by_product.values(), key=lambda r: r["quantity_sold"], reverse=True)[:10],
        "hourly_breakdown": [{"hour": h, **r} for h, r in sorted(hours.items())],
    }


async def sales_report(start: date, end: date, branch_id: Optional[int] = None, group_by: str = "day") -> dict:
    sales = await completed_sales(start, end, branch_id)
    fmt = PERIOD_FORMATS.get(group_by, PERIOD_FORMATS["day"])
    trend = group_sales(sales, lambda s: s.created_at.strftime(fmt))

    branch_breakdown = []
    if not branch_id:
        branches = {b.id: b for b in await Branch.find_all().to_list()}
        for bid, row in group_sales(sales, lambda s: s.branch_id).items():
            branch = branches.get(bid)
            branch_breakdown.append({"branch": branch.name if branch else None, **row})
        branch_breakdown.sort(key=lambda r: r["total"], reverse=True)

    summary = summarize(sales)
    return {
        "period": {"start": start.isoformat(), "end": end.isoformat()},
        "summary": {k: summary[k] for k in ("total_transactions", "total_sales", "total_gst", "total_discount")},
        "sales_trend": [{"period": p, **r} for p, r in sorted(trend.items())],
        "branch_breakdown": branch_breakdown,
    }


async def gst_report(start: date, end: date, branch_id: Optional[int] = None) -> dict:
    sales = await completed_sales(start, end, branch_id)
    items = await items_of(sales)

    rates: Dict[float, dict] = defaultdict(lambda: {"items": 0, "taxable_value": 0.0, "gst_amount": 0.0})
    for item in items:
        row = rates[item.gst_rate]
        row["items"] += 1
        row["taxable_value"] += item.unit_price * item.quantity
        row["gst_amount"] += item.gst_amount

    return {
        "period": {"start": start.isoformat(), "end": end.isoformat()},
        "summary": {
            "taxable_amount": sum(s.subtotal for s in sales),
            "total_gst": sum(s.gst_amount for s in sales),
            "total_with_gst": sum(s.grand_total for s in sales),
        },
        "rate_breakdown": [{"gst_rate": rate, **rates[rate]} for rate in sorted(rates)],
    }


async def stock_report(branch_id: Optional[int] = None, category_id: Optional[int] = None) -> dict:
    filters = [Product.is_active == True]  # noqa: E712
    if category_id:
        filters.append(Product.category_id == category_id)
    products = {p.id: p for p in await Product.find(*filters).to_list()}

    query = Stock.find(Stock.branch_id == branch_id) if branch_id else Stock.find_all()
    rows = [row for row in await query.to_list() if row.product_id in products]
    branches = {b.id: b for b in await Branch.find_all().to_list()}

    categories = {c.id: c for c in await Category.find_all().to_list()}
    category_stock: Dict[int, dict] = {}
    for product in products.values():
        category = categories.get(product.category_id)
        if category is None:
            continue
        category_stock.setdefault(category.id, {
            "category": category.name, "icon": category.icon, "products": 0, "quantity": 0, "value": 0.0,
        })["products"] += 1
    for row in rows:
        product = products[row.product_id]
        entry = category_stock.get(product.category_id)
        if entry is not None:
            entry["quantity"] += row.quantity
            entry["value"] += row.quantity * product.selling_price

    low_stock = [
        {
            "name": product.name,
            "sku": product.sku,
            "min_stock": product.min_stock,
            "quantity": row.quantity,
            "shortage": product.min_stock - row.quantity,
            "branch_name": branches[row.branch_id].name if row.branch_id in branches else None,
        }
        for row, product in await low_stock_rows(branch_id)
        if row.product_id in products
    ]
    low_stock.sort(key=lambda r: r["shortage"], reverse=True)

    out_of_stock = sorted(
        (
            {
                "name": products[row.product_id].name,
                "sku": products[row.product_id].sku,
                "branch_name": branches[row.branch_id].name if row.branch_id in branches else None,
            }
            for row in rows if row.quantity == 0
        ),
        key=lambda r: r["name"],
    )

    return {
        "summary": {
            "total_products": len(products),
            "total_stock": sum(row.quantity for row in rows),
            "stock_value": sum(row.quantity * products[row.product_id].selling_price for row in rows),
            "stock_cost": sum(row.quantity * products[row.product_id].purchase_price for row in rows),
        },
        "category_stock": sorted(category_stock.values(), key=lambda r: r["value"], reverse=True),
        "low_stock": low_stock[:20],
        "out_of_stock": out_of_stock,
    }


async def expiry_report(branch_id: Optional[int] = None, days: int = 30) -> dict:
    today = start_of_day()
    branches = {b.id: b for b in await Branch.find_all().to_list()}
    products = {p.id: p for p in await Product.find_all().to_list()}

    filters = [Stock.quantity > 0, Stock.expiry_date < today]
    if branch_id:
        filters.append(Stock.branch_id == branch_id)
    expired_rows = await Stock.find(*filters).sort("+expiry_date").to_list()

    def describe(row: Stock, product: Product) -> dict:
        return {
            "name": product.name,
            "sku": product.sku,
            "quantity": row.quantity,
            "batch_number": row.batch_number,
            "expiry_date": row.expiry_date,
            "branch_name": branches[row.branch_id].name if row.branch_id in branches else None,
            "value": row.quantity * product.selling_price,
        }

    expired = [
        {**describe(row, products[row.product_id]), "days_expired": -days_until(row.expiry_date)}
        for row in expired_rows if row.product_id in products
    ]
    expiring_soon = [
        {**describe(row, product), "days_until_expiry": days_until(row.expiry_date)}
        for row, product in await expiring_rows(branch_id, days)
    ]

    return {
        "summary": {
            "expired_count": len(expired),
            "expired_value": sum(r["value"] for r in expired),
            "expiring_soon_count": len(expiring_soon),
            "expiring_soon_value": sum(r["value"] for r in expiring_soon),
        },
        "expired": expired,
        "expiring_soon": expiring_soon,
    }
