"""
Sale completion workflow.

Turns a POS cart into a persisted sale: totals, invoice number, sale and
line documents, per-branch stock decrement and customer loyalty accrual.

The writes after validation are sequential and independent. A failure
part-way through leaves the sale persisted with only some stock rows
decremented; nothing rolls that back.
"""
import logging
import math
from datetime import datetime
from typing import Iterable, Optional

from beanie.operators import Inc, Set

from petcare.core.config import settings
from petcare.core.counters import next_id
from petcare.core.exceptions import NotFoundError, ValidationError
from petcare.models.customer import Customer
from petcare.models.sale import Sale, SaleItem, SaleStatus, DiscountType, PaymentStatus
from petcare.models.stock import Stock
from petcare.models.user import User
from petcare.schemas.sale import CartLine, SaleCreate

logger = logging.getLogger(__name__)


def calculate_totals(items: Iterable[CartLine], discount: float = 0.0,
                     discount_type: DiscountType = DiscountType.AMOUNT) -> dict:
    """
    Compute subtotal, GST, resolved discount and grand total for a cart.

    GST is the sum of the per-line figures sent by the caller. A
    percentage discount applies to the subtotal only. The grand total is
    not floored and can go negative.
    """
    subtotal = 0.0
    gst_total = 0.0
    for item in items:
        subtotal += item.quantity * item.unit_price
        gst_total += item.gst_amount or 0

    discount_amount = 0.0
    if discount:
        if discount_type == DiscountType.PERCENTAGE:
            discount_amount = subtotal * discount / 100
        else:
            discount_amount = discount

    return {
        "subtotal": subtotal,
        "gst_amount": gst_total,
        "discount": discount_amount,
        "grand_total": subtotal + gst_total - discount_amount,
    }


def loyalty_points_for(amount: float) -> int:
    return math.floor(amount / settings.LOYALTY_SPEND_PER_POINT)


async def next_invoice_number(branch_id: int, now: Optional[datetime] = None) -> str:
    """
    INV-<branch>-<YYYYMMDD>-<seq>, seq = existing sales of the branch + 1.

    This is a plain count, not an allocation: two checkouts that count
    before either one inserts get the same number.
    """
    now = now or datetime.utcnow()
    existing = await Sale.find(Sale.branch_id == branch_id).count()
    return f"INV-{branch_id}-{now:%Y%m%d}-{existing + 1:04d}"


async def first_stock_row(product_id: int, branch_id: int) -> Optional[Stock]:
    return await Stock.find(
        Stock.product_id == product_id,
        Stock.branch_id == branch_id,
    ).sort("_id").first_or_none()


async def decrement_stock(product_id: int, branch_id: int, quantity: int) -> Optional[Stock]:
    """Take `quantity` off the first stock row for (product, branch), never below zero."""
    stock = await first_stock_row(product_id, branch_id)
    if stock is None:
        logger.warning("No stock row for product %s at branch %s; decrement skipped", product_id, branch_id)
        return None

    stock.quantity = max(0, stock.quantity - quantity)
    stock.updated_at = datetime.utcnow()
    await stock.save()
    return stock


async def credit_customer(customer_id: int, amount: float, points: int) -> None:
    """Add to the customer's running total and loyalty points with $inc (negative values reverse)."""
    await Customer.find_one({"_id": customer_id}).update(
        Inc({Customer.total_purchases: amount, Customer.loyalty_points: points}),
        Set({Customer.updated_at: datetime.utcnow()}),
    )


async def complete_sale(cashier: User, sale_data: SaleCreate) -> Sale:
    # 1. Validate before anything is written
    if not sale_data.items:
        raise ValidationError("Items are required")

    branch_id = sale_data.branch_id or cashier.branch_id
    if not branch_id:
        raise ValidationError("Branch is required: your account is not assigned to a branch")

    if sale_data.customer_id is not None:
        if not await Customer.get(sale_data.customer_id):
            raise NotFoundError(f"Customer {sale_data.customer_id} not found")

    # 2. Totals
    totals = calculate_totals(sale_data.items, sale_data.discount, sale_data.discount_type)

    # 3. Invoice number
    invoice_number = await next_invoice_number(branch_id)

    points = loyalty_points_for(totals["grand_total"]) if sale_data.customer_id is not None else 0

    # 4. Create sale record (ID first: no ID, no sale)
    sale_id = await next_id(Sale.Settings.name)
    sale = Sale(
        id=sale_id,
        invoice_number=invoice_number,
        branch_id=branch_id,
        user_id=cashier.id,
        customer_id=sale_data.customer_id,
        discount_type=sale_data.discount_type,
        payment_method=sale_data.payment_method,
        payment_status=PaymentStatus.PAID,
        status=SaleStatus.COMPLETED,
        notes=sale_data.notes,
        loyalty_points=points,
        **totals,
    )
    await sale.insert()

    # 5. Lines + stock
    for item in sale_data.items:
        item_id = await next_id(SaleItem.Settings.name)
        await SaleItem(
            id=item_id,
            sale_id=sale_id,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount=item.discount or 0,
            gst_rate=item.gst_rate or 0,
            gst_amount=item.gst_amount or 0,
            total=item.quantity * item.unit_price,
        ).insert()

        await decrement_stock(item.product_id, branch_id, item.quantity)

    # 6. Loyalty
    if sale_data.customer_id is not None:
        await credit_customer(sale_data.customer_id, sale.grand_total, sale.loyalty_points)

    logger.info("Sale %s completed: %s, total %.2f", sale_id, invoice_number, sale.grand_total)
    return sale


async def cancel_sale(sale_id: int, reason: Optional[str] = None) -> Sale:
    """Void a completed sale: restock its lines and reverse the customer credit."""
    sale = await Sale.get(sale_id)
    if not sale:
        raise NotFoundError("Sale not found")

    if sale.status != SaleStatus.COMPLETED:
        raise ValidationError("Only completed sales can be cancelled")

    items = await SaleItem.find(SaleItem.sale_id == sale_id).to_list()
    for item in items:
        stock = await first_stock_row(item.product_id, sale.branch_id)
        if stock:
            await stock.update(
                Inc({Stock.quantity: item.quantity}),
                Set({Stock.updated_at: datetime.utcnow()}),
            )

    if sale.customer_id is not None:
        await credit_customer(sale.customer_id, -sale.grand_total, -sale.loyalty_points)

    note = f"Cancelled: {reason or 'No reason provided'}"
    sale.notes = f"{sale.notes} | {note}" if sale.notes else note
    sale.status = SaleStatus.CANCELLED
    sale.updated_at = datetime.utcnow()
    await sale.save()

    logger.info("Sale %s (%s) cancelled", sale_id, sale.invoice_number)
    return sale
