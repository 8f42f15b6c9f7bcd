"""Storefront order placement."""
import json
import logging
from datetime import datetime
from typing import Optional

from petcare.core.config import settings
from petcare.core.counters import next_id
from petcare.core.exceptions import ValidationError
from petcare.models.online_order import OnlineOrder, DeliveryType, OrderStatus
from petcare.schemas.customer import CustomerClaims
from petcare.schemas.online_order import OnlineOrderCreate
from petcare.services.sale_service import calculate_totals

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_ID = 1


async def next_order_number(branch_id: int, now: Optional[datetime] = None) -> str:
    """ORD-<branch>-<YYYYMMDD>-<seq>, seq = all online orders so far + 1 (plain count)."""
    now = now or datetime.utcnow()
    existing = await OnlineOrder.find_all().count()
    return f"ORD-{branch_id}-{now:%Y%m%d}-{existing + 1:04d}"


def parse_items(order: OnlineOrder) -> list:
    try:
        return json.loads(order.items_json or "[]")
    except ValueError:
        logger.warning("Order %s has an unreadable items blob", order.id)
        return []


async def place_order(customer: CustomerClaims, order_data: OnlineOrderCreate) -> OnlineOrder:
    if not order_data.items:
        raise ValidationError("Items are required")

    totals = calculate_totals(order_data.items)
    delivery_charge = settings.DELIVERY_CHARGE if order_data.delivery_type == DeliveryType.DELIVERY else 0.0

    branch_id = order_data.branch_id or DEFAULT_BRANCH_ID
    order_number = await next_order_number(branch_id)

    order_id = await next_id(OnlineOrder.Settings.name)
    order = OnlineOrder(
        id=order_id,
        order_number=order_number,
        customer_id=customer.customer_id,
        branch_id=branch_id,
        items_json=json.dumps([item.model_dump() for item in order_data.items]),
        subtotal=totals["subtotal"],
        gst_amount=totals["gst_amount"],
        delivery_charge=delivery_charge,
        grand_total=totals["subtotal"] + totals["gst_amount"] + delivery_charge,
        delivery_type=order_data.delivery_type,
        delivery_address=order_data.delivery_address,
        payment_method=order_data.payment_method,
        payment_status="pending",
        status=OrderStatus.PENDING,
        notes=order_data.notes,
    )
    await order.insert()

    logger.info("Online order %s placed by customer %s", order_number, customer.customer_id)
    return order
