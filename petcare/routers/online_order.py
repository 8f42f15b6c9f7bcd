from fastapi import APIRouter, HTTPException, Depends, status
from typing import Optional
from datetime import datetime

from petcare.models.online_order import OnlineOrder, OrderStatus
from petcare.models.customer import Customer
from petcare.models.user import User
from petcare.schemas.customer import CustomerClaims
from petcare.schemas.online_order import OnlineOrderCreate, OrderStatusUpdate
from petcare.dependencies.auth import get_current_user, get_current_customer
from petcare.services.order_service import place_order, parse_items

router = APIRouter()


# ==========================================
# 1. PLACE ORDER (Customer token)
# ==========================================

@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OnlineOrderCreate,
    customer: CustomerClaims = Depends(get_current_customer)
):
    order = await place_order(customer, order_data)
    return {
        "success": True,
        "message": "Order placed successfully",
        "data": {
            "id": order.id,
            "order_number": order.order_number,
            "grand_total": order.grand_total,
            "status": order.status,
        },
    }


# ==========================================
# 2. ORDER QUEUE (Staff)
# ==========================================

@router.get("/orders")
async def get_orders(
    status: Optional[OrderStatus] = None,
    branch_id: Optional[int] = None,
    current_user: User = Depends(get_current_user)
):
    query = OnlineOrder.find_all()
    if status:
        query = query.find(OnlineOrder.status == status)
    if branch_id:
        query = query.find(OnlineOrder.branch_id == branch_id)

    orders = await query.sort(-OnlineOrder.created_at).to_list()

    customers = {}
    if orders:
        found = await Customer.find({"_id": {"$in": list({o.customer_id for o in orders})}}).to_list()
        customers = {c.id: c for c in found}

    data = []
    for order in orders:
        customer = customers.get(order.customer_id)
        data.append({
            **order.model_dump(exclude={"items_json", "revision_id"}),
            "items": parse_items(order),
            "customer_name": customer.name if customer else None,
            "customer_phone": customer.phone if customer else None,
        })

    return {"success": True, "data": data, "count": len(data)}


@router.put("/orders/{order_id}/status")
async def update_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    current_user: User = Depends(get_current_user)
):
    order = await OnlineOrder.get(order_id)
    if not order:
        raise HTTPException(404, "Order not found")

    order.status = update.status
    order.updated_at = datetime.utcnow()
    await order.save()

    return {
        "success": True,
        "message": "Order status updated",
        "data": {"id": order.id, "status": order.status},
    }
