import logging
from fastapi import APIRouter, HTTPException, Depends, Query, status
from datetime import date, datetime, time, timedelta
from typing import Optional

from petcare.models.purchase_order import PurchaseOrder, POStatus, POItem, CLOSED_PO_STATUSES
from petcare.models.product import Product
from petcare.models.supplier import Supplier
from petcare.models.branch import Branch
from petcare.models.user import User
from petcare.schemas.procurement import POCreateSchema, POStatusUpdate, ReceiveGoodsSchema
from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_admin_user, get_manager_user
from petcare.services.stock_service import add_to_stock

logger = logging.getLogger(__name__)

router = APIRouter()


async def next_po_number(now: Optional[datetime] = None) -> str:
    """PO-<year>-<seq>, seq = orders raised this calendar year + 1 (a count, like invoice numbers)."""
    now = now or datetime.utcnow()
    existing = await PurchaseOrder.find(
        PurchaseOrder.created_at >= datetime(now.year, 1, 1),
        PurchaseOrder.created_at < datetime(now.year + 1, 1, 1),
    ).count()
    return f"PO-{now.year}-{existing + 1:04d}"


async def po_detail(po: PurchaseOrder) -> dict:
    supplier = await Supplier.get(po.supplier_id)
    branch = await Branch.get(po.branch_id)
    creator = await User.get(po.user_id)

    products = {}
    if po.items:
        found = await Product.find({"_id": {"$in": [i.product_id for i in po.items]}}).to_list()
        products = {p.id: p for p in found}

    items = []
    for item in po.items:
        product = products.get(item.product_id)
        items.append({
            **item.model_dump(),
            "product_name": product.name if product else "Unknown",
            "sku": product.sku if product else None,
            "barcode": product.barcode if product else None,
        })

    return {
        **po.model_dump(exclude={"revision_id", "items"}),
        "supplier_name": supplier.name if supplier else "Unknown",
        "supplier_gst": supplier.gst_number if supplier else None,
        "supplier_phone": supplier.phone if supplier else None,
        "branch_name": branch.name if branch else "Unknown",
        "created_by": creator.full_name if creator else "Unknown",
        "items": items,
    }


# ==========================================
# 1. LIST PURCHASE ORDERS
# ==========================================
@router.get("/")
async def get_purchase_orders(
    supplier_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    status: Optional[POStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(default=100, ge=1, le=500),
    current_user: User = Depends(get_current_user)
):
    filters = []
    if supplier_id:
        filters.append(PurchaseOrder.supplier_id == supplier_id)
    if branch_id:
        filters.append(PurchaseOrder.branch_id == branch_id)
    if status:
        filters.append(PurchaseOrder.status == status)
    if start_date and end_date:
        filters.append(PurchaseOrder.order_date >= datetime.combine(start_date, time.min))
        filters.append(PurchaseOrder.order_date < datetime.combine(end_date, time.min) + timedelta(days=1))

    orders = await PurchaseOrder.find(*filters).sort(-PurchaseOrder.created_at).limit(limit).to_list()

    suppliers = {s.id: s for s in await Supplier.find_all().to_list()}
    branches = {b.id: b for b in await Branch.find_all().to_list()}
    users = {u.id: u for u in await User.find({"_id": {"$in": list({o.user_id for o in orders})}}).to_list()}

    data = []
    for order in orders:
        supplier = suppliers.get(order.supplier_id)
        branch = branches.get(order.branch_id)
        creator = users.get(order.user_id)
        data.append({
            **order.model_dump(exclude={"revision_id", "items"}),
            "items_count": len(order.items),
            "supplier_name": supplier.name if supplier else "Unknown",
            "branch_name": branch.name if branch else "Unknown",
            "created_by": creator.full_name if creator else "Unknown",
        })

    return {"success": True, "data": data, "count": len(data)}


# ==========================================
# 2. GET SINGLE PURCHASE ORDER
# ==========================================
@router.get("/{po_id}")
async def get_purchase_order(po_id: int, current_user: User = Depends(get_current_user)):
    po = await PurchaseOrder.get(po_id)
    if not po:
        raise HTTPException(404, "Purchase order not found")
    return {"success": True, "data": await po_detail(po)}


# ==========================================
# 3. CREATE PURCHASE ORDER
# ==========================================
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_purchase_order(
    data: POCreateSchema,
    manager: User = Depends(get_manager_user)
):
    if not data.items:
        raise HTTPException(400, "Supplier, branch, and items are required")

    supplier = await Supplier.get(data.supplier_id)
    if not supplier:
        raise HTTPException(404, "Supplier not found")
    if not supplier.is_active:
        raise HTTPException(400, "Cannot create a purchase order for an inactive supplier")

    if not await Branch.get(data.branch_id):
        raise HTTPException(404, "Branch not found")

    po_items = []
    for item in data.items:
        if not await Product.get(item.product_id):
            raise HTTPException(404, f"Product {item.product_id} not found")
        po_items.append(POItem(subtotal=item.quantity * item.unit_price, **item.model_dump()))

    po = PurchaseOrder(
        id=await next_id(PurchaseOrder.Settings.name),
        po_number=await next_po_number(),
        supplier_id=data.supplier_id,
        branch_id=data.branch_id,
        user_id=manager.id,
        items=po_items,
        total_amount=sum(i.subtotal for i in po_items),
        expected_delivery=data.expected_delivery,
        notes=data.notes,
    )
    await po.insert()

    logger.info("Purchase order %s raised with supplier %s", po.po_number, supplier.id)
    return {"success": True, "message": "Purchase order created successfully", "data": await po_detail(po)}


# ==========================================
# 4. UPDATE STATUS
# ==========================================
@router.put("/{po_id}/status")
async def update_po_status(
    po_id: int,
    status_data: POStatusUpdate,
    manager: User = Depends(get_manager_user)
):
    po = await PurchaseOrder.get(po_id)
    if not po:
        raise HTTPException(404, "Purchase order not found")

    if po.status in CLOSED_PO_STATUSES:
        raise HTTPException(400, f"Cannot change a purchase order that is '{po.status.value}'")
    if status_data.status == POStatus.DELIVERED:
        raise HTTPException(400, "Use the receive endpoint to mark goods as delivered")

    po.status = status_data.status
    po.updated_at = datetime.utcnow()
    await po.save()

    return {"success": True, "message": "Status updated successfully", "data": po.model_dump(exclude={"revision_id"})}


# ==========================================
# 5. RECEIVE GOODS (UPDATES STOCK)
# ==========================================
@router.post("/{po_id}/receive")
async def receive_goods(
    po_id: int,
    data: Optional[ReceiveGoodsSchema] = None,
    manager: User = Depends(get_manager_user)
):
    """
    Receive a delivery into the order's branch. Each received line tops
    up its batch row (or opens one). Without an item list every line is
    received in full.
    """
    po = await PurchaseOrder.get(po_id)
    if not po:
        raise HTTPException(404, "Purchase order not found")

    if po.status == POStatus.DELIVERED:
        raise HTTPException(400, "This order has already been received")
    if po.status == POStatus.CANCELLED:
        raise HTTPException(400, "Cannot receive a cancelled order")

    lines = {item.product_id: item for item in po.items}
    if data and data.items is not None:
        received = [(i.product_id, i.received_quantity) for i in data.items]
    else:
        received = [(item.product_id, item.quantity) for item in po.items]

    # Check every line before touching stock
    for product_id, _ in received:
        if product_id not in lines:
            raise HTTPException(400, f"Product {product_id} is not on this purchase order")

    for product_id, quantity in received:
        line = lines[product_id]
        line.received_quantity = quantity
        if quantity:
            await add_to_stock(product_id, po.branch_id, quantity, line.batch_number, line.expiry_date)

    now = datetime.utcnow()
    po.status = POStatus.DELIVERED
    po.received_date = now
    po.updated_at = now
    if data and data.notes:
        po.notes = f"{po.notes} | {data.notes}" if po.notes else data.notes
    await po.save()

    logger.info("Purchase order %s received at branch %s", po.po_number, po.branch_id)
    return {
        "success": True,
        "message": "Goods received and stock updated successfully",
        "data": await po_detail(po),
    }


# ==========================================
# 6. DELETE PURCHASE ORDER
# ==========================================
@router.delete("/{po_id}")
async def delete_purchase_order(po_id: int, admin: User = Depends(get_admin_user)):
    po = await PurchaseOrder.get(po_id)
    if not po:
        raise HTTPException(404, "Purchase order not found")
    if po.status == POStatus.DELIVERED:
        raise HTTPException(400, "Cannot delete a delivered order")

    await po.delete()
    return {"success": True, "message": "Purchase order deleted successfully"}
