from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional

from petcare.models.sale import Sale, SaleItem, HeldSale, SaleStatus
from petcare.models.product import Product
from petcare.models.customer import Customer
from petcare.models.user import User
from petcare.schemas.sale import SaleCreate, SaleCancelRequest, HeldSaleCreate
from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_manager_user
from petcare.services.sale_service import complete_sale, cancel_sale
from petcare.services.stock_service import start_of_day

router = APIRouter()

WALK_IN = "Walk-in Customer"


# ==========================================
# 1. CREATE SALE (CRITICAL ENDPOINT)
# ==========================================

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_data: SaleCreate,
    current_user: User = Depends(get_current_user)
):
    """
    Check out a POS cart.
    Deducts stock at the branch and credits the customer's loyalty account.
    """
    sale = await complete_sale(current_user, sale_data)
    return {
        "success": True,
        "message": "Sale completed successfully",
        "data": {
            "id": sale.id,
            "invoice_number": sale.invoice_number,
            "grand_total": sale.grand_total,
        },
    }


# ==========================================
# 2. SALES HISTORY
# ==========================================

@router.get("/")
async def get_sales(
    branch_id: Optional[int] = None,
    limit: int = Query(default=50, ge=1, le=500),
    current_user: User = Depends(get_current_user)
):
    branch_id = branch_id or current_user.branch_id
    query = Sale.find(Sale.branch_id == branch_id) if branch_id else Sale.find_all()
    sales = await query.sort(-Sale.created_at).limit(limit).to_list()

    customer_ids = {s.customer_id for s in sales if s.customer_id is not None}
    customers = {}
    if customer_ids:
        found = await Customer.find({"_id": {"$in": list(customer_ids)}}).to_list()
        customers = {c.id: c for c in found}

    data = []
    for sale in sales:
        customer = customers.get(sale.customer_id)
        data.append({
            **sale.model_dump(exclude={"revision_id"}),
            "customer_name": customer.name if customer else WALK_IN,
        })

    return {"success": True, "data": data, "count": len(data)}


@router.get("/today")
async def get_today_summary(current_user: User = Depends(get_current_user)):
    """Today's completed sales (UTC day) for the caller's branch."""
    conditions = [Sale.status == SaleStatus.COMPLETED, Sale.created_at >= start_of_day()]
    if current_user.branch_id:
        conditions.append(Sale.branch_id == current_user.branch_id)

    sales = await Sale.find(*conditions).to_list()
    revenue = sum(s.grand_total for s in sales)

    return {
        "success": True,
        "data": {
            "transactions": len(sales),
            "revenue": revenue,
            "average": revenue / len(sales) if sales else 0.0,
        },
    }


# ==========================================
# 3. HELD CARTS
# ==========================================

@router.post("/hold", status_code=status.HTTP_201_CREATED)
async def hold_sale(
    held_data: HeldSaleCreate,
    current_user: User = Depends(get_current_user)
):
    held = HeldSale(
        id=await next_id(HeldSale.Settings.name),
        branch_id=held_data.branch_id or current_user.branch_id,
        user_id=current_user.id,
        customer_id=held_data.customer_id,
        cart_data=held_data.cart_data,
        notes=held_data.notes,
    )
    await held.insert()
    return {"success": True, "message": "Sale held successfully", "data": {"id": held.id}}


@router.get("/held")
async def get_held_sales(
    branch_id: Optional[int] = None,
    current_user: User = Depends(get_current_user)
):
    branch_id = branch_id or current_user.branch_id
    query = HeldSale.find(HeldSale.branch_id == branch_id) if branch_id else HeldSale.find_all()
    held = await query.sort(-HeldSale.created_at).to_list()
    return {"success": True, "data": [h.model_dump(exclude={"revision_id"}) for h in held], "count": len(held)}


@router.get("/held/{held_id}")
async def get_held_sale(held_id: int, current_user: User = Depends(get_current_user)):
    held = await HeldSale.get(held_id)
    if not held:
        raise HTTPException(404, "Held sale not found")
    return {"success": True, "data": held.model_dump(exclude={"revision_id"})}


@router.delete("/held/{held_id}")
async def delete_held_sale(held_id: int, current_user: User = Depends(get_current_user)):
    """Discard a held cart (also called once it has been resumed and checked out)."""
    held = await HeldSale.get(held_id)
    if not held:
        raise HTTPException(404, "Held sale not found")
    await held.delete()
    return {"success": True, "message": "Held sale removed"}


# ==========================================
# 4. SALE DETAIL / CANCELLATION
# ==========================================

@router.get("/{sale_id}")
async def get_sale(sale_id: int, current_user: User = Depends(get_current_user)):
    sale = await Sale.get(sale_id)
    if not sale:
        raise HTTPException(404, "Sale not found")

    items = await SaleItem.find(SaleItem.sale_id == sale_id).sort("_id").to_list()
    products = {}
    if items:
        found = await Product.find({"_id": {"$in": [i.product_id for i in items]}}).to_list()
        products = {p.id: p for p in found}

    item_rows = []
    for item in items:
        product = products.get(item.product_id)
        item_rows.append({
            **item.model_dump(exclude={"revision_id"}),
            "product_name": product.name if product else None,
            "sku": product.sku if product else None,
        })

    customer = await Customer.get(sale.customer_id) if sale.customer_id is not None else None

    return {
        "success": True,
        "data": {
            **sale.model_dump(exclude={"revision_id"}),
            "customer_name": customer.name if customer else WALK_IN,
            "items": item_rows,
        },
    }


@router.put("/{sale_id}/cancel")
async def cancel(
    sale_id: int,
    cancel_data: Optional[SaleCancelRequest] = None,
    manager: User = Depends(get_manager_user)
):
    sale = await cancel_sale(sale_id, cancel_data.reason if cancel_data else None)
    return {
        "success": True,
        "message": "Sale cancelled successfully",
        "data": {"id": sale.id, "status": sale.status},
    }
