from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional
from datetime import datetime

from petcare.models.stock import Stock, StockAdjustment, AdjustmentType
from petcare.models.product import Product
from petcare.models.category import Category
from petcare.models.branch import Branch
from petcare.models.user import User
from petcare.schemas.stock import StockCreate, StockUpdate, StockAdjustmentSchema
from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_manager_user

router = APIRouter()

# Adjustment types that take units off the shelf
OUTGOING_ADJUSTMENTS = {AdjustmentType.REMOVE, AdjustmentType.DAMAGE, AdjustmentType.EXPIRED}


# ==========================================
# 1. VIEW STOCK LEVELS
# ==========================================

@router.get("/")
async def get_stock(
    branch_id: Optional[int] = None,
    current_user: User = Depends(get_current_user)
):
    """
    Stock rows for a branch (defaults to the caller's branch; branchless
    head-office users see every branch).
    """
    branch_id = branch_id or current_user.branch_id
    query = Stock.find(Stock.branch_id == branch_id) if branch_id else Stock.find_all()
    rows = await query.sort("_id").to_list()

    products = {p.id: p for p in await Product.find_all().to_list()}
    categories = {c.id: c for c in await Category.find_all().to_list()}

    data = []
    for row in rows:
        product = products.get(row.product_id)
        if not product:
            continue
        category = categories.get(product.category_id)
        data.append({
            **row.model_dump(exclude={"revision_id"}),
            "product_name": product.name,
            "sku": product.sku,
            "mrp": product.mrp,
            "selling_price": product.selling_price,
            "min_stock": product.min_stock,
            "category_name": category.name if category else None,
        })

    return {"success": True, "data": data, "count": len(data)}


# ==========================================
# 2. RECEIVE A NEW BATCH
# ==========================================

@router.post("/", status_code=status.HTTP_201_CREATED)
async def add_stock(
    stock_data: StockCreate,
    manager: User = Depends(get_manager_user)
):
    if not await Product.get(stock_data.product_id):
        raise HTTPException(404, "Product not found")
    if not await Branch.get(stock_data.branch_id):
        raise HTTPException(404, "Branch not found")

    duplicate = await Stock.find_one(
        Stock.product_id == stock_data.product_id,
        Stock.branch_id == stock_data.branch_id,
        Stock.batch_number == stock_data.batch_number,
    )
    if duplicate:
        raise HTTPException(
            status_code=400,
            detail=f"Batch '{stock_data.batch_number}' already exists for this product at this branch"
        )

    stock = Stock(id=await next_id(Stock.Settings.name), **stock_data.model_dump())
    await stock.insert()

    return {"success": True, "message": "Stock added successfully", "data": stock.model_dump(exclude={"revision_id"})}


# ==========================================
# 3. EDIT A BATCH ROW
# ==========================================

@router.put("/{stock_id}")
async def update_stock(
    stock_id: int,
    update_data: StockUpdate,
    manager: User = Depends(get_manager_user)
):
    stock = await Stock.get(stock_id)
    if not stock:
        raise HTTPException(404, "Stock record not found")

    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(stock, field, value)
    stock.updated_at = datetime.utcnow()
    await stock.save()

    return {"success": True, "message": "Stock updated successfully", "data": stock.model_dump(exclude={"revision_id"})}


# ==========================================
# 4. MANUAL ADJUSTMENT (damage, expiry, recount)
# ==========================================

@router.post("/adjust")
async def adjust_stock(
    adjustment: StockAdjustmentSchema,
    manager: User = Depends(get_manager_user)
):
    branch_id = adjustment.branch_id or manager.branch_id
    if not branch_id:
        raise HTTPException(400, "branch_id is required")

    conditions = [Stock.product_id == adjustment.product_id, Stock.branch_id == branch_id]
    if adjustment.batch_number:
        conditions.append(Stock.batch_number == adjustment.batch_number)

    stock = await Stock.find(*conditions).sort("_id").first_or_none()
    if not stock:
        raise HTTPException(404, "Stock record not found")

    previous = stock.quantity
    if adjustment.adjustment_type == AdjustmentType.ADD:
        new_quantity = previous + adjustment.quantity
    elif adjustment.adjustment_type in OUTGOING_ADJUSTMENTS:
        if adjustment.quantity > previous:
            raise HTTPException(
                status_code=400,
                detail=f"Cannot remove {adjustment.quantity} units: only {previous} in stock"
            )
        new_quantity = previous - adjustment.quantity
    else:
        # Correction: the counted quantity replaces the recorded one
        new_quantity = adjustment.quantity

    stock.quantity = new_quantity
    stock.updated_at = datetime.utcnow()
    await stock.save()

    log = StockAdjustment(
        id=await next_id(StockAdjustment.Settings.name),
        stock_id=stock.id,
        product_id=stock.product_id,
        branch_id=branch_id,
        user_id=manager.id,
        adjustment_type=adjustment.adjustment_type,
        quantity=adjustment.quantity,
        previous_quantity=previous,
        new_quantity=new_quantity,
        reason=adjustment.reason,
        batch_number=stock.batch_number,
    )
    await log.insert()

    return {
        "success": True,
        "message": "Stock adjusted successfully",
        "data": {"stock_id": stock.id, "previous_quantity": previous, "new_quantity": new_quantity},
    }


@router.get("/adjustments")
async def get_adjustments(
    branch_id: Optional[int] = None,
    limit: int = Query(default=100, ge=1, le=500),
    current_user: User = Depends(get_current_user)
):
    branch_id = branch_id or current_user.branch_id
    query = StockAdjustment.find(StockAdjustment.branch_id == branch_id) if branch_id else StockAdjustment.find_all()
    logs = await query.sort(-StockAdjustment.created_at).limit(limit).to_list()
    return {"success": True, "data": [log.model_dump(exclude={"revision_id"}) for log in logs], "count": len(logs)}
