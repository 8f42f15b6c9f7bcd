import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional
from datetime import datetime

from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_manager_user
from petcare.models.user import User
from petcare.models.stock_transfer import StockTransfer, TransferItem, TransferStatus, TRANSFER_TRANSITIONS
from petcare.models.product import Product
from petcare.models.branch import Branch
from petcare.schemas.stock_transfer import StockTransferCreate, StockTransferStatusUpdate
from petcare.services.stock_service import on_hand, add_to_stock, take_from_stock

logger = logging.getLogger(__name__)

router = APIRouter()


async def next_transfer_number(now: Optional[datetime] = None) -> str:
    """TRF-<year>-<seq>, seq = all transfers so far + 1."""
    now = now or datetime.utcnow()
    existing = await StockTransfer.find_all().count()
    return f"TRF-{now.year}-{existing + 1:04d}"


async def check_availability(branch_id: int, items) -> None:
    """Every line must be covered by the branch's stock, else 400 before anything moves."""
    needed = {}
    for item in items:
        needed[item.product_id] = needed.get(item.product_id, 0) + item.quantity

    for product_id, quantity in needed.items():
        available = await on_hand(product_id, branch_id)
        if available < quantity:
            product = await Product.get(product_id)
            name = product.name if product else f"product ID {product_id}"
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Insufficient stock for {name}. Available: {available}"
            )


async def transfer_detail(transfer: StockTransfer) -> dict:
    from_branch = await Branch.get(transfer.from_branch_id)
    to_branch = await Branch.get(transfer.to_branch_id)
    requester = await User.get(transfer.user_id)

    products = {}
    if transfer.items:
        found = await Product.find({"_id": {"$in": [i.product_id for i in transfer.items]}}).to_list()
        products = {p.id: p for p in found}

    items = []
    for item in transfer.items:
        product = products.get(item.product_id)
        items.append({
            **item.model_dump(),
            "product_name": product.name if product else "Unknown",
            "sku": product.sku if product else None,
        })

    return {
        **transfer.model_dump(exclude={"revision_id", "items"}),
        "from_branch_name": from_branch.name if from_branch else "Unknown",
        "to_branch_name": to_branch.name if to_branch else "Unknown",
        "created_by": requester.full_name if requester else "Unknown",
        "items": items,
    }


# ==========================================
# 1. CREATE TRANSFER REQUEST
# ==========================================

@router.post("/transfer", status_code=status.HTTP_201_CREATED)
async def create_transfer(
    transfer_data: StockTransferCreate,
    manager: User = Depends(get_manager_user)
):
    """
    Request stock to move from one branch to another. Source stock is
    checked now but only moves when the transfer is completed.
    """
    if transfer_data.from_branch_id == transfer_data.to_branch_id:
        raise HTTPException(400, "Source and destination branches cannot be the same")

    if not transfer_data.items:
        raise HTTPException(400, "Items are required")

    if not await Branch.get(transfer_data.from_branch_id) or not await Branch.get(transfer_data.to_branch_id):
        raise HTTPException(404, "Branch not found")

    for item in transfer_data.items:
        if not await Product.get(item.product_id):
            raise HTTPException(404, f"Product {item.product_id} not found")

    await check_availability(transfer_data.from_branch_id, transfer_data.items)

    transfer = StockTransfer(
        id=await next_id(StockTransfer.Settings.name),
        transfer_number=await next_transfer_number(),
        from_branch_id=transfer_data.from_branch_id,
        to_branch_id=transfer_data.to_branch_id,
        user_id=manager.id,
        items=[TransferItem(**item.model_dump()) for item in transfer_data.items],
        notes=transfer_data.notes,
    )
    await transfer.insert()

    logger.info(
        "Transfer %s requested: branch %s -> %s",
        transfer.transfer_number, transfer.from_branch_id, transfer.to_branch_id,
    )
    return {"success": True, "message": "Stock transfer created successfully", "data": await transfer_detail(transfer)}


# ==========================================
# 2. LIST TRANSFERS
# ==========================================

@router.get("/transfers")
async def list_transfers(
    branch_id: Optional[int] = None,
    status: Optional[TransferStatus] = None,
    current_user: User = Depends(get_current_user)
):
    """Transfers into or out of a branch (all branches when none is given), newest first."""
    query = {}
    if branch_id:
        query["$or"] = [{"from_branch_id": branch_id}, {"to_branch_id": branch_id}]
    if status:
        query["status"] = status.value

    transfers = await StockTransfer.find(query).sort(-StockTransfer.created_at).to_list()
    branches = {b.id: b for b in await Branch.find_all().to_list()}
    users = {u.id: u for u in await User.find({"_id": {"$in": list({t.user_id for t in transfers})}}).to_list()}

    data = []
    for transfer in transfers:
        from_branch = branches.get(transfer.from_branch_id)
        to_branch = branches.get(transfer.to_branch_id)
        requester = users.get(transfer.user_id)
        data.append({
            **transfer.model_dump(exclude={"revision_id", "items"}),
            "from_branch_name": from_branch.name if from_branch else "Unknown",
            "to_branch_name": to_branch.name if to_branch else "Unknown",
            "created_by": requester.full_name if requester else "Unknown",
            "items_count": len(transfer.items),
            "total_quantity": sum(item.quantity for item in transfer.items),
        })

    return {"success": True, "data": data, "count": len(data)}


# ==========================================
# 3. GET TRANSFER DETAILS
# ==========================================

@router.get("/transfers/{transfer_id}")
async def get_transfer(transfer_id: int, current_user: User = Depends(get_current_user)):
    transfer = await StockTransfer.get(transfer_id)
    if not transfer:
        raise HTTPException(404, "Transfer not found")
    return {"success": True, "data": await transfer_detail(transfer)}


# ==========================================
# 4. UPDATE STATUS (COMPLETION MOVES STOCK)
# ==========================================

@router.put("/transfers/{transfer_id}/status")
async def update_transfer_status(
    transfer_id: int,
    status_data: StockTransferStatusUpdate,
    manager: User = Depends(get_manager_user)
):
    transfer = await StockTransfer.get(transfer_id)
    if not transfer:
        raise HTTPException(404, "Transfer not found")

    new_status = status_data.status
    if new_status not in TRANSFER_TRANSITIONS[transfer.status]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot move a transfer from '{transfer.status.value}' to '{new_status.value}'"
        )

    now = datetime.utcnow()
    if new_status == TransferStatus.COMPLETED:
        await check_availability(transfer.from_branch_id, transfer.items)
        for item in transfer.items:
            await take_from_stock(item.product_id, transfer.from_branch_id, item.quantity)
            await add_to_stock(item.product_id, transfer.to_branch_id, item.quantity, item.batch_number)
        transfer.completed_at = now
        logger.info("Transfer %s completed", transfer.transfer_number)

    transfer.status = new_status
    transfer.updated_at = now
    await transfer.save()

    return {
        "success": True,
        "message": "Transfer status updated successfully",
        "data": transfer.model_dump(exclude={"revision_id"}),
    }
