from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from petcare.models.branch import Branch
from petcare.models.sale import Sale, SaleStatus
from petcare.models.stock import Stock
from petcare.models.user import User
from petcare.schemas.branch import BranchCreate, BranchUpdate
from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_admin_user
from petcare.services.stock_service import low_stock_rows, start_of_day

router = APIRouter()


# --- 1. LIST ALL BRANCHES (Open to all Staff) ---
@router.get("/")
async def get_all_branches(current_user: User = Depends(get_current_user)):
    """
    Retrieve a list of all branches.
    Any logged-in staff member can see this list.
    """
    branches = await Branch.find_all().sort("_id").to_list()
    return {"success": True, "data": [b.model_dump(exclude={"revision_id"}) for b in branches], "count": len(branches)}


# --- 2. BRANCH DETAIL WITH TODAY'S FIGURES ---
@router.get("/{branch_id}")
async def get_branch(branch_id: int, current_user: User = Depends(get_current_user)):
    branch = await Branch.get(branch_id)
    if not branch:
        raise HTTPException(status_code=404, detail="Branch not found")

    todays_sales = await Sale.find(
        Sale.branch_id == branch_id,
        Sale.status == SaleStatus.COMPLETED,
        Sale.created_at >= start_of_day(),
    ).to_list()

    stats = {
        "today_sales": sum(s.grand_total for s in todays_sales),
        "today_transactions": len(todays_sales),
        "total_stock_items": await Stock.find(Stock.branch_id == branch_id).count(),
        "low_stock_count": len(await low_stock_rows(branch_id)),
    }

    return {"success": True, "data": {**branch.model_dump(exclude={"revision_id"}), "stats": stats}}


# --- 3. CREATE BRANCH (Admin Only) ---
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_branch(
    branch_in: BranchCreate,
    current_admin: User = Depends(get_admin_user)
):
    """
    Create a new branch. The branch code (e.g. 'CHN-01') must be unique.
    """
    if await Branch.find_one(Branch.code == branch_in.code):
        raise HTTPException(
            status_code=400,
            detail=f"Branch with code '{branch_in.code}' already exists."
        )

    new_branch = Branch(id=await next_id(Branch.Settings.name), **branch_in.model_dump())
    await new_branch.insert()

    return {"success": True, "message": "Branch created successfully", "data": new_branch.model_dump(exclude={"revision_id"})}


# --- 4. UPDATE BRANCH (Admin Only) ---
@router.put("/{branch_id}")
async def update_branch(
    branch_id: int,
    update_data: BranchUpdate,
    current_admin: User = Depends(get_admin_user)
):
    branch = await Branch.get(branch_id)
    if not branch:
        raise HTTPException(status_code=404, detail="Branch not found")

    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(branch, field, value)
    branch.updated_at = datetime.utcnow()
    await branch.save()

    return {"success": True, "message": "Branch updated successfully", "data": branch.model_dump(exclude={"revision_id"})}
