from fastapi import APIRouter, HTTPException, Depends, status
from slugify import slugify

from petcare.models.category import Category
from petcare.models.product import Product
from petcare.models.user import User
from petcare.schemas.category import CategoryCreate
from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_admin_user

router = APIRouter()

# --- 1. CREATE CATEGORY (Admin Only) ---
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(get_admin_user)
):
    # Names are unique
    if await Category.find_one(Category.name == category_data.name):
        raise HTTPException(status_code=400, detail="Category already exists")

    new_category = Category(
        id=await next_id(Category.Settings.name),
        name=category_data.name,
        slug=slugify(category_data.name),  # "Dog Food" -> "dog-food"
        description=category_data.description,
        icon=category_data.icon,
        color=category_data.color,
    )
    await new_category.insert()

    return {"success": True, "message": "Category created successfully", "data": new_category.model_dump(exclude={"revision_id"})}

# --- 2. LIST ALL CATEGORIES (with active product counts) ---
@router.get("/")
async def get_categories(current_user: User = Depends(get_current_user)):
    categories = await Category.find_all().sort("+name").to_list()

    data = []
    for category in categories:
        product_count = await Product.find(
            Product.category_id == category.id,
            Product.is_active == True,  # noqa: E712
        ).count()
        data.append({**category.model_dump(exclude={"revision_id"}), "product_count": product_count})

    return {"success": True, "data": data, "count": len(data)}
