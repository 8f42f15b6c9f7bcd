from fastapi import APIRouter, Depends
from typing import Optional

from petcare.models.sale import Sale, SaleStatus
from petcare.models.product import Product
from petcare.models.customer import Customer
from petcare.models.branch import Branch
from petcare.models.online_order import OnlineOrder, OPEN_ORDER_STATUSES
from petcare.models.user import User
from petcare.core.config import settings
from petcare.dependencies.auth import get_current_user
from petcare.services.stock_service import low_stock_rows, expiring_rows, start_of_day

router = APIRouter()


@router.get("/")
async def get_dashboard(
    branch_id: Optional[int] = None,
    current_user: User = Depends(get_current_user)
):
    """
    Overview for the home screen. Scoped to one branch (the caller's by
    default); head-office users without a branch see every branch.
    """
    branch_id = branch_id or current_user.branch_id

    sale_filters = [Sale.status == SaleStatus.COMPLETED]
    order_filters = [{"status": {"$in": [s.value for s in OPEN_ORDER_STATUSES]}}]
    if branch_id:
        sale_filters.append(Sale.branch_id == branch_id)
        order_filters.append(OnlineOrder.branch_id == branch_id)

    todays_sales = await Sale.find(*sale_filters, Sale.created_at >= start_of_day()).to_list()
    low_stock = await low_stock_rows(branch_id)
    expiring = await expiring_rows(branch_id, settings.EXPIRY_WINDOW_DAYS)

    recent = await Sale.find(*sale_filters).sort(-Sale.created_at).limit(10).to_list()
    customers = {}
    if recent:
        ids = list({s.customer_id for s in recent if s.customer_id is not None})
        customers = {c.id: c for c in await Customer.find({"_id": {"$in": ids}}).to_list()}
    branches = {b.id: b for b in await Branch.find_all().to_list()}

    recent_sales = []
    for sale in recent:
        customer = customers.get(sale.customer_id)
        branch = branches.get(sale.branch_id)
        recent_sales.append({
            "id": sale.id,
            "invoice_number": sale.invoice_number,
            "grand_total": sale.grand_total,
            "payment_method": sale.payment_method,
            "created_at": sale.created_at,
            "customer_name": customer.name if customer else "Walk-in Customer",
            "branch_name": branch.name if branch else None,
        })

    low_stock_alerts = []
    for stock, product in low_stock[:5]:
        branch = branches.get(stock.branch_id)
        low_stock_alerts.append({
            "id": product.id,
            "name": product.name,
            "sku": product.sku,
            "min_stock": product.min_stock,
            "quantity": stock.quantity,
            "branch_name": branch.name if branch else None,
        })

    return {
        "success": True,
        "data": {
            "today_sales": sum(s.grand_total for s in todays_sales),
            "today_transactions": len(todays_sales),
            "total_products": await Product.find(Product.is_active == True).count(),  # noqa: E712
            "total_customers": await Customer.find(Customer.is_active == True).count(),  # noqa: E712
            "low_stock_count": len(low_stock),
            "expiring_count": len(expiring),
            "pending_orders": await OnlineOrder.find(*order_filters).count(),
            "recent_sales": recent_sales,
            "low_stock_items": low_stock_alerts,
        },
    }
