from fastapi import APIRouter, Depends, Query
from datetime import date, datetime, timedelta
from typing import Literal, Optional

from petcare.models.user import User
from petcare.core.config import settings
from petcare.dependencies.auth import get_current_user
from petcare.services import report_service

router = APIRouter()


def today() -> date:
    return datetime.utcnow().date()


@router.get("/sales/daily")
async def daily_sales(
    branch_id: Optional[int] = None,
    day: Optional[date] = Query(default=None, alias="date"),
    current_user: User = Depends(get_current_user)
):
    """Totals, payment methods, categories, top products and hours for one day (today by default)."""
    data = await report_service.daily_sales_report(day or today(), branch_id)
    return {"success": True, "data": data}


@router.get("/sales")
async def sales_range(
    branch_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    group_by: Literal["day", "week", "month"] = "day",
    current_user: User = Depends(get_current_user)
):
    """Sales trend over a range, the last 30 days by default."""
    end = end_date or today()
    start = start_date or end - timedelta(days=30)
    data = await report_service.sales_report(start, end, branch_id, group_by)
    return {"success": True, "data": data}


@router.get("/gst")
async def gst(
    branch_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user)
):
    """GST collected per rate, the current month by default."""
    end = end_date or today()
    start = start_date or end.replace(day=1)
    data = await report_service.gst_report(start, end, branch_id)
    return {"success": True, "data": data}


@router.get("/stock")
async def stock(
    branch_id: Optional[int] = None,
    category_id: Optional[int] = None,
    current_user: User = Depends(get_current_user)
):
    data = await report_service.stock_report(branch_id, category_id)
    return {"success": True, "data": data}


@router.get("/expiry")
async def expiry(
    branch_id: Optional[int] = None,
    days: int = Query(default=settings.EXPIRY_WINDOW_DAYS, ge=0),
    current_user: User = Depends(get_current_user)
):
    data = await report_service.expiry_report(branch_id, days)
    return {"success": True, "data": data}
