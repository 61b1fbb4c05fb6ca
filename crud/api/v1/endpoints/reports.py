from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from crud import reports
from schemas.reports import Dashboard, LowStockItem, OverdueInvoice, QuickStats

router = APIRouter()

@router.get("/dashboard", response_model=Dashboard)
def get_dashboard_overview(
    as_of: Optional[date] = Query(None, description="Date the dashboard is computed for, defaults to today"),
    db: Session = Depends(get_db)
):
    """
    Get dashboard overview data including:
    - Sales and purchase totals with month-over-month change
    - Stock value, receivables, payables and overdue amounts
    - Monthly breakdown and low stock items
    """
    return reports.get_dashboard_data(db, as_of)

@router.get("/quick-stats", response_model=QuickStats)
def get_quick_stats(as_of: Optional[date] = None, db: Session = Depends(get_db)):
    return reports.get_quick_stats(db, as_of)

@router.get("/low-stock", response_model=List[LowStockItem])
def get_low_stock(limit: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    return reports.get_low_stock(db, limit)

@router.get("/overdue", response_model=List[OverdueInvoice])
def get_overdue(as_of: Optional[date] = None, db: Session = Depends(get_db)):
    return reports.get_overdue(db, as_of)
