from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List, Optional

class MonthlyTotals(BaseModel):
    label: str
    year: int
    month: int
    sales: Decimal
    purchase: Decimal

class MonthOverMonth(BaseModel):
    total_sales: Decimal
    total_purchase: Decimal
    sales_this_month: Decimal
    sales_last_month: Decimal
    purchase_this_month: Decimal
    purchase_last_month: Decimal
    sales_change: Decimal
    purchase_change: Decimal

class LowStockItem(BaseModel):
    item_id: int
    name: str
    stock: Decimal
    min_stock: Decimal
    status: str

class OverdueInvoice(BaseModel):
    invoice_id: int
    party_id: int
    due_date: date
    balance_due: Decimal
    days_overdue: int

class QuickStats(BaseModel):
    total_receivables: Decimal
    receivables_parties: int
    total_payables: Decimal
    payables_parties: int
    overdue_amount: Decimal
    overdue_count: int
    paid_this_month: Decimal
    paid_count: int

class Dashboard(BaseModel):
    as_of: date
    metrics: MonthOverMonth
    stock_value: Decimal
    item_count: int
    party_count: int
    quick_stats: QuickStats
    monthly: List[MonthlyTotals]
    low_stock: List[LowStockItem]
    overdue: Optional[List[OverdueInvoice]] = None
