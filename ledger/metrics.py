from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional
from models.invoice import InvoiceDirection
from schemas.inventory import ItemRecord
from schemas.reports import LowStockItem, MonthlyTotals, MonthOverMonth, OverdueInvoice, QuickStats
from config import settings
from ledger.numbers import ZERO, HUNDRED, to_decimal
from ledger.periods import Period, month_start, shift_month


def percent_change(current, previous) -> Decimal:
    current = to_decimal(current)
    previous = to_decimal(previous)
    if previous == 0:
        return ZERO
    return (current - previous) / previous * HUNDRED


def _revenue_invoices(invoices):
    return [inv for inv in invoices if not inv.is_deleted and inv.kind.is_revenue]


def _sum_totals(invoices, direction: InvoiceDirection, period: Optional[Period] = None) -> Decimal:
    return sum(
        (to_decimal(inv.total_amount) for inv in invoices
         if inv.kind.direction == direction and (period is None or period.contains(inv.invoice_date))),
        ZERO,
    )


def monthly_totals(invoices, today: date, months: Optional[int] = None) -> List[MonthlyTotals]:
    """Sales and purchase totals per calendar month, oldest first, ending with ``today``'s month."""
    months = months or settings.TRAILING_MONTHS
    invoices = _revenue_invoices(invoices)
    current = month_start(today)
    result = []
    for offset in range(months - 1, -1, -1):
        start = shift_month(current, -offset)
        period = Period(start, shift_month(start, 1))
        result.append(MonthlyTotals(
            label=start.strftime("%b"),
            year=start.year,
            month=start.month,
            sales=_sum_totals(invoices, InvoiceDirection.SALE, period),
            purchase=_sum_totals(invoices, InvoiceDirection.PURCHASE, period),
        ))
    return result


def month_over_month(invoices, today: date) -> MonthOverMonth:
    invoices = _revenue_invoices(invoices)
    this_start = month_start(today)
    this_month = Period(this_start, shift_month(this_start, 1))
    last_month = Period(shift_month(this_start, -1), this_start)

    sales_this = _sum_totals(invoices, InvoiceDirection.SALE, this_month)
    sales_last = _sum_totals(invoices, InvoiceDirection.SALE, last_month)
    purchase_this = _sum_totals(invoices, InvoiceDirection.PURCHASE, this_month)
    purchase_last = _sum_totals(invoices, InvoiceDirection.PURCHASE, last_month)

    return MonthOverMonth(
        total_sales=_sum_totals(invoices, InvoiceDirection.SALE),
        total_purchase=_sum_totals(invoices, InvoiceDirection.PURCHASE),
        sales_this_month=sales_this,
        sales_last_month=sales_last,
        purchase_this_month=purchase_this,
        purchase_last_month=purchase_last,
        sales_change=percent_change(sales_this, sales_last),
        purchase_change=percent_change(purchase_this, purchase_last),
    )


def low_stock_threshold(low_stock_alert, default=None) -> Decimal:
    # an unset or zero alert level falls back to the configured default
    threshold = to_decimal(low_stock_alert)
    if threshold > 0:
        return threshold
    return to_decimal(default if default is not None else settings.LOW_STOCK_DEFAULT)


def stock_status(current_stock, low_stock_alert=None, default=None) -> str:
    stock = to_decimal(current_stock)
    if stock <= 0:
        return "out"
    if stock <= low_stock_threshold(low_stock_alert, default):
        return "low"
    return "in-stock"


def low_stock_items(items: Iterable[ItemRecord], limit: Optional[int] = None, default=None) -> List[LowStockItem]:
    """Active items that are low or out of stock, lowest stock first."""
    flagged = []
    for item in items:
        if item.is_deleted:
            continue
        status = stock_status(item.current_stock, item.low_stock_alert, default)
        if status == "in-stock":
            continue
        flagged.append(LowStockItem(
            item_id=item.id,
            name=item.name,
            stock=to_decimal(item.current_stock),
            min_stock=low_stock_threshold(item.low_stock_alert, default),
            status=status,
        ))
    flagged.sort(key=lambda i: i.stock)
    return flagged[:limit] if limit is not None else flagged


def overdue_invoices(invoices, today: date) -> List[OverdueInvoice]:
    overdue = []
    for inv in invoices:
        if inv.is_deleted or inv.due_date is None:
            continue
        if inv.due_date < today and to_decimal(inv.balance_due) > 0:
            overdue.append(OverdueInvoice(
                invoice_id=inv.id,
                party_id=inv.party_id,
                due_date=inv.due_date,
                balance_due=to_decimal(inv.balance_due),
                days_overdue=(today - inv.due_date).days,
            ))
    return overdue


def quick_stats(invoices, payments, today: date) -> QuickStats:
    invoices = list(invoices)
    revenue = _revenue_invoices(invoices)

    receivables = [inv for inv in revenue
                   if inv.kind.direction == InvoiceDirection.SALE and to_decimal(inv.balance_due) > 0]
    payables = [inv for inv in revenue
                if inv.kind.direction == InvoiceDirection.PURCHASE and to_decimal(inv.balance_due) > 0]
    overdue = overdue_invoices(invoices, today)

    this_start = month_start(today)
    recent_payments = [p for p in payments if p.payment_date >= this_start]

    return QuickStats(
        total_receivables=sum((to_decimal(inv.balance_due) for inv in receivables), ZERO),
        receivables_parties=len({inv.party_id for inv in receivables}),
        total_payables=sum((to_decimal(inv.balance_due) for inv in payables), ZERO),
        payables_parties=len({inv.party_id for inv in payables}),
        overdue_amount=sum((o.balance_due for o in overdue), ZERO),
        overdue_count=len(overdue),
        paid_this_month=sum((to_decimal(p.amount) for p in recent_payments), ZERO),
        paid_count=len(recent_payments),
    )
