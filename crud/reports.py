from datetime import date
from io import BytesIO
from typing import List, Optional
import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session
from crud import inventory, invoice as invoice_crud
from ledger import metrics
from models.party import Party, Payment
from schemas.inventory import ItemRecord, StockRegister
from schemas.invoice import InvoiceRecord
from schemas.party import PaymentRecord
from schemas.reports import Dashboard, LowStockItem, OverdueInvoice, QuickStats
from utils.logger import get_logger

logger = get_logger("crud.reports")

REGISTER_COLUMNS = [
    ("Sl.No", None),
    ("Item Details", "name"),
    ("UOM", "unit"),
    ("Op.Qty", "opening_qty"),
    ("Avg.Price", "opening_avg_price"),
    ("Op.Amt", "opening_amount"),
    ("Purc.Qty", "purchase_qty"),
    ("Avg.Price", "purchase_avg_price"),
    ("Amt.In", "purchase_amount"),
    ("Cl.Qty", "closing_qty"),
    ("Price", "closing_price"),
    ("Sale.Qty", "sale_qty"),
    ("Avg.Price", "sale_avg_price"),
    ("Amt.Out", "sale_amount"),
]


def _invoice_records(db: Session) -> List[InvoiceRecord]:
    return [InvoiceRecord.model_validate(i) for i in invoice_crud.get_all_invoices(db)]

def _payment_records(db: Session) -> List[PaymentRecord]:
    return [PaymentRecord.model_validate(p) for p in db.query(Payment).all()]

def _item_records(db: Session) -> List[ItemRecord]:
    return [ItemRecord.model_validate(i) for i in inventory.get_active_items(db)]

def get_quick_stats(db: Session, today: Optional[date] = None) -> QuickStats:
    today = today or date.today()
    return metrics.quick_stats(_invoice_records(db), _payment_records(db), today)

def get_low_stock(db: Session, limit: Optional[int] = None) -> List[LowStockItem]:
    return metrics.low_stock_items(_item_records(db), limit)

def get_overdue(db: Session, today: Optional[date] = None) -> List[OverdueInvoice]:
    today = today or date.today()
    return metrics.overdue_invoices(_invoice_records(db), today)

def get_dashboard_data(db: Session, today: Optional[date] = None) -> Dashboard:
    today = today or date.today()
    invoices = _invoice_records(db)
    payments = _payment_records(db)
    items = _item_records(db)

    logger.info("Building dashboard as of %s from %d invoices", today, len(invoices))
    return Dashboard(
        as_of=today,
        metrics=metrics.month_over_month(invoices, today),
        stock_value=inventory.get_stock_value(db),
        item_count=len(items),
        party_count=db.query(Party).count(),
        quick_stats=metrics.quick_stats(invoices, payments, today),
        monthly=metrics.monthly_totals(invoices, today),
        low_stock=metrics.low_stock_items(items, 4),
        overdue=metrics.overdue_invoices(invoices, today),
    )

def generate_stock_register_excel(register: StockRegister) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Stock Register"

    title_font = Font(name='Arial', size=14, bold=True, color='000080')
    header_font = Font(name='Arial', size=11, bold=True)
    total_font = Font(name='Arial', size=11, bold=True)
    normal_font = Font(name='Arial', size=10)

    header_fill = PatternFill(start_color='E0E0E0', end_color='E0E0E0', fill_type='solid')
    total_fill = PatternFill(start_color='F0F0F0', end_color='F0F0F0', fill_type='solid')

    border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    ws["A1"] = "Stock Register"
    ws["A1"].font = title_font
    ws["A2"] = f"{register.period_start.strftime('%B %Y')}"
    ws["A2"].font = header_font

    header_row = 4
    for col, (title, _) in enumerate(REGISTER_COLUMNS, start=1):
        cell = ws.cell(row=header_row, column=col, value=title)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = border
        cell.alignment = Alignment(horizontal='center')

    current_row = header_row + 1
    for index, row in enumerate(register.rows, start=1):
        for col, (_, field) in enumerate(REGISTER_COLUMNS, start=1):
            value = index if field is None else getattr(row, field)
            cell = ws.cell(row=current_row, column=col, value=float(value) if col > 3 else value)
            cell.font = normal_font
            cell.border = border
            if col > 3:
                cell.number_format = '#,##0.00'
                cell.alignment = Alignment(horizontal='right')
        current_row += 1

    ws.cell(row=current_row, column=2, value="Total")
    totals = register.totals.model_dump()
    for col, (_, field) in enumerate(REGISTER_COLUMNS, start=1):
        cell = ws.cell(row=current_row, column=col)
        if field in totals:
            cell.value = float(totals[field])
            cell.number_format = '#,##0.00'
        cell.font = total_font
        cell.fill = total_fill
        cell.border = border

    ws.column_dimensions['A'].width = 8
    ws.column_dimensions['B'].width = 40
    for col in range(3, len(REGISTER_COLUMNS) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 12

    buffer = BytesIO()
    wb.save(buffer)
    excel_data = buffer.getvalue()
    buffer.close()
    return excel_data
