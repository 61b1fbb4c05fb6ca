from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from config import settings
from crud import inventory
from ledger import stock
from ledger.exceptions import InsufficientStockError, InvoiceValidationError, RecordNotFound
from ledger.lines import compute_line_input
from ledger.numbers import to_decimal
from ledger.totals import compute_invoice_totals, derive_payment_status, select_withholding_rate, tax_breakdown
from models.invoice import Invoice, InvoiceDirection, InvoiceKind, InvoiceLine, InvoiceStatus
from models.party import Party, Payment, PaymentDirection
from schemas.inventory import ItemRecord
from schemas.invoice import InvoiceCreate, InvoicePreview, InvoicePreviewRequest, InvoiceUpdate, LineInput
from schemas.party import InvoicePaymentCreate
from utils.logger import get_logger

logger = get_logger("crud.invoice")


def _validate_lines(db: Session, lines: List[LineInput]) -> dict:
    if not lines:
        raise InvoiceValidationError("Please add at least one item")

    items = {}
    for line in lines:
        db_item = inventory.get_item(db, line.item_id)
        if db_item is None:
            raise InvoiceValidationError(f"Item with ID {line.item_id} not found")
        name = line.item_name or db_item.name
        if line.quantity <= 0:
            raise InvoiceValidationError(f'Quantity must be greater than 0 for "{name}"')
        if line.rate < 0:
            raise InvoiceValidationError(f'Rate cannot be negative for "{name}"')
        items[line.item_id] = db_item
    return items

def _validate_party(db: Session, party_id: Optional[int]) -> Party:
    if party_id is None:
        raise InvoiceValidationError("Please select a party")
    party = db.query(Party).filter(Party.id == party_id).first()
    if party is None:
        raise InvoiceValidationError(f"Party with ID {party_id} not found")
    return party

def _check_stock(db: Session, kind: InvoiceKind, lines: List[LineInput], items: dict,
                 exclude_invoice_id: Optional[int] = None) -> None:
    """Reject a sale that asks for more than the reconciled quantity on hand."""
    if kind.stock_effect >= 0:
        return

    requested = {}
    for line in lines:
        requested[line.item_id] = requested.get(line.item_id, Decimal("0")) + to_decimal(line.quantity)

    ledger_lines = inventory.get_ledger_lines(db, list(requested), exclude_invoice_id)
    for item_id, quantity in requested.items():
        db_item = items[item_id]
        available = stock.available_quantity(ItemRecord.model_validate(db_item), ledger_lines)
        if quantity > available:
            logger.warning("Rejected %s: %s requested %s, %s available", kind.value, db_item.name, quantity, available)
            raise InsufficientStockError(db_item.name, available, quantity)

def _build_lines(lines: List[LineInput], items: dict):
    amounts = []
    db_lines = []
    for line in lines:
        line_amounts = compute_line_input(line)
        amounts.append(line_amounts)
        db_item = items[line.item_id]
        db_lines.append(InvoiceLine(
            item_id=line.item_id,
            item_name=line.item_name or db_item.name,
            unit=line.unit or db_item.unit,
            quantity=line.quantity,
            rate=line.rate,
            discount_percent=line.discount_percent,
            discount_amount=line_amounts.discount_amount,
            tax_rate_percent=line.tax_rate_percent,
            tax_amount=line_amounts.tax_amount,
            total=line_amounts.line_total,
        ))
    return amounts, db_lines

def _apply_totals(db_invoice: Invoice, amounts) -> None:
    totals = compute_invoice_totals(amounts, select_withholding_rate(db_invoice.kind, settings))
    db_invoice.subtotal = totals.subtotal
    db_invoice.discount_amount = totals.discount_amount
    db_invoice.tax_amount = totals.tax_amount
    db_invoice.withholding_amount = totals.withholding_amount
    db_invoice.total_amount = totals.grand_total
    _apply_payment_state(db_invoice, to_decimal(db_invoice.paid_amount))

def _apply_payment_state(db_invoice: Invoice, paid_amount: Decimal) -> None:
    state = derive_payment_status(db_invoice.total_amount, paid_amount)
    db_invoice.paid_amount = state.paid_amount
    db_invoice.balance_due = state.balance_due
    db_invoice.status = state.status

def _payment_direction(kind: InvoiceKind) -> PaymentDirection:
    return PaymentDirection.IN if kind.direction == InvoiceDirection.SALE else PaymentDirection.OUT

def _line_inputs(db_invoice: Invoice) -> List[LineInput]:
    return [
        LineInput(
            item_id=line.item_id,
            item_name=line.item_name,
            unit=line.unit,
            quantity=line.quantity,
            rate=line.rate,
            discount_percent=line.discount_percent,
            tax_rate_percent=line.tax_rate_percent,
        )
        for line in db_invoice.lines
    ]

def create_invoice(db: Session, invoice: InvoiceCreate) -> Invoice:
    """
    Save an invoice with its lines, stock movement and optional first payment.

    Everything is written in one transaction: if any part fails nothing is
    kept, so there is never a header without lines or a stock change
    without the invoice that caused it.
    """
    party = _validate_party(db, invoice.party_id)
    items = _validate_lines(db, invoice.lines)
    _check_stock(db, invoice.kind, invoice.lines, items)

    try:
        db_invoice = Invoice(
            invoice_number=invoice.invoice_number,
            kind=invoice.kind,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            party_id=party.id,
            notes=invoice.notes,
            paid_amount=Decimal("0"),
        )
        amounts, db_lines = _build_lines(invoice.lines, items)
        db_invoice.lines = db_lines
        _apply_totals(db_invoice, amounts)
        db.add(db_invoice)
        db.flush()

        inventory.apply_stock_delta(db, stock.stock_delta(invoice.kind, invoice.lines))

        if invoice.paid_amount > 0 and db_invoice.balance_due > 0:
            _record_invoice_payment(db, db_invoice, InvoicePaymentCreate(
                amount=invoice.paid_amount,
                payment_date=invoice.invoice_date,
                payment_method=invoice.payment_method,
            ))

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to save invoice %s", invoice.invoice_number)
        raise

    db.refresh(db_invoice)
    logger.info("%s %s saved: total %s, status %s", invoice.kind.value, db_invoice.invoice_number,
                db_invoice.total_amount, db_invoice.status.value)
    return db_invoice

def get_invoice(db: Session, invoice_id: int, include_deleted: bool = False) -> Optional[Invoice]:
    query = db.query(Invoice).filter(Invoice.id == invoice_id)
    if not include_deleted:
        query = query.filter(Invoice.is_deleted.is_(False))
    return query.first()

def get_invoices(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    kind: Optional[InvoiceKind] = None,
    status: Optional[InvoiceStatus] = None,
    party_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[Invoice]:
    query = db.query(Invoice).filter(Invoice.is_deleted.is_(False))

    if kind:
        query = query.filter(Invoice.kind == kind)
    if status:
        query = query.filter(Invoice.status == status)
    if party_id:
        query = query.filter(Invoice.party_id == party_id)
    if start_date:
        query = query.filter(Invoice.invoice_date >= start_date)
    if end_date:
        query = query.filter(Invoice.invoice_date <= end_date)

    return query.order_by(Invoice.invoice_date, Invoice.id).offset(skip).limit(limit).all()

def get_all_invoices(db: Session) -> List[Invoice]:
    return db.query(Invoice).filter(Invoice.is_deleted.is_(False)).all()

def update_invoice(db: Session, invoice_id: int, invoice_update: InvoiceUpdate) -> Invoice:
    """Whole-invoice edit: old lines and their stock movement are replaced."""
    db_invoice = get_invoice(db, invoice_id)
    if not db_invoice:
        raise RecordNotFound("Invoice", invoice_id)

    update_data = invoice_update.model_dump(exclude_unset=True, exclude={"lines"})
    if "party_id" in update_data:
        _validate_party(db, update_data["party_id"])
    invoice_date = update_data.get("invoice_date") or db_invoice.invoice_date
    due_date = update_data.get("due_date", db_invoice.due_date)
    if due_date is not None and due_date < invoice_date:
        raise InvoiceValidationError("Due date cannot be before invoice date")

    new_lines = invoice_update.lines if invoice_update.lines is not None else _line_inputs(db_invoice)
    items = _validate_lines(db, new_lines)
    _check_stock(db, db_invoice.kind, new_lines, items, exclude_invoice_id=invoice_id)

    # linked payments must keep adding up to paid_amount
    new_total = compute_invoice_totals(
        [compute_line_input(line) for line in new_lines],
        select_withholding_rate(db_invoice.kind, settings),
    ).grand_total
    already_paid = to_decimal(db_invoice.paid_amount)
    if new_total < already_paid:
        raise InvoiceValidationError(f"Invoice total {new_total} is less than the {already_paid} already paid")

    try:
        old_delta = stock.stock_delta(db_invoice.kind, db_invoice.lines)
        inventory.apply_stock_delta(db, {item_id: -qty for item_id, qty in old_delta.items()})

        for field, value in update_data.items():
            setattr(db_invoice, field, value)

        db_invoice.lines.clear()
        db.flush()
        amounts, db_lines = _build_lines(new_lines, items)
        db_invoice.lines.extend(db_lines)
        _apply_totals(db_invoice, amounts)

        inventory.apply_stock_delta(db, stock.stock_delta(db_invoice.kind, new_lines))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to update invoice %s", invoice_id)
        raise

    db.refresh(db_invoice)
    logger.info("Invoice %s updated: total %s", invoice_id, db_invoice.total_amount)
    return db_invoice

def delete_invoice(db: Session, invoice_id: int) -> bool:
    """Soft delete; the stock the invoice moved is put back."""
    db_invoice = get_invoice(db, invoice_id)
    if not db_invoice:
        return False

    try:
        delta = stock.stock_delta(db_invoice.kind, db_invoice.lines)
        inventory.apply_stock_delta(db, {item_id: -qty for item_id, qty in delta.items()})
        db_invoice.is_deleted = True
        db_invoice.deleted_at = inventory.utcnow()
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to delete invoice %s", invoice_id)
        raise

    logger.info("Invoice %s deleted", invoice_id)
    return True

def _record_invoice_payment(db: Session, db_invoice: Invoice, payment: InvoicePaymentCreate) -> Payment:
    """Link a payment to the invoice, capped at what is still due."""
    amount = min(to_decimal(payment.amount), to_decimal(db_invoice.balance_due))
    db_payment = Payment(
        party_id=db_invoice.party_id,
        invoice_id=db_invoice.id,
        direction=_payment_direction(db_invoice.kind),
        amount=amount,
        payment_date=payment.payment_date,
        payment_method=payment.payment_method,
        reference=payment.reference,
    )
    db.add(db_payment)
    _apply_payment_state(db_invoice, to_decimal(db_invoice.paid_amount) + amount)
    return db_payment

def add_payment(db: Session, invoice_id: int, payment: InvoicePaymentCreate) -> Invoice:
    db_invoice = get_invoice(db, invoice_id)
    if not db_invoice:
        raise RecordNotFound("Invoice", invoice_id)
    if to_decimal(db_invoice.balance_due) <= 0:
        raise InvoiceValidationError(f"Invoice {db_invoice.invoice_number} is already paid")

    try:
        _record_invoice_payment(db, db_invoice, payment)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to record payment on invoice %s", invoice_id)
        raise

    db.refresh(db_invoice)
    logger.info("Payment of %s recorded on invoice %s, status %s", payment.amount, invoice_id, db_invoice.status.value)
    return db_invoice

def preview_invoice(request: InvoicePreviewRequest) -> InvoicePreview:
    amounts = [compute_line_input(line) for line in request.lines]
    totals = compute_invoice_totals(amounts, select_withholding_rate(request.kind, settings))
    return InvoicePreview(
        lines=amounts,
        totals=totals,
        round_off=totals.round_off,
        payment=derive_payment_status(totals.grand_total, request.paid_amount),
        tax_breakdown=tax_breakdown(request.lines),
    )
