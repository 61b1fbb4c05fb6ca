from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session
from config import settings
from ledger import stock
from ledger.exceptions import LedgerError, RecordNotFound
from ledger.periods import month_period
from models.inventory import Item
from models.invoice import Invoice, InvoiceKind, InvoiceLine
from schemas.inventory import ItemCreate, ItemRecord, ItemUpdate, StockRegister
from schemas.invoice import PurchaseLedgerLine, SaleLedgerLine
from utils.logger import get_logger

logger = get_logger("crud.inventory")

STOCK_KINDS = [kind for kind in InvoiceKind if kind.stock_effect != 0]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def create_item(db: Session, item: ItemCreate) -> Item:
    db_item = Item(**item.model_dump(), current_stock=item.opening_stock)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    logger.info("Item %s created with opening stock %s", db_item.id, db_item.opening_stock)
    return db_item

def get_item(db: Session, item_id: int, include_deleted: bool = False) -> Optional[Item]:
    query = db.query(Item).filter(Item.id == item_id)
    if not include_deleted:
        query = query.filter(Item.is_deleted.is_(False))
    return query.first()

def get_items(db: Session, skip: int = 0, limit: int = 100, search: Optional[str] = None,
              include_deleted: bool = False) -> List[Item]:
    query = db.query(Item)

    if not include_deleted:
        query = query.filter(Item.is_deleted.is_(False))
    if search:
        query = query.filter(Item.name.ilike(f'%{search}%'))

    return query.order_by(Item.id).offset(skip).limit(limit).all()

def get_active_items(db: Session) -> List[Item]:
    return db.query(Item).filter(Item.is_deleted.is_(False)).order_by(Item.id).all()

def update_item(db: Session, item_id: int, item_update: ItemUpdate) -> Optional[Item]:
    db_item = get_item(db, item_id)

    if db_item:
        update_data = item_update.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_item, key, value)
        db.commit()
        db.refresh(db_item)
    return db_item

def soft_delete_item(db: Session, item_id: int) -> bool:
    db_item = get_item(db, item_id)

    if db_item:
        db_item.is_deleted = True
        db_item.deleted_at = utcnow()
        db.commit()
        logger.info("Item %s moved to recycle bin", item_id)
        return True
    return False

def restore_item(db: Session, item_id: int, now: Optional[datetime] = None) -> Item:
    db_item = get_item(db, item_id, include_deleted=True)
    if not db_item or not db_item.is_deleted:
        raise RecordNotFound("Deleted item", item_id)

    now = now or utcnow()
    window = timedelta(days=settings.RECYCLE_BIN_DAYS)
    if db_item.deleted_at is not None and now - _as_utc(db_item.deleted_at) > window:
        raise LedgerError(f"Item {item_id} was deleted more than {settings.RECYCLE_BIN_DAYS} days ago")

    db_item.is_deleted = False
    db_item.deleted_at = None
    db.commit()
    db.refresh(db_item)
    logger.info("Item %s restored", item_id)
    return db_item

def purge_deleted_items(db: Session, now: Optional[datetime] = None) -> int:
    """Physically delete items past the recovery window.

    Items still referenced by invoice lines stay soft-deleted so the ledger
    history they belong to can still be replayed.
    """
    now = now or utcnow()
    window = timedelta(days=settings.RECYCLE_BIN_DAYS)
    candidates = db.query(Item).filter(Item.is_deleted.is_(True), Item.deleted_at.isnot(None)).all()

    purged = 0
    for db_item in candidates:
        if now - _as_utc(db_item.deleted_at) <= window:
            continue
        referenced = db.query(InvoiceLine.id).filter(InvoiceLine.item_id == db_item.id).first()
        if referenced:
            continue
        db.delete(db_item)
        purged += 1

    db.commit()
    logger.info("Purged %d items from recycle bin", purged)
    return purged

def apply_stock_delta(db: Session, deltas: Dict[int, Decimal]) -> None:
    """Move cached stock with an in-database increment.

    Runs inside the caller's transaction; nothing is committed here.
    """
    for item_id, delta in deltas.items():
        if delta == 0:
            continue
        db.execute(
            update(Item)
            .where(Item.id == item_id)
            .values(current_stock=Item.current_stock + delta)
        )
        logger.info("Stock for item %s moved by %s", item_id, delta)

def get_ledger_lines(db: Session, item_ids: Optional[List[int]] = None,
                     exclude_invoice_id: Optional[int] = None) -> list:
    """Stock-moving lines of live invoices, tagged sale or purchase."""
    query = db.query(InvoiceLine, Invoice).join(Invoice, InvoiceLine.invoice_id == Invoice.id).filter(
        Invoice.is_deleted.is_(False),
        Invoice.kind.in_(STOCK_KINDS),
    )
    if item_ids is not None:
        query = query.filter(InvoiceLine.item_id.in_(item_ids))
    if exclude_invoice_id is not None:
        query = query.filter(Invoice.id != exclude_invoice_id)

    lines = []
    for line, invoice in query.all():
        line_type = SaleLedgerLine if invoice.kind.stock_effect < 0 else PurchaseLedgerLine
        lines.append(line_type(
            invoice_id=invoice.id,
            item_id=line.item_id,
            kind=invoice.kind,
            invoice_date=invoice.invoice_date,
            quantity=line.quantity,
            total=line.total,
        ))
    return lines

def get_available_quantity(db: Session, db_item: Item, exclude_invoice_id: Optional[int] = None) -> Decimal:
    lines = get_ledger_lines(db, [db_item.id], exclude_invoice_id)
    return stock.available_quantity(ItemRecord.model_validate(db_item), lines)

def get_stock_register(db: Session, year: int, month: int, status: str = "all") -> StockRegister:
    items = [ItemRecord.model_validate(i) for i in get_active_items(db)]
    lines = get_ledger_lines(db, [i.id for i in items])
    register = stock.stock_register(items, lines, month_period(year, month))

    if status != "all":
        rows = stock.filter_register(register.rows, status)
        register = StockRegister(
            period_start=register.period_start,
            period_end=register.period_end,
            rows=rows,
            totals=stock.register_totals(rows),
        )
    return register

def get_stock_value(db: Session) -> Decimal:
    items = [ItemRecord.model_validate(i) for i in get_active_items(db)]
    return stock.stock_value(items, get_ledger_lines(db, [i.id for i in items]))
