"""
Stock ledger reconciliation.

Every figure here is replayed from the item's opening stock and the full
history of stock-moving invoice lines. Nothing is carried over between
calls, so asking about the same period twice gives the same answer, and
the cached ``Item.current_stock`` column is never consulted.

Opening average price falls back to the item's current purchase price:
there is no cost trail before the ledger epoch, so items whose cost has
changed since ``opening_stock`` was set are valued approximately.
"""
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List
from models.invoice import InvoiceKind
from schemas.inventory import ItemRecord, StockMovement, StockRegister, StockRegisterTotals
from ledger.numbers import ZERO, to_decimal, safe_divide
from ledger.periods import Period
from ledger.metrics import low_stock_threshold
from utils.logger import get_logger

logger = get_logger("ledger.stock")

STOCK_FILTERS = ("all", "in-stock", "out-of-stock", "low-stock")


def reconcile_item(item: ItemRecord, purchase_lines, sale_lines, period: Period) -> StockMovement:
    before_purchase_qty = ZERO
    before_sale_qty = ZERO
    purchase_qty = ZERO
    purchase_amount = ZERO
    sale_qty = ZERO
    sale_amount = ZERO

    for line in purchase_lines:
        if line.invoice_date < period.start:
            before_purchase_qty += to_decimal(line.quantity)
        elif line.invoice_date < period.end:
            purchase_qty += to_decimal(line.quantity)
            purchase_amount += to_decimal(line.total)

    for line in sale_lines:
        if line.invoice_date < period.start:
            before_sale_qty += to_decimal(line.quantity)
        elif line.invoice_date < period.end:
            sale_qty += to_decimal(line.quantity)
            sale_amount += to_decimal(line.total)

    opening_qty = to_decimal(item.opening_stock) + before_purchase_qty - before_sale_qty
    opening_avg_price = to_decimal(item.purchase_price) if opening_qty > 0 else ZERO

    purchase_avg_price = safe_divide(purchase_amount, purchase_qty)
    sale_avg_price = safe_divide(sale_amount, sale_qty)

    # oversold items keep their negative closing quantity
    closing_qty = opening_qty + purchase_qty - sale_qty
    if closing_qty <= 0:
        closing_price = ZERO
    elif purchase_qty > 0:
        closing_price = purchase_avg_price
    else:
        closing_price = opening_avg_price

    return StockMovement(
        item_id=item.id,
        name=item.name,
        unit=item.unit or "PCS",
        opening_qty=opening_qty,
        opening_avg_price=opening_avg_price,
        opening_amount=opening_qty * opening_avg_price,
        purchase_qty=purchase_qty,
        purchase_amount=purchase_amount,
        purchase_avg_price=purchase_avg_price,
        sale_qty=sale_qty,
        sale_amount=sale_amount,
        sale_avg_price=sale_avg_price,
        closing_qty=closing_qty,
        closing_price=closing_price,
    )


def _group_lines(lines) -> Dict[int, Dict[str, list]]:
    grouped = defaultdict(lambda: {"purchase": [], "sale": []})
    for line in lines:
        grouped[line.item_id][line.direction].append(line)
    return grouped


def stock_register(items: Iterable[ItemRecord], lines, period: Period) -> StockRegister:
    """One movement row per active item, in the order the items were given."""
    grouped = _group_lines(lines)
    rows = []
    for item in items:
        if item.is_deleted:
            continue
        item_lines = grouped.get(item.id, {"purchase": [], "sale": []})
        rows.append(reconcile_item(item, item_lines["purchase"], item_lines["sale"], period))

    logger.debug("Stock register for %s..%s: %d rows", period.start, period.end, len(rows))
    return StockRegister(
        period_start=period.start,
        period_end=period.end,
        rows=rows,
        totals=register_totals(rows),
    )


def register_totals(rows: Iterable[StockMovement]) -> StockRegisterTotals:
    totals = StockRegisterTotals()
    for row in rows:
        totals.opening_qty += row.opening_qty
        totals.opening_amount += row.opening_amount
        totals.purchase_qty += row.purchase_qty
        totals.purchase_amount += row.purchase_amount
        totals.closing_qty += row.closing_qty
        totals.sale_qty += row.sale_qty
        totals.sale_amount += row.sale_amount
    return totals


def filter_register(rows: Iterable[StockMovement], status: str = "all", threshold=None) -> List[StockMovement]:
    if status not in STOCK_FILTERS:
        raise ValueError(f"Unknown stock filter: {status}")
    threshold = low_stock_threshold(threshold)

    if status == "in-stock":
        return [r for r in rows if r.closing_qty > 0]
    if status == "out-of-stock":
        return [r for r in rows if r.closing_qty <= 0]
    if status == "low-stock":
        return [r for r in rows if 0 < r.closing_qty <= threshold]
    return list(rows)


def available_quantity(item: ItemRecord, lines) -> Decimal:
    """All-time reconciled quantity on hand, the figure a sale is checked against."""
    quantity = to_decimal(item.opening_stock)
    for line in lines:
        if line.item_id != item.id:
            continue
        if line.direction == "purchase":
            quantity += to_decimal(line.quantity)
        else:
            quantity -= to_decimal(line.quantity)
    return quantity


def stock_value(items: Iterable[ItemRecord], lines) -> Decimal:
    grouped = _group_lines(lines)
    value = ZERO
    for item in items:
        if item.is_deleted:
            continue
        item_lines = grouped.get(item.id, {"purchase": [], "sale": []})
        quantity = available_quantity(item, item_lines["purchase"] + item_lines["sale"])
        value += quantity * to_decimal(item.purchase_price)
    return value


def stock_delta(kind: InvoiceKind, lines) -> Dict[int, Decimal]:
    """Signed quantity change per item that saving an invoice of ``kind`` applies."""
    effect = kind.stock_effect
    if effect == 0:
        return {}
    delta = defaultdict(lambda: ZERO)
    for line in lines:
        delta[line.item_id] += effect * to_decimal(line.quantity)
    return dict(delta)
