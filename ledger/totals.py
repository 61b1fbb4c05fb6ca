from decimal import Decimal
from typing import Iterable, List
from models.invoice import InvoiceDirection, InvoiceKind, InvoiceStatus
from schemas.invoice import InvoiceTotals, LineAmounts, PaymentState, TaxBreakdownRow
from ledger.lines import compute_line_input
from ledger.numbers import ZERO, to_decimal, percent_of, round_to_integer
from utils.logger import get_logger

logger = get_logger("ledger.totals")


def compute_invoice_totals(lines: Iterable[LineAmounts], withholding_rate=0) -> InvoiceTotals:
    """
    Roll computed lines up into invoice totals.

    Withholding tax (TCS) is charged on the discounted, taxed amount and
    only the grand total is rounded to a whole number. An empty sequence
    yields all-zero totals.
    """
    subtotal = ZERO
    discount_amount = ZERO
    tax_amount = ZERO
    for line in lines:
        subtotal += line.line_subtotal
        discount_amount += line.discount_amount
        tax_amount += line.tax_amount

    rate = to_decimal(withholding_rate)
    taxable_base = subtotal - discount_amount
    withholding_amount = percent_of(taxable_base + tax_amount, rate) if rate > 0 else ZERO
    unrounded_total = taxable_base + tax_amount + withholding_amount

    totals = InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        taxable_base=taxable_base,
        withholding_rate=rate if rate > 0 else ZERO,
        withholding_amount=withholding_amount,
        unrounded_total=unrounded_total,
        grand_total=round_to_integer(unrounded_total),
    )
    logger.debug("Invoice totals computed: %s", totals)
    return totals


def derive_payment_status(grand_total, paid_amount=0) -> PaymentState:
    grand_total = to_decimal(grand_total)
    paid = min(to_decimal(paid_amount), grand_total)
    balance_due = grand_total - paid

    if balance_due <= 0:
        status = InvoiceStatus.PAID
    elif paid > 0:
        status = InvoiceStatus.PARTIAL
    else:
        status = InvoiceStatus.UNPAID

    return PaymentState(grand_total=grand_total, paid_amount=paid, balance_due=balance_due, status=status)


def select_withholding_rate(kind: InvoiceKind, settings) -> Decimal:
    """Configured TCS rate for the invoice's direction, 0 when TCS is off."""
    if not settings.ENABLE_TCS:
        return ZERO
    if kind.direction == InvoiceDirection.SALE:
        return to_decimal(settings.SALE_TCS_PERCENT)
    return to_decimal(settings.PURCHASE_TCS_PERCENT)


def tax_breakdown(lines) -> List[TaxBreakdownRow]:
    """Taxable amount and tax grouped by rate, split into CGST/SGST halves.

    ``lines`` are line inputs (anything with quantity, rate,
    discount_percent and tax_rate_percent). Groups keep the order in which
    each rate first appears.
    """
    groups = {}
    for line in lines:
        rate = to_decimal(line.tax_rate_percent)
        amounts = compute_line_input(line)
        groups[rate] = groups.get(rate, ZERO) + amounts.taxable_amount

    rows = []
    for rate, taxable in groups.items():
        total_tax = percent_of(taxable, rate)
        rows.append(TaxBreakdownRow(
            rate=rate,
            taxable_amount=taxable,
            cgst=total_tax / 2,
            sgst=total_tax / 2,
            igst=ZERO,
            total=total_tax,
        ))
    return rows
