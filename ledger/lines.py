from schemas.invoice import LineAmounts
from ledger.numbers import to_decimal, percent_of


def compute_line(quantity, rate, discount_percent=0, tax_rate_percent=0) -> LineAmounts:
    """
    Amounts for a single invoice line.

    Discount comes off the gross before tax is applied. Nothing is rounded
    here; the invoice total is rounded once.
    """
    line_subtotal = to_decimal(quantity) * to_decimal(rate)
    discount_amount = percent_of(line_subtotal, discount_percent)
    taxable_amount = line_subtotal - discount_amount
    tax_amount = percent_of(taxable_amount, tax_rate_percent)

    return LineAmounts(
        line_subtotal=line_subtotal,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        tax_amount=tax_amount,
        line_total=taxable_amount + tax_amount,
    )


def compute_line_input(line) -> LineAmounts:
    return compute_line(line.quantity, line.rate, line.discount_percent, line.tax_rate_percent)
