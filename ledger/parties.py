from decimal import Decimal
from typing import Iterable, List
from models.invoice import InvoiceDirection
from models.party import PartyType
from schemas.party import PartyBalance, PartyRecord, Portfolio
from ledger.directions import direction_for_party
from ledger.numbers import ZERO, to_decimal

NET_RECEIVABLE = "net receivable"
NET_PAYABLE = "net payable"


def balance_label(net_due) -> str:
    net_due = to_decimal(net_due)
    if net_due > 0:
        return "receivable"
    if net_due < 0:
        return "payable"
    return "settled"


def party_balance(party: PartyRecord, invoices, payments) -> PartyBalance:
    """
    Net amount due for one party.

    ``invoices`` and ``payments`` may be the party's whole history; only
    invoices on the party's side of the books (sales for customers,
    purchases for suppliers) that are not deleted, and payments flowing
    in the matching direction, are counted.
    """
    invoice_direction = InvoiceDirection.SALE if party.party_type == PartyType.CUSTOMER else InvoiceDirection.PURCHASE
    payment_direction = direction_for_party(party.party_type)

    invoice_amount = sum(
        (to_decimal(inv.total_amount) for inv in invoices
         if inv.kind.direction == invoice_direction and not inv.is_deleted),
        ZERO,
    )
    payments_amount = sum(
        (to_decimal(p.amount) for p in payments if p.direction == payment_direction),
        ZERO,
    )
    net_due = to_decimal(party.opening_balance) + invoice_amount - payments_amount

    return PartyBalance(
        party_id=party.id,
        name=party.name,
        party_type=party.party_type,
        opening_balance=to_decimal(party.opening_balance),
        invoice_amount=invoice_amount,
        payments_amount=payments_amount,
        net_due=net_due,
        label=balance_label(net_due),
    )


def party_balances(parties: Iterable[PartyRecord], invoices, payments) -> List[PartyBalance]:
    invoices_by_party = {}
    for inv in invoices:
        invoices_by_party.setdefault(inv.party_id, []).append(inv)
    payments_by_party = {}
    for p in payments:
        payments_by_party.setdefault(p.party_id, []).append(p)

    return [
        party_balance(party, invoices_by_party.get(party.id, []), payments_by_party.get(party.id, []))
        for party in parties
    ]


def portfolio(balances: Iterable[PartyBalance]) -> Portfolio:
    balances = list(balances)
    receivable = sum((b.net_due for b in balances if b.party_type == PartyType.CUSTOMER), ZERO)
    payable = sum((b.net_due for b in balances if b.party_type == PartyType.SUPPLIER), ZERO)

    total_receivable = abs(receivable)
    net_balance = total_receivable - payable
    return Portfolio(
        total_receivable=total_receivable,
        total_payable=payable,
        net_balance=net_balance,
        net_label=NET_RECEIVABLE if net_balance >= 0 else NET_PAYABLE,
        parties=balances,
    )
