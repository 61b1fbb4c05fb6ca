from typing import List, Optional
from sqlalchemy.orm import Session
from crud import invoice as invoice_crud
from ledger import parties
from ledger.exceptions import InvoiceValidationError, RecordNotFound
from models.invoice import Invoice
from models.party import Party, PartyType, Payment
from schemas.invoice import InvoiceRecord
from schemas.party import InvoicePaymentCreate, PartyBalance, PartyCreate, PartyRecord, PaymentCreate, PaymentRecord, Portfolio
from utils.logger import get_logger

logger = get_logger("crud.party")


def create_party(db: Session, party: PartyCreate) -> Party:
    db_party = Party(**party.model_dump())
    db.add(db_party)
    db.commit()
    db.refresh(db_party)
    logger.info("Party %s (%s) created", db_party.id, db_party.party_type.value)
    return db_party

def get_party(db: Session, party_id: int) -> Optional[Party]:
    return db.query(Party).filter(Party.id == party_id).first()

def get_parties(db: Session, skip: int = 0, limit: int = 100,
                party_type: Optional[PartyType] = None, search: Optional[str] = None) -> List[Party]:
    query = db.query(Party)

    if party_type:
        query = query.filter(Party.party_type == party_type)
    if search:
        query = query.filter(Party.name.ilike(f"%{search}%"))

    return query.order_by(Party.id).offset(skip).limit(limit).all()

def record_payment(db: Session, payment: PaymentCreate) -> Payment:
    """Record a payment against a party, and against an invoice when one is named."""
    if get_party(db, payment.party_id) is None:
        raise RecordNotFound("Party", payment.party_id)

    if payment.invoice_id is not None:
        db_invoice = invoice_crud.get_invoice(db, payment.invoice_id)
        if db_invoice is None:
            raise RecordNotFound("Invoice", payment.invoice_id)
        if db_invoice.party_id != payment.party_id:
            raise InvoiceValidationError(f"Invoice {payment.invoice_id} does not belong to party {payment.party_id}")

        db_invoice = invoice_crud.add_payment(db, payment.invoice_id, InvoicePaymentCreate(
            amount=payment.amount,
            payment_date=payment.payment_date,
            payment_method=payment.payment_method,
            reference=payment.reference,
        ))
        return db.query(Payment).filter(Payment.invoice_id == db_invoice.id).order_by(Payment.id.desc()).first()

    db_payment = Payment(**payment.model_dump())
    db.add(db_payment)
    db.commit()
    db.refresh(db_payment)
    logger.info("Payment %s of %s recorded for party %s", db_payment.direction.value, db_payment.amount, payment.party_id)
    return db_payment

def get_payments(db: Session, party_id: Optional[int] = None) -> List[Payment]:
    query = db.query(Payment)
    if party_id is not None:
        query = query.filter(Payment.party_id == party_id)
    return query.order_by(Payment.payment_date, Payment.id).all()

def _party_history(db: Session, party_ids: Optional[List[int]] = None):
    invoices = db.query(Invoice).filter(Invoice.is_deleted.is_(False))
    payments = db.query(Payment)
    if party_ids is not None:
        invoices = invoices.filter(Invoice.party_id.in_(party_ids))
        payments = payments.filter(Payment.party_id.in_(party_ids))
    return (
        [InvoiceRecord.model_validate(i) for i in invoices.all()],
        [PaymentRecord.model_validate(p) for p in payments.all()],
    )

def get_party_balance(db: Session, party_id: int) -> PartyBalance:
    db_party = get_party(db, party_id)
    if db_party is None:
        raise RecordNotFound("Party", party_id)

    invoices, payments = _party_history(db, [party_id])
    return parties.party_balance(PartyRecord.model_validate(db_party), invoices, payments)

def get_portfolio(db: Session, party_type: Optional[PartyType] = None) -> Portfolio:
    records = [PartyRecord.model_validate(p) for p in get_parties(db, limit=None, party_type=party_type)]
    invoices, payments = _party_history(db)
    return parties.portfolio(parties.party_balances(records, invoices, payments))
