from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Boolean, Enum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum
from database import Base

class InvoiceDirection(PyEnum):
    SALE = "sale"
    PURCHASE = "purchase"

class InvoiceKind(PyEnum):
    SALE = "sale"
    SALE_INVOICE = "sale_invoice"
    SALE_RETURN = "sale_return"
    SALE_ORDER = "sale_order"
    ESTIMATION = "estimation"
    PROFORMA = "proforma"
    DELIVERY_CHALLAN = "delivery_challan"
    PURCHASE = "purchase"
    PURCHASE_BILL = "purchase_bill"
    PURCHASE_INVOICE = "purchase_invoice"
    PURCHASE_RETURN = "purchase_return"
    PURCHASE_ORDER = "purchase_order"

    @property
    def direction(self) -> InvoiceDirection:
        if self in SALE_KINDS:
            return InvoiceDirection.SALE
        return InvoiceDirection.PURCHASE

    @property
    def stock_effect(self) -> int:
        """Sign applied to line quantities when the invoice moves stock."""
        if self in (InvoiceKind.SALE, InvoiceKind.SALE_INVOICE):
            return -1
        if self in (InvoiceKind.PURCHASE, InvoiceKind.PURCHASE_BILL, InvoiceKind.PURCHASE_INVOICE):
            return 1
        return 0

    @property
    def is_revenue(self) -> bool:
        """Whether the kind counts towards sales/purchase totals and dues."""
        return self in REVENUE_KINDS


SALE_KINDS = frozenset({
    InvoiceKind.SALE,
    InvoiceKind.SALE_INVOICE,
    InvoiceKind.SALE_RETURN,
    InvoiceKind.SALE_ORDER,
    InvoiceKind.ESTIMATION,
    InvoiceKind.PROFORMA,
    InvoiceKind.DELIVERY_CHALLAN,
})

REVENUE_KINDS = frozenset({
    InvoiceKind.SALE,
    InvoiceKind.SALE_INVOICE,
    InvoiceKind.PURCHASE,
    InvoiceKind.PURCHASE_BILL,
    InvoiceKind.PURCHASE_INVOICE,
})

class InvoiceStatus(PyEnum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"

class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, nullable=False, index=True)
    kind = Column(Enum(InvoiceKind), nullable=False)
    invoice_date = Column(Date, nullable=False, index=True)
    due_date = Column(Date, nullable=True)
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=False)
    subtotal = Column(Numeric(15, 4), nullable=False, default=0)
    discount_amount = Column(Numeric(15, 4), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 4), nullable=False, default=0)
    withholding_amount = Column(Numeric(15, 4), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(15, 2), nullable=False, default=0)
    balance_due = Column(Numeric(15, 2), nullable=False, default=0)
    status = Column(Enum(InvoiceStatus), nullable=False, default=InvoiceStatus.UNPAID)
    notes = Column(String, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    party = relationship("Party", back_populates="invoices")
    lines = relationship("InvoiceLine", back_populates="invoice", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="invoice")

class InvoiceLine(Base):
    __tablename__ = "invoice_lines"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    item_name = Column(String, nullable=False)
    unit = Column(String, nullable=True)
    quantity = Column(Numeric(12, 3), nullable=False)
    rate = Column(Numeric(15, 4), nullable=False)
    discount_percent = Column(Numeric(7, 4), nullable=False, default=0)
    discount_amount = Column(Numeric(15, 4), nullable=False, default=0)
    tax_rate_percent = Column(Numeric(7, 4), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 4), nullable=False, default=0)
    total = Column(Numeric(15, 4), nullable=False)

    invoice = relationship("Invoice", back_populates="lines")
    item = relationship("Item", back_populates="invoice_lines")
