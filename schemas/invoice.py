from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Annotated, List, Literal, Optional, Union
from datetime import date, datetime
from decimal import Decimal
from models.invoice import InvoiceKind, InvoiceDirection, InvoiceStatus

class LineInput(BaseModel):
    item_id: int
    item_name: Optional[str] = None
    unit: Optional[str] = None
    quantity: Decimal
    rate: Decimal
    discount_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    tax_rate_percent: Decimal = Field(default=Decimal("0"), ge=0)

class LineAmounts(BaseModel):
    line_subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    line_total: Decimal

class InvoiceTotals(BaseModel):
    subtotal: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    taxable_base: Decimal = Decimal("0")
    withholding_rate: Decimal = Decimal("0")
    withholding_amount: Decimal = Decimal("0")
    unrounded_total: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")

    @property
    def round_off(self) -> Decimal:
        return self.grand_total - self.unrounded_total

class PaymentState(BaseModel):
    grand_total: Decimal
    paid_amount: Decimal
    balance_due: Decimal
    status: InvoiceStatus

class TaxBreakdownRow(BaseModel):
    rate: Decimal
    taxable_amount: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal = Decimal("0")
    total: Decimal


class _LedgerLineBase(BaseModel):
    invoice_id: int
    item_id: int
    kind: InvoiceKind
    invoice_date: date
    quantity: Decimal
    total: Decimal

    @model_validator(mode="after")
    def kind_matches_direction(self):
        if self.kind.direction.value != self.direction:
            raise ValueError(f"{self.kind.value} is not a {self.direction} kind")
        return self

class SaleLedgerLine(_LedgerLineBase):
    direction: Literal["sale"] = "sale"

class PurchaseLedgerLine(_LedgerLineBase):
    direction: Literal["purchase"] = "purchase"

LedgerLine = Annotated[Union[SaleLedgerLine, PurchaseLedgerLine], Field(discriminator="direction")]


class InvoiceRecord(BaseModel):
    """Invoice header as the ledger core sees it."""
    id: int
    kind: InvoiceKind
    invoice_date: date
    due_date: Optional[date] = None
    party_id: int
    total_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    balance_due: Decimal = Decimal("0")
    is_deleted: bool = False

    class Config:
        from_attributes = True

    @property
    def direction(self) -> InvoiceDirection:
        return self.kind.direction

class InvoiceLine(BaseModel):
    id: int
    invoice_id: int
    item_id: int
    item_name: str
    unit: Optional[str] = None
    quantity: Decimal
    rate: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    tax_rate_percent: Decimal
    tax_amount: Decimal
    total: Decimal

    class Config:
        from_attributes = True

class InvoiceCreate(BaseModel):
    invoice_number: str
    kind: InvoiceKind
    invoice_date: date
    due_date: Optional[date] = None
    party_id: Optional[int] = None
    lines: List[LineInput]
    notes: Optional[str] = None
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def due_after_invoice_date(cls, v, info):
        invoice_date = info.data.get("invoice_date")
        if v is not None and invoice_date is not None and v < invoice_date:
            raise ValueError("due_date cannot be before invoice_date")
        return v

class InvoiceUpdate(BaseModel):
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    party_id: Optional[int] = None
    lines: Optional[List[LineInput]] = None
    notes: Optional[str] = None

class Invoice(InvoiceRecord):
    invoice_number: str
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    withholding_amount: Decimal
    status: InvoiceStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    lines: List[InvoiceLine]

    class Config:
        from_attributes = True

class InvoicePreviewRequest(BaseModel):
    kind: InvoiceKind
    lines: List[LineInput]
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)

class InvoicePreview(BaseModel):
    lines: List[LineAmounts]
    totals: InvoiceTotals
    round_off: Decimal
    payment: PaymentState
    tax_breakdown: List[TaxBreakdownRow]
