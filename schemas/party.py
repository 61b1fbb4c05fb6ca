from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from models.party import PartyType, PaymentDirection
from ledger.directions import normalize_direction

class PartyBase(BaseModel):
    name: str
    party_type: PartyType
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    opening_balance: Decimal = Decimal("0")

class PartyCreate(PartyBase):
    pass

class PartyRecord(BaseModel):
    """Party as the ledger core sees it."""
    id: int
    name: str = ""
    party_type: PartyType
    opening_balance: Decimal = Decimal("0")

    class Config:
        from_attributes = True

class Party(PartyRecord):
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PaymentCreate(BaseModel):
    party_id: int
    invoice_id: Optional[int] = None
    direction: PaymentDirection
    amount: Decimal = Field(gt=0)
    payment_date: date
    payment_method: Optional[str] = None
    reference: Optional[str] = None

    @field_validator("direction", mode="before")
    @classmethod
    def normalize(cls, v):
        return normalize_direction(v)

class InvoicePaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_date: date
    payment_method: Optional[str] = None
    reference: Optional[str] = None

class PaymentRecord(BaseModel):
    """Payment as the ledger core sees it."""
    id: int
    party_id: int
    invoice_id: Optional[int] = None
    direction: PaymentDirection
    amount: Decimal
    payment_date: date

    class Config:
        from_attributes = True

    @field_validator("direction", mode="before")
    @classmethod
    def normalize(cls, v):
        return normalize_direction(v)

class Payment(PaymentRecord):
    payment_method: Optional[str] = None
    reference: Optional[str] = None

    class Config:
        from_attributes = True

class PartyBalance(BaseModel):
    party_id: int
    name: str
    party_type: PartyType
    opening_balance: Decimal
    invoice_amount: Decimal
    payments_amount: Decimal
    net_due: Decimal
    label: str

class Portfolio(BaseModel):
    total_receivable: Decimal
    total_payable: Decimal
    net_balance: Decimal
    net_label: str
    parties: List[PartyBalance] = []
