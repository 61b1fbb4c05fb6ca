from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Enum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum
from database import Base

class PartyType(PyEnum):
    CUSTOMER = "customer"
    SUPPLIER = "supplier"

class PaymentDirection(PyEnum):
    IN = "in"
    OUT = "out"

class Party(Base):
    __tablename__ = "parties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    party_type = Column(Enum(PartyType), nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    # signed: positive means the party owes us
    opening_balance = Column(Numeric(15, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    invoices = relationship("Invoice", back_populates="party")
    payments = relationship("Payment", back_populates="party")

class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)
    direction = Column(Enum(PaymentDirection), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String, nullable=True)
    reference = Column(String, nullable=True)

    party = relationship("Party", back_populates="payments")
    invoice = relationship("Invoice", back_populates="payments")
