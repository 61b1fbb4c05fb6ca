from sqlalchemy import Column, Integer, String, Numeric, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database import Base

class Item(Base):
    __tablename__ = 'items'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    unit = Column(String, nullable=False, default="PCS")
    opening_stock = Column(Numeric(12, 3), nullable=False, default=0)
    # cached running quantity, only ever moved by an atomic increment
    current_stock = Column(Numeric(12, 3), nullable=False, default=0)
    purchase_price = Column(Numeric(15, 2), nullable=False, default=0)
    sale_price = Column(Numeric(15, 2), nullable=False, default=0)
    low_stock_alert = Column(Numeric(12, 3), nullable=True)
    category_id = Column(Integer, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    invoice_lines = relationship("InvoiceLine", back_populates="item")
