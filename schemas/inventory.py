from pydantic import BaseModel, Field, condecimal
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

class ItemBase(BaseModel):
    name: str
    unit: str = "PCS"
    opening_stock: Decimal = Field(default=Decimal("0"), ge=0)
    purchase_price: condecimal(max_digits=15, decimal_places=2) = Decimal("0")
    sale_price: condecimal(max_digits=15, decimal_places=2) = Decimal("0")
    low_stock_alert: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[int] = None

class ItemCreate(ItemBase):
    pass

class ItemUpdate(BaseModel):
    name: Optional[str] = None
    unit: Optional[str] = None
    purchase_price: Optional[condecimal(max_digits=15, decimal_places=2)] = None
    sale_price: Optional[condecimal(max_digits=15, decimal_places=2)] = None
    low_stock_alert: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[int] = None

class ItemRecord(BaseModel):
    """Item as the ledger core sees it."""
    id: int
    name: str = ""
    unit: str = "PCS"
    opening_stock: Decimal = Decimal("0")
    current_stock: Decimal = Decimal("0")
    purchase_price: Decimal = Decimal("0")
    sale_price: Decimal = Decimal("0")
    low_stock_alert: Optional[Decimal] = None
    category_id: Optional[int] = None
    is_deleted: bool = False

    class Config:
        from_attributes = True

class Item(ItemRecord):
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class StockMovement(BaseModel):
    item_id: int
    name: str
    unit: str
    opening_qty: Decimal
    opening_avg_price: Decimal
    opening_amount: Decimal
    purchase_qty: Decimal
    purchase_amount: Decimal
    purchase_avg_price: Decimal
    sale_qty: Decimal
    sale_amount: Decimal
    sale_avg_price: Decimal
    closing_qty: Decimal
    closing_price: Decimal

class StockRegisterTotals(BaseModel):
    opening_qty: Decimal = Decimal("0")
    opening_amount: Decimal = Decimal("0")
    purchase_qty: Decimal = Decimal("0")
    purchase_amount: Decimal = Decimal("0")
    closing_qty: Decimal = Decimal("0")
    sale_qty: Decimal = Decimal("0")
    sale_amount: Decimal = Decimal("0")

class StockRegister(BaseModel):
    period_start: date
    period_end: date
    rows: List[StockMovement]
    totals: StockRegisterTotals
