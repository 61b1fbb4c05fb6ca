from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from schemas.inventory import Item, ItemCreate, ItemUpdate, StockRegister
from crud import inventory, reports

router = APIRouter()

@router.post("/items", response_model=Item)
def create_item(item: ItemCreate, db: Session = Depends(get_db)):
    return inventory.create_item(db, item)

@router.get("/items", response_model=List[Item])
def list_items(skip: int = 0, limit: int = 100, search: Optional[str] = None, db: Session = Depends(get_db)):
    return inventory.get_items(db, skip, limit, search)

@router.get("/stock-register", response_model=StockRegister)
def get_stock_register(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    status: str = Query("all", pattern="^(all|in-stock|out-of-stock|low-stock)$"),
    db: Session = Depends(get_db)
):
    """
    Opening, purchase, sale and closing figures per item for one calendar month
    """
    today = date.today()
    return inventory.get_stock_register(db, year or today.year, month or today.month, status)

@router.get("/stock-register/export")
def export_stock_register(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    status: str = Query("all", pattern="^(all|in-stock|out-of-stock|low-stock)$"),
    db: Session = Depends(get_db)
):
    today = date.today()
    year, month = year or today.year, month or today.month
    register = inventory.get_stock_register(db, year, month, status)
    content = reports.generate_stock_register_excel(register)
    filename = f"stock_register_{register.period_start.strftime('%B')}_{year}.xlsx"
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )

@router.get("/items/{item_id}", response_model=Item)
def get_item(item_id: int, db: Session = Depends(get_db)):
    db_item = inventory.get_item(db, item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return db_item

@router.put("/items/{item_id}", response_model=Item)
def update_item(item_id: int, item_update: ItemUpdate, db: Session = Depends(get_db)):
    db_item = inventory.update_item(db, item_id, item_update)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return db_item

@router.delete("/items/{item_id}")
def delete_item(item_id: int, db: Session = Depends(get_db)):
    success = inventory.soft_delete_item(db, item_id)
    if not success:
        raise HTTPException(status_code=404, detail="Item not found")
    return {"status": "success"}

@router.post("/items/{item_id}/restore", response_model=Item)
def restore_item(item_id: int, db: Session = Depends(get_db)):
    return inventory.restore_item(db, item_id)
