from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from schemas.invoice import (
    Invoice, InvoiceCreate, InvoiceUpdate,
    InvoicePreview, InvoicePreviewRequest
)
from schemas.party import InvoicePaymentCreate
from models.invoice import InvoiceKind, InvoiceStatus
from crud import invoice

router = APIRouter()

@router.post("/invoices", response_model=Invoice)
def create_invoice(payload: InvoiceCreate, db: Session = Depends(get_db)):
    return invoice.create_invoice(db, payload)

@router.post("/preview", response_model=InvoicePreview)
def preview_invoice(payload: InvoicePreviewRequest):
    return invoice.preview_invoice(payload)

@router.get("/invoices", response_model=List[Invoice])
def list_invoices(
    skip: int = 0,
    limit: int = 100,
    kind: Optional[InvoiceKind] = None,
    status: Optional[InvoiceStatus] = None,
    party_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db)
):
    return invoice.get_invoices(db, skip, limit, kind, status, party_id, start_date, end_date)

@router.get("/invoices/{invoice_id}", response_model=Invoice)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    db_invoice = invoice.get_invoice(db, invoice_id)
    if not db_invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return db_invoice

@router.put("/invoices/{invoice_id}", response_model=Invoice)
def update_invoice(invoice_id: int, invoice_update: InvoiceUpdate, db: Session = Depends(get_db)):
    return invoice.update_invoice(db, invoice_id, invoice_update)

@router.delete("/invoices/{invoice_id}")
def delete_invoice(invoice_id: int, db: Session = Depends(get_db)):
    success = invoice.delete_invoice(db, invoice_id)
    if not success:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return {"status": "success"}

@router.post("/invoices/{invoice_id}/payments", response_model=Invoice)
def add_payment(invoice_id: int, payment: InvoicePaymentCreate, db: Session = Depends(get_db)):
    return invoice.add_payment(db, invoice_id, payment)
