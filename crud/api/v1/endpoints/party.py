from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.party import Party, PartyBalance, PartyCreate, Payment, PaymentCreate, Portfolio
from models.party import PartyType
from crud import party

router = APIRouter()

@router.post("/", response_model=Party)
def create_party(payload: PartyCreate, db: Session = Depends(get_db)):
    return party.create_party(db, payload)

@router.get("/", response_model=List[Party])
def list_parties(
    skip: int = 0,
    limit: int = 100,
    party_type: Optional[PartyType] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return party.get_parties(db, skip, limit, party_type, search)

@router.get("/balances", response_model=Portfolio)
def get_balances(party_type: Optional[PartyType] = None, db: Session = Depends(get_db)):
    """
    Net due per party plus receivable, payable and net totals
    """
    return party.get_portfolio(db, party_type)

@router.post("/payments", response_model=Payment)
def record_payment(payment: PaymentCreate, db: Session = Depends(get_db)):
    return party.record_payment(db, payment)

@router.get("/{party_id}", response_model=Party)
def get_party(party_id: int, db: Session = Depends(get_db)):
    db_party = party.get_party(db, party_id)
    if db_party is None:
        raise HTTPException(status_code=404, detail="Party not found")
    return db_party

@router.get("/{party_id}/payments", response_model=List[Payment])
def list_payments(party_id: int, db: Session = Depends(get_db)):
    return party.get_payments(db, party_id)

@router.get("/{party_id}/balance", response_model=PartyBalance)
def get_party_balance(party_id: int, db: Session = Depends(get_db)):
    return party.get_party_balance(db, party_id)
