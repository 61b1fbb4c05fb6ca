"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database; the API client shares
the test's session so rows written through either side are visible to both.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, get_db
from main import app
from crud import inventory as inventory_crud
from crud import party as party_crud
from models.party import PartyType
from schemas.inventory import ItemCreate
from schemas.party import PartyCreate

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_item(db):
    def _make(name="Widget", opening_stock="10", purchase_price="80", sale_price="100", low_stock_alert=None):
        return inventory_crud.create_item(db, ItemCreate(
            name=name,
            opening_stock=Decimal(opening_stock),
            purchase_price=Decimal(purchase_price),
            sale_price=Decimal(sale_price),
            low_stock_alert=low_stock_alert,
        ))
    return _make


@pytest.fixture
def make_party(db):
    def _make(name="Acme Traders", party_type=PartyType.CUSTOMER, opening_balance="0"):
        return party_crud.create_party(db, PartyCreate(
            name=name,
            party_type=party_type,
            opening_balance=Decimal(opening_balance),
        ))
    return _make


@pytest.fixture
def today():
    return date(2024, 6, 15)
