"""Stock ledger reconciliation over purchase and sale history."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import TypeAdapter, ValidationError

from ledger.periods import month_period, shift_month
from ledger.stock import (
    available_quantity,
    filter_register,
    reconcile_item,
    register_totals,
    stock_delta,
    stock_register,
    stock_value,
)
from models.invoice import InvoiceKind
from schemas.inventory import ItemRecord
from schemas.invoice import LedgerLine, LineInput, PurchaseLedgerLine, SaleLedgerLine

JUNE = month_period(2024, 6)


def _purchase(day, quantity, total, item_id=1):
    return PurchaseLedgerLine(invoice_id=1, item_id=item_id, kind=InvoiceKind.PURCHASE,
                              invoice_date=day, quantity=Decimal(quantity), total=Decimal(total))


def _sale(day, quantity, total, item_id=1):
    return SaleLedgerLine(invoice_id=2, item_id=item_id, kind=InvoiceKind.SALE,
                          invoice_date=day, quantity=Decimal(quantity), total=Decimal(total))


@pytest.fixture
def item():
    return ItemRecord(id=1, name="Widget", opening_stock=Decimal("50"), purchase_price=Decimal("80"))


class TestReconcileItem:

    def test_opening_and_closing(self, item):
        purchases = [_purchase(date(2024, 5, 10), "20", "1600"), _purchase(date(2024, 6, 3), "30", "3000")]
        sales = [_sale(date(2024, 5, 20), "10", "1200"), _sale(date(2024, 6, 12), "40", "4800")]

        row = reconcile_item(item, purchases, sales, JUNE)

        assert row.opening_qty == Decimal("60")
        assert row.opening_avg_price == Decimal("80")
        assert row.opening_amount == Decimal("4800")
        assert row.purchase_qty == Decimal("30")
        assert row.purchase_avg_price == Decimal("100")
        assert row.sale_qty == Decimal("40")
        assert row.sale_avg_price == Decimal("120")
        assert row.closing_qty == Decimal("50")
        assert row.closing_price == Decimal("100")

    def test_no_purchases_in_period(self, item):
        row = reconcile_item(item, [], [_sale(date(2024, 6, 1), "5", "600")], JUNE)
        assert row.purchase_qty == 0
        assert row.purchase_avg_price == 0
        assert row.closing_qty == Decimal("45")
        assert row.closing_price == Decimal("80")

    def test_oversold_item_keeps_negative_closing(self, item):
        row = reconcile_item(item, [], [_sale(date(2024, 6, 2), "58", "5800")], JUNE)
        assert row.closing_qty == Decimal("-8")
        assert row.closing_price == 0

    def test_nothing_on_hand_has_no_opening_price(self):
        empty = ItemRecord(id=1, name="Empty", purchase_price=Decimal("80"))
        row = reconcile_item(empty, [], [], JUNE)
        assert row.opening_qty == 0
        assert row.opening_avg_price == 0
        assert row.closing_price == 0

    def test_period_end_is_exclusive(self, item):
        row = reconcile_item(item, [_purchase(date(2024, 7, 1), "10", "1000")], [], JUNE)
        assert row.purchase_qty == 0
        assert row.closing_qty == Decimal("50")

    def test_same_input_same_output(self, item):
        purchases = [_purchase(date(2024, 6, 3), "30", "3000")]
        sales = [_sale(date(2024, 6, 12), "40", "4800")]
        assert reconcile_item(item, purchases, sales, JUNE) == reconcile_item(item, purchases, sales, JUNE)

    def test_closing_identity(self, item):
        purchases = [_purchase(date(2024, 4, 1), "3.5", "350"), _purchase(date(2024, 6, 9), "7.25", "700")]
        sales = [_sale(date(2024, 5, 1), "80", "8000"), _sale(date(2024, 6, 30), "1.125", "150")]
        row = reconcile_item(item, purchases, sales, JUNE)
        assert row.closing_qty == row.opening_qty + row.purchase_qty - row.sale_qty


class TestStockRegister:

    def test_rows_per_active_item(self, item):
        deleted = ItemRecord(id=2, name="Gone", is_deleted=True)
        other = ItemRecord(id=3, name="Gadget", opening_stock=Decimal("5"), purchase_price=Decimal("10"))
        lines = [_purchase(date(2024, 6, 3), "30", "3000"), _sale(date(2024, 6, 4), "2", "30", item_id=3)]

        register = stock_register([item, deleted, other], lines, JUNE)

        assert [row.item_id for row in register.rows] == [1, 3]
        assert register.period_start == date(2024, 6, 1)
        assert register.period_end == date(2024, 7, 1)
        assert register.totals.purchase_qty == Decimal("30")
        assert register.totals.sale_qty == Decimal("2")
        assert register.totals.closing_qty == Decimal("83")

    def test_empty_register_totals(self):
        totals = register_totals([])
        assert totals.closing_qty == 0
        assert totals.sale_amount == 0

    def test_filters(self):
        items = [
            ItemRecord(id=1, name="Out", opening_stock=Decimal("0")),
            ItemRecord(id=2, name="Low", opening_stock=Decimal("5")),
            ItemRecord(id=3, name="Plenty", opening_stock=Decimal("50")),
        ]
        rows = stock_register(items, [], JUNE).rows

        assert len(filter_register(rows, "all")) == 3
        assert [r.name for r in filter_register(rows, "in-stock")] == ["Low", "Plenty"]
        assert [r.name for r in filter_register(rows, "out-of-stock")] == ["Out"]
        assert [r.name for r in filter_register(rows, "low-stock")] == ["Low"]
        assert [r.name for r in filter_register(rows, "low-stock", threshold=60)] == ["Low", "Plenty"]

    def test_unknown_filter(self):
        with pytest.raises(ValueError):
            filter_register([], "sideways")


class TestAvailableQuantity:

    def test_all_time_quantity(self, item):
        lines = [
            _purchase(date(2024, 5, 10), "20", "1600"),
            _sale(date(2024, 8, 1), "15", "1800"),
            _sale(date(2024, 8, 1), "99", "1", item_id=7),
        ]
        assert available_quantity(item, lines) == Decimal("55")

    def test_stock_value(self, item):
        lines = [_sale(date(2024, 6, 1), "10", "1200")]
        assert stock_value([item], lines) == Decimal("3200")


class TestStockDelta:

    def test_sale_removes_stock(self):
        lines = [LineInput(item_id=1, quantity=Decimal("2"), rate=Decimal("5")),
                 LineInput(item_id=1, quantity=Decimal("1"), rate=Decimal("5"))]
        assert stock_delta(InvoiceKind.SALE, lines) == {1: Decimal("-3")}

    def test_purchase_adds_stock(self):
        lines = [LineInput(item_id=4, quantity=Decimal("2.5"), rate=Decimal("5"))]
        assert stock_delta(InvoiceKind.PURCHASE_BILL, lines) == {4: Decimal("2.5")}

    @pytest.mark.parametrize("kind", [InvoiceKind.ESTIMATION, InvoiceKind.SALE_ORDER, InvoiceKind.DELIVERY_CHALLAN])
    def test_non_stock_kinds(self, kind):
        lines = [LineInput(item_id=1, quantity=Decimal("2"), rate=Decimal("5"))]
        assert stock_delta(kind, lines) == {}


class TestLedgerLineVariant:

    def test_direction_selects_variant(self):
        line = TypeAdapter(LedgerLine).validate_python({
            "direction": "sale", "invoice_id": 1, "item_id": 1, "kind": "sale_invoice",
            "invoice_date": "2024-06-01", "quantity": "2", "total": "20",
        })
        assert isinstance(line, SaleLedgerLine)

    def test_kind_must_match_direction(self):
        with pytest.raises(ValidationError):
            SaleLedgerLine(invoice_id=1, item_id=1, kind=InvoiceKind.PURCHASE,
                           invoice_date=date(2024, 6, 1), quantity=Decimal("1"), total=Decimal("1"))


class TestPeriods:

    def test_december_rolls_over(self):
        period = month_period(2023, 12)
        assert period.end == date(2024, 1, 1)
        assert period.contains(date(2023, 12, 31))
        assert not period.contains(date(2024, 1, 1))

    def test_shift_back_across_year(self):
        assert shift_month(date(2024, 2, 1), -3) == date(2023, 11, 1)
