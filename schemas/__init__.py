from .inventory import Item, ItemCreate, ItemUpdate, ItemRecord, StockMovement, StockRegister, StockRegisterTotals
from .invoice import (
    Invoice, InvoiceCreate, InvoiceUpdate, InvoiceRecord,
    InvoiceLine, LineInput, LineAmounts, InvoiceTotals, PaymentState, TaxBreakdownRow,
    LedgerLine, SaleLedgerLine, PurchaseLedgerLine,
    InvoicePreview, InvoicePreviewRequest
)
from .party import (
    Party, PartyCreate, PartyRecord,
    Payment, PaymentCreate, PaymentRecord, InvoicePaymentCreate,
    PartyBalance, Portfolio
)
from .reports import MonthlyTotals, MonthOverMonth, LowStockItem, OverdueInvoice, QuickStats, Dashboard
