from .inventory import Item
from .invoice import Invoice, InvoiceLine, InvoiceKind, InvoiceDirection, InvoiceStatus
from .party import Party, PartyType, Payment, PaymentDirection
