from .inventory import create_item, get_item, get_items, update_item, soft_delete_item, restore_item, get_stock_register
from .invoice import create_invoice, get_invoice, get_invoices, update_invoice, delete_invoice, add_payment, preview_invoice
from .party import create_party, get_party, get_parties, record_payment, get_party_balance, get_portfolio
from .reports import get_dashboard_data, get_quick_stats, get_low_stock, get_overdue, generate_stock_register_excel
