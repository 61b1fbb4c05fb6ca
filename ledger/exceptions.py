from decimal import Decimal


class LedgerError(Exception):
    pass


class RecordNotFound(LedgerError):
    def __init__(self, entity: str, record_id):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} with ID {record_id} not found")


class InvoiceValidationError(LedgerError):
    pass


class InsufficientStockError(InvoiceValidationError):
    def __init__(self, item_name: str, available: Decimal, requested: Decimal):
        self.item_name = item_name
        self.available = available
        self.requested = requested
        super().__init__(
            f'Insufficient stock for "{item_name}". Available: {available}, Requested: {requested}'
        )
