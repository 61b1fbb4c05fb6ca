"""
Derived-ledger computation core.

Pure functions that turn invoice lines, payments and item/party opening
values into invoice totals, stock movements, party balances and period
metrics. Nothing in here touches the database; callers in ``crud`` fetch
the records and hand them over as schema objects.
"""
