"""
POS API: moves dining-table state (orders, kitchen tickets, delivery
ledger) between tables.
"""
