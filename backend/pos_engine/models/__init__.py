from .catalog import Product, Customer
from .pos import (
    PriceMemoryEntry,
    PosTransaction,
    PosTransactionLine,
    HeldTransaction,
    TransactionSequence,
    PosAuditEvent,
)

__all__ = [
    'Product', 'Customer',
    'PriceMemoryEntry',
    'PosTransaction', 'PosTransactionLine',
    'HeldTransaction',
    'TransactionSequence',
    'PosAuditEvent',
]
