"""Multi-document MongoDB transaction demo over accounts and purchases."""

from order_transactions.config import Settings
from order_transactions.errors import (
    BusinessRuleViolation,
    OrderTransactionsError,
    SessionUnavailable,
    StoreOperationFailed,
    TransactionCommitFailed,
)

__all__ = [
    "BusinessRuleViolation",
    "OrderTransactionsError",
    "SessionUnavailable",
    "Settings",
    "StoreOperationFailed",
    "TransactionCommitFailed",
]
