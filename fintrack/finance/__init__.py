"""Mini README: Personal finance state and business rules.

This package holds the transaction store consumed by the interfaces,
together with its domain records, chart aggregations, import/export
document helpers and the structured results every operation returns.
"""

from .charts import ChartData
from .documents import ExportedFile
from .models import (
    PAYMENT_METHODS,
    CategoryKind,
    ExpenseType,
    FilterKind,
    FilterSpec,
    FormDraft,
    ModalState,
    Transaction,
    TransactionPayload,
    TransactionType,
)
from .results import ErrorKind, OperationResult
from .store import TransactionStore

__all__ = [
    "PAYMENT_METHODS",
    "CategoryKind",
    "ChartData",
    "ErrorKind",
    "ExpenseType",
    "ExportedFile",
    "FilterKind",
    "FilterSpec",
    "FormDraft",
    "ModalState",
    "OperationResult",
    "Transaction",
    "TransactionPayload",
    "TransactionStore",
    "TransactionType",
]
