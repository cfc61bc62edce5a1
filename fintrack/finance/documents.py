"""Mini README: Export and import document helpers.

Structure:
    * build_export_document / dump_document - serialise the full dataset.
    * export_filename - dated download name for exported files.
    * ExportedFile - serialised export ready for delivery.
    * ImportedDocument - validated content of an import file.
    * parse_import_document - decode and sanity check an import file.

The document shape is
``{"transactions": [...], "categories": {"expense": [...], "income": [...]},
"monthlyBudget": number}``. Files produced by older releases were a bare
array of transactions; those are still accepted as transactions-only
imports. Validation is deliberately shallow: only the first transaction is
checked for the required fields, the rest must merely be convertible.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..logging_utils import get_logger
from .models import Transaction, TransactionId

LOGGER = get_logger(__name__)

REQUIRED_FIRST_RECORD_FIELDS = ("description", "amount", "type", "date")


class DocumentParseError(ValueError):
    """Raised when import content is not readable JSON."""


class DocumentFormatError(ValueError):
    """Raised when import content is JSON but not an export document."""


def build_export_document(
    transactions: Sequence[Transaction],
    expense_categories: Sequence[str],
    income_categories: Sequence[str],
    monthly_budget: float,
) -> Dict[str, Any]:
    """Assemble the export document from store state."""

    return {
        "transactions": [transaction.as_dict() for transaction in transactions],
        "categories": {
            "expense": list(expense_categories),
            "income": list(income_categories),
        },
        "monthlyBudget": monthly_budget,
    }


def dump_document(document: Any) -> str:
    """Encode a document as indented UTF-8 friendly JSON text."""

    return json.dumps(document, indent=2, ensure_ascii=False)


def export_filename(prefix: str, today: date) -> str:
    """Return ``<prefix>_DD-MM-YYYY.json`` using the Brazilian date order."""

    return f"{prefix}_{today.strftime('%d-%m-%Y')}.json"


@dataclass(frozen=True)
class ExportedFile:
    """Export content plus the filename suggested for the download."""

    filename: str
    content: str


@dataclass(slots=True)
class ImportedDocument:
    """Validated import content; ``None`` fields were absent or ill-typed."""

    transactions: List[Transaction]
    expense_categories: Optional[List[str]] = None
    income_categories: Optional[List[str]] = None
    monthly_budget: Optional[float] = None


def _string_list(value: Any) -> Optional[List[str]]:
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    return None


def _budget_value(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value < 0:
        LOGGER.warning("Ignoring negative monthlyBudget %s in import", value)
        return None
    return value


def parse_import_document(
    content: str | bytes,
    id_factory_for: Optional[Callable[[Sequence[Any]], Callable[[], TransactionId]]] = None,
) -> ImportedDocument:
    """Decode ``content`` and validate it as an export document.

    Only the first record is checked for the required fields. Later records
    are converted leniently: ``id_factory_for`` receives the raw records and
    returns the id source used for records that arrive without an id.

    Raises ``DocumentParseError`` for undecodable text and
    ``DocumentFormatError`` for structurally invalid documents.
    """

    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig")
        data = json.loads(content)
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise DocumentParseError("Import content is not valid JSON") from error

    if isinstance(data, list):
        LOGGER.info("Import content uses the legacy bare-array layout")
        data = {"transactions": data}
    if not isinstance(data, dict):
        raise DocumentFormatError("Import document must be a JSON object")

    records = data.get("transactions")
    if not isinstance(records, list) or not records:
        raise DocumentFormatError("Import document must contain a non-empty transactions array")
    first = records[0]
    if not isinstance(first, dict) or not all(first.get(key) for key in REQUIRED_FIRST_RECORD_FIELDS):
        raise DocumentFormatError(
            "First transaction must have description, amount, type and date"
        )

    id_factory = id_factory_for(records) if id_factory_for is not None else None
    try:
        transactions = [Transaction.from_dict(record, id_factory) for record in records]
    except ValueError as error:
        raise DocumentFormatError(str(error)) from error

    document = ImportedDocument(transactions=transactions)
    categories = data.get("categories")
    if isinstance(categories, dict):
        document.expense_categories = _string_list(categories.get("expense"))
        document.income_categories = _string_list(categories.get("income"))
    if "monthlyBudget" in data:
        document.monthly_budget = _budget_value(data["monthlyBudget"])
    return document
