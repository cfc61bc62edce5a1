"""Mini README: Domain records for the personal finance tracker.

Structure:
    * TransactionType / ExpenseType / FilterKind / CategoryKind - enums
      coerced from user supplied strings.
    * Transaction - stored income or expense entry with JSON helpers.
    * TransactionPayload - user input for creating or editing a transaction.
    * FilterSpec, FormDraft, ModalState - transient view state.

Transactions keep the on-disk field names of the browser version of the
tracker (``productName``, ``itemDescription`` and friends) when exported, and
any unknown keys found on older records ride along in ``extra`` so that
edits and round trips never lose data.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

TransactionId = Union[int, str]

DEFAULT_EXPENSE_CATEGORIES: Tuple[str, ...] = (
    "Alimentação",
    "Transporte",
    "Moradia",
    "Lazer",
    "Saúde",
    "Educação",
    "Outros",
)
DEFAULT_INCOME_CATEGORIES: Tuple[str, ...] = (
    "Salário",
    "Investimentos",
    "Freelance",
    "Presente",
    "Outras Receitas",
)
PAYMENT_METHODS: Tuple[str, ...] = (
    "Dinheiro",
    "Cartão de Crédito",
    "Cartão de Débito",
    "Pix",
    "Boleto",
    "Transferência",
)


class _CoercibleEnum(str, Enum):
    """String enum accepting arbitrary casing and surrounding whitespace."""

    @classmethod
    def from_str(cls, value: object):
        if isinstance(value, cls):
            return value
        try:
            normalised = str(value).strip().lower()
            return cls(normalised)
        except ValueError as error:
            raise ValueError(f"Unsupported {cls.__name__} value: {value!r}") from error


class TransactionType(_CoercibleEnum):
    """Enumerate the supported transaction directions."""

    INCOME = "income"
    EXPENSE = "expense"


class ExpenseType(_CoercibleEnum):
    """Fixed versus variable classification of an expense."""

    FIXED = "fixa"
    VARIABLE = "variavel"

    @property
    def label(self) -> str:
        return "Fixa" if self is ExpenseType.FIXED else "Variável"


class FilterKind(_CoercibleEnum):
    """Granularity of the active date filter."""

    NONE = "none"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class CategoryKind(_CoercibleEnum):
    """Which category list an operation targets."""

    EXPENSE = "expense"
    INCOME = "income"

    @property
    def defaults(self) -> Tuple[str, ...]:
        if self is CategoryKind.EXPENSE:
            return DEFAULT_EXPENSE_CATEGORIES
        return DEFAULT_INCOME_CATEGORIES


# Persisted keys Transaction maps onto attributes; anything else lands in ``extra``.
_FIELD_KEYS = frozenset(
    {
        "id",
        "description",
        "productName",
        "amount",
        "type",
        "category",
        "date",
        "itemDescription",
        "expenseType",
        "paymentMethod",
    }
)


@dataclass(slots=True)
class Transaction:
    """Represent one recorded income or expense event.

    ``amount`` is signed: negative for expenses and positive for income.
    ``date`` is kept as the ``YYYY-MM-DD`` text the user entered so that
    month and year filters can use plain prefix matching.
    """

    transaction_id: TransactionId
    description: str
    amount: float
    transaction_type: TransactionType
    category: str
    date: str
    item_description: str = ""
    expense_type: str = ""
    payment_method: str = ""
    product_name: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_expense(self) -> bool:
        return self.transaction_type is TransactionType.EXPENSE

    @property
    def magnitude(self) -> float:
        return abs(self.amount)

    def merged(self, **changes: Any) -> "Transaction":
        """Return a copy with ``changes`` applied and every other field kept."""

        known = {item.name for item in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unsupported transaction fields: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        """Export the transaction using the persisted camelCase layout."""

        exported: Dict[str, Any] = dict(self.extra)
        exported.update(
            {
                "id": self.transaction_id,
                "description": self.description,
                "productName": self.product_name,
                "amount": self.amount,
                "type": self.transaction_type.value,
                "category": self.category,
                "date": self.date,
                "itemDescription": self.item_description,
                "expenseType": self.expense_type,
                "paymentMethod": self.payment_method,
            }
        )
        return exported

    @classmethod
    def from_dict(
        cls,
        record: Mapping[str, Any],
        id_factory: Optional[Callable[[], TransactionId]] = None,
    ) -> "Transaction":
        """Build a transaction from a persisted or imported record.

        Records written before fixed/variable tracking existed lack
        ``expenseType``, ``paymentMethod`` and ``itemDescription``; those
        default to empty strings. A missing ``id`` is drawn from
        ``id_factory`` and a missing or unknown ``type`` follows the sign of
        ``amount``. Raises ``ValueError`` when the record is not a mapping,
        has no numeric amount, or lacks an id with no factory to supply one.
        """

        if not isinstance(record, Mapping):
            raise ValueError("Transaction records must be JSON objects")
        try:
            amount = float(record["amount"])
        except KeyError as error:
            raise ValueError("Transaction record is missing 'amount'") from error
        except (TypeError, ValueError) as error:
            raise ValueError(f"Transaction amount is not numeric: {record.get('amount')!r}") from error

        transaction_id = record.get("id")
        if transaction_id is None:
            if id_factory is None:
                raise ValueError("Transaction record is missing 'id'")
            transaction_id = id_factory()

        try:
            transaction_type = TransactionType.from_str(record.get("type"))
        except ValueError:
            transaction_type = TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME

        description = str(record.get("description") or "")
        return cls(
            transaction_id=transaction_id,
            description=description,
            amount=amount,
            transaction_type=transaction_type,
            category=str(record.get("category") or ""),
            date=str(record.get("date") or ""),
            item_description=str(record.get("itemDescription") or ""),
            expense_type=str(record.get("expenseType") or ""),
            payment_method=str(record.get("paymentMethod") or ""),
            product_name=str(record.get("productName") or description.strip()),
            extra={key: value for key, value in record.items() if key not in _FIELD_KEYS},
        )


# Accepted spellings for payload keys, including the short names used by
# the browser form handlers.
_PAYLOAD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "description": ("description", "desc"),
    "amount": ("amount", "val"),
    "transaction_type": ("transaction_type", "type", "transType"),
    "category": ("category", "cat"),
    "date": ("date", "dateStr"),
    "item_description": ("item_description", "itemDescription", "itemDesc"),
    "expense_type": ("expense_type", "expenseType", "expType"),
    "payment_method": ("payment_method", "paymentMethod", "payMethod"),
}


@dataclass(slots=True)
class TransactionPayload:
    """Raw form input for ``TransactionStore.add_or_update_transaction``."""

    description: str = ""
    amount: Any = 0
    transaction_type: str = TransactionType.INCOME.value
    category: str = ""
    date: str = ""
    item_description: str = ""
    expense_type: str = ""
    payment_method: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TransactionPayload":
        """Build a payload from a mapping using any of the accepted key spellings."""

        values: Dict[str, Any] = {}
        for attribute, aliases in _PAYLOAD_ALIASES.items():
            for alias in aliases:
                if alias in data and data[alias] is not None:
                    values[attribute] = data[alias]
                    break
        return cls(**values)


@dataclass(slots=True)
class FilterSpec:
    """Active view restriction applied before every aggregate."""

    kind: FilterKind = FilterKind.NONE
    value: str = ""

    @property
    def is_active(self) -> bool:
        return self.kind is not FilterKind.NONE and bool(self.value)

    def matches(self, transaction: Transaction) -> bool:
        """Return whether ``transaction`` is visible under this filter."""

        if not self.is_active:
            return True
        if not transaction.date:
            return False
        if self.kind is FilterKind.DAY:
            return transaction.date == self.value
        return transaction.date.startswith(self.value)


@dataclass(slots=True)
class FormDraft:
    """Transient form fields plus edit-mode tracking."""

    description: str = ""
    amount: float = 0
    transaction_type: str = TransactionType.INCOME.value
    category: str = ""
    date: str = ""
    item_description: str = ""
    expense_type: str = ""
    payment_method: str = ""
    is_editing: bool = False
    editing_id: Optional[TransactionId] = None

    @classmethod
    def for_transaction(cls, transaction: Transaction) -> "FormDraft":
        """Populate a draft from an existing transaction for editing."""

        return cls(
            description=transaction.description,
            amount=abs(transaction.amount),
            transaction_type=transaction.transaction_type.value,
            category=transaction.category,
            date=transaction.date,
            item_description=transaction.item_description or "",
            expense_type=transaction.expense_type or "",
            payment_method=transaction.payment_method or "",
            is_editing=True,
            editing_id=transaction.transaction_id,
        )

    def as_payload(self) -> TransactionPayload:
        """Return the draft fields as a payload ready for submission."""

        return TransactionPayload(
            description=self.description,
            amount=self.amount,
            transaction_type=self.transaction_type,
            category=self.category,
            date=self.date,
            item_description=self.item_description,
            expense_type=self.expense_type,
            payment_method=self.payment_method,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "amount": self.amount,
            "type": self.transaction_type,
            "category": self.category,
            "date": self.date,
            "itemDescription": self.item_description,
            "expenseType": self.expense_type,
            "paymentMethod": self.payment_method,
            "isEditing": self.is_editing,
            "editingTransactionId": self.editing_id,
        }


@dataclass(slots=True)
class ModalState:
    """Read-only detail view selection."""

    selected: Optional[Transaction] = None
    visible: bool = False
