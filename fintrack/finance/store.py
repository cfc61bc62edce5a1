"""Mini README: Transaction store holding all tracker state and business rules.

Structure:
    * TransactionStore - owns transactions, categories, budget, filter,
      form draft and modal state; validates input, mutates, persists and
      derives the figures shown on the dashboard.

Every mutating operation follows the same contract: validate, mutate,
persist the touched slots, then return an ``OperationResult``. Nothing is
raised for user mistakes. Persistence is eager and synchronous; when a
slot cannot be written the in-memory change is kept and the result is a
``persistence`` failure so the caller can warn the user.

Edit mode is a two-state machine. ``start_edit_transaction`` moves from
idle to editing a given id; a successful ``add_or_update_transaction`` or
deleting the edited id moves back to idle. Submitting while idle always
creates a new transaction.
"""

from __future__ import annotations

import json
import math
import time
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Union

from ..configuration import FinTrackSettings
from ..logging_utils import get_logger
from ..storage import KeyValueStorage, StorageError, create_storage
from . import charts
from .charts import ChartData
from .documents import (
    DocumentFormatError,
    DocumentParseError,
    ExportedFile,
    build_export_document,
    dump_document,
    export_filename,
    parse_import_document,
)
from .models import (
    PAYMENT_METHODS,
    CategoryKind,
    ExpenseType,
    FilterKind,
    FilterSpec,
    FormDraft,
    ModalState,
    Transaction,
    TransactionId,
    TransactionPayload,
    TransactionType,
)
from .results import ErrorKind, OperationResult

LOGGER = get_logger(__name__)

DEFAULT_KEY_PREFIX = "my-finance-app"
DEFAULT_EXPORT_PREFIX = "meu_sistema_financeiro"

MSG_EMPTY_DESCRIPTION = "O Nome do Item/Produto não pode estar vazio."
MSG_INVALID_AMOUNT = "O valor da transação deve ser maior que zero."
MSG_MISSING_CATEGORY = "Por favor, selecione uma categoria para a transação."
MSG_MISSING_DATE = "Por favor, selecione a data da transação."
MSG_EMPTY_ITEM_DESCRIPTION = "A Descrição detalhada da transação não pode estar vazia."
MSG_INVALID_TYPE = "Tipo de transação inválido. Escolha receita ou despesa."
MSG_MISSING_EXPENSE_TYPE = "Por favor, selecione se a despesa é fixa ou variável."
MSG_MISSING_PAYMENT_METHOD = "Por favor, selecione a forma de pagamento."
MSG_NO_FILE = "Nenhum arquivo selecionado para importação."
MSG_IMPORT_FORMAT = (
    "Formato de arquivo JSON inválido ou dados inesperados. "
    "Certifique-se de que é um arquivo de exportação válido."
)
MSG_IMPORT_PARSE = "Erro ao ler ou parsear o arquivo. Certifique-se de que é um arquivo JSON válido."
MSG_IMPORTED = "Dados importados com sucesso! O histórico foi atualizado."
MSG_EXPORTED = "Dados exportados com sucesso! Verifique sua pasta de downloads."
MSG_PERSISTENCE = "Não foi possível salvar os dados neste dispositivo. As alterações podem ser perdidas."


def _same_id(left: Optional[TransactionId], right: Optional[TransactionId]) -> bool:
    """Compare ids leniently so ``"17"`` from a URL matches the stored ``17``."""

    if left is None or right is None:
        return False
    return left == right or str(left) == str(right)


def _validation(reason: str, message: str) -> OperationResult:
    LOGGER.warning("Validation failed (%s): %s", reason, message)
    return OperationResult.failure(ErrorKind.VALIDATION, reason, message)


class TransactionStore:
    """Single owner of the tracker's state.

    ``today`` supplies the calendar date used for current-month figures and
    export filenames; ``now_ms`` supplies the millisecond clock used to
    generate transaction ids. Both exist so tests can pin time.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        export_prefix: str = DEFAULT_EXPORT_PREFIX,
        today: Callable[[], date] = date.today,
        now_ms: Optional[Callable[[], int]] = None,
    ) -> None:
        self.storage = storage
        self.transactions_key = f"{key_prefix}-transactions"
        self.categories_key = f"{key_prefix}-categories"
        self.budget_key = f"{key_prefix}-budget"
        self.export_prefix = export_prefix
        self._today = today
        self._now_ms = now_ms or (lambda: int(time.time() * 1000))
        self._last_id = 0

        self.filter = FilterSpec()
        self.draft = FormDraft()
        self.modal = ModalState()
        self.chart_render_key = 0

        self.transactions: List[Transaction] = self._load_transactions()
        self.expense_categories, self.income_categories = self._load_categories()
        self.monthly_budget: float = self._load_budget()
        LOGGER.debug(
            "Store initialised with %s transactions, %s/%s categories, budget %s",
            len(self.transactions),
            len(self.expense_categories),
            len(self.income_categories),
            self.monthly_budget,
        )

    @classmethod
    def from_settings(cls, settings: FinTrackSettings, **kwargs: Any) -> "TransactionStore":
        """Build a store on the backend and slot names configured in ``settings``."""

        return cls(
            create_storage(settings),
            key_prefix=settings.storage_prefix,
            export_prefix=settings.export_prefix,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    def _read_slot(self, key: str) -> Any:
        """Return the decoded slot or ``None`` when absent or unparseable."""

        raw = self.storage.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as error:
            LOGGER.error("Slot %s holds invalid JSON and is ignored: %s", key, error)
            return None

    def _load_transactions(self) -> List[Transaction]:
        records = self._read_slot(self.transactions_key)
        if not isinstance(records, list):
            return []
        id_factory = self._id_factory(records)
        loaded: List[Transaction] = []
        for position, record in enumerate(records):
            try:
                loaded.append(Transaction.from_dict(record, id_factory))
            except ValueError as error:
                LOGGER.error("Skipping stored transaction #%s: %s", position, error)
        return loaded

    def _load_categories(self) -> tuple[List[str], List[str]]:
        stored = self._read_slot(self.categories_key)
        if not isinstance(stored, dict):
            stored = {}
        return (
            self._with_defaults(CategoryKind.EXPENSE, stored.get("expense")),
            self._with_defaults(CategoryKind.INCOME, stored.get("income")),
        )

    def _load_budget(self) -> float:
        stored = self._read_slot(self.budget_key)
        if isinstance(stored, bool) or not isinstance(stored, (int, float)) or stored < 0:
            return 0
        return stored

    @staticmethod
    def _with_defaults(kind: CategoryKind, names: Any) -> List[str]:
        """Return ``names`` with any missing default category restored up front."""

        if not isinstance(names, list):
            return list(kind.defaults)
        custom = [name for name in names if isinstance(name, str)]
        missing = [name for name in kind.defaults if name not in custom]
        return missing + custom

    def _write_slot(self, key: str, value: Any) -> Optional[OperationResult]:
        try:
            self.storage.set_item(key, json.dumps(value, ensure_ascii=False))
        except StorageError as error:
            LOGGER.error("Persisting slot %s failed: %s", key, error)
            return OperationResult.failure(ErrorKind.PERSISTENCE, "persistence_failed", MSG_PERSISTENCE)
        return None

    def _persist_transactions(self) -> Optional[OperationResult]:
        return self._write_slot(
            self.transactions_key, [transaction.as_dict() for transaction in self.transactions]
        )

    def _persist_categories(self) -> Optional[OperationResult]:
        return self._write_slot(
            self.categories_key,
            {"expense": self.expense_categories, "income": self.income_categories},
        )

    def _persist_budget(self) -> Optional[OperationResult]:
        return self._write_slot(self.budget_key, self.monthly_budget)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def is_editing(self) -> bool:
        return self.draft.is_editing

    @property
    def editing_transaction_id(self) -> Optional[TransactionId]:
        return self.draft.editing_id

    @property
    def payment_methods(self) -> Sequence[str]:
        return PAYMENT_METHODS

    def categories_for(self, kind: Union[str, CategoryKind]) -> List[str]:
        """Return the live category list for ``kind``."""

        if CategoryKind.from_str(kind) is CategoryKind.EXPENSE:
            return self.expense_categories
        return self.income_categories

    def get_transaction(self, transaction_id: TransactionId) -> Optional[Transaction]:
        for transaction in self.transactions:
            if _same_id(transaction.transaction_id, transaction_id):
                return transaction
        return None

    def _next_id(self, used: Optional[Set[str]] = None) -> int:
        """Millisecond timestamp id, bumped past any id already in use.

        ``used`` holds ids as text; it defaults to the ids of the current list.
        """

        if used is None:
            used = {str(transaction.transaction_id) for transaction in self.transactions}
        candidate = max(int(self._now_ms()), self._last_id + 1)
        while str(candidate) in used:
            candidate += 1
        self._last_id = candidate
        return candidate

    def _id_factory(self, records: Sequence[Any]) -> Callable[[], int]:
        """Id source for id-less ``records`` that avoids every id they already carry."""

        used = {
            str(record["id"])
            for record in records
            if isinstance(record, Mapping) and record.get("id") is not None
        }

        def issue() -> int:
            transaction_id = self._next_id(used)
            used.add(str(transaction_id))
            return transaction_id

        return issue

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _validate_payload(self, payload: TransactionPayload) -> Union[OperationResult, Dict[str, Any]]:
        """Check payload fields in display order; return a failure or clean values."""

        description = str(payload.description or "").strip()
        if not description:
            return _validation("empty_description", MSG_EMPTY_DESCRIPTION)

        try:
            amount = float(payload.amount)
        except (TypeError, ValueError):
            return _validation("invalid_amount", MSG_INVALID_AMOUNT)
        if not math.isfinite(amount) or amount <= 0:
            return _validation("invalid_amount", MSG_INVALID_AMOUNT)

        category = str(payload.category or "").strip()
        if not category:
            return _validation("missing_category", MSG_MISSING_CATEGORY)

        transaction_date = str(payload.date or "").strip()
        if not transaction_date:
            return _validation("missing_date", MSG_MISSING_DATE)

        item_description = str(payload.item_description or "").strip()
        if not item_description:
            return _validation("empty_item_description", MSG_EMPTY_ITEM_DESCRIPTION)

        try:
            transaction_type = TransactionType.from_str(payload.transaction_type)
        except ValueError:
            return _validation("invalid_type", MSG_INVALID_TYPE)

        expense_type = ""
        payment_method = ""
        if transaction_type is TransactionType.EXPENSE:
            try:
                expense_type = ExpenseType.from_str(payload.expense_type).value
            except ValueError:
                return _validation("missing_expense_type", MSG_MISSING_EXPENSE_TYPE)
            payment_method = str(payload.payment_method or "").strip()
            if payment_method not in PAYMENT_METHODS:
                return _validation("missing_payment_method", MSG_MISSING_PAYMENT_METHOD)

        signed = -abs(amount) if transaction_type is TransactionType.EXPENSE else abs(amount)
        return {
            "description": description,
            "product_name": description,
            "amount": signed,
            "transaction_type": transaction_type,
            "category": category,
            "date": transaction_date,
            "item_description": item_description,
            "expense_type": expense_type,
            "payment_method": payment_method,
        }

    def add_or_update_transaction(
        self, payload: Union[TransactionPayload, Mapping[str, Any]]
    ) -> OperationResult:
        """Create a transaction, or update the one being edited.

        Updates merge the validated fields into the existing record so any
        other stored keys survive. When the edited id has disappeared the
        list is left alone but edit mode still ends.
        """

        if not isinstance(payload, TransactionPayload):
            payload = TransactionPayload.from_mapping(payload)
        checked = self._validate_payload(payload)
        if isinstance(checked, OperationResult):
            return checked

        saved: Optional[Transaction] = None
        if self.draft.is_editing:
            editing_id = self.draft.editing_id
            for index, current in enumerate(self.transactions):
                if _same_id(current.transaction_id, editing_id):
                    saved = current.merged(**checked)
                    self.transactions[index] = saved
                    LOGGER.info("Updated transaction %s", current.transaction_id)
                    break
            else:
                LOGGER.warning("Transaction %s vanished before the edit was saved", editing_id)
        else:
            saved = Transaction(transaction_id=self._next_id(), **checked)
            self.transactions.append(saved)
            LOGGER.info(
                "Added %s transaction %s of %.2f",
                saved.transaction_type.value,
                saved.transaction_id,
                saved.amount,
            )

        self.chart_render_key += 1
        self.draft = FormDraft()
        failure = self._persist_transactions()
        return failure or OperationResult.success(payload=saved)

    def delete_transaction(self, transaction_id: TransactionId) -> OperationResult:
        """Remove the transaction with ``transaction_id``; unknown ids are a no-op.

        Confirmation is the caller's job; once invoked the removal is unconditional.
        """

        remaining = [
            transaction
            for transaction in self.transactions
            if not _same_id(transaction.transaction_id, transaction_id)
        ]
        removed = len(self.transactions) - len(remaining)
        self.transactions = remaining
        self.chart_render_key += 1
        if self.draft.is_editing and _same_id(self.draft.editing_id, transaction_id):
            self.draft = FormDraft()
        LOGGER.info("Deleted transaction %s (%s removed)", transaction_id, removed)
        failure = self._persist_transactions()
        return failure or OperationResult.success(payload=bool(removed))

    def start_edit_transaction(self, transaction: Transaction) -> OperationResult:
        """Copy ``transaction`` into the form draft and enter edit mode."""

        self.draft = FormDraft.for_transaction(transaction)
        LOGGER.debug("Editing transaction %s", transaction.transaction_id)
        return OperationResult.success(payload=self.draft)

    # ------------------------------------------------------------------
    # Categories, filter, budget, modal
    # ------------------------------------------------------------------

    def add_custom_category(self, name: str, kind: Union[str, CategoryKind]) -> OperationResult:
        try:
            category_kind = CategoryKind.from_str(kind)
        except ValueError:
            return _validation("invalid_category_kind", "Tipo de categoria inválido.")
        trimmed = str(name or "").strip()
        if not trimmed:
            return _validation("empty_category", "O nome da categoria não pode estar vazio.")
        target = self.categories_for(category_kind)
        if trimmed in target:
            return _validation("category_exists", f"A categoria '{trimmed}' já existe.")
        target.append(trimmed)
        LOGGER.info("Added %s category '%s'", category_kind.value, trimmed)
        failure = self._persist_categories()
        return failure or OperationResult.success(f"Categoria '{trimmed}' adicionada com sucesso.")

    def remove_custom_category(self, name: str, kind: Union[str, CategoryKind]) -> OperationResult:
        try:
            category_kind = CategoryKind.from_str(kind)
        except ValueError:
            return _validation("invalid_category_kind", "Tipo de categoria inválido.")
        trimmed = str(name or "").strip()
        if not trimmed:
            return _validation("empty_category", "O nome da categoria não pode estar vazio.")
        if trimmed in category_kind.defaults:
            return _validation(
                "default_category", f"A categoria padrão '{trimmed}' não pode ser removida."
            )
        target = self.categories_for(category_kind)
        if trimmed not in target:
            return _validation("category_not_found", f"A categoria '{trimmed}' não foi encontrada.")
        target.remove(trimmed)
        LOGGER.info("Removed %s category '%s'", category_kind.value, trimmed)
        failure = self._persist_categories()
        return failure or OperationResult.success(f"Categoria '{trimmed}' removida com sucesso.")

    def update_filter(self, kind: Union[str, FilterKind], value: Optional[str]) -> OperationResult:
        """Replace the active filter. Session only, never persisted."""

        try:
            filter_kind = FilterKind.from_str(kind)
        except ValueError:
            return _validation("invalid_filter", "Tipo de filtro inválido.")
        self.filter = FilterSpec(kind=filter_kind, value=str(value or "").strip())
        self.chart_render_key += 1
        LOGGER.debug("Filter set to %s=%r", filter_kind.value, self.filter.value)
        return OperationResult.success(payload=self.filter)

    def set_monthly_budget(self, value: Any) -> OperationResult:
        if isinstance(value, bool):
            return _validation("invalid_budget", "O orçamento mensal deve ser um número.")
        try:
            budget = float(value)
        except (TypeError, ValueError):
            return _validation("invalid_budget", "O orçamento mensal deve ser um número.")
        if not math.isfinite(budget):
            return _validation("invalid_budget", "O orçamento mensal deve ser um número.")
        if budget < 0:
            return _validation("negative_budget", "O orçamento mensal não pode ser negativo.")
        self.monthly_budget = budget
        LOGGER.info("Monthly budget set to %.2f", budget)
        failure = self._persist_budget()
        return failure or OperationResult.success("Orçamento mensal atualizado.")

    def open_details_modal(self, transaction: Transaction) -> None:
        self.modal = ModalState(selected=transaction, visible=True)

    def close_details_modal(self) -> None:
        self.modal = ModalState()

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_document(self) -> Dict[str, Any]:
        return build_export_document(
            self.transactions,
            self.expense_categories,
            self.income_categories,
            self.monthly_budget,
        )

    def export_data(self) -> OperationResult:
        """Serialise the full dataset; the payload is an ``ExportedFile`` to deliver."""

        exported = ExportedFile(
            filename=export_filename(self.export_prefix, self._today()),
            content=dump_document(self.export_document()),
        )
        LOGGER.info(
            "Exported %s transactions as %s", len(self.transactions), exported.filename
        )
        return OperationResult.success(MSG_EXPORTED, payload=exported)

    def import_data(self, file_contents: Optional[Union[str, bytes]]) -> OperationResult:
        """Replace state with an exported document, all or nothing."""

        if file_contents is None:
            return _validation("no_file", MSG_NO_FILE)
        try:
            document = parse_import_document(file_contents, self._id_factory)
        except DocumentParseError as error:
            LOGGER.error("Import failed while parsing: %s", error, exc_info=error.__cause__)
            return OperationResult.failure(ErrorKind.PARSE, "parse_error", MSG_IMPORT_PARSE)
        except DocumentFormatError as error:
            LOGGER.warning("Import rejected: %s", error)
            return OperationResult.failure(ErrorKind.IMPORT_FORMAT, "invalid_format", MSG_IMPORT_FORMAT)

        self.transactions = document.transactions
        failures = [self._persist_transactions()]
        if document.expense_categories is not None or document.income_categories is not None:
            if document.expense_categories is not None:
                self.expense_categories = self._with_defaults(
                    CategoryKind.EXPENSE, document.expense_categories
                )
            if document.income_categories is not None:
                self.income_categories = self._with_defaults(
                    CategoryKind.INCOME, document.income_categories
                )
            failures.append(self._persist_categories())
        if document.monthly_budget is not None:
            self.monthly_budget = document.monthly_budget
            failures.append(self._persist_budget())
        self.chart_render_key += 1
        LOGGER.info("Imported %s transactions", len(self.transactions))

        failure = next((item for item in failures if item is not None), None)
        return failure or OperationResult.success(MSG_IMPORTED, payload=len(self.transactions))

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def filtered_transactions(self) -> List[Transaction]:
        if not self.filter.is_active:
            return self.transactions
        return [transaction for transaction in self.transactions if self.filter.matches(transaction)]

    @property
    def total_balance(self) -> float:
        return sum(transaction.amount for transaction in self.filtered_transactions)

    @property
    def total_income(self) -> float:
        return sum(
            transaction.amount
            for transaction in self.filtered_transactions
            if transaction.transaction_type is TransactionType.INCOME
        )

    @property
    def total_expenses(self) -> float:
        return sum(
            transaction.magnitude for transaction in self.filtered_transactions if transaction.is_expense
        )

    @property
    def current_month_total_expenses(self) -> float:
        """Expenses dated in the current calendar month, ignoring the filter."""

        month_prefix = self._today().strftime("%Y-%m")
        return sum(
            transaction.magnitude
            for transaction in self.transactions
            if transaction.is_expense and transaction.date.startswith(month_prefix)
        )

    @property
    def remaining_budget(self) -> float:
        return self.monthly_budget - self.current_month_total_expenses

    @property
    def budget_usage_percent(self) -> float:
        if not self.monthly_budget:
            return 0.0
        return self.current_month_total_expenses / self.monthly_budget * 100

    @property
    def expense_chart_data(self) -> ChartData:
        return charts.expense_by_category(self.filtered_transactions)

    @property
    def category_distribution_chart_data(self) -> ChartData:
        return charts.category_distribution(self.filtered_transactions)

    @property
    def expense_type_distribution_chart_data(self) -> ChartData:
        return charts.expense_type_distribution(self.filtered_transactions)

    @property
    def payment_method_distribution_chart_data(self) -> ChartData:
        return charts.payment_method_distribution(self.filtered_transactions)

    @property
    def bar_chart_data(self) -> ChartData:
        return charts.income_vs_expense(self.filtered_transactions)

    def summary(self) -> Dict[str, Any]:
        """Aggregate figures and chart data for dashboard rendering."""

        return {
            "totalBalance": self.total_balance,
            "totalIncome": self.total_income,
            "totalExpenses": self.total_expenses,
            "currentMonthTotalExpenses": self.current_month_total_expenses,
            "monthlyBudget": self.monthly_budget,
            "remainingBudget": self.remaining_budget,
            "budgetUsagePercent": self.budget_usage_percent,
            "chartRenderKey": self.chart_render_key,
            "charts": {
                "expenses": self.expense_chart_data.as_dict(),
                "categories": self.category_distribution_chart_data.as_dict(),
                "expenseTypes": self.expense_type_distribution_chart_data.as_dict(),
                "paymentMethods": self.payment_method_distribution_chart_data.as_dict(),
                "incomeVsExpense": self.bar_chart_data.as_dict(),
            },
        }

    def modal_state(self) -> Dict[str, Any]:
        """Detail modal visibility and the selected transaction, if any."""

        selected = self.modal.selected
        return {
            "visible": self.modal.visible,
            "transaction": selected.as_dict() if selected else None,
        }

    def snapshot(self) -> Dict[str, Any]:
        """Full view state for the presentation layer."""

        return {
            "transactions": [transaction.as_dict() for transaction in self.filtered_transactions],
            "categories": {"expense": self.expense_categories, "income": self.income_categories},
            "paymentMethods": list(PAYMENT_METHODS),
            "monthlyBudget": self.monthly_budget,
            "filter": {"kind": self.filter.kind.value, "value": self.filter.value},
            "form": self.draft.as_dict(),
            "modal": self.modal_state(),
            "chartRenderKey": self.chart_render_key,
        }
