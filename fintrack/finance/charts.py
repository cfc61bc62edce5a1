"""Mini README: Chart-ready aggregations over transactions.

Structure:
    * ChartData - parallel labels, values and colours for one chart.
    * expense_by_category - expenses summed per category.
    * category_distribution - absolute amounts per category across both types.
    * expense_type_distribution - fixed versus variable expenses.
    * payment_method_distribution - expenses per payment method.
    * income_vs_expense - two-bar comparison of totals.

Every function receives the already filtered transactions. Colours are
assigned by position and recycled or truncated to the number of groups.
The category charts keep every group they see; the fixed/variable and
payment method charts drop groups whose total is zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import cycle, islice
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .models import PAYMENT_METHODS, ExpenseType, Transaction, TransactionType

CATEGORY_PALETTE = ("#41B883", "#E46651", "#00D8FF", "#DD1B16", "#2C3E50", "#F38B00", "#A9A9A9")
EXPENSE_TYPE_PALETTE = ("#3498DB", "#F1C40F")
PAYMENT_METHOD_PALETTE = ("#8E44AD", "#16A085", "#D35400", "#27AE60", "#C0392B", "#7F8C8D")
BAR_PALETTE = ("#2ecc71", "#e74c3c")
BAR_LABELS = ("Receitas", "Despesas")


def _palette(colours: Sequence[str], count: int) -> List[str]:
    return list(islice(cycle(colours), count))


@dataclass(frozen=True)
class ChartData:
    """Labels and values ready for a chart widget."""

    labels: List[str]
    data: List[float]
    colors: List[str]
    label: Optional[str] = None

    @classmethod
    def build(
        cls,
        totals: Dict[str, float],
        palette: Sequence[str],
        *,
        label: Optional[str] = None,
    ) -> "ChartData":
        return cls(
            labels=list(totals.keys()),
            data=list(totals.values()),
            colors=_palette(palette, len(totals)),
            label=label,
        )

    def as_dict(self) -> Dict[str, Any]:
        """Return the labels/datasets layout consumed by the chart widgets."""

        dataset: Dict[str, Any] = {"backgroundColor": self.colors, "data": self.data}
        if self.label:
            dataset["label"] = self.label
        return {"labels": self.labels, "datasets": [dataset]}


def _sum_by(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], Optional[str]],
) -> Dict[str, float]:
    """Sum absolute amounts per key, preserving first-seen order."""

    totals: Dict[str, float] = {}
    for transaction in transactions:
        group = key(transaction)
        if group is None:
            continue
        totals[group] = totals.get(group, 0.0) + transaction.magnitude
    return totals


def _expenses(transactions: Iterable[Transaction]) -> List[Transaction]:
    return [transaction for transaction in transactions if transaction.is_expense]


def expense_by_category(transactions: Iterable[Transaction]) -> ChartData:
    """Expenses summed per category, every category included."""

    totals = _sum_by(_expenses(transactions), lambda transaction: transaction.category)
    return ChartData.build(totals, CATEGORY_PALETTE)


def category_distribution(transactions: Iterable[Transaction]) -> ChartData:
    """Absolute amounts per category over income and expenses together."""

    totals = _sum_by(transactions, lambda transaction: transaction.category)
    return ChartData.build(totals, CATEGORY_PALETTE)


def expense_type_distribution(transactions: Iterable[Transaction]) -> ChartData:
    """Fixed versus variable expenses; empty groups are omitted."""

    raw = _sum_by(_expenses(transactions), lambda transaction: transaction.expense_type or None)
    totals = {
        expense_type.label: raw[expense_type.value]
        for expense_type in ExpenseType
        if raw.get(expense_type.value)
    }
    return ChartData.build(totals, EXPENSE_TYPE_PALETTE)


def payment_method_distribution(transactions: Iterable[Transaction]) -> ChartData:
    """Expenses per payment method in catalogue order; empty groups are omitted."""

    raw = _sum_by(_expenses(transactions), lambda transaction: transaction.payment_method or None)
    ordered = [method for method in PAYMENT_METHODS if raw.get(method)]
    # methods outside the catalogue come from imported data; keep them last
    ordered.extend(method for method in raw if method not in PAYMENT_METHODS and raw[method])
    totals = {method: raw[method] for method in ordered}
    return ChartData.build(totals, PAYMENT_METHOD_PALETTE)


def income_vs_expense(transactions: Iterable[Transaction]) -> ChartData:
    """Total income against total expenses as a two-bar chart."""

    income = 0.0
    expenses = 0.0
    for transaction in transactions:
        if transaction.transaction_type is TransactionType.INCOME:
            income += transaction.amount
        else:
            expenses += transaction.magnitude
    return ChartData(
        labels=list(BAR_LABELS),
        data=[income, expenses],
        colors=list(BAR_PALETTE),
        label="Valores",
    )
