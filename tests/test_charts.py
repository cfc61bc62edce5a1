"""Mini README: Tests for the chart aggregations.

These tests confirm grouping keys, absolute sums, palette recycling and
the per-chart policy for dropping empty groups.
"""

from __future__ import annotations

import pytest

from fintrack.finance import Transaction, TransactionType
from fintrack.finance import charts


def _tx(
    transaction_id: int,
    amount: float,
    category: str,
    *,
    expense_type: str = "",
    payment_method: str = "",
) -> Transaction:
    transaction_type = TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME
    return Transaction(
        transaction_id=transaction_id,
        description=f"item {transaction_id}",
        amount=amount,
        transaction_type=transaction_type,
        category=category,
        date="2024-03-01",
        expense_type=expense_type,
        payment_method=payment_method,
    )


SAMPLE = [
    _tx(1, -10.0, "Alimentação", expense_type="variavel", payment_method="Pix"),
    _tx(2, -25.0, "Moradia", expense_type="fixa", payment_method="Boleto"),
    _tx(3, -5.0, "Alimentação", expense_type="variavel", payment_method="Pix"),
    _tx(4, 1000.0, "Salário"),
]


def test_expense_by_category_sums_absolute_amounts() -> None:
    chart = charts.expense_by_category(SAMPLE)

    assert chart.labels == ["Alimentação", "Moradia"]
    assert chart.data == [pytest.approx(15.0), pytest.approx(25.0)]
    assert chart.colors == list(charts.CATEGORY_PALETTE[:2])


def test_category_distribution_spans_both_types() -> None:
    chart = charts.category_distribution(SAMPLE)

    assert chart.labels == ["Alimentação", "Moradia", "Salário"]
    assert chart.data[-1] == pytest.approx(1000.0)


def test_palette_is_recycled_for_many_groups() -> None:
    many = [_tx(index, -1.0, f"cat {index}") for index in range(9)]

    chart = charts.expense_by_category(many)

    assert len(chart.colors) == 9
    assert chart.colors[7] == charts.CATEGORY_PALETTE[0]


def test_expense_type_distribution_omits_empty_groups() -> None:
    only_variable = [item for item in SAMPLE if item.expense_type != "fixa"]

    full = charts.expense_type_distribution(SAMPLE)
    partial = charts.expense_type_distribution(only_variable)

    assert full.labels == ["Fixa", "Variável"]
    assert full.data == [pytest.approx(25.0), pytest.approx(15.0)]
    assert partial.labels == ["Variável"]
    assert partial.colors == [charts.EXPENSE_TYPE_PALETTE[0]]


def test_payment_method_distribution_follows_catalogue_order() -> None:
    chart = charts.payment_method_distribution(SAMPLE + [_tx(5, -3.0, "Lazer", payment_method="Vale")])

    assert chart.labels == ["Pix", "Boleto", "Vale"]
    assert chart.data == [pytest.approx(15.0), pytest.approx(25.0), pytest.approx(3.0)]


def test_income_vs_expense_always_has_two_bars() -> None:
    empty = charts.income_vs_expense([])
    chart = charts.income_vs_expense(SAMPLE)

    assert empty.labels == ["Receitas", "Despesas"]
    assert empty.data == [0.0, 0.0]
    assert chart.data == [pytest.approx(1000.0), pytest.approx(40.0)]
    assert chart.as_dict()["datasets"][0]["label"] == "Valores"


def test_chart_dict_layout() -> None:
    payload = charts.expense_by_category(SAMPLE).as_dict()

    assert payload["labels"] == ["Alimentação", "Moradia"]
    assert set(payload["datasets"][0]) == {"backgroundColor", "data"}
