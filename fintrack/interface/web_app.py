"""Mini README: FastAPI JSON interface for the finance tracker.

Structure:
    * create_application - application factory wiring routes to one store.
    * Request bodies - Pydantic models for transaction, category, filter and
      budget forms.

Each route forwards to a ``TransactionStore`` operation and turns the
returned ``OperationResult`` into a response: 200 on success, 400 for
validation and import problems, 500 when persistence failed. Asking for
confirmation before deleting is left to the browser client. Imports are
the one asynchronous path: the uploaded file is awaited in full and then
applied to the store in a single call.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from ..configuration import get_settings
from ..finance import ErrorKind, OperationResult, Transaction, TransactionStore
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class TransactionBody(BaseModel):
    """Form fields submitted when saving a transaction."""

    description: str = ""
    amount: Optional[float] = None
    type: str = "income"
    category: str = ""
    date: str = ""
    itemDescription: str = ""
    expenseType: str = ""
    paymentMethod: str = ""


class CategoryBody(BaseModel):
    name: str
    kind: str


class FilterBody(BaseModel):
    kind: str = "none"
    value: str = ""


class BudgetBody(BaseModel):
    value: float


def _respond(result: OperationResult, **extra: Any) -> JSONResponse:
    """Translate a store result into a JSON response."""

    if result.ok:
        status_code = 200
    elif result.kind is ErrorKind.PERSISTENCE:
        status_code = 500
    else:
        status_code = 400
    body: Dict[str, Any] = result.as_dict()
    body.update(extra)
    return JSONResponse(body, status_code=status_code)


def create_application(store: Optional[TransactionStore] = None) -> FastAPI:
    """Create the FastAPI application bound to ``store`` (built from settings when omitted)."""

    app = FastAPI(title="FinTrack", version="1.0.0")
    if store is None:
        store = TransactionStore.from_settings(get_settings())
    app.state.store = store

    def _lookup(transaction_id: str) -> Transaction:
        transaction = store.get_transaction(transaction_id)
        if transaction is None:
            raise HTTPException(status_code=404, detail=f"Transaction {transaction_id} not found")
        return transaction

    @app.get("/")
    async def index() -> JSONResponse:
        """Report storage details and dataset size."""

        return JSONResponse(
            {
                "storage": store.storage.metadata(),
                "transactions": len(store.transactions),
                "chartRenderKey": store.chart_render_key,
            }
        )

    @app.get("/api/state")
    async def state() -> JSONResponse:
        """Return transactions (filtered), categories, form and modal state."""

        return JSONResponse(store.snapshot())

    @app.get("/api/summary")
    async def summary() -> JSONResponse:
        """Return totals, budget progress and chart datasets."""

        figures = store.summary()
        LOGGER.debug(
            "Summary -> balance: %.2f income: %.2f expenses: %.2f",
            figures["totalBalance"],
            figures["totalIncome"],
            figures["totalExpenses"],
        )
        return JSONResponse(figures)

    @app.post("/api/transactions")
    async def save_transaction(body: TransactionBody) -> JSONResponse:
        """Create a transaction, or update the one currently being edited."""

        result = store.add_or_update_transaction(body.model_dump())
        saved = result.payload.as_dict() if isinstance(result.payload, Transaction) else None
        return _respond(result, transaction=saved, chartRenderKey=store.chart_render_key)

    @app.delete("/api/transactions/{transaction_id}")
    async def delete_transaction(transaction_id: str) -> JSONResponse:
        """Delete a transaction; the client confirms with the user beforehand."""

        result = store.delete_transaction(transaction_id)
        return _respond(result, removed=bool(result.payload))

    @app.post("/api/transactions/{transaction_id}/edit")
    async def start_edit(transaction_id: str) -> JSONResponse:
        """Load a transaction into the form draft."""

        result = store.start_edit_transaction(_lookup(transaction_id))
        return _respond(result, form=store.draft.as_dict())

    @app.post("/api/transactions/{transaction_id}/details")
    async def open_details(transaction_id: str) -> JSONResponse:
        store.open_details_modal(_lookup(transaction_id))
        return JSONResponse(store.modal_state())

    @app.delete("/api/details")
    async def close_details() -> JSONResponse:
        store.close_details_modal()
        return JSONResponse(store.modal_state())

    @app.post("/api/categories")
    async def add_category(body: CategoryBody) -> JSONResponse:
        result = store.add_custom_category(body.name, body.kind)
        return _respond(result, categories={"expense": store.expense_categories, "income": store.income_categories})

    @app.delete("/api/categories/{kind}/{name}")
    async def remove_category(kind: str, name: str) -> JSONResponse:
        result = store.remove_custom_category(name, kind)
        return _respond(result, categories={"expense": store.expense_categories, "income": store.income_categories})

    @app.put("/api/filter")
    async def update_filter(body: FilterBody) -> JSONResponse:
        result = store.update_filter(body.kind, body.value)
        return _respond(result, chartRenderKey=store.chart_render_key)

    @app.put("/api/budget")
    async def set_budget(body: BudgetBody) -> JSONResponse:
        result = store.set_monthly_budget(body.value)
        return _respond(result, monthlyBudget=store.monthly_budget)

    @app.get("/api/export")
    async def export_data() -> Response:
        """Download the full dataset as a JSON attachment."""

        exported = store.export_data().payload
        return Response(
            content=exported.content.encode("utf-8"),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
        )

    @app.post("/api/import")
    async def import_data(file: Optional[UploadFile] = File(None)) -> JSONResponse:
        """Replace the dataset with an uploaded export file."""

        contents = await file.read() if file is not None else None
        if file is not None:
            LOGGER.info("Received import upload %s (%s bytes)", file.filename, len(contents))
        result = store.import_data(contents)
        return _respond(result)

    return app
