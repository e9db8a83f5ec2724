"""
Expense endpoints, mounted at /api/v1/expenses.

Every route is scoped to the caller from the X-User-Id header.
"""

import datetime as dt
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError

from expense_tracker.api.dependencies import get_app_settings, get_service, get_user_id
from expense_tracker.api.responses import api_response
from expense_tracker.bulk import decode_payload
from expense_tracker.config import Settings
from expense_tracker.errors import BadRequestError, ImportValidationError
from expense_tracker.models.expense import ExpenseCreate, ExpenseQuery, ExpenseUpdate
from expense_tracker.orchestrator import ExpenseService

router = APIRouter(prefix="/api/v1/expenses", tags=["expenses"])


class BulkDeleteRequest(BaseModel):
    # Checked by the service so a bad shape gets the domain message
    ids: Any = None


@router.post("", status_code=201)
async def add_expense(
    payload: ExpenseCreate,
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
) -> JSONResponse:
    expense = await service.create_expense(user_id, payload)
    return api_response(201, expense, "Expense added successfully")


@router.get("")
async def list_expenses(
    category: Optional[str] = Query(None),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    start_date: Optional[dt.date] = Query(None, alias="startDate"),
    end_date: Optional[dt.date] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Paginated list, newest first, served from cache when possible."""
    app_settings = settings.app
    if limit is not None and limit > app_settings.max_page_size:
        raise BadRequestError(f"limit cannot exceed {app_settings.max_page_size}")

    try:
        query = ExpenseQuery(
            category=category,
            payment_method=payment_method,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit or app_settings.default_page_size,
        )
    except ValidationError as e:
        raise BadRequestError(e.errors()[0]["msg"].removeprefix("Value error, "))

    result, from_cache = await service.list_expenses(user_id, query)
    message = "Expenses retrieved from cache" if from_cache else "Expenses retrieved successfully"
    return api_response(200, result, message)


@router.get("/statistics")
async def get_statistics(
    start_date: Optional[dt.date] = Query(None, alias="startDate"),
    end_date: Optional[dt.date] = Query(None, alias="endDate"),
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
) -> JSONResponse:
    stats = await service.statistics(user_id, start_date, end_date)
    return api_response(200, stats, "Expense statistics retrieved successfully")


@router.get("/summary")
async def get_summary(
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
) -> JSONResponse:
    summary = await service.summary(user_id)
    return api_response(200, summary, "Expense summary retrieved successfully")


@router.get("/export")
async def export_expenses(
    import_format: bool = Query(False, alias="importFormat"),
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
) -> Response:
    """CSV download; importFormat=true writes M/D/YYYY dates for re-import."""
    content = await service.export_csv(user_id, import_date_format=import_format)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="expenses.csv"'},
    )


@router.post("/bulk-upload", status_code=201)
async def bulk_upload(
    file: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Import a CSV file. Any invalid row rejects the whole file."""
    if file is None:
        raise BadRequestError("CSV file is required")

    app_settings = settings.app
    data = await file.read(app_settings.max_upload_size_bytes + 1)
    if len(data) > app_settings.max_upload_size_bytes:
        raise BadRequestError(f"CSV file exceeds {app_settings.max_upload_size_mb} MB limit")

    result = await service.bulk_import(user_id, decode_payload(data))
    if not result.succeeded:
        raise ImportValidationError(result.error_messages, result.valid_count)

    return api_response(
        201,
        result.inserted,
        f"{result.inserted_count} expenses uploaded successfully",
    )


@router.post("/bulk-delete")
async def bulk_delete(
    payload: Optional[BulkDeleteRequest] = None,
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
) -> JSONResponse:
    ids = payload.ids if payload is not None else None
    result = await service.bulk_delete(user_id, ids)
    return api_response(
        200,
        result,
        f"{result.deleted_count} expenses deleted successfully",
    )


@router.patch("/{expense_id}")
async def update_expense(
    expense_id: str,
    payload: ExpenseUpdate,
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
) -> JSONResponse:
    expense = await service.update_expense(user_id, expense_id, payload)
    return api_response(200, expense, "Expense updated successfully")


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: str,
    user_id: str = Depends(get_user_id),
    service: ExpenseService = Depends(get_service),
) -> JSONResponse:
    await service.delete_expense(user_id, expense_id)
    return api_response(200, {}, "Expense deleted successfully")
