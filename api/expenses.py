"""
Expense API routes — filtered listing, CRUD and currency conversion.

Route prefix: /api/expense.  Every route requires a Bearer access token;
the caller's id always comes from the token, never from the request.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_currency_converter, get_current_user_id
from connectors.currency import CurrencyConverter
from core import expenses
from utils.schemas import (
    ApiResponse,
    ExpenseCreate,
    ExpenseFilter,
    ExpenseRead,
    ExpenseUpdate,
    JsonDecimal,
)

router = APIRouter(tags=["expenses"])


@router.get("", response_model=List[ExpenseRead])
async def list_expenses(
    category: Optional[str] = Query(None),
    currency: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description='"value" or "date"'),
    order: Optional[str] = Query(None, description='"asc" (default) or "desc"'),
    session: AsyncSession = Depends(db_session),
    user_id: int = Depends(get_current_user_id),
) -> List[ExpenseRead]:
    """List the caller's expenses. 404 when nothing matches."""
    filters = ExpenseFilter(
        category=category,
        currency=currency,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        order=order,
    )
    rows = await expenses.list_expenses(session, user_id, filters)
    return [ExpenseRead.model_validate(row) for row in rows]


@router.get("/convert", response_model=ApiResponse[JsonDecimal])
async def convert_currency(
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    amount: Decimal = Query(...),
    converter: CurrencyConverter = Depends(get_currency_converter),
    user_id: int = Depends(get_current_user_id),
) -> ApiResponse:
    """Convert an amount between currencies via the exchange-rate service."""
    result = await converter.convert(from_currency, to_currency, amount)
    return ApiResponse.ok(result)


@router.get("/{expense_id}", response_model=ApiResponse[ExpenseRead])
async def get_expense(
    expense_id: int,
    session: AsyncSession = Depends(db_session),
    user_id: int = Depends(get_current_user_id),
) -> ApiResponse:
    expense = await expenses.get_expense(session, user_id, expense_id)
    return ApiResponse.ok(ExpenseRead.model_validate(expense))


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_in: ExpenseCreate,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(db_session),
    user_id: int = Depends(get_current_user_id),
) -> ExpenseRead:
    expense = await expenses.create_expense(session, user_id, expense_in)
    response.headers["Location"] = str(request.url_for("get_expense", expense_id=expense.id))
    return ExpenseRead.model_validate(expense)


@router.put("/{expense_id}", response_model=ExpenseRead)
async def update_expense(
    expense_id: int,
    update_in: ExpenseUpdate,
    session: AsyncSession = Depends(db_session),
    user_id: int = Depends(get_current_user_id),
) -> ExpenseRead:
    expense = await expenses.update_expense(session, user_id, expense_id, update_in)
    return ExpenseRead.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    session: AsyncSession = Depends(db_session),
    user_id: int = Depends(get_current_user_id),
) -> Response:
    await expenses.delete_expense(session, user_id, expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
