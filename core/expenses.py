"""
Expense queries and CRUD, always scoped to the calling user.

Every lookup filters on ``Expense.user_id == user_id``; an id that does
not exist and an id owned by someone else both raise ``NotFoundError``.
"""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFoundError
from database.models import Expense
from utils.schemas import ExpenseCreate, ExpenseFilter, ExpenseUpdate

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    "value": Expense.value,
    "date": Expense.date,
}


def build_expense_query(user_id: int, filters: ExpenseFilter) -> Select:
    """
    Compose the SELECT for a user's expenses.

    Provided filters are ANDed. Category and currency match exactly but
    ignore case, date bounds are inclusive. Without a known ``sort_by``
    the store's natural order is kept; ``order`` defaults to ascending.
    """
    stmt = select(Expense).where(Expense.user_id == user_id)

    if filters.category and filters.category.strip():
        stmt = stmt.where(func.lower(Expense.category) == filters.category.lower())
    if filters.currency and filters.currency.strip():
        stmt = stmt.where(func.lower(Expense.currency) == filters.currency.lower())
    if filters.start_date is not None:
        stmt = stmt.where(Expense.date >= filters.start_date)
    if filters.end_date is not None:
        stmt = stmt.where(Expense.date <= filters.end_date)

    column = _SORT_COLUMNS.get((filters.sort_by or "").lower())
    if column is not None:
        descending = (filters.order or "").lower() == "desc"
        stmt = stmt.order_by(column.desc() if descending else column.asc())

    return stmt


async def list_expenses(
    session: AsyncSession, user_id: int, filters: ExpenseFilter
) -> List[Expense]:
    """Run the filtered query; an empty result raises ``NotFoundError``."""
    result = await session.execute(build_expense_query(user_id, filters))
    expenses = list(result.scalars())
    if not expenses:
        raise NotFoundError()
    return expenses


async def get_expense(session: AsyncSession, user_id: int, expense_id: int) -> Expense:
    result = await session.execute(
        select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
    )
    expense = result.scalar_one_or_none()
    if expense is None:
        raise NotFoundError()
    return expense


async def create_expense(
    session: AsyncSession, user_id: int, expense_in: ExpenseCreate
) -> Expense:
    expense = Expense(**expense_in.model_dump(), user_id=user_id)
    session.add(expense)
    await session.flush()
    await session.refresh(expense)
    logger.info("Created expense %s for user %s", expense.id, user_id)
    return expense


async def update_expense(
    session: AsyncSession, user_id: int, expense_id: int, update_in: ExpenseUpdate
) -> Expense:
    expense = await get_expense(session, user_id, expense_id)
    for field, value in update_in.model_dump().items():
        setattr(expense, field, value)
    await session.flush()
    await session.refresh(expense)
    logger.info("Updated expense %s for user %s", expense_id, user_id)
    return expense


async def delete_expense(session: AsyncSession, user_id: int, expense_id: int) -> None:
    expense = await get_expense(session, user_id, expense_id)
    await session.delete(expense)
    await session.flush()
    logger.info("Deleted expense %s for user %s", expense_id, user_id)
