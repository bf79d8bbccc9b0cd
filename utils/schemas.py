"""
Pydantic schemas for the MoveBudget API.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Decimals leave the API as JSON numbers rather than strings.
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Envelope
# ═══════════════════════════════════════════════════════════════════════════════


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: T) -> "ApiResponse[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> "ApiResponse[T]":
        return cls(success=False, message=message)


# ═══════════════════════════════════════════════════════════════════════════════
# Auth
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenPair(CamelModel):
    """Access + refresh token returned by login and refresh."""

    access_token: str
    refresh_token: str


# ═══════════════════════════════════════════════════════════════════════════════
# Expenses
# ═══════════════════════════════════════════════════════════════════════════════


class ExpenseCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=50)
    value: Decimal = Field(..., ge=Decimal("0.01"))
    currency: str = Field(..., min_length=3, max_length=3)
    date: datetime

    normalise_date = field_validator("date")(_naive_utc)


class ExpenseUpdate(ExpenseCreate):
    """Full replacement of an expense's editable fields."""


class ExpenseRead(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    category: str
    value: JsonDecimal
    currency: str
    date: datetime
    user_id: int


class ExpenseFilter(BaseModel):
    category: Optional[str] = None
    currency: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: Optional[str] = None   # "value" | "date"
    order: Optional[str] = None     # "asc" | "desc"

    normalise_dates = field_validator("start_date", "end_date")(_naive_utc)

