"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage, caching and API responses

DESIGN DECISION: Field names are snake_case in Python and camelCase on the
wire (paymentMethod, startDate, totalExpenses). The alias generator keeps
the two in sync; models accept either spelling on input.

Monetary values are Decimal internally and rendered as JSON numbers.
"""

import datetime as dt
import json
import math
from decimal import Decimal
from typing import Annotated, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    SerializationInfo,
    model_validator,
)
from pydantic.alias_generators import to_camel


# Serialization context flag for payloads that must round-trip exactly (cache)
EXACT_MONEY = "exact_money"


def serialize_money(value: Decimal, info: SerializationInfo) -> Union[float, str]:
    """JSON number for API clients; exact string when EXACT_MONEY is set."""
    if info.context and info.context.get(EXACT_MONEY):
        return str(value)
    return float(value)


# Decimal in Python, number in JSON
Money = Annotated[
    Decimal,
    PlainSerializer(serialize_money, return_type=Union[float, str], when_used="json"),
]


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class WireModel(BaseModel):
    """Base for models that cross the API boundary."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(WireModel):
    """
    A stored expense record.

    The owner (user_id) is fixed at creation; updates can never move an
    expense to another user.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Opaque unique identifier"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owner of the expense"
    )
    amount: Money = Field(
        ...,
        gt=0,
        description="Amount spent"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    payment_method: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    created_at: dt.datetime = Field(default_factory=utcnow)
    updated_at: dt.datetime = Field(default_factory=utcnow)


class ExpenseCreate(WireModel):
    """Payload for a single insert. All five fields are required."""

    amount: Money = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=500)
    date: dt.date
    category: str = Field(..., min_length=1, max_length=100)
    payment_method: str = Field(..., min_length=1, max_length=100)

    def to_expense(self, user_id: str) -> Expense:
        """Tag the payload with its owner."""
        return Expense(user_id=user_id, **self.model_dump())


class ExpenseUpdate(WireModel):
    """Partial update. Any subset of the five user fields."""

    amount: Optional[Money] = Field(default=None, gt=0)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    date: Optional[dt.date] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    payment_method: Optional[str] = Field(default=None, min_length=1, max_length=100)

    def changes(self) -> dict:
        """Fields the client actually sent, by Python name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# =============================================================================
# QUERY MODELS
# =============================================================================

class ExpenseFilter(BaseModel):
    """
    What the store filters on.

    Date bounds are inclusive; either may be omitted.
    """

    user_id: str
    category: Optional[str] = None
    payment_method: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    def matches(self, expense: Expense) -> bool:
        if expense.user_id != self.user_id:
            return False
        if self.category and expense.category != self.category:
            return False
        if self.payment_method and expense.payment_method != self.payment_method:
            return False
        if self.start_date and expense.date < self.start_date:
            return False
        if self.end_date and expense.date > self.end_date:
            return False
        return True


class ExpenseQuery(WireModel):
    """List query parameters as sent by the dashboard."""

    category: Optional[str] = None
    payment_method: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)

    @model_validator(mode='after')
    def validate_range(self) -> 'ExpenseQuery':
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate cannot be before startDate")
        return self

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def to_filter(self, user_id: str) -> ExpenseFilter:
        return ExpenseFilter(
            user_id=user_id,
            category=self.category,
            payment_method=self.payment_method,
            start_date=self.start_date,
            end_date=self.end_date,
        )

    def canonical_json(self) -> str:
        """Stable serialization used as the query part of a cache key."""
        return json.dumps(
            self.model_dump(mode="json", by_alias=True),
            sort_keys=True,
            separators=(",", ":"),
        )


class ExpensePage(WireModel):
    """One page of list results plus pagination metadata."""

    expenses: list[Expense] = Field(default_factory=list)
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total_pages: int = Field(ge=0)

    @classmethod
    def build(cls, expenses: list[Expense], total: int, page: int, limit: int) -> 'ExpensePage':
        return cls(
            expenses=expenses,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )


# =============================================================================
# BULK IMPORT / DELETE MODELS
# =============================================================================

class RowError(WireModel):
    """All validation failures for one CSV row."""

    row: int = Field(
        ...,
        ge=2,
        description="Row number as the user sees it (header is row 1)"
    )
    messages: list[str] = Field(..., min_length=1)

    def to_message(self) -> str:
        return f"Row {self.row}: {', '.join(self.messages)}"


class ImportResult(WireModel):
    """
    Outcome of a bulk import.

    Either errors is non-empty and nothing was inserted, or errors is
    empty and inserted holds the whole batch.
    """

    inserted: list[Expense] = Field(default_factory=list)
    errors: list[RowError] = Field(default_factory=list)
    valid_count: int = Field(default=0, ge=0)
    # False when the stored batch could not evict cached list pages
    cache_invalidated: bool = Field(default=True, exclude=True)

    @property
    def succeeded(self) -> bool:
        return not self.errors

    @property
    def inserted_count(self) -> int:
        return len(self.inserted)

    @property
    def error_messages(self) -> list[str]:
        return [error.to_message() for error in self.errors]


class BulkDeleteResult(WireModel):
    deleted_count: int = Field(ge=0)


# =============================================================================
# AGGREGATION MODELS
# =============================================================================

class ExpenseStatistics(WireModel):
    """
    Totals over a user's expenses in a date range.

    expenses_by_month is keyed "YYYY-M" (month not zero-padded).
    """

    total_expenses: Money = Decimal("0")
    average_expense: Money = Decimal("0")
    expense_count: int = 0
    expenses_by_category: dict[str, Money] = Field(default_factory=dict)
    expenses_by_month: dict[str, Money] = Field(default_factory=dict)


class CategoryTotal(WireModel):
    name: str
    total: Money


class ExpenseSummary(WireModel):
    """Lifetime total plus the three biggest categories."""

    total_expenses: Money = Decimal("0")
    categories: list[CategoryTotal] = Field(default_factory=list)
