"""Pydantic schemas for the bank transactions domain."""

from typing import Optional

from pydantic import BaseModel, Field

from packages.categorization.constants import Category


class TransactionSummary(BaseModel):
    """Totals over the listed transactions."""

    total_revenue: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    by_category: dict[str, float] = Field(default_factory=dict)


class TransactionListResponse(BaseModel):
    transactions: list[dict]
    count: int
    summary: TransactionSummary


class TransactionUpdate(BaseModel):
    """Manual override of a stored transaction."""

    category: Optional[Category] = None
    is_business: Optional[bool] = None


class RecategorizeRequest(BaseModel):
    """Re-run the categorizer over stored transactions."""

    statement_id: Optional[str] = None
    only_uncategorized: bool = False


class RecategorizeResponse(BaseModel):
    checked: int
    updated: int
