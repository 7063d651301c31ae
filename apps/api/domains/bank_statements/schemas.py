"""Pydantic schemas for the bank statements domain."""

from datetime import date
from typing import Optional

from pydantic import BaseModel


class UploadedStatement(BaseModel):
    """Summary of a freshly imported statement."""

    id: str
    file_name: str
    transaction_count: int
    skipped_rows: int = 0
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class UploadResponse(BaseModel):
    """Response from a statement upload."""

    success: bool = True
    statement: UploadedStatement


class StatementOut(BaseModel):
    """A stored bank statement row."""

    id: str
    file_name: str
    file_url: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    statement_date_from: Optional[date] = None
    statement_date_to: Optional[date] = None
    status: str
    total_transactions: int = 0
    created_at: Optional[str] = None


class StatementListResponse(BaseModel):
    statements: list[StatementOut]
    count: int
