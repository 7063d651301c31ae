"""Bank statements router: CSV upload and statement listing."""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile
from supabase import Client

from apps.api.core.auth import get_current_user, get_user_client, require_upload_role
from apps.api.core.config import settings
from apps.api.core.errors import BadRequestError, PayloadTooLargeError
from apps.api.domains.bank_statements.schemas import (
    StatementListResponse,
    UploadedStatement,
    UploadResponse,
)
from apps.api.domains.bank_statements.service import import_statement, list_statements

router = APIRouter(prefix="/bank-statements", tags=["bank-statements"])
logger = structlog.get_logger()


@router.post("/upload", response_model=UploadResponse)
async def upload_statement(
    file: Optional[UploadFile] = File(None),
    bank_name: Optional[str] = Form(None, alias="bankName"),
    account_number: Optional[str] = Form(None, alias="accountNumber"),
    client: Client = Depends(get_user_client),
    user: Any = Depends(require_upload_role),
):
    """Import a bank CSV export: parse, categorize, store file and rows."""
    if file is None:
        raise BadRequestError("No file provided")

    filename = file.filename or ""
    if not filename.endswith(".csv"):
        raise BadRequestError("Only CSV files are supported")

    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise PayloadTooLargeError(f"File too large (max {limit_mb}MB)")

    result = import_statement(
        client,
        file_name=filename,
        content=contents,
        user_id=user.id,
        bucket=settings.STATEMENTS_BUCKET,
        bank_name=bank_name,
        account_number=account_number,
    )

    parsed = result.parsed
    return UploadResponse(
        statement=UploadedStatement(
            id=result.statement_id,
            file_name=result.file_name,
            transaction_count=result.transaction_count,
            skipped_rows=parsed.skipped_rows,
            date_from=parsed.date_from,
            date_to=parsed.date_to,
        )
    )


@router.get("", response_model=StatementListResponse)
async def get_statements(
    client: Client = Depends(get_user_client),
    user: Any = Depends(get_current_user),
):
    """List uploaded statements, newest first."""
    statements = list_statements(client)
    return {"statements": statements, "count": len(statements)}
