"""Bank statement service: parse, categorize and persist an uploaded CSV.

The parser and categorizer are pure; everything that touches Supabase
(storage, statement row, transaction rows, status lifecycle) lives here.
A statement row moves processing -> completed, or processing -> error when
the transaction insert fails after the statement was recorded. A failed
status update is logged and does not change the outcome of the import.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from supabase import Client

from apps.api.core.errors import BadRequestError, PersistenceError
from packages.categorization.rules import categorize
from packages.ingestion_engine.parser import (
    ParsedStatement,
    StatementFormatError,
    parse_statement,
)

logger = structlog.get_logger()

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class StatementImportResult:
    """Outcome of a successful import."""

    statement_id: str
    file_name: str
    parsed: ParsedStatement

    @property
    def transaction_count(self) -> int:
        return len(self.parsed.transactions)


def decode_statement(content: bytes) -> str:
    """Decode uploaded bytes; UTF-8 (with or without BOM) first, then latin-1."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def parse_uploaded_statement(content: bytes) -> ParsedStatement:
    """Decode and parse, mapping format errors to a 400."""
    text = decode_statement(content)
    try:
        return parse_statement(text)
    except StatementFormatError as e:
        raise BadRequestError(f"Failed to parse CSV: {e}")


def storage_path(file_name: str, now: Optional[float] = None) -> str:
    """Object key for an upload: '<epoch millis>-<original name>'."""
    millis = int((time.time() if now is None else now) * 1000)
    return f"{millis}-{file_name}"


def store_statement_file(
    client: Client, bucket: str, path: str, content: bytes
) -> str:
    """Upload the raw file and return its URL.

    A first failure is taken to mean the bucket does not exist yet: the bucket
    is created (private) and the upload retried once.
    """
    storage = client.storage
    file_options = {"content-type": "text/csv"}

    try:
        storage.from_(bucket).upload(path, content, file_options)
    except Exception as first_error:
        logger.info("statement_upload_retry", bucket=bucket, error=str(first_error))
        try:
            storage.create_bucket(bucket, options={"public": False})
        except Exception as bucket_error:
            logger.warning(
                "statement_bucket_create_failed",
                bucket=bucket,
                error=str(bucket_error),
            )
        else:
            try:
                storage.from_(bucket).upload(path, content, file_options)
            except Exception as retry_error:
                raise PersistenceError(f"Failed to upload file: {retry_error}")

    return storage.from_(bucket).get_public_url(path)


def build_statement_record(
    parsed: ParsedStatement,
    *,
    file_name: str,
    file_url: Optional[str],
    user_id: str,
    bank_name: Optional[str] = None,
    account_number: Optional[str] = None,
) -> dict[str, Any]:
    return {
        "file_name": file_name,
        "file_url": file_url,
        "bank_name": bank_name or None,
        "account_number": account_number or None,
        "statement_date_from": parsed.date_from.isoformat() if parsed.date_from else None,
        "statement_date_to": parsed.date_to.isoformat() if parsed.date_to else None,
        "uploaded_by": user_id,
        "status": STATUS_PROCESSING,
        "total_transactions": len(parsed.transactions),
    }


def build_transaction_rows(statement_id: str, parsed: ParsedStatement) -> list[dict[str, Any]]:
    """One bank_transactions row per parsed transaction, categorized."""
    return [
        {
            "statement_id": statement_id,
            "transaction_date": txn.date.isoformat(),
            "description": txn.description,
            "amount": txn.amount,
            "transaction_type": txn.type,
            "category": categorize(txn.description).value,
            "is_business": True,
        }
        for txn in parsed.transactions
    ]


def set_statement_status(client: Client, statement_id: str, status: str) -> bool:
    """Move a statement to a new status. Failures are logged, not raised."""
    try:
        client.table("bank_statements").update({"status": status}).eq("id", statement_id).execute()
    except Exception as e:
        logger.warning(
            "statement_status_update_failed",
            statement_id=statement_id,
            status=status,
            error=str(e),
        )
        return False
    return True


def import_statement(
    client: Client,
    *,
    file_name: str,
    content: bytes,
    user_id: str,
    bucket: str,
    bank_name: Optional[str] = None,
    account_number: Optional[str] = None,
) -> StatementImportResult:
    """Run the full upload flow for one statement file.

    Raises:
        BadRequestError: The file cannot be decoded or parsed.
        PersistenceError: Storage or database writes failed.
    """
    log = logger.bind(file_name=file_name, user_id=user_id)

    parsed = parse_uploaded_statement(content)
    log.info(
        "statement_parsed",
        transactions=len(parsed.transactions),
        skipped_rows=parsed.skipped_rows,
    )

    file_url = store_statement_file(client, bucket, storage_path(file_name), content)

    record = build_statement_record(
        parsed,
        file_name=file_name,
        file_url=file_url,
        user_id=user_id,
        bank_name=bank_name,
        account_number=account_number,
    )
    try:
        result = client.table("bank_statements").insert(record).execute()
        statement_id = str(result.data[0]["id"])
    except Exception as e:
        log.error("statement_record_failed", error=str(e))
        raise PersistenceError(f"Failed to create statement record: {e}")

    rows = build_transaction_rows(statement_id, parsed)
    if rows:
        try:
            client.table("bank_transactions").insert(rows).execute()
        except Exception as e:
            log.error("statement_transactions_failed", statement_id=statement_id, error=str(e))
            set_statement_status(client, statement_id, STATUS_ERROR)
            raise PersistenceError(f"Failed to insert transactions: {e}")

    set_statement_status(client, statement_id, STATUS_COMPLETED)
    log.info("statement_imported", statement_id=statement_id, transactions=len(rows))

    return StatementImportResult(statement_id=statement_id, file_name=file_name, parsed=parsed)


def list_statements(client: Client) -> list[dict[str, Any]]:
    """All statements visible to the caller, newest first."""
    result = (
        client.table("bank_statements")
        .select("*")
        .order("created_at", desc=True)
        .execute()
    )
    return result.data or []
