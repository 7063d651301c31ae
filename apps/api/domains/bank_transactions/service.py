"""Bank transactions service: listing, summaries, overrides, re-categorization."""

from typing import Any, Optional

import pandas as pd
import structlog
from supabase import Client

from apps.api.core.errors import NotFoundError, PersistenceError
from packages.categorization.constants import Category
from packages.categorization.rules import categorize

logger = structlog.get_logger()

TABLE = "bank_transactions"

# Listing filter -> stored transaction_type
DIRECTION_TYPES = {
    "revenue": "credit",
    "expenses": "debit",
}


def list_transactions(
    client: Client,
    direction: str = "all",
    category: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Business transactions, newest first, optionally filtered."""
    query = (
        client.table(TABLE)
        .select("*")
        .eq("is_business", True)
        .order("transaction_date", desc=True)
    )

    transaction_type = DIRECTION_TYPES.get(direction)
    if transaction_type:
        query = query.eq("transaction_type", transaction_type)

    if category:
        query = query.eq("category", category)

    result = query.execute()
    return result.data or []


def summarize_transactions(rows: list[dict[str, Any]]) -> dict[str, Any]:
    """Revenue, expenses, net profit and per-category totals."""
    df = pd.DataFrame(rows, columns=["transaction_type", "category", "amount"])
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)

    total_revenue = float(df.loc[df["transaction_type"] == "credit", "amount"].sum())
    total_expenses = float(df.loc[df["transaction_type"] == "debit", "amount"].sum())

    by_category = (
        df.dropna(subset=["category"]).groupby("category")["amount"].sum().round(2)
    )

    return {
        "total_revenue": round(total_revenue, 2),
        "total_expenses": round(total_expenses, 2),
        "net_profit": round(total_revenue - total_expenses, 2),
        "by_category": {str(k): float(v) for k, v in by_category.items()},
    }


def update_transaction(
    client: Client, transaction_id: str, changes: dict[str, Any]
) -> dict[str, Any]:
    """Apply a manual override; raises NotFoundError for unknown ids."""
    result = client.table(TABLE).update(changes).eq("id", transaction_id).execute()
    if not result.data:
        raise NotFoundError(f"Transaction {transaction_id} not found")
    logger.info("transaction_updated", transaction_id=transaction_id, fields=sorted(changes))
    return result.data[0]


def recategorize_transactions(
    client: Client,
    statement_id: Optional[str] = None,
    only_uncategorized: bool = False,
) -> tuple[int, int]:
    """Re-run the rules over stored rows. Returns (checked, updated)."""
    query = client.table(TABLE).select("id, description, category")
    if statement_id:
        query = query.eq("statement_id", statement_id)
    if only_uncategorized:
        query = query.eq("category", Category.UNCATEGORIZED.value)

    rows = query.execute().data or []

    updated = 0
    for row in rows:
        new_category = categorize(row.get("description")).value
        if new_category == row.get("category"):
            continue
        try:
            client.table(TABLE).update({"category": new_category}).eq("id", row["id"]).execute()
        except Exception as e:
            logger.error("recategorize_failed", transaction_id=row["id"], error=str(e))
            raise PersistenceError(f"Failed to update transaction {row['id']}: {e}")
        updated += 1

    logger.info("transactions_recategorized", checked=len(rows), updated=updated)
    return len(rows), updated
