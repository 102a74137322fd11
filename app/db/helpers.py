# app/db/helpers.py
"""
Database helper functions for common read patterns.
Reduces boilerplate in service layer.
"""

from typing import Any

import psycopg
from psycopg import sql

from app.db.pool import get_db_connection
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

Query = str | sql.Composable


class DatabaseError(Exception):
    """Custom exception for database operations."""

    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.operation = operation


def _query_preview(query: Query) -> str:
    return (query if isinstance(query, str) else repr(query))[:100]


async def fetch_all(query: Query, params: tuple = ()) -> list[dict[str, Any]]:
    """
    Execute query and return all rows as list of dicts.

    Args:
        query: SQL query with %s placeholders
        params: Query parameters

    Returns:
        List of dicts with row data
    """
    try:
        async with await get_db_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return await cur.fetchall()

    except psycopg.Error as e:
        logger.error("Database fetch_all error", query=_query_preview(query), error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_all") from e


async def fetch_all_paged(table: str, order_by: str = "id", page_size: int = 1000) -> list[dict[str, Any]]:
    """
    Read a whole table in fixed-size pages ordered by `order_by`.

    Stops on an empty page or a page shorter than `page_size`.
    """
    query = sql.SQL("SELECT * FROM {table} ORDER BY {order_by} ASC LIMIT %s OFFSET %s").format(
        table=sql.Identifier(table),
        order_by=sql.Identifier(order_by),
    )

    rows: list[dict[str, Any]] = []
    offset = 0
    while True:
        page = await fetch_all(query, (page_size, offset))
        rows.extend(page)
        logger.debug("Fetched table page", table=table, offset=offset, page_rows=len(page))

        if len(page) < page_size:
            break
        offset += page_size

    logger.info("Finished reading table", table=table, total_rows=len(rows))
    return rows
