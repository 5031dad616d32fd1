"""
Product record store.

Thin CRUD layer over the Supabase products table: find / insert /
update / delete. Every failure surfaces as DatabaseError so batch
callers can count it and move on.
"""

from typing import Any, Optional
import structlog

from config import get_write_client
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)

# PostgREST default max rows per response
DEFAULT_PAGE_SIZE = 1000


class ProductStore:
    """
    Record store used by the upsert engine and duplicate reconciler.

    Writes default to the service-role client when configured.
    """

    def __init__(self, client=None, table: str = "products", logger=None):
        self.db = client if client is not None else get_write_client()
        self.table = table
        self.logger = logger or structlog.get_logger(__name__)

    # ===================
    # READ OPERATIONS
    # ===================

    def find(
        self,
        org_id: Optional[str],
        filters: Optional[dict[str, Any]] = None,
        columns: str = "*",
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[dict]:
        """
        Find records matching every filter.

        Args:
            org_id: Tenant scope, or None to search all organizations
            filters: Column -> required value (None matches NULL)
            columns: Columns to return
            order_by: Optional sort column
            descending: Sort direction for order_by
            limit: Page size; all rows the server returns when omitted
            offset: First row of the page (with limit)

        Returns:
            Matching rows (possibly empty)

        Raises:
            DatabaseError: If the query fails
        """
        try:
            query = self.db.table(self.table).select(columns)

            if org_id is not None:
                query = query.eq("org_id", org_id)
            for column, value in (filters or {}).items():
                if value is None:
                    query = query.is_(column, "null")
                else:
                    query = query.eq(column, value)

            if order_by:
                query = query.order(order_by, desc=descending)
            if limit is not None:
                query = query.range(offset, offset + limit - 1)

            result = query.execute()
            return result.data or []

        except Exception as e:
            self.logger.error(
                "find_products_failed",
                org_id=org_id,
                filters=filters,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def find_all(
        self,
        org_id: Optional[str],
        filters: Optional[dict[str, Any]] = None,
        columns: str = "*",
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[dict]:
        """
        Find every matching record, reading page by page in id order.

        Use for full-table scans; a single find() is capped by the
        server's max rows per response.

        Raises:
            DatabaseError: If any page fails
        """
        rows: list[dict] = []
        offset = 0

        while True:
            page = self.find(
                org_id,
                filters,
                columns=columns,
                order_by="id",
                limit=page_size,
                offset=offset,
            )
            rows.extend(page)
            if len(page) < page_size:
                break
            offset += page_size

        self.logger.debug("find_all_complete", org_id=org_id, rows=len(rows), pages=offset // page_size + 1)
        return rows

    # ===================
    # WRITE OPERATIONS
    # ===================

    def insert(self, record: dict[str, Any]) -> str:
        """
        Insert one record.

        Returns:
            New record id

        Raises:
            DatabaseError: If the insert fails
        """
        try:
            result = self.db.table(self.table).insert(record).execute()
            if not result.data:
                raise DatabaseError("insert", "no row returned")
            return str(result.data[0]["id"])

        except DatabaseError:
            raise
        except Exception as e:
            self.logger.error(
                "insert_product_failed",
                org_id=record.get("org_id"),
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

    def update(self, record_id: str, patch: dict[str, Any]) -> str:
        """
        Apply a patch to one record.

        Returns:
            The record id

        Raises:
            DatabaseError: If the update fails
        """
        try:
            self.db.table(self.table).update(patch).eq("id", record_id).execute()
            return record_id

        except Exception as e:
            self.logger.error(
                "update_product_failed",
                record_id=record_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

    def delete(self, record_ids: list[str]) -> int:
        """
        Hard delete records by id.

        Returns:
            Number of ids requested for deletion

        Raises:
            DatabaseError: If the delete fails
        """
        if not record_ids:
            return 0

        try:
            self.db.table(self.table).delete().in_("id", record_ids).execute()
            return len(record_ids)

        except Exception as e:
            self.logger.error(
                "delete_products_failed",
                count=len(record_ids),
                error=str(e)
            )
            raise DatabaseError("delete", str(e))
