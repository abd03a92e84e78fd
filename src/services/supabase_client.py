"""Supabase client wrapper and the tenant-scoped query gateway."""

import asyncio
import re
from typing import Any, Callable, Iterable, Optional, TypeVar
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.config import AgentConfig
from src.utils.errors import SupabaseError, QueryTimeoutError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

T = TypeVar("T")

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = AgentConfig.SUPABASE_URL
        key = AgentConfig.supabase_key()

        if not url or not key:
            raise SupabaseError(
                "SUPABASE_URL and either SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY must be set"
            )

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info(
            "Supabase client initialized",
            supabase_url=url,
            service_role=AgentConfig.is_service_role()
        )

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        """Enter async context."""
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context."""
        if exc_type:
            logger.error(
                "Supabase operation error",
                error=str(exc_val),
                error_type=exc_type.__name__
            )
        return False


_SEARCH_UNSAFE = re.compile(r"[,()%*]")


def _apply_filters(query: Any, filters: Optional[dict[str, Any]]) -> Any:
    """
    Apply `column[__op]` filters to a PostgREST query builder.

    Supported ops: eq (default; list values become `in`), neq, gte, lte, ilike.
    JSON paths use PostgREST syntax, e.g. `address->>city__ilike`.
    """
    for key, value in (filters or {}).items():
        if value is None:
            continue
        column, _, op = key.partition("__")
        op = op or "eq"
        if op == "eq":
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.in_(column, list(value))
            else:
                query = query.eq(column, value)
        elif op == "neq":
            query = query.neq(column, value)
        elif op == "gte":
            query = query.gte(column, value)
        elif op == "lte":
            query = query.lte(column, value)
        elif op == "ilike":
            query = query.ilike(column, value)
        else:
            raise SupabaseError(f"Unsupported filter operator: {op} ({key})")
    return query


def build_search_clause(columns: Iterable[str], text: str) -> str:
    """Build a PostgREST OR clause matching `text` in any of `columns`."""
    cleaned = _SEARCH_UNSAFE.sub(" ", text).strip()
    return ",".join(f"{column}.ilike.%{cleaned}%" for column in columns)


class QueryGateway:
    """
    Tenant-scoped CRUD over the Supabase store.

    Every read filters on `agency_id`; inserts must carry it. The blocking
    client runs in a worker thread bounded by the configured timeout. No
    business logic, no retries.
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self.timeout_seconds = timeout_seconds or AgentConfig.SUPABASE_QUERY_TIMEOUT_SECONDS

    async def _execute(self, operation: str, table: str, call: Callable[[Client], T]) -> T:
        async with SupabaseClient() as client:
            try:
                return await asyncio.wait_for(
                    asyncio.to_thread(call, client),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError:
                raise QueryTimeoutError(
                    f"Supabase {operation} on {table} timed out after {self.timeout_seconds}s",
                    context={"table": table, "operation": operation},
                )
            except SupabaseError:
                raise
            except Exception as e:
                raise SupabaseError(
                    f"Failed to {operation} {table}: {e}",
                    context={"table": table, "operation": operation},
                )

    async def list_records(
        self,
        table: str,
        agency_id: str,
        filters: Optional[dict[str, Any]] = None,
        search: Optional[tuple[list[str], str]] = None,
        limit: int = 50,
        offset: int = 0,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> tuple[list[dict], int]:
        """List rows for a tenant. Returns (rows, total matching count)."""
        def call(client: Client) -> tuple[list[dict], int]:
            query = client.table(table).select("*", count="exact").eq("agency_id", agency_id)
            query = _apply_filters(query, filters)
            if search and search[1]:
                query = query.or_(build_search_clause(search[0], search[1]))
            query = query.order(order_by, desc=descending).range(offset, offset + limit - 1)
            result = query.execute()
            rows = result.data or []
            total = result.count if result.count is not None else len(rows)
            return rows, total

        return await self._execute("list", table, call)

    async def get_by_id(self, table: str, record_id: str, agency_id: str) -> Optional[dict]:
        """Get a single row by ID within a tenant."""
        def call(client: Client) -> Optional[dict]:
            result = (
                client.table(table)
                .select("*")
                .eq("id", record_id)
                .eq("agency_id", agency_id)
                .limit(1)
                .execute()
            )
            return result.data[0] if result.data else None

        return await self._execute("get", table, call)

    async def insert_record(self, table: str, record: dict) -> dict:
        """Insert a row. The record must carry its agency_id."""
        if not record.get("agency_id"):
            raise SupabaseError(f"Refusing to insert into {table} without agency_id")

        def call(client: Client) -> dict:
            result = client.table(table).insert(record).execute()
            if result.data:
                return result.data[0]
            raise SupabaseError(f"Failed to insert into {table}: no data returned")

        return await self._execute("insert", table, call)

    async def update_record(self, table: str, record_id: str, agency_id: str, updates: dict) -> dict:
        """Update a row by ID within a tenant."""
        def call(client: Client) -> dict:
            result = (
                client.table(table)
                .update(updates)
                .eq("id", record_id)
                .eq("agency_id", agency_id)
                .execute()
            )
            if result.data:
                return result.data[0]
            raise SupabaseError(f"Failed to update {table}: {record_id} not found")

        return await self._execute("update", table, call)

    async def delete_record(self, table: str, record_id: str, agency_id: str) -> None:
        """Delete a row by ID within a tenant."""
        def call(client: Client) -> None:
            client.table(table).delete().eq("id", record_id).eq("agency_id", agency_id).execute()

        await self._execute("delete", table, call)


_gateway: Optional[QueryGateway] = None


def get_query_gateway() -> QueryGateway:
    """Get or create the process-wide query gateway."""
    global _gateway
    if _gateway is None:
        _gateway = QueryGateway()
    return _gateway
