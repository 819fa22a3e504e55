"""
Database client.

Async access to the Supabase tables that hold saved artifacts. The Supabase
SDK is synchronous, so every query runs in the default executor.
"""

import asyncio
from typing import Any, Callable

from supabase import Client

from adgen.shared.errors import RetryableError
from adgen.shared.logging import get_logger
from adgen.shared.retry import backoff_delay

logger = get_logger("database")

HEALTH_CHECK_TABLE = "image_variations"


class DatabaseClient:
    """Supabase table access with retry on transient failures."""

    def __init__(self, client: Client, retry_base_delay: float = 2):
        """
        Args:
            client: Supabase client built from settings
            retry_base_delay: First backoff delay in seconds; doubles per attempt
        """
        self.client = client
        self.retry_base_delay = retry_base_delay

    async def _execute_sync(self, func: Callable[[], Any], max_attempts: int = 3) -> Any:
        """
        Run a blocking Supabase call, retrying failures with exponential backoff.

        Raises:
            RetryableError: If the call still fails on the last attempt
        """
        loop = asyncio.get_running_loop()
        for attempt in range(1, max_attempts + 1):
            try:
                return await loop.run_in_executor(None, func)
            except Exception as e:
                if attempt == max_attempts:
                    raise RetryableError(
                        f"Database operation failed after {max_attempts} attempts: {str(e)}"
                    ) from e
                delay = backoff_delay(self.retry_base_delay, attempt)
                logger.warning(
                    "Database call failed, retrying",
                    extra={"attempt": attempt, "delay": delay, "error": str(e)}
                )
                await asyncio.sleep(delay)

    def table(self, table_name: str) -> "AsyncTableQueryBuilder":
        """Start a query on ``table_name``; finish it with ``await ... .execute()``."""
        return AsyncTableQueryBuilder(self, table_name)

    async def health_check(self) -> bool:
        """True when a single-row read of the artifacts table succeeds."""
        try:
            await self._execute_sync(
                lambda: self.client.table(HEALTH_CHECK_TABLE).select("id").limit(1).execute(),
                max_attempts=1
            )
            return True
        except RetryableError:
            return False


class AsyncTableQueryBuilder:
    """
    Chains PostgREST filters on the synchronous query builder and executes
    the finished query through DatabaseClient.
    """

    def __init__(self, db_client: DatabaseClient, table_name: str):
        self.db_client = db_client
        self.table_name = table_name
        self._query_builder = db_client.client.table(table_name)

    def _chain(self, method: str, *args, **kwargs) -> "AsyncTableQueryBuilder":
        self._query_builder = getattr(self._query_builder, method)(*args, **kwargs)
        return self

    def select(self, *args, **kwargs):
        return self._chain("select", *args, **kwargs)

    def insert(self, *args, **kwargs):
        return self._chain("insert", *args, **kwargs)

    def delete(self, *args, **kwargs):
        return self._chain("delete", *args, **kwargs)

    def eq(self, *args, **kwargs):
        return self._chain("eq", *args, **kwargs)

    def neq(self, *args, **kwargs):
        return self._chain("neq", *args, **kwargs)

    def gte(self, *args, **kwargs):
        return self._chain("gte", *args, **kwargs)

    def order(self, *args, **kwargs):
        return self._chain("order", *args, **kwargs)

    def limit(self, *args, **kwargs):
        return self._chain("limit", *args, **kwargs)

    async def execute(self, max_attempts: int = 3) -> Any:
        """
        Run the query.

        Raises:
            RetryableError: If the query fails on every attempt
        """
        query_builder = self._query_builder
        return await self.db_client._execute_sync(query_builder.execute, max_attempts)
