from __future__ import annotations

import asyncio
import sqlite3
import unittest
from typing import Any

from keyset_pager.core.errors import ExecutionFailed
from keyset_pager.core.executor import AsyncPageExecutor, PageExecutor
from keyset_pager.core.query_builder import assemble_page_query
from keyset_pager.entities import AnimalRanking
from keyset_pager.ports.db_api.async_database import AsyncDatabase
from keyset_pager.ports.db_api.database import Database
from keyset_pager.ports.db_api.dialects import SQLiteDialect

from tests._seed import (
    SlowAsyncDatabase,
    SlowConnection,
    SpyDatabase,
    created_at,
    seeded_pool,
    seeded_sqlite,
    slow_pool,
)


def rank_query(cursor: int = 0, limit: int = 2, direction: str = "ASC") -> Any:
    return assemble_page_query(
        "animal_rankings", "rank", cursor, direction, limit, {}, SQLiteDialect()
    )


def animal_row(rank: int, name: str) -> dict[str, Any]:
    return {
        "id": rank,
        "rank": rank,
        "name": name,
        "created_at": created_at(rank).isoformat(sep=" "),
        "updated_at": created_at(rank).isoformat(sep=" "),
    }


class _FailingCursor:
    def __init__(self, message: str):
        self.message = message

    def execute(self, sql: str, params: Any = None) -> None:
        raise sqlite3.OperationalError(self.message)

    def close(self) -> None:
        pass


class _FailingConn:
    def __init__(self, message: str = "database is locked"):
        self.message = message

    def cursor(self) -> _FailingCursor:
        return _FailingCursor(self.message)


class PageExecutorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = seeded_sqlite()
        self.executor = PageExecutor(self.db, AnimalRanking)

    def tearDown(self) -> None:
        self.db.close()

    def test_full_page_carries_next_cursor(self) -> None:
        page = self.executor.execute(rank_query(0, 2))
        self.assertEqual([row.name for row in page.rows], ["Lion", "Tiger"])
        self.assertEqual(page.last_row.rank, 2)
        self.assertEqual(page.next_cursor, 2)
        self.assertTrue(page.has_next)

    def test_short_page_is_last(self) -> None:
        page = self.executor.execute(rank_query(4, 2))
        self.assertEqual([row.name for row in page.rows], ["Wolf"])
        self.assertEqual(page.last_row.name, "Wolf")
        self.assertIsNone(page.next_cursor)
        self.assertFalse(page.has_next)

    def test_empty_page(self) -> None:
        page = self.executor.execute(rank_query(5, 2))
        self.assertEqual(page.rows, [])
        self.assertIsNone(page.last_row)
        self.assertIsNone(page.next_cursor)

    def test_descending_last_row_is_page_boundary(self) -> None:
        page = self.executor.execute(rank_query(4, 2, "DESC"))
        self.assertEqual([row.rank for row in page.rows], [3, 2])
        self.assertEqual(page.next_cursor, 2)

    def test_rows_are_scanned_into_models(self) -> None:
        row = self.executor.execute(rank_query(0, 1)).rows[0]
        self.assertIsInstance(row, AnimalRanking)
        self.assertEqual(row.created_at, created_at(1))

    def test_rows_beyond_limit_are_dropped(self) -> None:
        spy = SpyDatabase(
            rows=[animal_row(1, "Lion"), animal_row(2, "Tiger"), animal_row(3, "Elephant")]
        )
        page = PageExecutor(spy, AnimalRanking).execute(rank_query(0, 2))
        self.assertEqual(len(page.rows), 2)
        self.assertEqual(page.next_cursor, 2)

    def test_store_failure_becomes_execution_failed(self) -> None:
        executor = PageExecutor(Database(_FailingConn(), SQLiteDialect()), AnimalRanking)
        with self.assertRaises(ExecutionFailed) as ctx:
            executor.execute(rank_query())
        self.assertIsInstance(ctx.exception.cause, sqlite3.OperationalError)
        self.assertIs(ctx.exception.__cause__, ctx.exception.cause)

    def test_failure_log_names_only_the_error_class(self) -> None:
        conn = _FailingConn("no such column: secret-name")
        executor = PageExecutor(Database(conn, SQLiteDialect()), AnimalRanking)
        with self.assertLogs("keyset_pager.core.executor", level="WARNING") as logs:
            with self.assertRaises(ExecutionFailed) as ctx:
                executor.execute(rank_query())
        output = "\n".join(logs.output)
        self.assertIn("OperationalError", output)
        self.assertNotIn("secret-name", output)
        self.assertNotIn("secret-name", str(ctx.exception))

    def test_scan_mismatch_becomes_execution_failed(self) -> None:
        bad = animal_row(1, "Lion")
        bad["rank"] = "first"
        executor = PageExecutor(SpyDatabase(rows=[animal_row(2, "Tiger"), bad]), AnimalRanking)
        with self.assertRaises(ExecutionFailed) as ctx:
            executor.execute(rank_query(0, 5))
        self.assertIsInstance(ctx.exception.cause, TypeError)

    def test_missing_table_becomes_execution_failed(self) -> None:
        self.db.execute('DROP TABLE "animal_rankings";')
        with self.assertRaises(ExecutionFailed):
            self.executor.execute(rank_query())

    def test_closed_connection_becomes_execution_failed(self) -> None:
        self.db.close()
        with self.assertRaises(ExecutionFailed) as ctx:
            self.executor.execute(rank_query())
        self.assertIsInstance(ctx.exception.cause, RuntimeError)

    def test_parameter_values_are_not_logged(self) -> None:
        query = assemble_page_query(
            "animal_rankings", "name", "secret-name", "ASC", 2, {}, SQLiteDialect()
        )
        with self.assertLogs("keyset_pager.core.executor", level="DEBUG") as logs:
            self.executor.execute(query)
        output = "\n".join(logs.output)
        self.assertIn("[str, int]", output)
        self.assertNotIn("secret-name", output)

    def test_model_must_be_a_dataclass(self) -> None:
        with self.assertRaises(TypeError):
            PageExecutor(self.db, dict)


class AsyncPageExecutorTests(unittest.IsolatedAsyncioTestCase):
    async def test_async_adapter_over_pooled_sqlite(self) -> None:
        pool = seeded_pool()
        self.addCleanup(pool.close)
        async with AsyncDatabase(pool, SQLiteDialect()) as db:
            page = await AsyncPageExecutor(db, AnimalRanking).execute(rank_query(2, 2))
        self.assertEqual([row.name for row in page.rows], ["Elephant", "Leopard"])
        self.assertEqual(page.next_cursor, 4)

    async def test_timeout_raises_timeout_error(self) -> None:
        db = SlowAsyncDatabase(delay=5)
        executor = AsyncPageExecutor(db, AnimalRanking)
        with self.assertRaises(TimeoutError):
            await executor.execute(rank_query(), timeout=0.01)
        self.assertTrue(db.cancelled)

    async def test_completes_within_timeout(self) -> None:
        db = SlowAsyncDatabase(delay=0, rows=[animal_row(1, "Lion")])
        executor = AsyncPageExecutor(db, AnimalRanking)
        page = await executor.execute(rank_query(0, 1), timeout=5)
        self.assertEqual(page.next_cursor, 1)

    async def test_caller_cancellation_propagates(self) -> None:
        db = SlowAsyncDatabase(delay=5)
        task = asyncio.create_task(AsyncPageExecutor(db, AnimalRanking).execute(rank_query()))
        await asyncio.sleep(0)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertTrue(db.cancelled)

    async def test_store_failure_becomes_execution_failed(self) -> None:
        db = AsyncDatabase(_FailingConn(), SQLiteDialect())
        with self.assertRaises(ExecutionFailed) as ctx:
            await AsyncPageExecutor(db, AnimalRanking).execute(rank_query(), timeout=1)
        self.assertIsInstance(ctx.exception.cause, sqlite3.OperationalError)

    async def test_pooled_timeout_interrupts_the_running_statement(self) -> None:
        conn = SlowConnection(delay=5)
        pool = slow_pool(conn)
        self.addCleanup(pool.close)
        executor = AsyncPageExecutor(AsyncDatabase(pool, SQLiteDialect()), AnimalRanking)

        loop = asyncio.get_running_loop()
        started = loop.time()
        with self.assertRaises(TimeoutError):
            await executor.execute(rank_query(), timeout=0.05)
        self.assertLess(loop.time() - started, 1)

        self.assertTrue(conn.interrupted.is_set())
        self.assertTrue(await asyncio.to_thread(conn.finished.wait, 2))
        # The interrupted connection goes back to the pool for the next call.
        borrowed = await asyncio.to_thread(pool.acquire, 2)
        self.assertIs(borrowed, conn)
        pool.release(borrowed)

    async def test_pooled_query_leaves_the_event_loop_running(self) -> None:
        conn = SlowConnection(delay=0.3, rows=[animal_row(1, "Lion")])
        pool = slow_pool(conn)
        self.addCleanup(pool.close)
        executor = AsyncPageExecutor(AsyncDatabase(pool, SQLiteDialect()), AnimalRanking)
        ticks = 0

        async def ticker() -> None:
            nonlocal ticks
            while True:
                await asyncio.sleep(0.01)
                ticks += 1

        ticking = asyncio.create_task(ticker())
        try:
            page = await executor.execute(rank_query(0, 1), timeout=5)
        finally:
            ticking.cancel()
        self.assertEqual([row.name for row in page.rows], ["Lion"])
        self.assertGreater(ticks, 5)
        self.assertFalse(conn.interrupted.is_set())
