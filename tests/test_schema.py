from __future__ import annotations

import sqlite3
import unittest

from keyset_pager.core.errors import InvalidColumn
from keyset_pager.core.schema import (
    apply_schema,
    create_sort_indexes_sql,
    create_table_sql,
    default_index_name,
    insert_rows,
)
from keyset_pager.entities import ANIMAL_RANKINGS, RESOURCES
from keyset_pager.ports.db_api.database import Database
from keyset_pager.ports.db_api.dialects import MySQLDialect, PostgresDialect, SQLiteDialect

from tests._seed import animal_rows, created_at, resource_rows


class SchemaSqlTests(unittest.TestCase):
    def test_sqlite_table(self) -> None:
        self.assertEqual(
            create_table_sql(ANIMAL_RANKINGS, SQLiteDialect()),
            'CREATE TABLE IF NOT EXISTS "animal_rankings" ('
            '"id" INTEGER PRIMARY KEY AUTOINCREMENT, '
            '"rank" INTEGER NOT NULL UNIQUE, '
            '"name" VARCHAR(255) NOT NULL, '
            '"created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP, '
            '"updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP);',
        )

    def test_mysql_table(self) -> None:
        sql = create_table_sql(RESOURCES, MySQLDialect(), if_not_exists=False)
        self.assertTrue(sql.startswith("CREATE TABLE `resources` ("))
        self.assertIn("`id` INT AUTO_INCREMENT PRIMARY KEY", sql)
        self.assertIn("`uuid` VARCHAR(255) NOT NULL UNIQUE", sql)

    def test_one_index_per_sort_column(self) -> None:
        self.assertEqual(
            create_sort_indexes_sql(ANIMAL_RANKINGS, PostgresDialect()),
            [
                'CREATE INDEX IF NOT EXISTS "idx_animal_rankings_rank" '
                'ON "animal_rankings" ("rank");',
                'CREATE INDEX IF NOT EXISTS "idx_animal_rankings_name" '
                'ON "animal_rankings" ("name");',
            ],
        )

    def test_mysql_indexes_skip_if_not_exists(self) -> None:
        statements = create_sort_indexes_sql(RESOURCES, MySQLDialect())
        self.assertEqual(
            statements,
            [
                "CREATE INDEX `idx_resources_created_at` ON `resources` (`created_at`);",
                "CREATE INDEX `idx_resources_name` ON `resources` (`name`);",
            ],
        )

    def test_default_index_name_is_sanitized(self) -> None:
        self.assertEqual(default_index_name("my-table", "col name"), "idx_my_table_col_name")


class ApplySchemaSQLiteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.conn = sqlite3.connect(":memory:")
        self.db = Database(self.conn, SQLiteDialect())

    def tearDown(self) -> None:
        self.conn.close()

    def test_apply_schema_is_repeatable(self) -> None:
        apply_schema(self.db, ANIMAL_RANKINGS)
        apply_schema(self.db, ANIMAL_RANKINGS)
        indexes = {
            row["name"]
            for row in self.db.fetchall(
                "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = ?",
                ["animal_rankings"],
            )
        }
        self.assertIn("idx_animal_rankings_rank", indexes)
        self.assertIn("idx_animal_rankings_name", indexes)

    def test_insert_rows(self) -> None:
        apply_schema(self.db, RESOURCES)
        self.assertEqual(insert_rows(self.db, RESOURCES, resource_rows()), 5)
        rows = self.db.fetchall('SELECT "created_at" FROM "resources" ORDER BY "id" LIMIT 1')
        self.assertEqual(rows[0]["created_at"], created_at(1).isoformat(sep=" "))

    def test_insert_rows_validation(self) -> None:
        apply_schema(self.db, ANIMAL_RANKINGS)
        self.assertEqual(insert_rows(self.db, ANIMAL_RANKINGS, []), 0)
        with self.assertRaises(InvalidColumn):
            insert_rows(self.db, ANIMAL_RANKINGS, [{"rank": 1, "species": "cat"}])
        rows = animal_rows()
        rows[1] = {"name": rows[1]["name"], "rank": rows[1]["rank"]}
        with self.assertRaises(ValueError):
            insert_rows(self.db, ANIMAL_RANKINGS, rows)
        self.assertEqual(self.db.fetchall('SELECT * FROM "animal_rankings"'), [])
