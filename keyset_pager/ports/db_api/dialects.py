"""Concrete SQL dialect implementations for DB-API adapters."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any


class Dialect:
    """Base dialect that defines quoting, placeholders, and value binding."""

    name: str = "generic"
    paramstyle: str = "qmark"
    quote_char: str = '"'

    def q(self, ident: str) -> str:
        """Quote SQL identifier."""

        escaped = ident.replace(self.quote_char, self.quote_char * 2)
        return f"{self.quote_char}{escaped}{self.quote_char}"

    def placeholder(self, key: str) -> str:
        """Return the positional placeholder for the current param style.

        `key` is a hint only; every supported style is positional.
        """

        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def adapt_param(self, value: Any) -> Any:
        """Convert one bound value into what the driver expects."""

        return value

    def auto_pk_sql(self, pk_name: str) -> str:
        """Return SQL fragment for auto-increment primary key column."""

        return f"{self.q(pk_name)} INTEGER PRIMARY KEY"

    def interrupt(self, conn: Any) -> bool:
        """Abort the statement running on `conn` from another thread.

        Returns False when the driver has no thread-safe way to do so; the
        statement then runs to completion.
        """

        return False


class SQLiteDialect(Dialect):
    """SQLite dialect (`?` parameters, timestamps stored as ISO-8601 text).

    SQLite compares timestamps as text, so cursor values and stored values
    must share one format: UTC `datetime.isoformat(sep=" ")`. Aware values
    are converted to UTC and naive values are taken to be UTC already.
    """

    name = "sqlite"
    paramstyle = "qmark"
    quote_char = '"'

    def adapt_param(self, value: Any) -> Any:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            else:
                value = value.astimezone(timezone.utc)
            return value.isoformat(sep=" ")
        if isinstance(value, date):
            return value.isoformat()
        return value

    def auto_pk_sql(self, pk_name: str) -> str:
        return f"{self.q(pk_name)} INTEGER PRIMARY KEY AUTOINCREMENT"

    def interrupt(self, conn: Any) -> bool:
        conn.interrupt()
        return True


class PostgresDialect(Dialect):
    """PostgreSQL dialect (`%s` positional parameters)."""

    name = "postgres"
    paramstyle = "format"
    quote_char = '"'

    def auto_pk_sql(self, pk_name: str) -> str:
        return f"{self.q(pk_name)} SERIAL PRIMARY KEY"

    def interrupt(self, conn: Any) -> bool:
        # psycopg and psycopg2 both send a server-side cancel request.
        conn.cancel()
        return True


class MySQLDialect(Dialect):
    """MySQL dialect (`%s` positional parameters, backtick quoting)."""

    name = "mysql"
    paramstyle = "format"
    quote_char = "`"

    def auto_pk_sql(self, pk_name: str) -> str:
        return f"{self.q(pk_name)} INT AUTO_INCREMENT PRIMARY KEY"


def dialect_for(name: str) -> Dialect:
    """Return a dialect instance by its configured name."""

    dialects = {
        SQLiteDialect.name: SQLiteDialect,
        PostgresDialect.name: PostgresDialect,
        MySQLDialect.name: MySQLDialect,
    }
    try:
        return dialects[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unsupported dialect {name!r}. Use one of: {', '.join(sorted(dialects))}."
        ) from None
