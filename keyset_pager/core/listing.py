"""Per-entity listing services built on the keyset pagination core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, List, Mapping, Optional, Tuple, TypeVar

from .contracts import AsyncDatabasePort, DatabasePort
from .descriptors import EntityDescriptor, SortColumn
from .direction import Direction
from .errors import InvalidLimit
from .executor import AsyncPageExecutor, PageExecutor, PageResult
from .filters import parse_filters
from .models import DataclassModel
from .query_builder import PageQuery, assemble_page_query

T = TypeVar("T", bound=DataclassModel)

DEFAULT_LIMIT = 50
MAX_LIMIT = 1000


@dataclass(frozen=True)
class ListingPage(Generic[T]):
    """One listing response: rows and the public key of the next page.

    `next_page_key` is `None` on the last page (short or empty).
    """

    items: List[T]
    next_page_key: Any = None


class _ListingBase(Generic[T]):
    def __init__(
        self,
        descriptor: EntityDescriptor[T],
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ):
        if default_limit < 1 or max_limit < 1:
            raise ValueError("default_limit and max_limit must be >= 1.")
        self.descriptor = descriptor
        self.default_limit = min(default_limit, max_limit)
        self.max_limit = max_limit

    def _prepare(
        self,
        dialect: Any,
        sort_key: Any,
        cursor: Any,
        limit: Optional[int],
        direction: Any,
        filters: Optional[Mapping[str, Any]],
    ) -> Tuple[SortColumn, PageQuery]:
        resolved_direction = Direction.parse(direction)
        column = self.descriptor.resolve(sort_key)
        if cursor is None or cursor == "":
            cursor_value = column.type.seed(resolved_direction)
        else:
            cursor_value = column.type.decode(cursor)
        parsed = parse_filters(filters)
        self.descriptor.require_columns(parsed)

        query = assemble_page_query(
            self.descriptor.table,
            column.name,
            cursor_value,
            resolved_direction,
            self._effective_limit(limit),
            parsed,
            dialect,
        )
        return column, query

    def _effective_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise InvalidLimit(f"limit must be a non-negative integer, got {limit!r}")
        if limit == 0:
            return self.default_limit
        return min(limit, self.max_limit)

    @staticmethod
    def _to_listing(column: SortColumn, page: PageResult[T]) -> ListingPage[T]:
        if not page.has_next:
            return ListingPage(items=page.rows, next_page_key=None)
        return ListingPage(items=page.rows, next_page_key=column.page_key(page.last_row))


class ListingService(_ListingBase[T]):
    """Lists one entity type page by page.

    Resolves the caller's sort key through the entity descriptor, validates
    and decodes the request, then assembles and runs the page query.
    """

    def __init__(
        self,
        db: DatabasePort,
        descriptor: EntityDescriptor[T],
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ):
        super().__init__(descriptor, default_limit=default_limit, max_limit=max_limit)
        self.db = db
        self.executor = PageExecutor(db, descriptor.model)

    def list_page(
        self,
        sort_key: Any,
        cursor: Any = None,
        limit: Optional[int] = None,
        direction: Any = Direction.ASC,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> ListingPage[T]:
        """Return one page ordered by `sort_key`, starting after `cursor`.

        Args:
            sort_key: Member (or member name) of the entity's sort key enum.
            cursor: Previous `next_page_key`, a typed seed, or `None` for the
                first page.
            limit: Page size; `None`/`0` uses the default, larger values are
                clamped to `max_limit`.
            direction: `Direction` or `"ASC"`/`"DESC"`.
            filters: Field -> scalar (equality) or collection (membership).

        Raises:
            InvalidDirection, InvalidColumn, InvalidCursor, InvalidLimit:
                Before any statement reaches the store.
            ExecutionFailed: If the store fails.
        """

        column, query = self._prepare(
            self.db.dialect, sort_key, cursor, limit, direction, filters
        )
        return self._to_listing(column, self.executor.execute(query))


class AsyncListingService(_ListingBase[T]):
    """Async counterpart of `ListingService` with per-call timeouts."""

    def __init__(
        self,
        db: AsyncDatabasePort,
        descriptor: EntityDescriptor[T],
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
        timeout: Optional[float] = None,
    ):
        super().__init__(descriptor, default_limit=default_limit, max_limit=max_limit)
        self.db = db
        self.timeout = timeout
        self.executor = AsyncPageExecutor(db, descriptor.model)

    async def list_page(
        self,
        sort_key: Any,
        cursor: Any = None,
        limit: Optional[int] = None,
        direction: Any = Direction.ASC,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> ListingPage[T]:
        """Return one page; see `ListingService.list_page`.

        `timeout` overrides the service default for this call.

        Raises:
            TimeoutError: If the store call outlives the timeout.
        """

        column, query = self._prepare(
            self.db.dialect, sort_key, cursor, limit, direction, filters
        )
        page = await self.executor.execute(
            query, timeout=timeout if timeout is not None else self.timeout
        )
        return self._to_listing(column, page)
