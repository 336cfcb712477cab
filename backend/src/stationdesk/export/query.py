"""Composable query description shared by the paginator and CSV writer."""

from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence, Tuple

from sqlalchemy import Select, and_, func, or_, select


@dataclass(frozen=True)
class QuerySpec:
    """A filtered, ordered SELECT over one entity.

    SQLAlchemy ``Select`` objects are generative, so every refinement here
    returns a new spec and the original stays usable as-is.

    A spec built with :meth:`keyed` also knows its sort key, which lets
    batch readers continue after the last row seen instead of counting
    rows with OFFSET.
    """

    statement: Select
    keys: Tuple[Any, ...] = ()
    descending: bool = False

    def where(self, *criteria: Any) -> "QuerySpec":
        """Add conjunctive filter predicates."""
        return replace(self, statement=self.statement.where(*criteria))

    def order_by(self, *clauses: Any) -> "QuerySpec":
        """Replace the sort order. Drops any sort key."""
        return replace(
            self,
            statement=self.statement.order_by(None).order_by(*clauses),
            keys=(),
            descending=False,
        )

    def keyed(self, *columns: Any, descending: bool = False) -> "QuerySpec":
        """Sort by ``columns``, which together must identify a row."""
        clauses = [c.desc() if descending else c.asc() for c in columns]
        return replace(
            self,
            statement=self.statement.order_by(None).order_by(*clauses),
            keys=tuple(columns),
            descending=descending,
        )

    def options(self, *opts: Any) -> "QuerySpec":
        return replace(self, statement=self.statement.options(*opts))

    def slice(self, offset: int, limit: int) -> Select:
        """The statement bounded to ``[offset, offset + limit)``."""
        return self.statement.offset(offset).limit(limit)

    def key_of(self, row: Any) -> Tuple[Any, ...]:
        return tuple(getattr(row, column.key) for column in self.keys)

    def after(self, last: Optional[Sequence[Any]], limit: int) -> Select:
        """The next ``limit`` rows sorting strictly after key ``last``."""
        if not self.keys:
            raise ValueError("spec has no sort key")
        stmt = self.statement
        if last is not None:
            stmt = stmt.where(self._past(last))
        return stmt.limit(limit)

    def _past(self, last: Sequence[Any]):
        # (a, b) past (x, y): a past x, or a = x and b past y
        terms = []
        for i, column in enumerate(self.keys):
            if self.descending:
                beyond = column < last[i]
            else:
                beyond = column > last[i]
            equal = [self.keys[j] == last[j] for j in range(i)]
            terms.append(and_(*equal, beyond))
        return or_(*terms)

    def count_statement(self) -> Select:
        """COUNT over the same filters, without ordering or bounds."""
        inner = self.statement.order_by(None).limit(None).offset(None)
        return select(func.count()).select_from(inner.subquery())
