"""
Composable, parameterized SELECT/COUNT construction.

A query is an explicit list of (predicate fragment, bound values) pairs joined
with AND. Fragments and ORDER BY identifiers must come from code, never from
the caller: sort fields are resolved through an allow-list mapping of public
names to SQL expressions, and the direction is reduced to ASC/DESC.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple

from planner.utils.pagination import calculate_offset, resolve_sort_field, normalize_sort_order


class QueryBuilder:
    """Builder for filtered, sorted, paginated queries over one table."""

    def __init__(self, table: str, sort_fields: Mapping[str, str], tie_breaker: Optional[str] = "id"):
        """
        Args:
            table: Table name (trusted identifier)
            sort_fields: Ordered allow-list of public sort name -> SQL expression;
                the first entry is the fallback
            tie_breaker: Column appended to ORDER BY so pages are stable
        """
        self.table = table
        self.sort_fields = dict(sort_fields)
        self.tie_breaker = tie_breaker
        self._predicates: List[Tuple[str, Tuple[Any, ...]]] = []
        self._order: Optional[Tuple[str, str]] = None
        self._window: Optional[Tuple[int, int]] = None

    def where(self, fragment: str, *values: Any) -> "QueryBuilder":
        """Add a predicate; each '?' in fragment must have a matching value."""
        if fragment.count("?") != len(values):
            raise ValueError(f"Predicate '{fragment}' expects {fragment.count('?')} values, got {len(values)}")
        self._predicates.append((fragment, values))
        return self

    def where_if(self, condition: bool, fragment: str, *values: Any) -> "QueryBuilder":
        """Add a predicate only when condition holds (optional filters)."""
        if condition:
            self.where(fragment, *values)
        return self

    def order_by(self, sort_by: Optional[str], sort_order: Optional[str]) -> "QueryBuilder":
        field = resolve_sort_field(sort_by, list(self.sort_fields))
        direction = normalize_sort_order(sort_order).upper()
        self._order = (self.sort_fields[field], direction)
        return self

    def paginate(self, page: Optional[int], limit: Optional[int]) -> "QueryBuilder":
        """Apply LIMIT/OFFSET only when a limit is given."""
        if limit:
            self._window = (int(limit), calculate_offset(int(page or 1), int(limit)))
        else:
            self._window = None
        return self

    def _where_clause(self) -> Tuple[str, List[Any]]:
        if not self._predicates:
            return "", []
        params: List[Any] = []
        for _, values in self._predicates:
            params.extend(values)
        return "WHERE " + " AND ".join(fragment for fragment, _ in self._predicates), params

    def build_select(self, columns: str = "*") -> Tuple[str, List[Any]]:
        """Render the SELECT statement and its parameters."""
        where_clause, params = self._where_clause()
        parts = [f"SELECT {columns} FROM {self.table}"]
        if where_clause:
            parts.append(where_clause)
        if self._order:
            expression, direction = self._order
            order_clause = f"ORDER BY {expression} {direction}"
            if self.tie_breaker and expression != self.tie_breaker:
                order_clause += f", {self.tie_breaker} {direction}"
            parts.append(order_clause)
        if self._window:
            limit, offset = self._window
            parts.append("LIMIT ? OFFSET ?")
            params = params + [limit, offset]
        return " ".join(parts), params

    def build_count(self) -> Tuple[str, List[Any]]:
        """Render COUNT(*) over the same predicates, without order or window."""
        where_clause, params = self._where_clause()
        sql = f"SELECT COUNT(*) AS count FROM {self.table}"
        if where_clause:
            sql += f" {where_clause}"
        return sql, params


def build_update(table: str, changes: Dict[str, Any], allowed_columns: Mapping[str, str]) -> Tuple[str, List[Any]]:
    """
    Render the SET clause for a partial update.

    Keys of changes are mapped through allowed_columns; unknown keys are
    rejected rather than interpolated.
    """
    assignments = []
    params: List[Any] = []
    for key, value in changes.items():
        if key not in allowed_columns:
            raise ValueError(f"Column '{key}' cannot be updated on {table}")
        assignments.append(f"{allowed_columns[key]} = ?")
        params.append(value)
    return ", ".join(assignments), params
