"""Parameterized SQL fragment builders.

Values never touch the SQL text: every value is bound to a generated named
placeholder (``:p0``, ``:p1``, ...) in the order it was added, so placeholder
names and parameters cannot drift apart.

Example:
    qb = QueryBuilder()
    qb.where("b.curriculum_component = {0}", "Mathematics")
    qb.where("(b.title LIKE {0} OR b.author LIKE {0})", "%ana%")
    sql = f"SELECT * FROM books b{qb.clause}"
    rows = db.query(sql, qb.params)
"""

from __future__ import annotations

from typing import Any


class QueryBuilder:
    """Ordered list of WHERE predicates with their bound values."""

    def __init__(self, prefix: str = "p"):
        self._prefix = prefix
        self._predicates: list[str] = []
        self._params: dict[str, Any] = {}

    def bind(self, value: Any) -> str:
        """Register a value and return its placeholder."""
        name = f"{self._prefix}{len(self._params)}"
        self._params[name] = value
        return f":{name}"

    def where(self, template: str, *values: Any) -> QueryBuilder:
        """Add a predicate.

        Args:
            template: SQL predicate with ``{0}``, ``{1}``... slots for values.
                A slot may appear more than once.
            values: Values bound to the slots, in order.
        """
        placeholders = [self.bind(value) for value in values]
        self._predicates.append(template.format(*placeholders))
        return self

    def where_if(self, condition: bool, template: str, *values: Any) -> QueryBuilder:
        """Add a predicate only when ``condition`` holds."""
        if condition:
            self.where(template, *values)
        return self

    @property
    def clause(self) -> str:
        """`` WHERE a AND b`` or an empty string."""
        if not self._predicates:
            return ""
        return " WHERE " + " AND ".join(self._predicates)

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    def paginate(self, limit: int, offset: int) -> tuple[str, dict[str, Any]]:
        """Return a LIMIT/OFFSET suffix and the full parameter set for it.

        The builder itself is left unchanged so the same filters can feed a
        COUNT query.
        """
        params = self.params
        limit_name = f"{self._prefix}{len(params)}"
        offset_name = f"{self._prefix}{len(params) + 1}"
        params[limit_name] = limit
        params[offset_name] = offset
        return f" LIMIT :{limit_name} OFFSET :{offset_name}", params


class SetClause:
    """Partial ``UPDATE ... SET`` list over a fixed set of columns."""

    def __init__(self, allowed: set[str] | frozenset[str], prefix: str = "s"):
        self._allowed = allowed
        self._prefix = prefix
        self._assignments: list[str] = []
        self._params: dict[str, Any] = {}

    def set(self, column: str, value: Any) -> SetClause:
        if column not in self._allowed:
            raise ValueError(f"Column '{column}' is not updatable")
        name = f"{self._prefix}{len(self._params)}"
        self._params[name] = value
        self._assignments.append(f"{column} = :{name}")
        return self

    def __bool__(self) -> bool:
        return bool(self._assignments)

    @property
    def sql(self) -> str:
        return ", ".join(self._assignments)

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)
