"""Statement builder for the filtered property listing.

Filters are held as an ordered list of ``Predicate`` triples. Rendering
walks that list once, appending each value to the parameter list and
naming its placeholder after the value's 1-based position (``:p1``,
``:p2``, ...), so placeholder N always binds ``params[N - 1]``. The
result limit is appended last.

Usage:
    statement = (
        PropertyQuery()
        .min_price(100)
        .max_price(200)
        .city_contains("austin")
        .limit(10)
        .build()
    )
    db.execute(text(statement.sql), statement.bind_params())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from config import settings
from models_pydantic import PropertySearchOptions

BASE_SELECT = (
    "SELECT properties.*, avg(property_reviews.rating) AS average_rating\n"
    "FROM properties\n"
    "LEFT JOIN property_reviews ON properties.id = property_reviews.property_id"
)

_OPERATORS = frozenset({"=", ">=", "<=", "LIKE"})


@dataclass(frozen=True)
class Predicate:
    column: str
    operator: str
    value: Any

    def __post_init__(self):
        if self.operator not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {self.operator!r}")

    def render(self, position: int) -> str:
        return f"{self.column} {self.operator} :p{position}"


@dataclass(frozen=True)
class Statement:
    sql: str
    params: tuple[Any, ...]

    def bind_params(self) -> dict[str, Any]:
        return {f"p{i}": value for i, value in enumerate(self.params, start=1)}


def validate_limit(limit: Any) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    return limit


@dataclass(frozen=True)
class PropertyQuery:
    """Immutable builder; every filter method returns a new query."""

    where: tuple[Predicate, ...] = ()
    having: tuple[Predicate, ...] = ()
    result_limit: int = field(default_factory=lambda: settings.default_result_limit)

    def _add_where(self, predicate: Predicate) -> PropertyQuery:
        return PropertyQuery(self.where + (predicate,), self.having, self.result_limit)

    def min_price(self, amount: Optional[int]) -> PropertyQuery:
        if not amount:
            return self
        return self._add_where(Predicate("properties.cost_per_night", ">=", amount))

    def max_price(self, amount: Optional[int]) -> PropertyQuery:
        if not amount:
            return self
        return self._add_where(Predicate("properties.cost_per_night", "<=", amount))

    def city_contains(self, city: Optional[str]) -> PropertyQuery:
        """Case-insensitive substring match on the city column."""
        if not city:
            return self
        return self._add_where(Predicate("lower(properties.city)", "LIKE", f"%{city.lower()}%"))

    def owned_by(self, owner_id: Optional[int]) -> PropertyQuery:
        if not owner_id:
            return self
        return self._add_where(Predicate("properties.owner_id", "=", owner_id))

    def min_rating(self, rating: Optional[float]) -> PropertyQuery:
        # Compares the per-property average, so it belongs after GROUP BY.
        if not rating:
            return self
        return PropertyQuery(
            self.where,
            self.having + (Predicate("avg(property_reviews.rating)", ">=", rating),),
            self.result_limit,
        )

    def limit(self, limit: int) -> PropertyQuery:
        return PropertyQuery(self.where, self.having, validate_limit(limit))

    def build(self) -> Statement:
        params: list[Any] = []

        def bind(predicate: Predicate) -> str:
            params.append(predicate.value)
            return predicate.render(len(params))

        parts = [BASE_SELECT]
        where = [bind(p) for p in self.where]
        if where:
            parts.append("WHERE " + " AND ".join(where))
        parts.append("GROUP BY properties.id")
        having = [bind(p) for p in self.having]
        if having:
            parts.append("HAVING " + " AND ".join(having))
        params.append(validate_limit(self.result_limit))
        parts.append("ORDER BY properties.cost_per_night ASC")
        parts.append(f"LIMIT :p{len(params)}")
        return Statement("\n".join(parts) + ";", tuple(params))


def build_property_search(
    options: Optional[PropertySearchOptions] = None,
    limit: Optional[int] = None,
) -> Statement:
    """Apply the search filters in their fixed order and build the statement."""
    options = options or PropertySearchOptions()
    query = (
        PropertyQuery()
        .min_price(options.minimum_price_per_night)
        .max_price(options.maximum_price_per_night)
        .city_contains(options.city)
        .owned_by(options.owner_id)
        .min_rating(options.minimum_rating)
    )
    if limit is not None:
        query = query.limit(limit)
    return query.build()
