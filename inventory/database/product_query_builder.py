# inventory/database/product_query_builder.py
# Builds the WHERE predicate for product searches from the optional filters.

from typing import Any, Dict, List, Tuple

from inventory.domain.product import ProductFilter

# Predicate that matches every row; used when no filter is supplied.
MATCH_ALL = "1=1"


class ProductQueryBuilder:
    """
    Accumulates (fragment, bound values) pairs and joins them with AND.

    Each fragment is a case-insensitive substring match against a fixed column;
    user text only ever travels as a bound value.
    """

    # (filter attribute, column, bind parameter), in the order predicates are appended.
    FILTER_COLUMNS = (
        ("name_filter", "productName", "name_filter"),
        ("manufacturer_filter", "manufacturer", "manufacturer_filter"),
        ("sku_filter", "sku", "sku_filter"),
    )

    def __init__(self):
        self._clauses: List[Tuple[str, Dict[str, Any]]] = []

    def add_substring_match(self, column: str, param_name: str, value: str) -> 'ProductQueryBuilder':
        """Adds `LOWER(column) LIKE '%value%'`. Empty values are skipped."""
        if not value:
            return self
        fragment = f"LOWER({column}) LIKE :{param_name}"
        self._clauses.append((fragment, {param_name: f"%{value.lower()}%"}))
        return self

    def where_clause(self) -> str:
        if not self._clauses:
            return MATCH_ALL
        return " AND ".join(fragment for fragment, _ in self._clauses)

    def params(self) -> Dict[str, Any]:
        bound: Dict[str, Any] = {}
        for _, values in self._clauses:
            bound.update(values)
        return bound

    def __len__(self):
        return len(self._clauses)

    @classmethod
    def from_filter(cls, criteria: ProductFilter) -> 'ProductQueryBuilder':
        builder = cls()
        for attribute, column, param_name in cls.FILTER_COLUMNS:
            builder.add_substring_match(column, param_name, getattr(criteria, attribute))
        return builder
