from typing import Any, Dict, Iterable, List


class QueryBuilder:
    """
    Accumulates boolean query clauses and serializes them to the
    Elasticsearch query DSL.

    Clause kinds:
        must:   every clause has to match, contributes to the score
        should: optional, boosts relevance of matching documents
        filter: has to match, does not affect the score
    """

    CLAUSE_KINDS = ("must", "should", "filter")

    def __init__(self, name: str = "bool"):
        self.name = name
        self._clauses: Dict[str, List[Dict[str, Any]]] = {}

    def must(self, clause: Dict[str, Any]) -> "QueryBuilder":
        return self.add_clause("must", clause)

    def should(self, clause: Dict[str, Any]) -> "QueryBuilder":
        return self.add_clause("should", clause)

    def filter(self, clause: Dict[str, Any]) -> "QueryBuilder":
        return self.add_clause("filter", clause)

    def exists(self, field: str) -> "QueryBuilder":
        """Filter on documents where `field` has a value."""
        return self.filter({"exists": {"field": field}})

    def terms(self, field: str, values: Iterable[str]) -> "QueryBuilder":
        """Filter on documents where `field` holds one of `values`."""
        return self.filter({"terms": {field: list(values)}})

    def add_clause(self, kind: str, clause: Dict[str, Any]) -> "QueryBuilder":
        if kind not in self.CLAUSE_KINDS:
            raise ValueError(f"Unknown clause kind: {kind}")
        self._clauses.setdefault(kind, []).append(clause)
        return self

    def get_terms(self, kind: str) -> List[Dict[str, Any]]:
        return list(self._clauses.get(kind, []))

    def to_dict(self) -> Dict[str, Any]:
        clauses = {
            kind: list(self._clauses[kind])
            for kind in self.CLAUSE_KINDS
            if self._clauses.get(kind)
        }
        return {self.name: clauses}
