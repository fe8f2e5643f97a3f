# app/db/filters.py
"""
Dynamic WHERE-clause composition from typed predicate descriptors.

A Predicate names a field, an operator and a value. A FilterBuilder knows
which column expression each field maps to and turns a list of predicates
into one ANDed SQLAlchemy clause. Values always travel as bound parameters;
they are never spliced into the SQL text.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import and_
from sqlalchemy.dialects import sqlite
from sqlalchemy.sql.expression import ColumnElement, Select


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str
    value: Any


def escape_like(value: str, escape_char: str = "\\") -> str:
    """Make LIKE wildcards in user input match literally."""
    return (
        value.replace(escape_char, escape_char * 2)
        .replace("%", escape_char + "%")
        .replace("_", escape_char + "_")
    )


class FilterBuilder:
    def __init__(self, fields: Mapping[str, ColumnElement]):
        self._fields = dict(fields)

    def predicate_clause(self, predicate: Predicate) -> ColumnElement:
        if predicate.field not in self._fields:
            raise ValueError(f"Unknown filter field: {predicate.field!r}")
        column = self._fields[predicate.field]
        op = predicate.op
        value = predicate.value

        if op == "eq":
            return column == value
        if op == "ne":
            return column != value
        if op == "contains":
            return column.like(f"%{escape_like(str(value))}%", escape="\\")
        if op == "ge":
            return column >= value
        if op == "le":
            return column <= value
        if op == "in":
            return column.in_(list(value))
        raise ValueError(f"Unknown filter operator: {op!r}")

    def where(self, predicates: Sequence[Predicate]) -> Optional[ColumnElement]:
        """ANDed clause for all predicates, or None when there are none."""
        clauses = [self.predicate_clause(p) for p in predicates]
        if not clauses:
            return None
        return and_(*clauses)

    def apply(self, stmt: Select, predicates: Sequence[Predicate]) -> Select:
        clause = self.where(predicates)
        if clause is None:
            return stmt
        return stmt.where(clause)


def compile_statement(stmt, dialect=None) -> Tuple[str, List[Any]]:
    """
    Render a statement to its parameterized SQL text and the ordered list of
    values bound to its placeholders.
    """
    compiled = stmt.compile(dialect=dialect or sqlite.dialect())
    params: Dict[str, Any] = compiled.params
    names = compiled.positiontup if compiled.positiontup is not None else list(params)
    return str(compiled), [params[name] for name in names]


def optional_predicates(**criteria: Tuple[str, str, Any]) -> List[Predicate]:
    """
    Build predicates from ``field=(op, value)`` pairs, skipping criteria whose
    value is None or an empty string.
    """
    predicates = []
    for field_name, (op, value) in criteria.items():
        if value is None or value == "":
            continue
        predicates.append(Predicate(field_name, op, value))
    return predicates
