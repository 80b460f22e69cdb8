from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import pandas as pd

from .query import FilterQuery
from .resources import RATING_FIELD, ResourceConfig


def field_column(df: pd.DataFrame, field: str) -> pd.Series:
    """Column for a dotted field path; all-missing when the store lacks it."""
    if field in df.columns:
        return df[field]
    return pd.Series([None] * len(df), index=df.index, dtype=object)


def _contains_text(value: Any, term: str) -> bool:
    if isinstance(value, str):
        return term in value.lower()
    if isinstance(value, (list, tuple)):
        return any(isinstance(v, str) and term in v.lower() for v in value)
    return False


def _any_of(value: Any, wanted: frozenset[str]) -> bool:
    if isinstance(value, (list, tuple)):
        return any(isinstance(v, str) and v.lower() in wanted for v in value)
    return isinstance(value, str) and value.lower() in wanted


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any

    def mask(self, df: pd.DataFrame) -> pd.Series:
        return field_column(df, self.field).apply(lambda v: v == self.value).astype(bool)


@dataclass(frozen=True)
class Range:
    field: str
    gte: Any = None
    lte: Any = None

    def mask(self, df: pd.DataFrame) -> pd.Series:
        col = field_column(df, self.field)
        bound = self.gte if self.gte is not None else self.lte
        if isinstance(bound, pd.Timestamp):
            if not pd.api.types.is_datetime64_any_dtype(col):
                col = pd.to_datetime(col, utc=True, errors="coerce", format="ISO8601")
        else:
            col = pd.to_numeric(col, errors="coerce")
        mask = pd.Series(True, index=df.index)
        if self.gte is not None:
            mask &= col >= self.gte
        if self.lte is not None:
            mask &= col <= self.lte
        return mask


@dataclass(frozen=True)
class AnyOf:
    field: str
    values: tuple[str, ...]

    def mask(self, df: pd.DataFrame) -> pd.Series:
        wanted = frozenset(v.lower() for v in self.values)
        return field_column(df, self.field).apply(_any_of, args=(wanted,)).astype(bool)


@dataclass(frozen=True)
class TextSearch:
    term: str
    fields: tuple[str, ...]

    def mask(self, df: pd.DataFrame) -> pd.Series:
        term = self.term.lower()
        mask = pd.Series(False, index=df.index)
        for field in self.fields:
            mask |= field_column(df, field).apply(_contains_text, args=(term,)).astype(bool)
        return mask


Clause = Union[Equals, Range, AnyOf, TextSearch]


@dataclass(frozen=True)
class Predicate:
    """Conjunction of clauses; the empty predicate matches everything."""

    clauses: tuple[Clause, ...] = ()

    def mask(self, df: pd.DataFrame) -> pd.Series:
        mask = pd.Series(True, index=df.index)
        for clause in self.clauses:
            mask &= clause.mask(df)
        return mask


def build_predicate(filters: FilterQuery, resource: ResourceConfig) -> Predicate:
    """Translate a filter query into store clauses. Pure and deterministic."""
    clauses: list[Clause] = []

    if filters.status is not None:
        clauses.append(Equals("status", filters.status))

    if filters.search:
        clauses.append(TextSearch(filters.search, resource.search_fields))

    if resource.price_field and (filters.min_price is not None or filters.max_price is not None):
        clauses.append(Range(resource.price_field, gte=filters.min_price, lte=filters.max_price))

    if filters.rating is not None:
        clauses.append(Range(RATING_FIELD, gte=filters.rating))

    if filters.categories:
        clauses.append(AnyOf(resource.set_field, filters.categories))

    list_fields = dict(resource.list_params)
    for param, values in filters.lists:
        clauses.append(AnyOf(list_fields[param], values))

    flag_fields = dict(resource.flags)
    for param in filters.flags:
        clauses.append(Equals(flag_fields[param], True))

    if resource.date_field and (filters.start_date is not None or filters.end_date is not None):
        clauses.append(Range(resource.date_field, gte=filters.start_date, lte=filters.end_date))

    return Predicate(tuple(clauses))
