"""
Ordered stage sequence executed by the listing store.

A list request is always: proximity-or-match, then sort (match mode only),
then skip/limit, then card projection. The count query reuses the first
stage alone.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import pandas as pd

from .geo import haversine_m, split_coordinates
from .predicates import Predicate, field_column
from .query import FilterQuery
from .resources import RATING_FIELD, ResourceConfig

SORT_PRECEDENCE: tuple[tuple[str, int], ...] = (
    ("featured", -1),
    ("promoted", -1),
    (RATING_FIELD, -1),
    ("createdAt", -1),
)

DISTANCE_FIELD = "distance"


class PipelineOrderError(ValueError):
    """Raised when pagination would run on an unordered result set."""


@dataclass(frozen=True)
class Match:
    predicate: Predicate

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.loc[self.predicate.mask(df)]


@dataclass(frozen=True)
class GeoNear:
    """Proximity search and predicate filtering as one stage, nearest first."""

    lng: float
    lat: float
    max_distance_km: float
    predicate: Predicate

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        lngs, lats = split_coordinates(field_column(df, "location.coordinates"))
        distances = haversine_m(self.lng, self.lat, lngs, lats)
        within = pd.Series(distances <= self.max_distance_km * 1000.0, index=df.index)
        keep = self.predicate.mask(df) & within
        out = df.loc[keep].copy()
        out[DISTANCE_FIELD] = distances[keep.to_numpy()]
        return out.sort_values(DISTANCE_FIELD, kind="mergesort")


@dataclass(frozen=True)
class Sort:
    keys: tuple[tuple[str, int], ...]

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        keys = [(f, d) for f, d in self.keys if f in df.columns]
        if df.empty or not keys:
            return df
        return df.sort_values(
            by=[f for f, _ in keys],
            ascending=[d > 0 for _, d in keys],
            kind="mergesort",
            na_position="last",
        )


@dataclass(frozen=True)
class Skip:
    count: int

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.iloc[self.count:]


@dataclass(frozen=True)
class Limit:
    count: int

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.iloc[: self.count]


@dataclass(frozen=True)
class AddFields:
    fields: tuple[tuple[str, str], ...]

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        out = df.copy()
        for target, source in self.fields:
            out[target] = field_column(df, source)
        return out


@dataclass(frozen=True)
class Project:
    fields: tuple[str, ...]

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        keep = [
            c for c in df.columns
            if c in self.fields or any(c.startswith(f + ".") for f in self.fields)
        ]
        return df[keep]


Stage = Union[Match, GeoNear, Sort, Skip, Limit, AddFields, Project]


def check_order(stages: list[Stage]) -> None:
    if not stages or not isinstance(stages[0], (Match, GeoNear)):
        raise PipelineOrderError("pipeline must open with a match or proximity stage")
    paged = False
    for stage in stages[1:]:
        if isinstance(stage, GeoNear):
            raise PipelineOrderError("proximity search must be the first stage")
        if isinstance(stage, (Skip, Limit)):
            paged = True
        elif isinstance(stage, (Sort, Match)) and paged:
            raise PipelineOrderError("skip/limit must come after filtering and sorting")


def first_stage(predicate: Predicate, filters: FilterQuery) -> Match | GeoNear:
    if filters.geo is not None:
        return GeoNear(
            lng=filters.geo.lng,
            lat=filters.geo.lat,
            max_distance_km=filters.geo.distance_km,
            predicate=predicate,
        )
    return Match(predicate)


def assemble_pipeline(
    predicate: Predicate,
    filters: FilterQuery,
    resource: ResourceConfig,
) -> list[Stage]:
    stages: list[Stage] = [first_stage(predicate, filters)]
    # Proximity results are already distance-ordered.
    if filters.geo is None:
        stages.append(Sort(SORT_PRECEDENCE))
    stages.extend([
        Skip(filters.skip),
        Limit(filters.limit),
        AddFields((("reviewCount", "rating.count"),)),
        Project(resource.projection),
    ])
    return stages


def count_pipeline(predicate: Predicate, filters: FilterQuery) -> list[Stage]:
    return [first_stage(predicate, filters)]
