from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

import pandas as pd

from .config import DEFAULT_QUERY_CONFIG, QueryConfig
from .resources import ResourceConfig

ALL_STATUSES = "all"
DEFAULT_STATUS = "active"


@dataclass(frozen=True)
class GeoOrigin:
    lat: float
    lng: float
    distance_km: int


@dataclass(frozen=True)
class FilterQuery:
    """Canonical, typed view of one listing request. Never persisted."""

    page: int = 1
    limit: int = 12
    status: str | None = DEFAULT_STATUS
    search: str | None = None
    rating: float | None = None
    min_price: int | None = None
    max_price: int | None = None
    categories: tuple[str, ...] = ()
    lists: tuple[tuple[str, tuple[str, ...]], ...] = ()
    flags: tuple[str, ...] = ()
    start_date: pd.Timestamp | None = None
    end_date: pd.Timestamp | None = None
    geo: GeoOrigin | None = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def echo(self, resource: ResourceConfig) -> dict[str, Any]:
        """The ``filters`` block echoed back to the caller."""
        echoed: dict[str, Any] = {
            resource.set_param: list(self.categories),
            "priceRange": {"min": self.min_price, "max": self.max_price},
            "rating": self.rating,
            "search": self.search,
            "status": self.status or ALL_STATUSES,
            "location": (
                {"lat": self.geo.lat, "lng": self.geo.lng, "distance": self.geo.distance_km}
                if self.geo
                else None
            ),
        }
        for param, values in self.lists:
            echoed[param] = list(values)
        if self.flags:
            echoed["flags"] = list(self.flags)
        if resource.date_field:
            echoed["dateRange"] = {
                "start": self.start_date.isoformat() if self.start_date is not None else None,
                "end": self.end_date.isoformat() if self.end_date is not None else None,
            }
        return echoed


# ── Lenient parsers: malformed input means "absent", never an error ─────


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        # "12.0" from form inputs
        parsed = _parse_float(value)
        return int(parsed) if parsed is not None else None


def _parse_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def _parse_list(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _parse_date(value: str | None) -> pd.Timestamp | None:
    if not value or not value.strip():
        return None
    try:
        parsed = pd.to_datetime(value.strip(), utc=True)
    except (ValueError, TypeError, OverflowError):
        return None
    return None if parsed is pd.NaT else parsed


def _parse_status(value: str | None) -> str | None:
    if value is None or not value.strip():
        return DEFAULT_STATUS
    value = value.strip()
    return None if value == ALL_STATUSES else value


def _parse_geo(params: Mapping[str, str], config: QueryConfig) -> GeoOrigin | None:
    lat = _parse_float(params.get("lat"))
    lng = _parse_float(params.get("lng"))
    # (0, 0) is "no location given"; directory coordinates are never there.
    if lat is None or lng is None or (lat == 0 and lng == 0):
        return None
    distance = _parse_int(params.get("distance"))
    if distance is None or distance <= 0:
        distance = config.default_distance_km
    return GeoOrigin(lat=lat, lng=lng, distance_km=distance)


def normalize_params(
    params: Mapping[str, str],
    resource: ResourceConfig,
    config: QueryConfig = DEFAULT_QUERY_CONFIG,
) -> FilterQuery:
    """Parse raw request parameters into a ``FilterQuery``."""
    page = _parse_int(params.get("page"))
    page = max(1, page) if page is not None else 1

    limit = _parse_int(params.get("limit"))
    if limit is None or limit <= 0:
        limit = resource.default_limit
    limit = min(limit, config.max_limit)

    rating = _parse_float(params.get("rating"))
    if rating is not None and rating <= 0:
        rating = None

    search = (params.get("search") or "").strip() or None

    lists = tuple(
        (param, values)
        for param, _ in resource.list_params
        if (values := _parse_list(params.get(param)))
    )
    flags = tuple(param for param, _ in resource.flags if params.get(param) == "true")

    start_date = end_date = None
    if resource.date_field:
        start_date = _parse_date(params.get("startDate"))
        end_date = _parse_date(params.get("endDate"))

    return FilterQuery(
        page=page,
        limit=limit,
        status=_parse_status(params.get("status")),
        search=search,
        rating=rating,
        min_price=_parse_int(params.get("minPrice")),
        max_price=_parse_int(params.get("maxPrice")),
        categories=_parse_list(params.get(resource.set_param)),
        lists=lists,
        flags=flags,
        start_date=start_date,
        end_date=end_date,
        geo=_parse_geo(params, config),
    )
