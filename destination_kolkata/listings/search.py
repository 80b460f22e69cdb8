from __future__ import annotations

import time
from typing import Any, Mapping

from ..analytics.store import record_event
from .config import DEFAULT_QUERY_CONFIG, QueryConfig
from .data_store import get_store
from .documents import primary_image
from .models import ListingPage, Pagination
from .pipeline import assemble_pipeline, count_pipeline
from .predicates import build_predicate
from .query import FilterQuery, normalize_params
from .resources import ResourceConfig


def _search_event(
    resource: ResourceConfig,
    filters: FilterQuery,
    total: int,
    returned: int,
    elapsed_ms: float,
) -> dict[str, Any]:
    return {
        "resource": resource.name,
        "search": filters.search,
        "categories": list(filters.categories),
        "rating": filters.rating,
        "price": filters.min_price is not None or filters.max_price is not None,
        "geo": filters.geo is not None,
        "flags": list(filters.flags),
        "page": filters.page,
        "total": total,
        "results_returned": returned,
        "response_time_ms": elapsed_ms,
    }


def search_listings(
    resource: ResourceConfig,
    params: Mapping[str, str],
    config: QueryConfig = DEFAULT_QUERY_CONFIG,
) -> ListingPage:
    """
    Run one list request end to end.

    The page fetch and the count share the same first stage, so the total
    always describes the same predicate and proximity window as the items.
    Store failures propagate as ``StoreError``; nothing partial is returned.
    """
    start_time = time.time()

    filters = normalize_params(params, resource, config)
    predicate = build_predicate(filters, resource)
    store = get_store(resource.name)

    items = store.aggregate(assemble_pipeline(predicate, filters, resource))
    for item in items:
        item["primaryImage"] = primary_image(item)
    total = store.count(count_pipeline(predicate, filters))

    page = ListingPage(
        items=items,
        pagination=Pagination.build(filters.page, filters.limit, total),
        filters=filters.echo(resource),
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("search", _search_event(resource, filters, total, len(items), elapsed_ms))
    return page
