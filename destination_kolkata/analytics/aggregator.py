from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    total = len(searches)

    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    resource_counter: Counter[str] = Counter(s.get("resource", "unknown") for s in searches)

    # Search terms are compared case-insensitively
    term_counter: Counter[str] = Counter()
    for s in searches:
        if s.get("search"):
            term_counter[s["search"].strip().lower()] += 1
    top_terms = [{"name": n, "count": c} for n, c in term_counter.most_common(10)]

    category_counter: Counter[str] = Counter()
    for s in searches:
        for c in s.get("categories", []) or []:
            category_counter[c] += 1
    top_categories = [{"name": n, "count": c} for n, c in category_counter.most_common(10)]

    flag_counter: Counter[str] = Counter()
    for s in searches:
        for f in s.get("flags", []) or []:
            flag_counter[f] += 1

    filter_counts = {"search": 0, "category": 0, "rating": 0, "price": 0, "location": 0, "flags": 0}
    for s in searches:
        if s.get("search"):
            filter_counts["search"] += 1
        if s.get("categories"):
            filter_counts["category"] += 1
        if s.get("rating"):
            filter_counts["rating"] += 1
        if s.get("price"):
            filter_counts["price"] += 1
        if s.get("geo"):
            filter_counts["location"] += 1
        if s.get("flags"):
            filter_counts["flags"] += 1
    filter_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in filter_counts.items()
    }

    zero_results = sum(1 for s in searches if s.get("total") == 0)

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "searches_by_resource": dict(resource_counter),
        "top_search_terms": top_terms,
        "top_categories": top_categories,
        "flag_usage": dict(flag_counter),
        "filter_usage": filter_usage,
        "zero_result_searches": {
            "count": zero_results,
            "rate": round(zero_results / total * 100, 1) if total else 0.0,
        },
    }
