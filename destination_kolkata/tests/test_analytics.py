from __future__ import annotations

import time

from fastapi.testclient import TestClient

from destination_kolkata.analytics.aggregator import compute_analytics
from destination_kolkata.analytics.store import clear_events, get_events, record_event
from destination_kolkata.app import app

client = TestClient(app)


def test_analytics_returns_empty_initially():
    resp = client.get("/analytics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_searches"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["zero_result_searches"] == {"count": 0, "rate": 0.0}


def test_list_request_records_search_event():
    client.get("/api/restaurants", params={"search": "Biryani", "cuisine": "Mughlai"})
    [event] = get_events("search")
    assert event["resource"] == "restaurants"
    assert event["search"] == "Biryani"
    assert event["categories"] == ["Mughlai"]
    assert event["total"] == 1
    assert event["response_time_ms"] >= 0


def test_analytics_aggregates_searches():
    client.get("/api/restaurants", params={"search": "biryani"})
    client.get("/api/restaurants", params={"search": "BIRYANI"})
    client.get("/api/hotels", params={"lat": "22.55", "lng": "88.35"})
    client.get("/api/attractions", params={"search": "nothing-matches-this"})

    body = client.get("/analytics").json()
    assert body["total_searches"] == 4
    assert body["searches_by_resource"] == {"restaurants": 2, "hotels": 1, "attractions": 1}
    assert body["top_search_terms"][0] == {"name": "biryani", "count": 2}
    assert body["filter_usage"]["search"] == 75.0
    assert body["filter_usage"]["location"] == 25.0
    assert body["zero_result_searches"]["count"] == 1


def test_flag_usage_counts():
    clear_events()
    record_event("search", {"resource": "attractions", "flags": ["hasParking", "isFree"]})
    record_event("search", {"resource": "attractions", "flags": ["isFree"]})
    record_event("other", {"resource": "attractions"})
    stats = compute_analytics(get_events())
    assert stats["total_searches"] == 2
    assert stats["flag_usage"] == {"hasParking": 1, "isFree": 2}
    assert stats["filter_usage"]["flags"] == 100.0


def test_events_narrowed_by_resource_and_age():
    record_event("search", {"resource": "hotels"})
    record_event("search", {"resource": "events"})
    assert [e["resource"] for e in get_events(resource="hotels")] == ["hotels"]
    assert get_events(since=time.time() + 60) == []


def test_analytics_for_one_resource():
    client.get("/api/hotels")
    client.get("/api/restaurants")
    body = client.get("/analytics", params={"resource": "hotels"}).json()
    assert body["total_searches"] == 1
    assert body["searches_by_resource"] == {"hotels": 1}
    assert client.get("/analytics", params={"resource": "promotions"}).status_code == 404
