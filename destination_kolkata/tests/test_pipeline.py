import pytest

from destination_kolkata.listings.documents import frame_from_documents, prepare_document
from destination_kolkata.listings.pipeline import (
    SORT_PRECEDENCE,
    GeoNear,
    Limit,
    Match,
    PipelineOrderError,
    Project,
    Skip,
    Sort,
    assemble_pipeline,
    check_order,
    count_pipeline,
)
from destination_kolkata.listings.predicates import Predicate, build_predicate
from destination_kolkata.listings.query import normalize_params
from destination_kolkata.listings.resources import RESTAURANTS


def _build(params):
    filters = normalize_params(params, RESTAURANTS)
    predicate = build_predicate(filters, RESTAURANTS)
    return predicate, filters


def test_plain_pipeline_order():
    predicate, filters = _build({"page": "2", "limit": "5"})
    stages = assemble_pipeline(predicate, filters, RESTAURANTS)
    assert isinstance(stages[0], Match)
    assert stages[1] == Sort(SORT_PRECEDENCE)
    assert stages[2] == Skip(5)
    assert stages[3] == Limit(5)
    assert isinstance(stages[-1], Project)
    check_order(stages)


def test_geo_pipeline_skips_sort():
    predicate, filters = _build({"lat": "22.555", "lng": "88.3517", "distance": "3"})
    stages = assemble_pipeline(predicate, filters, RESTAURANTS)
    assert stages[0] == GeoNear(lng=88.3517, lat=22.555, max_distance_km=3, predicate=predicate)
    assert not any(isinstance(s, Sort) for s in stages)


def test_count_pipeline_is_first_stage_only():
    predicate, filters = _build({"lat": "22.555", "lng": "88.3517", "page": "3"})
    stages = count_pipeline(predicate, filters)
    assert len(stages) == 1
    assert stages[0] == assemble_pipeline(predicate, filters, RESTAURANTS)[0]


def test_sort_precedence_order():
    assert [f for f, _ in SORT_PRECEDENCE] == ["featured", "promoted", "rating.average", "createdAt"]
    assert all(direction == -1 for _, direction in SORT_PRECEDENCE)


@pytest.mark.parametrize(
    "stages",
    [
        [],
        [Skip(0), Match(Predicate())],
        [Match(Predicate()), Skip(0), Sort(SORT_PRECEDENCE)],
        [Match(Predicate()), Limit(3), Match(Predicate())],
        [Match(Predicate()), GeoNear(88.0, 22.0, 5, Predicate())],
    ],
)
def test_check_order_rejects_misordered_stages(stages):
    with pytest.raises(PipelineOrderError):
        check_order(stages)


def test_sort_stage_applies_precedence(make_listing):
    docs = [
        make_listing("plain-high", rating={"average": 4.9, "count": 3}),
        make_listing("promoted", promoted=True, rating={"average": 3.0, "count": 3}),
        make_listing("featured", featured=True, rating={"average": 2.0, "count": 3}),
        make_listing("plain-old", rating={"average": 4.0, "count": 1}, createdAt="2020-01-01T00:00:00+00:00"),
        make_listing("plain-new", rating={"average": 4.0, "count": 1}, createdAt="2024-01-01T00:00:00+00:00"),
    ]
    df = frame_from_documents([prepare_document(d) for d in docs])
    ordered = Sort(SORT_PRECEDENCE).apply(df)["name"].tolist()
    assert ordered == ["featured", "promoted", "plain-high", "plain-new", "plain-old"]


def test_geo_near_filters_and_orders_by_distance(make_listing):
    docs = [
        make_listing("far", featured=True, location={"coordinates": [88.40, 22.60]}),
        make_listing("near", location={"coordinates": [88.3517, 22.555]}),
        make_listing("mid", location={"coordinates": [88.3560, 22.555]}),
    ]
    df = frame_from_documents([prepare_document(d) for d in docs])
    out = GeoNear(lng=88.3517, lat=22.555, max_distance_km=1, predicate=Predicate()).apply(df)
    assert out["name"].tolist() == ["near", "mid"]
    assert out["distance"].is_monotonic_increasing
    assert (out["distance"] <= 1000).all()


def test_project_keeps_nested_columns(make_listing):
    df = frame_from_documents([prepare_document(make_listing("x", secret="hidden"))])
    out = Project(RESTAURANTS.projection).apply(df)
    assert "rating.average" in out.columns
    assert "address.area" in out.columns
    assert "secret" not in out.columns
