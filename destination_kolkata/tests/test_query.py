from destination_kolkata.listings.config import QueryConfig
from destination_kolkata.listings.query import normalize_params
from destination_kolkata.listings.resources import ATTRACTIONS, EVENTS, HOTELS, RESTAURANTS


def test_defaults_when_no_params():
    q = normalize_params({}, RESTAURANTS)
    assert q.page == 1
    assert q.limit == 12
    assert q.status == "active"
    assert q.search is None
    assert q.rating is None
    assert q.categories == ()
    assert q.geo is None


def test_event_default_limit_is_nine():
    assert normalize_params({}, EVENTS).limit == 9


def test_page_is_floored_at_one():
    assert normalize_params({"page": "0"}, HOTELS).page == 1
    assert normalize_params({"page": "-4"}, HOTELS).page == 1
    assert normalize_params({"page": "abc"}, HOTELS).page == 1
    assert normalize_params({"page": "3"}, HOTELS).page == 3


def test_limit_falls_back_and_is_capped():
    assert normalize_params({"limit": "0"}, HOTELS).limit == 12
    assert normalize_params({"limit": "junk"}, HOTELS).limit == 12
    assert normalize_params({"limit": "1000"}, HOTELS).limit == 100
    assert normalize_params({"limit": "30"}, HOTELS, QueryConfig(max_limit=20)).limit == 20


def test_skip_offset():
    q = normalize_params({"page": "3", "limit": "5"}, HOTELS)
    assert q.skip == 10


def test_rating_zero_or_garbage_means_no_filter():
    assert normalize_params({"rating": "0"}, HOTELS).rating is None
    assert normalize_params({"rating": "-1"}, HOTELS).rating is None
    assert normalize_params({"rating": "NaN"}, HOTELS).rating is None
    assert normalize_params({"rating": "4.5"}, HOTELS).rating == 4.5


def test_price_bounds_are_independent():
    q = normalize_params({"minPrice": "500"}, HOTELS)
    assert q.min_price == 500
    assert q.max_price is None
    q = normalize_params({"maxPrice": "x"}, HOTELS)
    assert q.max_price is None


def test_category_list_split_and_trimmed():
    q = normalize_params({"category": " Luxury, ,Budget "}, HOTELS)
    assert q.categories == ("Luxury", "Budget")
    assert normalize_params({"category": ""}, HOTELS).categories == ()


def test_restaurants_use_cuisine_param():
    q = normalize_params({"cuisine": "Bengali,Mughlai", "category": "ignored"}, RESTAURANTS)
    assert q.categories == ("Bengali", "Mughlai")


def test_geo_requires_both_coordinates():
    assert normalize_params({"lat": "22.55"}, RESTAURANTS).geo is None
    q = normalize_params({"lat": "22.555", "lng": "88.3517"}, RESTAURANTS)
    assert q.geo is not None
    assert q.geo.distance_km == 50


def test_zero_zero_origin_means_no_location():
    assert normalize_params({"lat": "0", "lng": "0"}, RESTAURANTS).geo is None
    assert normalize_params({"lat": "0", "lng": "88.35"}, RESTAURANTS).geo is not None


def test_distance_parsing():
    q = normalize_params({"lat": "22.5", "lng": "88.3", "distance": "5"}, RESTAURANTS)
    assert q.geo.distance_km == 5
    q = normalize_params({"lat": "22.5", "lng": "88.3", "distance": "far"}, RESTAURANTS)
    assert q.geo.distance_km == 50


def test_flags_only_activate_on_literal_true():
    q = normalize_params(
        {"hasGuidedTour": "true", "hasParking": "1", "isFree": "True"},
        ATTRACTIONS,
    )
    assert q.flags == ("hasGuidedTour",)


def test_unknown_flags_are_ignored():
    q = normalize_params({"hasGuidedTour": "true"}, HOTELS)
    assert q.flags == ()


def test_status_handling():
    assert normalize_params({"status": "all"}, HOTELS).status is None
    assert normalize_params({"status": "pending"}, HOTELS).status == "pending"
    assert normalize_params({"status": "  "}, HOTELS).status == "active"


def test_search_is_stripped():
    assert normalize_params({"search": "  biryani "}, RESTAURANTS).search == "biryani"
    assert normalize_params({"search": "   "}, RESTAURANTS).search is None


def test_event_dates_only_for_events():
    q = normalize_params({"startDate": "2027-01-01", "endDate": "bogus"}, EVENTS)
    assert q.start_date is not None
    assert q.start_date.year == 2027
    assert q.end_date is None
    assert normalize_params({"startDate": "2027-01-01"}, HOTELS).start_date is None


def test_amenities_list_param():
    q = normalize_params({"amenities": "WiFi,Pool"}, HOTELS)
    assert q.lists == (("amenities", ("WiFi", "Pool")),)


def test_echo_reports_applied_filters():
    q = normalize_params({"cuisine": "Bengali", "lat": "22.5", "lng": "88.3"}, RESTAURANTS)
    echoed = q.echo(RESTAURANTS)
    assert echoed["cuisine"] == ["Bengali"]
    assert echoed["status"] == "active"
    assert echoed["location"] == {"lat": 22.5, "lng": 88.3, "distance": 50}
