"""
Declarative field mapping for every listing type.

The search pipeline is written once; each listing type only describes
which of its fields are searchable, range-filterable, set-filterable or
exposed as boolean flags, and which fields a list card needs.
"""
from __future__ import annotations

from dataclasses import dataclass

# Fields every list card carries, whatever the listing type.
CARD_FIELDS: tuple[str, ...] = (
    "_id",
    "slug",
    "name",
    "description",
    "shortDescription",
    "images",
    "location",
    "address",
    "contact",
    "rating",
    "reviewCount",
    "amenities",
    "tags",
    "status",
    "featured",
    "promoted",
    "distance",
    "createdAt",
)

RATING_FIELD = "rating.average"


class UnknownResourceError(LookupError):
    """Raised when a URL names a listing type that is not registered."""


@dataclass(frozen=True)
class ResourceConfig:
    name: str
    array_key: str
    label: str
    set_param: str
    set_field: str
    search_fields: tuple[str, ...]
    extra_projection: tuple[str, ...]
    required_fields: tuple[str, ...]
    default_limit: int = 12
    price_field: str | None = None
    flags: tuple[tuple[str, str], ...] = ()
    list_params: tuple[tuple[str, str], ...] = ()
    date_field: str | None = None

    @property
    def projection(self) -> tuple[str, ...]:
        return CARD_FIELDS + self.extra_projection


HOTELS = ResourceConfig(
    name="hotels",
    array_key="hotels",
    label="Hotel",
    set_param="category",
    set_field="category",
    search_fields=("name", "description", "address.area", "category", "tags"),
    extra_projection=("category", "priceRange", "checkInTime", "checkOutTime"),
    required_fields=("name", "description", "location", "priceRange", "category"),
    price_field="priceRange.min",
    flags=(("featured", "featured"),),
    list_params=(("amenities", "amenities"),),
)

RESTAURANTS = ResourceConfig(
    name="restaurants",
    array_key="restaurants",
    label="Restaurant",
    set_param="cuisine",
    set_field="cuisine",
    search_fields=("name", "description", "address.area", "cuisine", "tags"),
    extra_projection=(
        "cuisine",
        "priceRange",
        "avgMealCost",
        "openingHours",
        "reservationRequired",
    ),
    required_fields=("name", "description", "cuisine", "location", "contact"),
    price_field="avgMealCost",
    flags=(
        ("featured", "featured"),
        ("reservationRequired", "reservationRequired"),
    ),
    list_params=(("amenities", "amenities"),),
)

ATTRACTIONS = ResourceConfig(
    name="attractions",
    array_key="places",
    label="Attraction",
    set_param="category",
    set_field="category",
    search_fields=("name", "description", "address.area", "category", "tags"),
    extra_projection=(
        "category",
        "entryFee",
        "timings",
        "duration",
        "bestTimeToVisit",
        "guidedTours",
        "accessibility",
    ),
    required_fields=("name", "description", "category", "location"),
    price_field="entryFee.adult",
    flags=(
        ("featured", "featured"),
        ("hasGuidedTour", "guidedTours.available"),
        ("isWheelchairAccessible", "accessibility.wheelchairAccessible"),
        ("hasParking", "accessibility.parkingAvailable"),
        ("isFree", "entryFee.isFree"),
    ),
)

EVENTS = ResourceConfig(
    name="events",
    array_key="events",
    label="Event",
    set_param="category",
    set_field="category",
    search_fields=(
        "name",
        "description",
        "address.area",
        "category",
        "tags",
        "organizer.name",
        "venue.name",
    ),
    extra_projection=(
        "category",
        "startDate",
        "endDate",
        "startTime",
        "endTime",
        "ticketPrice",
        "organizer",
        "venue",
        "isRecurring",
    ),
    required_fields=("name", "description", "category", "startDate", "venue", "organizer"),
    default_limit=9,
    price_field="ticketPrice.min",
    flags=(
        ("featured", "featured"),
        ("isRecurring", "isRecurring"),
        ("requiresBooking", "ticketing.advanceBookingRequired"),
        ("isFree", "ticketPrice.isFree"),
    ),
    date_field="startDate",
)

SPORTS = ResourceConfig(
    name="sports",
    array_key="sports",
    label="Sports venue",
    set_param="category",
    set_field="category",
    search_fields=(
        "name",
        "description",
        "address.area",
        "category",
        "sport",
        "tags",
        "facilities",
    ),
    extra_projection=("category", "sport", "facilities", "entryFee", "timings"),
    required_fields=("name", "description", "category", "sport", "location"),
    price_field="entryFee.adult",
    flags=(
        ("featured", "featured"),
        ("isFree", "entryFee.isFree"),
    ),
    list_params=(("amenities", "amenities"),),
)

RESOURCES: dict[str, ResourceConfig] = {
    r.name: r for r in (HOTELS, RESTAURANTS, ATTRACTIONS, EVENTS, SPORTS)
}


def get_resource(name: str) -> ResourceConfig:
    try:
        return RESOURCES[name]
    except KeyError:
        raise UnknownResourceError(f"Unknown listing type: {name}") from None
