from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class ListingPage(BaseModel):
    items: list[dict[str, Any]]
    pagination: Pagination
    filters: dict[str, Any] = Field(default_factory=dict)

    def envelope(self, array_key: str) -> dict[str, Any]:
        """Response body keyed the way the listing type names its array."""
        return {
            array_key: self.items,
            "pagination": self.pagination.model_dump(by_alias=True),
            "filters": self.filters,
        }


class ResourceOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    label: str
    array_key: str
    default_limit: int
    set_param: str
    flags: list[str]
    list_params: list[str]


class SubmissionResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]
    message: str
