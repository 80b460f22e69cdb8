from __future__ import annotations

import logging
from typing import Any

from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .data_ingestion.history import get_history
from .data_ingestion.ingest import run_ingestion
from .listings.data_store import StoreError, get_store
from .listings.models import ResourceOut, SubmissionResponse
from .listings.resources import RESOURCES, UnknownResourceError, get_resource
from .listings.search import search_listings
from .listings.submissions import SubmissionError, submit_listing

logger = logging.getLogger(__name__)

app = FastAPI(title="Destination Kolkata Listings API", version="1.0.0")


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


@app.exception_handler(UnknownResourceError)
def unknown_resource_handler(request: Request, exc: UnknownResourceError) -> JSONResponse:
    return _error(404, str(exc))


@app.exception_handler(StoreError)
def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure on %s: %s", request.url.path, exc)
    return _error(500, "Failed to load listings")


@app.exception_handler(SubmissionError)
def submission_error_handler(request: Request, exc: SubmissionError) -> JSONResponse:
    return _error(400, exc.message, fields=list(exc.fields))


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    """Distinct categories and areas among active listings, per listing type."""
    out: dict[str, Any] = {}
    for name, resource in RESOURCES.items():
        df = get_store(name).frame
        active = df.loc[df["status"] == "active"]
        categories: set[str] = set()
        if resource.set_field in active.columns:
            for val in active[resource.set_field].dropna():
                values = val if isinstance(val, list) else [val]
                categories.update(str(v).strip() for v in values if str(v).strip())
        areas: list[str] = []
        if "address.area" in active.columns:
            areas = sorted(active["address.area"].dropna().astype(str).unique().tolist())
        out[name] = {
            resource.set_param: sorted(categories),
            "areas": areas,
            "total": len(active),
        }
    return out


@app.get("/api/resources")
def list_resources() -> dict:
    resources = [
        ResourceOut(
            name=r.name,
            label=r.label,
            array_key=r.array_key,
            default_limit=r.default_limit,
            set_param=r.set_param,
            flags=[param for param, _ in r.flags],
            list_params=[param for param, _ in r.list_params],
        ).model_dump(by_alias=True)
        for r in RESOURCES.values()
    ]
    return {"resources": resources}


@app.get("/api/{resource_name}")
def list_listings(resource_name: str, request: Request):
    resource = get_resource(resource_name)
    try:
        page = search_listings(resource, dict(request.query_params))
    except StoreError:
        logger.exception("Listing query failed for %s", resource.name)
        return _error(500, f"Failed to fetch {resource.name}")
    return page.envelope(resource.array_key)


@app.get("/api/{resource_name}/{key}")
def get_listing(resource_name: str, key: str):
    resource = get_resource(resource_name)
    try:
        listing = get_store(resource.name).find_one(key)
    except StoreError:
        logger.exception("Listing lookup failed for %s", resource.name)
        return _error(500, f"Failed to fetch {resource.label.lower()}")
    if listing is None or listing.get("status") != "active":
        return _error(404, f"{resource.label} not found")
    return {"success": True, "data": listing}


@app.post("/api/{resource_name}", status_code=201, response_model=SubmissionResponse)
def create_listing(resource_name: str, payload: dict[str, Any] = Body(...)) -> SubmissionResponse:
    resource = get_resource(resource_name)
    stored = submit_listing(resource, payload)
    return SubmissionResponse(
        data=stored,
        message=f"{resource.label} submitted successfully and is pending review",
    )


# ── Operations endpoints ─────────────────────────────────────────────────


@app.get("/ingestion/history")
def ingestion_history(
    dataType: str | None = None,
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    return get_history(data_type=dataType, status=status, page=page, limit=limit)


@app.post("/ingestion/run")
def ingestion_run(resource: str | None = None) -> dict:
    results = run_ingestion(resources=[resource] if resource else None)
    return {"success": all(r["status"] != "failed" for r in results), "results": results}


@app.get("/analytics")
def analytics(resource: str | None = None) -> dict:
    if resource:
        get_resource(resource)
    return compute_analytics(get_events(resource=resource))
