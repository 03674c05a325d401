"""FastAPI integration for WildSpine.

Provides a thin REST adapter over the ingestion service:
- Animal registration and listing
- Sighting submission and paginated history
- Health check
- OpenAPI documentation

Authentication is handled upstream; the authenticated reporter's email
arrives in the ``X-Reporter-Email`` header.

Example:
    >>> from wildspine.api.fastapi import create_app
    >>> from wildspine.core.runtime import Runtime
    >>>
    >>> app = create_app(Runtime())
    >>>
    >>> # Run with: wildspine serve

Note:
    Requires the `api` optional dependency:
    ``pip install wildspine[api]``
"""

from __future__ import annotations

import base64
import binascii
from datetime import date, datetime
from typing import Any

try:
    from fastapi import FastAPI, Header, Query, Request
    from fastapi.responses import JSONResponse
except ImportError as e:
    raise ImportError(
        "FastAPI is required for the API module. Install with: pip install wildspine[api]"
    ) from e

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from wildspine.core.exceptions import (
    DuplicateSightingError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    WildSpineError,
)
from wildspine.core.runtime import Runtime
from wildspine.models import Coordinates
from wildspine.utils.pagination import Page

# =============================================================================
# Request Models
# =============================================================================


class AnimalIn(BaseModel):
    name: str = Field(..., min_length=1)
    date_of_birth: date
    last_seen: datetime
    lat: float
    long: float


class SightingIn(BaseModel):
    """Sighting report. Missing fields are rejected by the service."""

    timestamp: datetime | None = None
    lat: float | None = None
    long: float | None = None
    image: str | None = Field(default=None, description="Base64-encoded image bytes")


STATUS_CODES: dict[type[WildSpineError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    DuplicateSightingError: 409,
    PersistenceError: 500,
}


def _page_response(page: Page[Any], key: str) -> dict[str, Any]:
    return {
        "page": page.page,
        "pageSize": page.page_size,
        "totalCount": page.total_count,
        "totalPages": page.total_pages,
        key: [item.model_dump(mode="json") for item in page.items],
    }


def _coordinates(lat: float | None, long: float | None) -> Coordinates | None:
    if lat is None or long is None:
        return None
    try:
        return Coordinates(lat=lat, long=long)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid coordinates: lat={lat}, long={long}") from e


def create_app(
    runtime: Runtime,
    title: str = "WildSpine API",
    version: str = "0.1.0",
    description: str = "Wildlife sighting ingestion and notification API",
    start_consumer: bool = True,
) -> FastAPI:
    """Create a FastAPI application for WildSpine.

    Args:
        runtime: Runtime owning the service, queue and consumer.
        title: API title for OpenAPI docs.
        version: API version.
        description: API description for docs.
        start_consumer: Start the queue consumer on application startup.

    Returns:
        Configured FastAPI application.

    Example:
        >>> from wildspine.api.fastapi import create_app
        >>> from wildspine.core.runtime import Runtime
        >>> app = create_app(Runtime())
        >>> app.title
        'WildSpine API'
    """
    app = FastAPI(
        title=title,
        version=version,
        description=description,
    )

    app.state.runtime = runtime

    # =========================================================================
    # Lifecycle Events
    # =========================================================================

    @app.on_event("startup")
    async def startup() -> None:
        """Open backends and start the consumer."""
        await app.state.runtime.initialize(start_consumer=start_consumer)

    @app.on_event("shutdown")
    async def shutdown() -> None:
        """Stop the consumer, then close the queue and repository."""
        await app.state.runtime.close()

    @app.exception_handler(WildSpineError)
    async def wildspine_error(request: Request, exc: WildSpineError) -> JSONResponse:
        status = next(
            (code for kind, code in STATUS_CODES.items() if isinstance(exc, kind)),
            500,
        )
        return JSONResponse(status_code=status, content={"error": str(exc)})

    # =========================================================================
    # Health & Info Endpoints
    # =========================================================================

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "consumer_running": app.state.runtime.consumer.running,
        }

    # =========================================================================
    # Animal Endpoints
    # =========================================================================

    @app.post("/api/v1/animals", status_code=201)
    async def create_animal(body: AnimalIn) -> dict[str, Any]:
        """Register a tracked animal."""
        animal = await app.state.runtime.service.create_animal(
            name=body.name,
            date_of_birth=body.date_of_birth,
            last_seen=body.last_seen,
            coordinates=_coordinates(body.lat, body.long),
        )
        return {"message": "success", "animal": animal.model_dump(mode="json")}

    @app.get("/api/v1/animals")
    async def list_animals(
        page: str | None = Query(None),
        page_size: str | None = Query(None, alias="pageSize"),
    ) -> dict[str, Any]:
        """List animals, most recently seen first."""
        result = await app.state.runtime.service.list_animals(page, page_size)
        return _page_response(result, "animals")

    @app.get("/api/v1/animals/{animal_id}")
    async def get_animal(animal_id: int) -> dict[str, Any]:
        """Get one animal."""
        animal = await app.state.runtime.service.get_animal(animal_id)
        return animal.model_dump(mode="json")

    # =========================================================================
    # Sighting Endpoints
    # =========================================================================

    @app.post("/api/v1/animals/{animal_id}/sightings", status_code=201)
    async def create_sighting(
        animal_id: int,
        body: SightingIn,
        x_reporter_email: str | None = Header(None),
    ) -> dict[str, Any]:
        """Report a sighting for an animal."""
        image: bytes | None = None
        if body.image:
            try:
                image = base64.b64decode(body.image, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValidationError("image must be base64 encoded") from e

        sighting_id = await app.state.runtime.service.submit_sighting(
            animal_id=animal_id,
            coordinates=_coordinates(body.lat, body.long),
            timestamp=body.timestamp,
            reporter_email=x_reporter_email,
            image=image,
        )
        return {"message": "success", "id": sighting_id}

    @app.get("/api/v1/animals/{animal_id}/sightings")
    async def list_sightings(
        animal_id: int,
        page: str | None = Query(None),
        page_size: str | None = Query(None, alias="pageSize"),
    ) -> dict[str, Any]:
        """List an animal's sightings, newest first."""
        result = await app.state.runtime.service.list_sightings(animal_id, page, page_size)
        return _page_response(result, "sightings")

    return app
