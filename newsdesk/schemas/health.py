"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import Field

from newsdesk.schemas.common import CamelModel


class HealthResponse(CamelModel):
    """Payload of the health check endpoint (wrapped in the standard envelope)."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev or prod)")
    version: str = Field(description="API version")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )
