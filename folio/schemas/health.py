"""Health check payload."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    version: str = Field(description="API version")
    environment: str = Field(description="APP_ENV the process runs with")
    database: Literal["connected", "disconnected"] = Field(description="Result of a SELECT 1 probe")
    permission_cache: Literal["enabled", "disabled"]
