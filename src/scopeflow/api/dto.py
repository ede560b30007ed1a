from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ValidateRequest(BaseModel):
    workflow: dict[str, Any] = Field(
        ..., description="Authoring workflow document (discovery, url_types, playwright_enabled)"
    )


class CompileRequest(ValidateRequest):
    schema_version: int | None = Field(
        None,
        description="Target worker contract: 1 = flat (legacy), 2 = nested. "
        "Defaults to the server's CONTRACT_SCHEMA_VERSION.",
    )


class ValidateResponse(BaseModel):
    ok: bool
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)


class CompileResponse(BaseModel):
    schema_version: int
    crawl_params: dict[str, Any]
    warnings: list[str] = Field(default_factory=list)
