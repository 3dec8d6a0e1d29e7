"""Pydantic models describing partial manifest content."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AssetDeclaration(BaseModel):
    type: str = Field(..., description="Asset type tag, e.g. Microsoft.VSO.Icon.")
    path: str = Field(..., description="Asset path relative to the declaring manifest.")

    model_config = ConfigDict(extra="forbid")
