"""Pydantic models for gallery REST payloads."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Publisher(BaseModel):
    publisher_name: str = Field(..., alias="publisherName")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: Optional[str] = None
    publisher_id: Optional[str] = Field(default=None, alias="publisherId")

    model_config = ConfigDict(extra="allow", populate_by_name=True)
