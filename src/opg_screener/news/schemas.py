"""News provider response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from opg_screener.types import NewsItem


class NewsAttributes(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    publish_on: datetime = Field(alias="publishOn")
    title: str


class NewsEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    attributes: NewsAttributes


class NewsResponse(BaseModel):
    """Top-level news payload. Only ``data`` is read."""

    model_config = ConfigDict(extra="ignore")

    data: list[NewsEntry] = Field(default_factory=list)

    def to_items(self) -> list[NewsItem]:
        """Map entries to news items, provider order kept."""
        return [
            NewsItem(published_at=entry.attributes.publish_on, headline=entry.attributes.title)
            for entry in self.data
        ]
