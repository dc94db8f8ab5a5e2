"""Query parameters and response models of the text unit search service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StatusFilter(str, Enum):
    """Translation status scoping understood by the search service."""

    ALL = "ALL"
    TRANSLATED = "TRANSLATED"
    UNTRANSLATED = "UNTRANSLATED"
    FOR_TRANSLATION = "FOR_TRANSLATION"
    REVIEW_NEEDED = "REVIEW_NEEDED"
    APPROVED_AND_NOT_REJECTED = "APPROVED_AND_NOT_REJECTED"


@dataclass
class TextUnitSearcherParameters:
    """Filters of a search or count query. None means unscoped."""

    repository_ids: list[int] = field(default_factory=list)
    tm_text_unit_ids: list[int] = field(default_factory=list)
    for_root_locale: bool = False
    status_filter: StatusFilter | None = None
    to_be_fully_translated: bool | None = None
    limit: int | None = None
    offset: int | None = None

    def to_query_params(self) -> dict[str, Any]:
        """Render as query string parameters, omitting unscoped filters."""
        params: dict[str, Any] = {}
        if self.repository_ids:
            params["repositoryIds"] = ",".join(str(i) for i in self.repository_ids)
        if self.tm_text_unit_ids:
            params["tmTextUnitIds"] = ",".join(str(i) for i in self.tm_text_unit_ids)
        if self.for_root_locale:
            params["forRootLocale"] = "true"
        if self.status_filter is not None:
            params["statusFilter"] = self.status_filter.value
        if self.to_be_fully_translated is not None:
            params["toBeFullyTranslated"] = "true" if self.to_be_fully_translated else "false"
        if self.limit is not None:
            params["limit"] = self.limit
        if self.offset is not None:
            params["offset"] = self.offset
        return params


class TextUnitDTO(BaseModel):
    """A text unit as returned by search (subset of the service payload)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tm_text_unit_id: int = Field(alias="tmTextUnitId")
    name: str | None = None
    source: str | None = None
    comment: str | None = None
    target_locale: str | None = Field(default=None, alias="targetLocale")
    asset_path: str | None = Field(default=None, alias="assetPath")
    repository_name: str | None = Field(default=None, alias="repositoryName")


class TextUnitAndWordCount(BaseModel):
    """Result of a count query."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text_unit_count: int = Field(alias="textUnitCount")
    text_unit_word_count: int = Field(default=0, alias="textUnitWordCount")
