"""Pydantic models for filter options and the conversion result."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from pagefit import settings

# ---------------------------------------------------------------------------
# Filter options (closed tagged union, discriminated by ``kind``)
# ---------------------------------------------------------------------------


class ThresholdType(StrEnum):
    FIXED = "fixed"
    DYNAMIC = "dynamic"


def _clamp(value: Any, low: float, high: float | None = None) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value  # let pydantic report the type error
    if isinstance(value, float) and math.isnan(value):
        return type(value)(low)
    if value < low:
        return type(value)(low)
    if high is not None and value > high:
        return type(value)(high)
    return value


class NoFilter(BaseModel):
    """Keep everything; no fit output is produced."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class PruningOptions(BaseModel):
    """Query-free boilerplate filter.

    ``threshold`` applies in ``fixed`` mode.  ``dynamic`` mode derives the
    page threshold from the mean block score times ``dynamic_factor``.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["pruning"] = "pruning"
    threshold: float = settings.PRUNING_THRESHOLD
    threshold_type: ThresholdType = ThresholdType.FIXED
    min_word_threshold: int = settings.PRUNING_MIN_WORDS
    dynamic_factor: float = settings.DYNAMIC_THRESHOLD_FACTOR

    @field_validator("threshold", mode="before")
    @classmethod
    def clamp_threshold(cls, v: Any) -> Any:
        return _clamp(v, 0.0, 1.0)

    @field_validator("min_word_threshold", mode="before")
    @classmethod
    def clamp_min_words(cls, v: Any) -> Any:
        return _clamp(v, 0)

    @field_validator("dynamic_factor", mode="before")
    @classmethod
    def clamp_factor(cls, v: Any) -> Any:
        return _clamp(v, 0.0)


class Bm25Options(BaseModel):
    """Query-driven relevance filter."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bm25"] = "bm25"
    query: str = ""
    threshold: float = settings.BM25_THRESHOLD
    k1: float = settings.BM25_K1
    b: float = settings.BM25_B
    use_tag_weights: bool = False

    @field_validator("query", mode="before")
    @classmethod
    def strip_query(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("threshold", "k1", mode="before")
    @classmethod
    def clamp_non_negative(cls, v: Any) -> Any:
        return _clamp(v, 0.0)

    @field_validator("b", mode="before")
    @classmethod
    def clamp_b(cls, v: Any) -> Any:
        return _clamp(v, 0.0, 1.0)


FilterOptions = Annotated[
    Union[NoFilter, PruningOptions, Bm25Options],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


class MarkdownResult(BaseModel):
    """Outcome of one HTML → Markdown conversion."""

    model_config = ConfigDict(frozen=True)

    raw_markdown: str = ""
    fit_markdown: str | None = None
    fit_html: str | None = None
    title: str | None = None
    references_markdown: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def word_count(self) -> int:
        source = self.fit_markdown if self.fit_markdown is not None else self.raw_markdown
        return len(source.split())

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v
