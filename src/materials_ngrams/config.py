from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .errors import ConfigurationError
from .models import Coverage, MinimumCount, SelectionPolicy

# Record fields consumed from the artwork dump
TEXT_FIELD: str = "medium"
CATEGORY_FIELD: str = "category"

# Phrase lengths analysed by default
DEFAULT_SIZES: Tuple[int, ...] = (1, 2, 3, 4)

# /* ~~~ share of all occurrences the top n-grams must cover, per n ~~~ */
DEFAULT_COVERAGE: Mapping[int, float] = {1: 0.8, 2: 0.6, 3: 0.4, 4: 0.2}
FALLBACK_COVERAGE: float = 0.2

# /* ~~~ minimum-count mode: floor is this share of the DOCUMENT count ~~~ */
MIN_COUNT_SHARE: float = 0.01

MODES = ("coverage", "min-count")

# Controlled vocabulary (AAT subjects in Elasticsearch)
AAT_ES_URL: str = os.environ.get("AAT_ES_URL", "http://localhost:9200")
AAT_INDEX: str = os.environ.get("AAT_INDEX", "aatsy_subjects")
AAT_FIELDS: Tuple[str, ...] = ("name^10", "scope_note^5", "terms^3")
AAT_CANDIDATES: int = 5

# /* ~~~ cap on in-flight vocabulary lookups per batch ~~~ */
MAX_WORKERS: int = 8
REQUEST_TIMEOUT: float = 10.0
MAX_RETRIES: int = 2

# None stands for "all artworks, across categories"
CATEGORIES: Tuple[Optional[str], ...] = (
    None,
    "Painting",
    "Photography",
    "Print",
    "Sculpture",
    "Drawing, Collage or other Work on Paper",
)
ALL_SENTINEL: str = "all"

OUT_DIR: str = "out"
PREVIEW_SIZE: int = 10


@dataclass(frozen=True)
class VocabularySettings:
    url: str = AAT_ES_URL
    index: str = AAT_INDEX
    fields: Tuple[str, ...] = AAT_FIELDS
    candidates: int = AAT_CANDIDATES
    max_workers: int = MAX_WORKERS
    request_timeout: float = REQUEST_TIMEOUT
    max_retries: int = MAX_RETRIES

    def validate(self) -> "VocabularySettings":
        if self.candidates < 1:
            raise ConfigurationError(f"candidates must be >= 1, got {self.candidates}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {self.max_retries}")
        return self


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Everything one analysis run needs, passed explicitly.

    mode:      "coverage" (per-n share of occurrences) or "min-count"
               (floor = MIN_COUNT_SHARE * number of documents, truncated).
    coverage:  per-n coverage defaults; n missing from the map uses FALLBACK_COVERAGE.
    overrides: explicit per-n policy, wins over the mode defaults.
    """
    sizes: Tuple[int, ...] = DEFAULT_SIZES
    mode: str = "coverage"
    coverage: Mapping[int, float] = field(default_factory=lambda: dict(DEFAULT_COVERAGE))
    min_count_share: float = MIN_COUNT_SHARE
    overrides: Mapping[int, SelectionPolicy] = field(default_factory=dict)
    stem: bool = False
    text_field: str = TEXT_FIELD
    category_field: str = CATEGORY_FIELD

    def validate(self) -> "AnalysisConfig":
        if not self.sizes:
            raise ConfigurationError("at least one n-gram size is required")
        for n in list(self.sizes) + list(self.coverage) + list(self.overrides):
            _check_n(n)
        if self.mode not in MODES:
            raise ConfigurationError(f"unknown selection mode {self.mode!r}; expected one of {MODES}")
        for threshold in self.coverage.values():
            Coverage(threshold)
        if self.min_count_share < 0:
            raise ConfigurationError(f"min_count_share must be >= 0, got {self.min_count_share}")
        return self

    def policy_for(self, n: int, document_count: int) -> SelectionPolicy:
        _check_n(n)
        if n in self.overrides:
            return self.overrides[n]
        if self.mode == "min-count":
            return MinimumCount(int(self.min_count_share * document_count))
        return Coverage(self.coverage.get(n, FALLBACK_COVERAGE))


def _check_n(n: int) -> None:
    if not isinstance(n, int) or n < 1:
        raise ConfigurationError(f"n-gram size must be an integer >= 1, got {n!r}")


def policy_from_args(mode: str, *, threshold: float | None = None, floor: int | None = None) -> Optional[SelectionPolicy]:
    """Build an explicit policy from CLI/HTTP parameters; None means "use the per-n default"."""
    if mode not in MODES:
        raise ConfigurationError(f"unknown selection mode {mode!r}; expected one of {MODES}")
    if mode == "coverage":
        return Coverage(float(threshold)) if threshold is not None else None
    return MinimumCount(int(floor)) if floor is not None else None


def parse_category(value: Optional[str]) -> Optional[str]:
    """Map the "all" sentinel (or nothing) to None."""
    if value is None or value.strip().lower() == ALL_SENTINEL:
        return None
    return value
