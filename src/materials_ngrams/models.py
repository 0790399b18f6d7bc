from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .errors import ConfigurationError

Document = Tuple[str, ...]   # normalized tokens of one "medium" field
NGram = Tuple[str, ...]


@dataclass(frozen=True)
class Corpus:
    """Tokenized documents for one (source, category, stem) configuration."""
    source: str
    category: Optional[str]           # None = all artworks
    stem: bool
    documents: Tuple[Document, ...]
    records_read: int = 0             # records seen in the stream, retained or not

    def __len__(self) -> int:
        return len(self.documents)


@dataclass(frozen=True)
class NgramFrequency:
    ngram: str
    frequency: int


@dataclass(frozen=True)
class NgramTally:
    counts: Dict[str, int]            # phrase -> count, first-seen order
    total: int                        # number of n-grams extracted
    unique: int


# ---------- selection policies ----------

@dataclass(frozen=True)
class MinimumCount:
    """Keep every n-gram seen at least `floor` times."""
    floor: int

    def __post_init__(self) -> None:
        if self.floor < 0:
            raise ConfigurationError(f"minimum count floor must be >= 0, got {self.floor}")


@dataclass(frozen=True)
class Coverage:
    """Keep the top n-grams accounting for `threshold` of all occurrences."""
    threshold: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(f"coverage threshold must be within [0, 1], got {self.threshold}")


SelectionPolicy = Union[MinimumCount, Coverage]


@dataclass(frozen=True)
class Selection:
    """Result of one top-n pass, with the numbers the summary line reports."""
    n: int
    policy: SelectionPolicy
    items: List[NgramFrequency]
    total: int                        # all n-grams of length n in the corpus
    unique: int
    document_count: int

    @property
    def covered(self) -> int:
        return sum(nf.frequency for nf in self.items)

    @property
    def share_of_ngrams(self) -> float:
        return 100 * len(self.items) / self.unique if self.unique else 0.0

    @property
    def share_of_occurrences(self) -> float:
        return 100 * self.covered / self.total if self.total else 0.0


# ---------- controlled vocabulary ----------

class MatchQuality(str, Enum):
    EXACT = "exact"
    SYNONYM = "synonym"


@dataclass(frozen=True)
class VocabularySubject:
    name: str
    scope_note: str = ""
    terms: List[str] = field(default_factory=list)
    facet_name: str = ""
    record_type: str = ""


@dataclass(frozen=True)
class VocabularyHit:
    id: str
    score: float
    subject: VocabularySubject


@dataclass(frozen=True)
class MatchResult:
    hit: VocabularyHit
    quality: MatchQuality


@dataclass(frozen=True)
class NgramRow:
    ngram_length: int
    category: Optional[str]
    ngram: str
    frequency: int
    aat_id: Optional[str] = None
    aat_name: Optional[str] = None
    facet_name: Optional[str] = None
    record_type: Optional[str] = None
    match_quality: Optional[str] = None

    @classmethod
    def build(cls, n: int, category: Optional[str], nf: NgramFrequency,
              match: Optional[MatchResult] = None) -> "NgramRow":
        if match is None:
            return cls(n, category, nf.ngram, nf.frequency)
        subject = match.hit.subject
        return cls(
            ngram_length=n,
            category=category,
            ngram=nf.ngram,
            frequency=nf.frequency,
            aat_id=match.hit.id,
            aat_name=subject.name,
            facet_name=subject.facet_name,
            record_type=subject.record_type,
            match_quality=match.quality.value,
        )
