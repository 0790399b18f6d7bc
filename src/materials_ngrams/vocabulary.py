# materials_ngrams/vocabulary.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple

from elasticsearch import ApiError, Elasticsearch, TransportError

from .config import VocabularySettings
from .errors import MatchingCancelled, SearchError
from .models import (MatchQuality, MatchResult, NgramFrequency, VocabularyHit,
                     VocabularySubject)
from .normalize import normalize_term

log = logging.getLogger(__name__)


class VocabularySearch(Protocol):
    def search(self, term: str, size: int) -> List[VocabularyHit]: ...


class VocabularyIndex:
    """
    Ranked lookups against the AAT subjects index.

    Each query is a best_fields multi_match over the preferred name, the scope
    note and the alternate terms, weighted name > scope note > terms. Transient
    transport errors are retried by the client itself (max_retries); anything
    still failing surfaces as SearchError.
    """

    def __init__(self, settings: Optional[VocabularySettings] = None, *, client: Any = None) -> None:
        self.settings = (settings or VocabularySettings()).validate()
        self._client = client if client is not None else Elasticsearch(
            self.settings.url,
            request_timeout=self.settings.request_timeout,
            max_retries=self.settings.max_retries,
            retry_on_timeout=True,
        )

    def query_body(self, term: str) -> dict:
        return {
            "bool": {
                "must": {
                    "multi_match": {
                        "query": term,
                        "fields": list(self.settings.fields),
                        "type": "best_fields",
                    }
                }
            }
        }

    def search(self, term: str, size: Optional[int] = None) -> List[VocabularyHit]:
        size = size or self.settings.candidates
        try:
            resp = self._client.search(index=self.settings.index, size=size, query=self.query_body(term))
        except ApiError as exc:
            raise SearchError(
                f"vocabulary search for {term!r} failed with status {exc.meta.status}",
                status=exc.meta.status,
                body=exc.body,
            ) from exc
        except TransportError as exc:
            raise SearchError(f"vocabulary search for {term!r} failed: {exc}") from exc
        try:
            raw_hits = list(resp["hits"]["hits"])
        except (KeyError, TypeError) as exc:
            raise SearchError(f"vocabulary search for {term!r} returned a malformed response") from exc
        return [_to_hit(h) for h in raw_hits[:size]]

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _to_hit(raw: Any) -> VocabularyHit:
    if not isinstance(raw, Mapping) or raw.get("_id") is None:
        raise SearchError(f"vocabulary hit without an _id: {raw!r}")
    src = raw.get("_source")
    if not isinstance(src, Mapping):
        src = {}
    terms = src.get("terms")
    try:
        score = float(raw.get("_score") or 0.0)
    except (TypeError, ValueError):
        score = 0.0
    return VocabularyHit(
        id=str(raw["_id"]),
        score=score,
        subject=VocabularySubject(
            name=_text(src.get("name")),
            scope_note=_text(src.get("scope_note")),
            terms=[t for t in terms if isinstance(t, str)] if isinstance(terms, list) else [],
            facet_name=_text(src.get("facet_name")),
            record_type=_text(src.get("record_type")),
        ),
    )


def classify_match(term: str, hit: VocabularyHit) -> Optional[MatchQuality]:
    """exact if term == preferred name, synonym if term is one of the alternate terms (normalized)."""
    t = normalize_term(term)
    if t == normalize_term(_text(hit.subject.name)):
        return MatchQuality.EXACT
    if t in {normalize_term(x) for x in hit.subject.terms if isinstance(x, str)}:
        return MatchQuality.SYNONYM
    return None


def find_top_hit(index: VocabularySearch, nf: NgramFrequency, size: int = 5) -> Optional[MatchResult]:
    """
    First candidate, in search-rank order, that is an exact or synonym match.
    A failed lookup counts as "no match" for this n-gram.
    """
    try:
        try:
            hits = index.search(nf.ngram, size)
            for hit in hits[:size]:
                quality = classify_match(nf.ngram, hit)
                if quality is not None:
                    return MatchResult(hit=hit, quality=quality)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise SearchError(f"malformed vocabulary response for {nf.ngram!r}: {exc}") from exc
    except SearchError as exc:
        log.warning("No vocabulary match for %r: %s", nf.ngram, exc)
        if exc.body is not None:
            log.debug("Search error body for %r: %r", nf.ngram, exc.body)
    return None


def match_ngrams(index: VocabularySearch,
                 ngrams: Sequence[NgramFrequency],
                 *,
                 size: int = 5,
                 max_workers: int = 8,
                 cancel: Optional[threading.Event] = None) -> List[Tuple[NgramFrequency, Optional[MatchResult]]]:
    """
    Look up every n-gram concurrently. Result i belongs to ngrams[i] whatever the
    completion order: each task fills its own slot of a pre-sized list.
    If `cancel` gets set, pending lookups are skipped and MatchingCancelled is raised.
    """
    slots: List[Optional[MatchResult]] = [None] * len(ngrams)

    def _fill(i: int) -> None:
        if cancel is not None and cancel.is_set():
            return
        slots[i] = find_top_hit(index, ngrams[i], size)

    if ngrams:
        with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(ngrams)))) as ex:
            futures = [ex.submit(_fill, i) for i in range(len(ngrams))]
            for fut in futures:
                fut.result()

    if cancel is not None and cancel.is_set():
        raise MatchingCancelled(f"matching cancelled; discarded {len(ngrams)} pending results")

    matched = sum(1 for m in slots if m is not None)
    log.info("Matched %d of %d n-grams to vocabulary subjects", matched, len(ngrams))
    return list(zip(ngrams, slots))
