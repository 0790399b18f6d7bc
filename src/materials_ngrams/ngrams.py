from __future__ import annotations
from collections import Counter
from typing import Iterable, List, Sequence

from nltk.util import ngrams as _nltk_ngrams

from .errors import ConfigurationError
from .models import (Coverage, Document, MinimumCount, NGram, NgramFrequency,
                     NgramTally, SelectionPolicy)


def extract_ngrams(documents: Iterable[Document], n: int) -> List[NGram]:
    """All n-grams of the corpus, document order then offset order."""
    if n < 1:
        raise ConfigurationError(f"n-gram size must be >= 1, got {n}")
    out: List[NGram] = []
    for doc in documents:
        if len(doc) >= n:
            out.extend(_nltk_ngrams(doc, n))
    return out


def tally_ngrams(grams: Iterable[NGram]) -> NgramTally:
    """Count n-grams by their space-joined form."""
    counts = Counter(" ".join(g) for g in grams)
    return NgramTally(counts=dict(counts), total=sum(counts.values()), unique=len(counts))


def sort_frequencies(tally: NgramTally) -> List[NgramFrequency]:
    """Descending by frequency; equal counts keep first-seen order (sorted() is stable)."""
    pairs = [NgramFrequency(ngram, count) for ngram, count in tally.counts.items()]
    return sorted(pairs, key=lambda nf: -nf.frequency)


def select_top(frequencies: Sequence[NgramFrequency], policy: SelectionPolicy, total: int) -> List[NgramFrequency]:
    """
    Apply a selection policy to an already-sorted frequency list.

    MinimumCount(floor): everything seen at least `floor` times.
    Coverage(threshold): target = floor(threshold * total). An entry is taken while
    the running sum *before* it is still <= target, so the last entry taken may
    overshoot the target.
    """
    if isinstance(policy, MinimumCount):
        return [nf for nf in frequencies if nf.frequency >= policy.floor]

    if isinstance(policy, Coverage):
        target = int(policy.threshold * total)
        picked: List[NgramFrequency] = []
        so_far = 0
        for nf in frequencies:
            if so_far > target:
                break
            so_far += nf.frequency
            picked.append(nf)
        return picked

    raise ConfigurationError(f"unsupported selection policy: {policy!r}")


def coverage_target(policy: SelectionPolicy, total: int) -> int | None:
    if isinstance(policy, Coverage):
        return int(policy.threshold * total)
    return None
