# materials_ngrams/engine.py
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from . import config as CFG
from .config import AnalysisConfig, VocabularySettings
from .errors import LoadError
from .loader import Source, load_corpus
from .models import Corpus, NgramFrequency, NgramRow, Selection, SelectionPolicy
from .ngrams import coverage_target, extract_ngrams, select_top, sort_frequencies, tally_ngrams
from .output import output_path, write_rows
from .vocabulary import VocabularySearch, match_ngrams

log = logging.getLogger(__name__)


class NgramAnalyzer:
    """
    Finds the most common phrases in a corpus of artwork materials descriptions
    and, when given a vocabulary, annotates them with their AAT subject.

    Public API (used by CLI/Flask):
      * create(data, ...):  load a corpus and return a ready analyzer
      * top_ngrams(n, policy):  tally + select n-grams of one length
      * annotate(selection):  match a selection against the vocabulary
      * analyze(sizes):  rows for every requested n

    Example:
        analyzer = NgramAnalyzer.create("data/artworks.json", category="Sculpture")
        analyzer.top_bigrams()                     # default: cover 60% of occurrences
        analyzer.top_ngrams(3, Coverage(0.25))
    """

    # ------------- lifecycle -------------

    def __init__(self,
                 corpus: Corpus,
                 *,
                 config: Optional[AnalysisConfig] = None,
                 vocabulary: Optional[VocabularySearch] = None,
                 vocabulary_settings: Optional[VocabularySettings] = None) -> None:
        self.corpus = corpus
        self.config = (config or AnalysisConfig()).validate()
        self.vocabulary = vocabulary
        self.vocabulary_settings = (vocabulary_settings or VocabularySettings()).validate()

    @classmethod
    def create(cls,
               data: Source,
               *,
               category: Optional[str] = None,
               config: Optional[AnalysisConfig] = None,
               vocabulary: Optional[VocabularySearch] = None,
               vocabulary_settings: Optional[VocabularySettings] = None,
               progress: bool = False) -> "NgramAnalyzer":
        """Validate the configuration first, then load; never returns a half-built analyzer."""
        config = (config or AnalysisConfig()).validate()
        corpus = load_corpus(
            data,
            category=category,
            stem=config.stem,
            text_field=config.text_field,
            category_field=config.category_field,
            progress=progress,
        )
        log.info("Returning %s analyzer with %d documents", category or "all", len(corpus))
        return cls(corpus, config=config, vocabulary=vocabulary, vocabulary_settings=vocabulary_settings)

    @property
    def category(self) -> Optional[str]:
        return self.corpus.category

    # ------------- selection -------------

    def top_ngrams(self, n: int, policy: Optional[SelectionPolicy] = None) -> Selection:
        policy = policy or self.config.policy_for(n, len(self.corpus))
        log.info("Seeking top n-grams of length %d with %s over %s artworks",
                 n, policy, self.category or "all")

        grams = extract_ngrams(self.corpus.documents, n)
        log.info("Found %d total n-grams of length %d in %d documents", len(grams), n, len(self.corpus))

        tally = tally_ngrams(grams)
        log.info("Found %d unique n-grams", tally.unique)

        target = coverage_target(policy, tally.total)
        if target is not None:
            log.info("Seeking enough unique n-grams to cover %d occurrences", target)

        items = select_top(sort_frequencies(tally), policy, tally.total)
        selection = Selection(
            n=n,
            policy=policy,
            items=items,
            total=tally.total,
            unique=tally.unique,
            document_count=len(self.corpus),
        )
        log.info("Found the top %d n-grams covering %d occurrences", len(items), selection.covered)
        log.info("%.2f%% of n-grams account for %.2f%% of all occurrences",
                 selection.share_of_ngrams, selection.share_of_occurrences)
        return selection

    def top_unigrams(self, policy: Optional[SelectionPolicy] = None) -> Selection:
        return self.top_ngrams(1, policy)

    def top_bigrams(self, policy: Optional[SelectionPolicy] = None) -> Selection:
        return self.top_ngrams(2, policy)

    def top_trigrams(self, policy: Optional[SelectionPolicy] = None) -> Selection:
        return self.top_ngrams(3, policy)

    def top_tetragrams(self, policy: Optional[SelectionPolicy] = None) -> Selection:
        return self.top_ngrams(4, policy)

    # ------------- matching -------------

    def annotate(self, selection: Selection, *, cancel: Optional[threading.Event] = None) -> List[NgramRow]:
        """One row per selected n-gram, in selection order; vocabulary columns empty without an index."""
        if self.vocabulary is None:
            return [NgramRow.build(selection.n, self.category, nf) for nf in selection.items]
        matched = match_ngrams(
            self.vocabulary,
            selection.items,
            size=self.vocabulary_settings.candidates,
            max_workers=self.vocabulary_settings.max_workers,
            cancel=cancel,
        )
        return [NgramRow.build(selection.n, self.category, nf, m) for nf, m in matched]

    def analyze(self,
                sizes: Optional[Iterable[int]] = None,
                policy: Optional[SelectionPolicy] = None,
                *,
                cancel: Optional[threading.Event] = None) -> Dict[int, List[NgramRow]]:
        out: Dict[int, List[NgramRow]] = {}
        for n in sizes or self.config.sizes:
            out[n] = self.annotate(self.top_ngrams(n, policy), cancel=cancel)
        return out


def preview(items: Iterable[NgramFrequency], k: int = CFG.PREVIEW_SIZE) -> List[str]:
    """The first k phrases of a selection, for console summaries."""
    out: List[str] = []
    for nf in items:
        if len(out) >= k:
            break
        out.append(nf.ngram)
    return out


def run_categories(data: Source,
                   *,
                   categories: Iterable[Optional[str]] = CFG.CATEGORIES,
                   config: Optional[AnalysisConfig] = None,
                   vocabulary: Optional[VocabularySearch] = None,
                   vocabulary_settings: Optional[VocabularySettings] = None,
                   policy: Optional[SelectionPolicy] = None,
                   out_dir: Union[str, Path] = CFG.OUT_DIR,
                   progress: bool = False,
                   on_selection=None) -> Dict[Optional[str], Dict[int, Path]]:
    """
    Analyse each category in turn and write one CSV per n-gram size.

    A LoadError aborts only that category: it is logged and no file is written
    for it. `on_selection(category, selection)` is called after each top-n pass.
    """
    config = (config or AnalysisConfig()).validate()
    written: Dict[Optional[str], Dict[int, Path]] = {}
    for category in categories:
        try:
            analyzer = NgramAnalyzer.create(
                data,
                category=category,
                config=config,
                vocabulary=vocabulary,
                vocabulary_settings=vocabulary_settings,
                progress=progress,
            )
        except LoadError as exc:
            log.error("Skipping %s artworks: %s", category or "all", exc)
            continue

        log.info("Analyzing %s artworks", category or "all")
        paths: Dict[int, Path] = {}
        for n in config.sizes:
            selection = analyzer.top_ngrams(n, policy)
            rows = analyzer.annotate(selection)
            path = output_path(out_dir, category, n)
            write_rows(rows, path)
            paths[n] = path
            if on_selection is not None:
                on_selection(category, selection)
        written[category] = paths
    return written
