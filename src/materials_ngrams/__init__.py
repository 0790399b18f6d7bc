"""
Artwork materials n-gram analysis

Reads a dump of artwork records (newline-delimited JSON), finds the most common
phrases in their "medium" descriptions and cross-references them against the
Art & Architecture Thesaurus (AAT) held in Elasticsearch, so that the phrases
can be curated into a materials taxonomy.

Pipeline:
- tokenize each description (optionally Porter-stemmed) while loading the corpus
- extract and tally 1- to 4-grams
- keep the top n-grams by coverage of all occurrences, or by a minimum count
- match each phrase to an AAT subject: exact (preferred name) or synonym (alternate term)

Example Usage:
    from materials_ngrams import NgramAnalyzer, VocabularyIndex, Coverage

    analyzer = NgramAnalyzer.create("data/artworks.json", category="Painting",
                                    vocabulary=VocabularyIndex())
    rows = analyzer.annotate(analyzer.top_ngrams(2, Coverage(0.6)))
"""

# src/materials_ngrams/__init__.py
from .config import AnalysisConfig, VocabularySettings
from .engine import NgramAnalyzer, run_categories
from .errors import AnalysisError, ConfigurationError, LoadError, MatchingCancelled, SearchError
from .loader import load_corpus
from .models import Corpus, Coverage, MatchQuality, MinimumCount, NgramFrequency, NgramRow
from .vocabulary import VocabularyIndex, match_ngrams

__version__ = "1.0.0"
__all__ = [
    "AnalysisConfig", "VocabularySettings",
    "NgramAnalyzer", "run_categories", "load_corpus",
    "Corpus", "Coverage", "MinimumCount", "MatchQuality", "NgramFrequency", "NgramRow",
    "VocabularyIndex", "match_ngrams",
    "AnalysisError", "ConfigurationError", "LoadError", "MatchingCancelled", "SearchError",
]
