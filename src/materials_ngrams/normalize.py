from __future__ import annotations
from typing import List

from nltk.stem import PorterStemmer
from nltk.tokenize import RegexpTokenizer

# /* ~~~ runs of letters/digits/underscore; punctuation never sticks to a word ~~~ */
_TOKENIZER = RegexpTokenizer(r"\w+")
_STEMMER = PorterStemmer()


def tokenize(text: str, stem: bool = False) -> List[str]:
    """
    Split a materials description into lowercase word tokens.
    "Oil on canvas." -> ["oil", "on", "canvas"]
    With stem=True each token is Porter-stemmed: "prints" -> "print".
    """
    if not text:
        return []
    tokens = _TOKENIZER.tokenize(text.lower())
    if stem:
        tokens = [_STEMMER.stem(t) for t in tokens]
    return tokens


def normalize_term(text: str) -> str:
    """Trim + lowercase, the comparison form for vocabulary matching."""
    return text.strip().lower()
