from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Union

from tqdm import tqdm

from .config import CATEGORY_FIELD, TEXT_FIELD
from .errors import LoadError
from .models import Corpus, Document
from .normalize import tokenize

log = logging.getLogger(__name__)

Source = Union[str, os.PathLike, Iterable[Mapping[str, Any]]]


def count_lines(path: Union[str, os.PathLike]) -> int:
    """Number of lines in a file, read in blocks (progress bar total)."""
    lines = 0
    try:
        with open(path, "rb") as f:
            for block in iter(lambda: f.read(1 << 20), b""):
                lines += block.count(b"\n")
    except OSError as exc:
        raise LoadError(f"cannot read {path}: {exc}") from exc
    return lines


def iter_ndjson(path: Union[str, os.PathLike]) -> Iterator[Mapping[str, Any]]:
    """Yield one JSON object per non-blank line; any malformed line aborts with LoadError."""
    try:
        f = open(path, "r", encoding="utf-8")
    except OSError as exc:
        raise LoadError(f"cannot open {path}: {exc}") from exc
    with f:
        line_no = 0
        while True:
            try:
                line = f.readline()
            except UnicodeDecodeError as exc:
                raise LoadError(f"{path}: invalid UTF-8 near line {line_no + 1}: {exc.reason}") from exc
            if not line:
                break
            line_no += 1
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise LoadError(f"{path}:{line_no}: malformed JSON record: {exc.msg}") from exc
            if not isinstance(record, dict):
                raise LoadError(f"{path}:{line_no}: expected a JSON object, got {type(record).__name__}")
            yield record


def _is_useable(record: Mapping[str, Any], where: str, category: Optional[str],
                text_field: str, category_field: str) -> bool:
    text = record.get(text_field)
    if text is not None and not isinstance(text, str):
        raise LoadError(f"{where}: field {text_field!r} must be a string, got {type(text).__name__}")
    if not text:
        return False
    return category is None or record.get(category_field) == category


def load_corpus(source: Source,
                *,
                category: Optional[str] = None,
                stem: bool = False,
                text_field: str = TEXT_FIELD,
                category_field: str = CATEGORY_FIELD,
                progress: bool = False) -> Corpus:
    """
    Stream records from `source` (an NDJSON path or an iterable of mappings) and
    build an immutable Corpus of tokenized documents, in stream order.

    A record is kept when its text field is non-empty and, if `category` is set,
    its category field equals it exactly. Errors abort the whole load.
    """
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        if not path.is_file():
            raise LoadError(f"data file not found: {path}")
        name = str(path)
        total: Optional[int] = count_lines(path) if progress else None
        records: Iterable[Mapping[str, Any]] = iter_ndjson(path)
    else:
        name = "<records>"
        total = len(source) if hasattr(source, "__len__") else None  # type: ignore[arg-type]
        records = source

    log.info("Loading %s (category=%s, stem=%s)", name, category or "all", stem)
    documents: List[Document] = []
    seen = 0
    bar = tqdm(records, total=total, unit="artworks", disable=not progress)
    try:
        for record in bar:
            seen += 1
            if not isinstance(record, Mapping):
                raise LoadError(f"{name}#{seen}: expected a mapping, got {type(record).__name__}")
            if _is_useable(record, f"{name}#{seen}", category, text_field, category_field):
                documents.append(tuple(tokenize(record[text_field], stem=stem)))
    finally:
        bar.close()

    log.info("Loaded %d documents out of %d records", len(documents), seen)
    return Corpus(
        source=name,
        category=category,
        stem=stem,
        documents=tuple(documents),
        records_read=seen,
    )
