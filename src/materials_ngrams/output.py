from __future__ import annotations
import csv
import logging
import re
from dataclasses import asdict, fields
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .models import NgramRow

log = logging.getLogger(__name__)

CSV_FIELDS: List[str] = [f.name for f in fields(NgramRow)]


def path_prefix(category: Optional[str]) -> str:
    """"Drawing, Collage or other Work on Paper" -> "drawing"; no category -> "all"."""
    if not category:
        return "all"
    first = re.split(r"\W+", category.strip())[0]
    return first.lower() or "all"


def output_path(out_dir: Union[str, Path], category: Optional[str], n: int) -> Path:
    return Path(out_dir) / f"{path_prefix(category)}-{n}grams.csv"


def write_rows(rows: Iterable[NgramRow], path: Union[str, Path]) -> int:
    """Write rows as CSV (header included); None becomes an empty cell."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow({k: ("" if v is None else v) for k, v in asdict(row).items()})
            count += 1
    log.info("Wrote %d rows to %s", count, path)
    return count
