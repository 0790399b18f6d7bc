from __future__ import annotations
import argparse, logging, os, sys

from . import config as CFG
from .config import AnalysisConfig, VocabularySettings, parse_category, policy_from_args
from .engine import preview, run_categories
from .errors import ConfigurationError
from .models import Selection
from .vocabulary import VocabularyIndex


def _supports_color() -> bool:
    return sys.stdout.isatty() and os.environ.get("NO_COLOR", "") == ""

CSI = "\033["
def _c(text: str, code: str) -> str:
    if not _supports_color(): return text
    return f"{CSI}{code}m{text}{CSI}0m"


def _print_summary(category, selection: Selection, k: int) -> None:
    label = category or "all"
    print(_c(f"\n{label}: top {len(selection.items)} n-grams of length {selection.n}", "1;37"))
    print(_c(f"{selection.share_of_ngrams:.2f}% of n-grams account for "
             f"{selection.share_of_occurrences:.2f}% of all occurrences", "32"))
    phrases = preview(selection.items, k)
    if not phrases:
        print(_c("(no n-grams)", "2;37")); return
    print(_c("Previewing top %d..." % len(phrases), "1;34"))
    for p in phrases:
        print(_c(f"• {p}", "34"))


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Materials n-gram analysis with AAT matching")
    p.add_argument("--data", required=True, help="Newline-delimited JSON file of artworks")
    p.add_argument("--category", action="append", default=None,
                   help="Category to analyse (repeatable); 'all' for every artwork. Default: all + main categories")
    p.add_argument("--stem", action="store_true", help="Porter-stem tokens before n-gram analysis")
    p.add_argument("--sizes", type=int, nargs="+", default=list(CFG.DEFAULT_SIZES), help="n-gram sizes")
    p.add_argument("--mode", choices=CFG.MODES, default="coverage")
    p.add_argument("--threshold", type=float, default=None,
                   help="Coverage share for every n (default: per-n 0.8/0.6/0.4/0.2)")
    p.add_argument("--floor", type=int, default=None,
                   help="Minimum count for every n (default: 1%% of document count)")
    p.add_argument("--es-url", default=CFG.AAT_ES_URL)
    p.add_argument("--index", default=CFG.AAT_INDEX)
    p.add_argument("--no-match", action="store_true", help="Skip AAT matching")
    p.add_argument("--workers", type=int, default=CFG.MAX_WORKERS, help="Max in-flight AAT lookups")
    p.add_argument("--out", default=CFG.OUT_DIR, help="Output directory for CSV files")
    p.add_argument("--preview", type=int, default=CFG.PREVIEW_SIZE)
    p.add_argument("--progress", action="store_true", help="Show a loading progress bar")
    p.add_argument("--verbose", action="store_true")
    args = p.parse_args(argv)

    if args.verbose or os.environ.get("MATERIALS_NGRAMS_VERBOSE") == "1":
        logging.basicConfig(level=logging.INFO)

    try:
        config = AnalysisConfig(sizes=tuple(args.sizes), mode=args.mode, stem=args.stem).validate()
        policy = policy_from_args(args.mode, threshold=args.threshold, floor=args.floor)
        settings = VocabularySettings(url=args.es_url, index=args.index, max_workers=args.workers).validate()
    except ConfigurationError as exc:
        p.error(str(exc))

    categories = [parse_category(c) for c in args.category] if args.category else list(CFG.CATEGORIES)

    vocabulary = None if args.no_match else VocabularyIndex(settings)
    try:
        written = run_categories(
            args.data,
            categories=categories,
            config=config,
            vocabulary=vocabulary,
            vocabulary_settings=settings,
            policy=policy,
            out_dir=args.out,
            progress=args.progress,
            on_selection=lambda cat, sel: _print_summary(cat, sel, args.preview),
        )
    finally:
        if vocabulary is not None:
            vocabulary.close()

    for category, paths in written.items():
        for path in paths.values():
            print(_c(f"Wrote {path}", "35"))

    failed = [c for c in categories if c not in written]
    if failed:
        print(_c("Failed: " + ", ".join(c or "all" for c in failed), "1;31"), file=sys.stderr)
        return 1
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
