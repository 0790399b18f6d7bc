import json
from pathlib import Path

import pytest

from materials_ngrams.__main__ import main


def _seed(tmp: Path) -> Path:
    path = tmp / "artworks.json"
    records = [
        {"medium": "Oil on canvas", "category": "Painting"},
        {"medium": "Gelatin silver print", "category": "Photography"},
    ]
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return path


@pytest.mark.e2e
def test_cli_writes_csv_files(tmp_path: Path, capsys):
    out = tmp_path / "out"
    rc = main([
        "--data", str(_seed(tmp_path)),
        "--category", "all", "--category", "Photography",
        "--sizes", "1", "2",
        "--mode", "min-count", "--floor", "1",
        "--no-match", "--out", str(out),
    ])
    assert rc == 0
    for name in ("all-1grams.csv", "all-2grams.csv", "photography-1grams.csv", "photography-2grams.csv"):
        assert (out / name).exists()
    printed = capsys.readouterr().out
    assert "gelatin silver" in printed
    assert "Wrote" in printed


@pytest.mark.e2e
def test_cli_reports_failed_categories(tmp_path: Path):
    rc = main(["--data", str(tmp_path / "missing.json"), "--category", "all",
               "--no-match", "--out", str(tmp_path / "out")])
    assert rc == 1


@pytest.mark.e2e
def test_cli_rejects_bad_threshold(tmp_path: Path):
    with pytest.raises(SystemExit) as info:
        main(["--data", str(_seed(tmp_path)), "--threshold", "2", "--no-match"])
    assert info.value.code == 2
