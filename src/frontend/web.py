from __future__ import annotations
import argparse
import logging
from dataclasses import asdict

from flask import Flask, request, jsonify, Response
from materials_ngrams import config as CFG
from materials_ngrams.config import AnalysisConfig, VocabularySettings, parse_category, policy_from_args
from materials_ngrams.engine import NgramAnalyzer
from materials_ngrams.errors import ConfigurationError
from materials_ngrams.vocabulary import VocabularyIndex

app = Flask(__name__)
_analyzer: NgramAnalyzer | None = None

# ---------- API ----------
@app.get("/api/health")
def api_health():
    ready = _analyzer is not None
    return jsonify({
        "ok": ready,
        "documents": len(_analyzer.corpus) if ready else 0,
        "category": _analyzer.category if ready else None,
    })

@app.get("/api/ngrams")
def api_ngrams():
    if _analyzer is None:
        return jsonify({"error": "analyzer not loaded"}), 503
    n = request.args.get("n", 1, type=int)
    mode = request.args.get("mode", _analyzer.config.mode, type=str)
    threshold = request.args.get("threshold", None, type=float)
    floor = request.args.get("floor", None, type=int)
    match = request.args.get("match", "1", type=str) not in ("0", "false", "no")
    try:
        policy = policy_from_args(mode, threshold=threshold, floor=floor)
        if policy is None and mode != _analyzer.config.mode:
            policy = AnalysisConfig(mode=mode).policy_for(n, len(_analyzer.corpus))
        selection = _analyzer.top_ngrams(n, policy)
    except ConfigurationError as exc:
        return jsonify({"error": str(exc)}), 400

    if match:
        rows = _analyzer.annotate(selection)
    else:
        rows = NgramAnalyzer(_analyzer.corpus, config=_analyzer.config).annotate(selection)
    return jsonify({
        "n": n,
        "total": selection.total,
        "unique": selection.unique,
        "covered": selection.covered,
        "rows": [asdict(r) for r in rows],
    })

# ---------- UI ----------
@app.get("/")
def home():
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<title>Materials n-grams</title>
<style>
body{margin:0;background:#0b0f14;color:#cfd8e3;font:15px/1.45 system-ui,sans-serif}
.container{max-width:980px;margin:24px auto;padding:0 16px}
table{border-collapse:collapse;width:100%}
td,th{border-bottom:1px solid #1c2530;padding:4px 8px;text-align:left}
.exact{color:#45d483}.synonym{color:#6ee7ff}
</style>
</head>
<body>
<div class="container">
<h1>Materials n-grams</h1>
<label>n <select id="n"><option>1</option><option>2</option><option>3</option><option>4</option></select></label>
<label><input type="checkbox" id="match" checked /> match AAT</label>
<div id="stats"></div>
<table><thead><tr><th>n-gram</th><th>frequency</th><th>AAT subject</th><th>quality</th></tr></thead>
<tbody id="out"></tbody></table>
</div>
<script>
const n = document.getElementById("n"), match = document.getElementById("match");
async function load(){
  const r = await fetch(`/api/ngrams?n=${n.value}&match=${match.checked ? 1 : 0}`);
  const data = await r.json();
  document.getElementById("stats").textContent =
    data.error ? data.error : `${data.rows.length} of ${data.unique} unique n-grams, covering ${data.covered} of ${data.total}`;
  const out = document.getElementById("out");
  out.replaceChildren();
  for (const row of data.rows || []) {
    const tr = document.createElement("tr");
    for (const value of [row.ngram, row.frequency, row.aat_name || "", row.match_quality || ""]) {
      const td = document.createElement("td");
      td.textContent = String(value);
      tr.appendChild(td);
    }
    if (row.match_quality === "exact" || row.match_quality === "synonym") {
      tr.lastChild.className = row.match_quality;
    }
    out.appendChild(tr);
  }
}
n.addEventListener("change", load); match.addEventListener("change", load); load();
</script>
</body>
</html>
"""
    return Response(html, mimetype="text/html")

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Browse top n-grams of one corpus over HTTP")
    ap.add_argument("--data", required=True)
    ap.add_argument("--category", default=None, help="Category filter, or 'all'")
    ap.add_argument("--stem", action="store_true")
    ap.add_argument("--mode", choices=CFG.MODES, default="coverage")
    ap.add_argument("--es-url", default=CFG.AAT_ES_URL)
    ap.add_argument("--index", default=CFG.AAT_INDEX)
    ap.add_argument("--no-match", action="store_true")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    global _analyzer
    settings = VocabularySettings(url=args.es_url, index=args.index)
    vocabulary = None if args.no_match else VocabularyIndex(settings)
    _analyzer = NgramAnalyzer.create(
        args.data,
        category=parse_category(args.category),
        config=AnalysisConfig(mode=args.mode, stem=args.stem),
        vocabulary=vocabulary,
        vocabulary_settings=settings,
        progress=args.verbose,
    )

    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        if vocabulary is not None:
            vocabulary.close()
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
