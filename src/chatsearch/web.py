from __future__ import annotations
import argparse
import logging
from flask import Flask, request, jsonify, Response
from markupsafe import escape
from . import config as CFG
from .engine import Engine

app = Flask(__name__)
_engine: Engine | None = None

log = logging.getLogger(__name__)

def _row(r, q: str) -> dict:
    msg = r.item
    # blank queries are a pass-through in search, so they are not highlighted either
    html = _engine.highlight(msg.text, q) if q.strip() else escape(msg.text)  # type: ignore
    return {
        "id": msg.id,
        "score": round(r.score, 4),
        "exact_match": r.exact_match,
        "author": msg.author,
        "date": msg.date,
        "chat": msg.chat,
        "forwarded_from": msg.forwarded_from,
        "media_type": msg.media_type,
        "text": msg.text,
        "html": str(html),
    }

# ---------- API ----------
@app.get("/api/search")
def api_search():
    q = request.args.get("q", "", type=str)
    k = request.args.get("k", CFG.UI_LIMIT, type=int)
    if _engine is None or _engine.index is None:
        return jsonify({"error": "engine not initialized"}), 503
    hits = _engine.search_scored(q, limit=k)
    return jsonify([_row(r, q) for r in hits])

@app.get("/health")
def health():
    if _engine is None or _engine.index is None:
        return jsonify({"ok": False, "items": 0}), 503
    return jsonify({"ok": True, "items": _engine.stats()["items"]})

# ---------- UI ----------
@app.get("/")
def home():
    # A tiny page: CSS variables + minimal JS, no external deps.
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Chat search</title>
<style>
:root{
  --bg:#0b0f14; --panel:#0f141b; --ink:#cfd8e3; --muted:#8a94a6;
  --accent:#6ee7ff; --border:#1c2530; --mark-bg:rgba(110,231,255,.2);
}
*{box-sizing:border-box}
body{
  margin:0; background:var(--bg); color:var(--ink);
  font:16px/1.45 system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,"Helvetica Neue",Arial;
}
.container{ max-width:980px; margin:24px auto; padding:0 16px }
.card{
  background:var(--panel); border:1px solid var(--border);
  border-radius:16px; padding:18px; box-shadow:0 10px 30px rgba(0,0,0,.25);
}
h1{ font-size:20px; margin:0 0 8px 0 }
input{
  width:100%; padding:12px 14px; border-radius:12px; border:1px solid var(--border);
  background:#0b1117; color:var(--ink); outline:none; font-size:16px;
}
input:focus{ border-color:var(--accent) }
.meta{ color:var(--muted); font-size:13px; margin-top:6px }
.msg{ padding:12px 14px; border-top:1px solid var(--border) }
.msg:first-child{ border-top:none }
.head{ color:var(--muted); font-size:13px }
.tag{ color:var(--muted); font-size:12px; margin-left:8px }
.more{ padding:12px 14px; color:var(--muted); text-align:center }
mark{ background:var(--mark-bg); color:inherit; border-bottom:1px solid var(--accent) }
</style>
</head>
<body>
  <div class="container">
    <div class="card">
      <h1>Chat search</h1>
      <input id="q" type="text" placeholder="Search messages…" autocomplete="off" autofocus />
      <div class="meta" id="stats">Ready.</div>
      <div id="out"></div>
    </div>
  </div>
<script>
const PAGE = __PAGE__;
const q = document.querySelector("#q"), out = document.querySelector("#out"), stats = document.querySelector("#stats");
let t;
function esc(s){ return String(s).replace(/[&<>"']/g, c => ({"&":"&amp;","<":"&lt;",">":"&gt;",'"':"&quot;","'":"&#39;"}[c])); }
async function run(){
  const t0 = performance.now();
  const resp = await fetch(`/api/search?q=${encodeURIComponent(q.value)}`);
  if(!resp.ok){ stats.textContent = `Error: HTTP ${resp.status}`; return; }
  const data = await resp.json();
  stats.textContent = `Results: ${data.length} • ~${Math.max(1, Math.round(performance.now() - t0))} ms`;
  // html is produced server-side and already escaped
  out.innerHTML = data.slice(0, PAGE).map(r => `
    <div class="msg">
      <div class="head">${esc(r.author || "")} ${esc(r.date || "")}${r.forwarded_from ? `<span class="tag">forwarded from ${esc(r.forwarded_from)}</span>` : ""}</div>
      <div>${r.html}</div>${r.media_type ? `<span class="tag">[${esc(r.media_type)}]</span>` : ""}
    </div>`).join("") +
    (data.length > PAGE ? `<div class="more">Showing first ${PAGE} of ${data.length}. Refine the query.</div>` : "");
}
q.addEventListener("input", () => { clearTimeout(t); t = setTimeout(run, 150); });
run();
</script>
</body>
</html>
""".replace("__PAGE__", str(CFG.UI_PAGE_SIZE))
    return Response(html, mimetype="text/html")

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run Flask UI on top of Engine")
    ap.add_argument("--input", nargs="+", required=True, help="Chat export .json or .txt files")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    verbose = args.verbose or CFG.VERBOSE
    global _engine
    _engine = Engine()
    _engine.build(args.input, verbose=verbose)
    log.info("Serving %d messages on %s:%d", _engine.stats()["items"], args.host, args.port)

    try:
        app.run(host=args.host, port=args.port, debug=verbose)
    finally:
        _engine.shutdown()
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
