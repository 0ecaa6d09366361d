from __future__ import annotations
import argparse, os, sys, json
from . import config as CFG
from .engine import Engine
from .loader import message_text

def _supports_color() -> bool:
    return sys.stdout.isatty() and os.environ.get("NO_COLOR", "") == ""

CSI = "\033["
def _c(text: str, code: str) -> str:
    if not _supports_color(): return text
    return f"{CSI}{code}m{text}{CSI}0m"

def _row(rank: int, r, query: str, show_html: bool) -> dict:
    text = message_text(r.item)
    row = {
        "rank": rank,
        "id": r.item_id,
        "score": round(r.score, 4),
        "exact_match": r.exact_match,
        "text": text,
    }
    if show_html:
        row["html"] = str(Engine.highlight(text, query))
    return row

def _print_table(rows, show_html: bool) -> None:
    if not rows:
        print(_c("(no matches)", "2;37")); return
    print(_c("#   Score   Exact  Message", "1;37"))
    for r in rows:
        exact = "yes" if r["exact_match"] else ""
        body = r["html"] if show_html else r["text"]
        print(f"{r['rank']:<3} {r['score']:<7} {exact:<6} {body}")

def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Fuzzy trigram search over chat exports")
    p.add_argument("--input", nargs="+", required=True, help="Chat export .json or .txt files")
    p.add_argument("-k", "--limit", type=int, default=CFG.DEFAULT_LIMIT, help="Max results")
    p.add_argument("--q", default=None, help="Single query to run once")
    p.add_argument("--repl", action="store_true", help="Interactive loop after init")
    p.add_argument("--json", action="store_true", help="Emit JSON rows")
    p.add_argument("--highlight", action="store_true", help="Show <mark>-highlighted HTML")
    p.add_argument("--verbose", action="store_true")
    args = p.parse_args(argv)

    eng = Engine()
    try:
        eng.build(args.input, verbose=args.verbose or CFG.VERBOSE)

        def run_query(q: str) -> None:
            hits = eng.search_scored(q, limit=args.limit)
            rows = [_row(i, r, q, args.highlight) for i, r in enumerate(hits, 1)]
            if args.json:
                print(json.dumps(rows, ensure_ascii=False, indent=2))
            else:
                _print_table(rows, args.highlight)

        if args.q is not None:
            run_query(args.q)

        if args.repl:
            print("Type a query (empty line to exit).")
            while True:
                try:
                    q = input("> ")
                except (EOFError, KeyboardInterrupt):
                    print(); break
                if not q.strip():
                    break
                run_query(q)

        return 0
    finally:
        eng.shutdown()

if __name__ == "__main__":
    raise SystemExit(main())
