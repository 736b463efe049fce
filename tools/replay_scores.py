# tools/replay_scores.py
from __future__ import annotations
import argparse, csv, io, json
from pathlib import Path
from typing import List
from level_core.config import load_config, promotion_config_from
from level_core.level_store import level_for_promotion
from level_core.promotion import evaluate_after_attempt
from level_core.scores import ScoreHistory, rolling_average

def _read_scores(path: Path) -> List[float]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        raw = json.loads(text)
        return [float(x) for x in (raw.get("scores", []) if isinstance(raw, dict) else raw)]
    out: List[float] = []
    for row in csv.reader(io.StringIO(text)):
        for cell in row:
            cell = cell.strip()
            if not cell: continue
            try: out.append(float(cell))
            except ValueError: continue  # header or note
    return out

def replay(scores: List[float], start_level: int, cfg) -> List[dict]:
    history = ScoreHistory()
    level = level_for_promotion(start_level)
    rows = []
    for s in scores:
        history.append(s)
        res = evaluate_after_attempt(level, history, cfg)
        avg = rolling_average(history)
        rows.append({"n": len(history), "score": s, "avg5": None if avg is None else round(avg, 2),
                     "level_before": level, "level_after": res.new_level, "change": res.change})
        level = res.new_level
    return rows

def main():
    ap = argparse.ArgumentParser(description="Replay attempt scores through the promotion ladder.")
    ap.add_argument("scores", help="CSV or JSON file of scores, oldest first")
    ap.add_argument("--start", type=int, default=4, help="starting level (0-8)")
    ap.add_argument("--json", action="store_true", help="print rows as JSON")
    a = ap.parse_args()
    cfg = promotion_config_from(load_config())
    rows = replay(_read_scores(Path(a.scores)), a.start, cfg)
    if a.json:
        print(json.dumps(rows, indent=2)); return
    for r in rows:
        print(f"#{r['n']:>3} score={r['score']:>5.1f} avg5={r['avg5'] if r['avg5'] is not None else '-':>6} "
              f"L{r['level_before']} -> L{r['level_after']} {r['change']}")

if __name__ == "__main__":
    main()
