"""
Evaluation harness -- runs eval_questions.jsonl through the interpreter and
query service, and generates analytics/reports/eval_report.md.

Runs against a synthetic worksheet (pipelines.seed) pinned to a fixed
reference day, so relative phrases resolve the same way on every run.

Checks:
  - Metric correctness   (interpreted metrics match expected, in order)
  - Intent correctness   (comparison / growth / list / summary)
  - Date resolution      (number of rows the question selected)
  - Result shape         (metrics / comparison / error)
  - Latency              (end-to-end ms)
"""
from __future__ import annotations

import asyncio
import datetime
import json
import sys
import time
from pathlib import Path
from typing import Any

EVAL_PATH = Path(__file__).resolve().parent / "eval_questions.jsonl"
REPORT_PATH = Path(__file__).resolve().parents[1] / "reports" / "eval_report.md"

REFERENCE_DAY = datetime.date(2026, 2, 11)


class _FrameSource:
    """In-memory data source over the synthetic worksheet."""

    name = "eval"

    def __init__(self, rows: list[dict[str, str]]):
        self._rows = rows

    def fetch_rows(self) -> list[dict[str, str]]:
        return self._rows


def _load_questions() -> list[dict[str, Any]]:
    lines = EVAL_PATH.read_text().splitlines()
    return [json.loads(line) for line in lines if line.strip()]


def _build_cache():
    from pipelines.seed.seed_data import build_sheet
    from src.sheets.cache import DatasetCache

    frame = build_sheet(REFERENCE_DAY)
    return DatasetCache(source=_FrameSource(frame.to_dict(orient="records")), ttl=3600)


def _run_one(q: dict[str, Any], cache) -> dict[str, Any]:
    """Run a single question through interpreter + service."""
    from src.insights.interpreter import interpret
    from src.insights.service import process_query

    question = q["question"]
    t0 = time.perf_counter()
    dataset = asyncio.run(cache.get_dataset())
    query = interpret(question, dataset, today=REFERENCE_DAY)
    result = asyncio.run(process_query(question, cache=cache, today=REFERENCE_DAY))
    latency = int((time.perf_counter() - t0) * 1000)

    metric_ok = query.metrics == q.get("expected_metrics", [])
    intent_ok = query.intent == q.get("expected_intent", "summary")
    dates_ok = len(query.dates) == q.get("expected_dates", len(query.dates))
    type_ok = result.type == q.get("expected_type", result.type)

    return {
        "question": question,
        "latency_ms": latency,
        "metrics": query.metrics,
        "intent": query.intent,
        "date_count": len(query.dates),
        "result_type": result.type,
        "items": len(result.data),
        "metric_ok": metric_ok,
        "intent_ok": intent_ok,
        "dates_ok": dates_ok,
        "type_ok": type_ok,
        "success": metric_ok and intent_ok and dates_ok and type_ok,
        "message": result.message,
    }


def _rate(hits: int, total: int) -> str:
    return f"**{(hits / total * 100) if total else 0:.0f}%** ({hits}/{total})"


def _generate_report(results: list[dict[str, Any]], questions: list[dict[str, Any]]) -> str:
    """Generate the Markdown eval report."""
    total = len(results)
    now = datetime.datetime.now().strftime("%Y-%m-%d %H:%M")

    successes = sum(1 for r in results if r["success"])
    latencies = sorted(r["latency_ms"] for r in results)
    avg_lat = sum(latencies) / len(latencies) if latencies else 0
    p50_lat = latencies[len(latencies) // 2] if latencies else 0
    max_lat = latencies[-1] if latencies else 0

    lines: list[str] = []
    lines.append("# Evaluation Report")
    lines.append("")
    lines.append(f"> Generated: {now}  |  Questions: **{total}**  |  Reference day: `{REFERENCE_DAY.isoformat()}`")
    lines.append("")
    lines.append("---")
    lines.append("")
    lines.append("## Summary")
    lines.append("")
    lines.append("| Metric | Value |")
    lines.append("|--------|-------|")
    lines.append(f"| Overall success rate | {_rate(successes, total)} |")
    lines.append(f"| Metric correctness | {_rate(sum(r['metric_ok'] for r in results), total)} |")
    lines.append(f"| Intent correctness | {_rate(sum(r['intent_ok'] for r in results), total)} |")
    lines.append(f"| Date resolution | {_rate(sum(r['dates_ok'] for r in results), total)} |")
    lines.append(f"| Result shape | {_rate(sum(r['type_ok'] for r in results), total)} |")
    lines.append("")
    lines.append("## Latency")
    lines.append("")
    lines.append("| Stat | ms |")
    lines.append("|------|-----|")
    lines.append(f"| Mean | {avg_lat:.0f} |")
    lines.append(f"| p50 | {p50_lat} |")
    lines.append(f"| Max | {max_lat} |")
    lines.append("")
    lines.append("---")
    lines.append("")

    lines.append("## Per-Question Results")
    lines.append("")
    lines.append("| # | Question | Metrics | Intent | Dates | Type | Items | Pass |")
    lines.append("|---|----------|---------|--------|-------|------|-------|------|")
    for i, r in enumerate(results, 1):
        qtext = r["question"][:55] + ("..." if len(r["question"]) > 55 else "")
        lines.append(
            f"| {i} | {qtext} | {'OK' if r['metric_ok'] else 'ERROR'} | "
            f"{'OK' if r['intent_ok'] else 'ERROR'} | {r['date_count']} | {r['result_type']} | "
            f"{r['items']} | {'OK' if r['success'] else 'ERROR'} |"
        )
    lines.append("")

    lines.append("## Failures")
    lines.append("")
    failures = [(i, r, q) for i, (r, q) in enumerate(zip(results, questions), 1) if not r["success"]]
    if not failures:
        lines.append("None -- all questions handled correctly.")
        lines.append("")
    for i, r, q in failures:
        lines.append(f"### #{i}: {r['question']}")
        lines.append("")
        lines.append(f"- metrics: `{r['metrics']}` (expected `{q.get('expected_metrics')}`)")
        lines.append(f"- intent: `{r['intent']}` (expected `{q.get('expected_intent')}`)")
        lines.append(f"- dates: {r['date_count']} (expected {q.get('expected_dates')})")
        lines.append(f"- type: `{r['result_type']}` (expected `{q.get('expected_type')}`)")
        if r.get("message"):
            lines.append(f"- message: {r['message']}")
        lines.append("")

    return "\n".join(lines)


def run():
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")  # type: ignore[attr-defined]

    questions = _load_questions()
    print(f"Loaded {len(questions)} eval questions.")
    print("Running evaluation...\n")

    cache = _build_cache()
    results = []
    for i, q in enumerate(questions, 1):
        r = _run_one(q, cache)
        status = "PASS" if r["success"] else "FAIL"
        print(f"  [{i:2d}/{len(questions)}] {status}  {r['question'][:60]:<60}  {r['latency_ms']:>4d}ms  items={r['items']}")
        results.append(r)

    report = _generate_report(results, questions)
    REPORT_PATH.parent.mkdir(parents=True, exist_ok=True)
    REPORT_PATH.write_text(report, encoding="utf-8")
    print(f"\nReport written to {REPORT_PATH}")

    total = len(results)
    successes = sum(1 for r in results if r["success"])
    print(f"\n{'='*50}")
    print(f"  Success: {successes}/{total} ({successes/total*100:.0f}%)")
    print(f"{'='*50}")


if __name__ == "__main__":
    run()
