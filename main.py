"""Pressroom - Music Press Search

Simple CLI for running a search and analysing the results.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

from pressroom.agents.scorer import build_scorer
from pressroom.config import settings
from pressroom.models.schemas import ExportFormat, SearchConfig
from pressroom.services.enricher import Enricher, EnrichmentPhase
from pressroom.services.export import export_results
from pressroom.tools.search_provider import SearchOrchestrator


def _print_table(results) -> None:
    print(f"\n{'#':>3}  {'Type':<10} {'Sentiment':<9} {'Rel':>4}  {'Source':<20} Title")
    print("-" * 90)
    for i, r in enumerate(results, 1):
        sentiment = r.analysis.sentiment.value if r.analysis else "-"
        relevance = str(r.analysis.relevance_score) if r.analysis else "-"
        dup = " (dup)" if r.is_duplicate else ""
        print(
            f"{i:>3}  {r.content_type.value:<10} {sentiment:<9} {relevance:>4}  "
            f"{r.source[:20]:<20} {r.title[:60]}{dup}"
        )


async def run_search(config: SearchConfig, export: str | None, output: str | None):
    """Search, analyse and optionally export."""
    print(f"Search query: {config.query}")
    print("-" * 50)

    orchestrator = SearchOrchestrator.from_settings(settings)
    outcome = await orchestrator.search(config)
    print(f"[*] {len(outcome.results)} results from {outcome.provider}")
    for reason in outcome.fallback_reasons:
        print(f"  [~] skipped: {reason}")

    enricher = Enricher(build_scorer(settings), max_parallel=settings.analysis_max_parallel)
    batch = enricher.enrich(outcome.results)
    async for event in batch:
        if event.phase == EnrichmentPhase.ANALYZED:
            print(f"\r[+] Analysing... {event.progress:.0%}", end="", flush=True)
        elif event.phase == EnrichmentPhase.FAILED:
            print(f"\n[!] Analysis failed for #{event.index + 1}: {event.error}")

    summary = batch.summary
    print(f"\n[*] Analysis done: {summary.completed}/{summary.total} ({summary.failed} failed)")
    _print_table(batch.results)

    if export:
        artifact = export_results(batch.results, export)
        path = Path(output or artifact.filename)
        path.write_bytes(artifact.content)
        print(f"\n[*] Exported {len(batch.results)} results to {path}")


def main():
    parser = argparse.ArgumentParser(description="Pressroom Music Press Search")
    parser.add_argument("--query", "-q", required=True, help="Search query")
    parser.add_argument("--max-results", "-n", type=int, default=20, help="Maximum results (1-200)")
    parser.add_argument("--date-from", help="Earliest publish date (YYYY-MM-DD)")
    parser.add_argument("--date-to", help="Latest publish date (YYYY-MM-DD)")
    parser.add_argument(
        "--content-type",
        action="append",
        dest="content_types",
        help="Content type to include; repeatable (default: all)",
    )
    parser.add_argument(
        "--export",
        choices=[f.value for f in ExportFormat],
        help="Export format",
    )
    parser.add_argument("--output", "-o", help="Export file path (default: generated name)")

    args = parser.parse_args()

    try:
        config = SearchConfig(
            query=args.query,
            max_results=args.max_results,
            date_from=args.date_from,
            date_to=args.date_to,
            content_types=args.content_types or ["all"],
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"[!] {err['msg']}", file=sys.stderr)
        sys.exit(2)

    asyncio.run(run_search(config, args.export, args.output))


if __name__ == "__main__":
    main()
