"""Serialize a result set to JSON, CSV or PDF for download."""
from __future__ import annotations

import csv
import io
import json
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

import fitz  # PyMuPDF

from pressroom.errors import ValidationError
from pressroom.models.schemas import ExportFormat, SearchResult, Sentiment

CSV_HEADERS = [
    "Title",
    "Source",
    "Publish Date",
    "Content Type",
    "Sentiment",
    "Relevance Score",
    "Authority",
    "Themes",
    "URL",
    "Snippet",
]
NOT_AVAILABLE = "N/A"

# Landscape A4 in points.
PAGE_WIDTH = 842
PAGE_HEIGHT = 595
MARGIN = 40
ROW_HEIGHT = 16
PDF_COLUMNS = [("#", 0), ("Title", 30), ("Source", 380), ("Date", 520), ("Sentiment", 610), ("Relevance", 700)]
PDF_TITLE_LENGTH = 50


@dataclass(frozen=True)
class ExportArtifact:
    content: bytes
    filename: str
    media_type: str


def _stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def _date_only(value: str) -> str:
    return value[:10] if value else NOT_AVAILABLE


def to_json(results: list[SearchResult]) -> bytes:
    payload = [r.model_dump(mode="json", by_alias=True) for r in results]
    return json.dumps(payload, indent=2).encode("utf-8")


def to_csv(results: list[SearchResult]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    for r in results:
        analysis = r.analysis
        writer.writerow(
            [
                r.title,
                r.source,
                _date_only(r.publish_date),
                r.content_type.value,
                analysis.sentiment.value if analysis else NOT_AVAILABLE,
                analysis.relevance_score if analysis else NOT_AVAILABLE,
                analysis.authority if analysis else NOT_AVAILABLE,
                "; ".join(analysis.themes) if analysis else NOT_AVAILABLE,
                r.url,
                r.snippet,
            ]
        )
    return buffer.getvalue().encode("utf-8")


def _truncate(text: str, length: int) -> str:
    return text if len(text) <= length else text[: length - 3] + "..."


def _pdf_row(index: int, r: SearchResult) -> list[str]:
    analysis = r.analysis
    return [
        str(index),
        _truncate(r.title, PDF_TITLE_LENGTH),
        _truncate(r.source, 24),
        _date_only(r.publish_date),
        analysis.sentiment.value if analysis else NOT_AVAILABLE,
        f"{analysis.relevance_score}%" if analysis else NOT_AVAILABLE,
    ]


def _write_row(page: fitz.Page, y: float, cells: list[str], fontsize: float = 9) -> None:
    for (_, offset), text in zip(PDF_COLUMNS, cells):
        page.insert_text((MARGIN + offset, y), text, fontsize=fontsize)


def to_pdf(results: list[SearchResult]) -> bytes:
    doc = fitz.open()
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    page.insert_text((MARGIN, MARGIN + 10), "Music Press Search Results", fontsize=18)
    page.insert_text((MARGIN, MARGIN + 30), f"Generated: {_stamp()}", fontsize=10)

    y = MARGIN + 60
    _write_row(page, y, [name for name, _ in PDF_COLUMNS], fontsize=10)
    y += ROW_HEIGHT
    for i, r in enumerate(results, start=1):
        if y > PAGE_HEIGHT - MARGIN:
            page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
            y = MARGIN + 10
        _write_row(page, y, _pdf_row(i, r))
        y += ROW_HEIGHT

    sentiments = Counter(r.analysis.sentiment for r in results if r.analysis)
    summary = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    summary.insert_text((MARGIN, MARGIN + 10), "Summary", fontsize=16)
    lines = [f"Total Results: {len(results)}"] + [
        f"{s.value.capitalize()}: {sentiments.get(s, 0)}"
        for s in (Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.NEUTRAL, Sentiment.MIXED)
    ]
    for offset, line in enumerate(lines):
        summary.insert_text((MARGIN, MARGIN + 40 + offset * ROW_HEIGHT), line, fontsize=11)

    content = doc.tobytes()
    doc.close()
    return content


def export_results(results: list[SearchResult], fmt: ExportFormat | str) -> ExportArtifact:
    """Render ``results`` in the requested format."""
    if not results:
        raise ValidationError("No results to export")
    try:
        fmt = ExportFormat(fmt)
    except ValueError as e:
        raise ValidationError(f"Unsupported export format: {fmt}") from e
    stamp = _stamp()

    if fmt == ExportFormat.JSON:
        return ExportArtifact(to_json(results), f"music-press-{stamp}.json", "application/json")
    if fmt in (ExportFormat.CSV, ExportFormat.EXCEL):
        return ExportArtifact(to_csv(results), f"music-press-{stamp}.csv", "text/csv")
    return ExportArtifact(to_pdf(results), f"music-press-{stamp}.pdf", "application/pdf")
