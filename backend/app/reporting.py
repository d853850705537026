# -*- coding: utf-8 -*-
"""HTML and PDF exports of a stored comparison report."""

import logging
from datetime import datetime, timezone
from html import escape
from io import BytesIO
from pathlib import Path
from string import Template
from textwrap import wrap
from typing import Any, Dict, List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.fonts import addMapping
from reportlab.lib.units import cm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from app.models import MetricName
from app.utils.formatting import format_duration, format_file_size, format_metric_value

logger = logging.getLogger(__name__)

PDF_FONT_REGULAR = "Helvetica"
PDF_FONT_BOLD = "Helvetica-Bold"
PDF_FONT_CJK: Optional[str] = None

_FONT_DIR = Path(__file__).resolve().parent / "static" / "fonts"

try:
    regular_path = _FONT_DIR / "DejaVuSans.ttf"
    bold_path = _FONT_DIR / "DejaVuSans-Bold.ttf"

    if regular_path.exists():
        pdfmetrics.registerFont(TTFont("DejaVuSans", str(regular_path)))
        PDF_FONT_REGULAR = "DejaVuSans"

    if bold_path.exists():
        pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", str(bold_path)))
        PDF_FONT_BOLD = "DejaVuSans-Bold"

    if PDF_FONT_REGULAR == "DejaVuSans":
        addMapping("DejaVuSans", 0, 0, PDF_FONT_REGULAR)
        addMapping("DejaVuSans", 1, 0, PDF_FONT_BOLD)
except Exception:  # pragma: no cover - defensive
    logger.warning("Unicode PDF font could not be loaded, falling back to Helvetica.", exc_info=True)
    PDF_FONT_REGULAR = "Helvetica"
    PDF_FONT_BOLD = "Helvetica-Bold"

try:
    # Chinese file names and text; the viewer supplies the glyphs.
    pdfmetrics.registerFont(UnicodeCIDFont("STSong-Light"))
    PDF_FONT_CJK = "STSong-Light"
except Exception:  # pragma: no cover - defensive
    logger.warning("CJK PDF font could not be registered.", exc_info=True)

_CJK_START = 0x2E80

REPORT_TITLE = "Vocal Progress Report"

_HTML_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>$title</title>
<style>
body { font-family: sans-serif; margin: 2rem; color: #1F2937; }
table { border-collapse: collapse; width: 100%; margin-bottom: 1.5rem; }
th, td { border: 1px solid #E5E7EB; padding: 0.4rem 0.6rem; text-align: left; }
.improved { color: #10B981; }
.declined { color: #EF4444; }
.unchanged { color: #6B7280; }
</style>
</head>
<body>
<h1>$title</h1>
<p class="meta">Report ID: $report_id &middot; Generated: $generated_at</p>
<h2>Recordings</h2>
$recordings
<h2>Comparison</h2>
$comparison
<h2>Summary</h2>
$summary
<h2>Areas to work on</h2>
$advice
</body>
</html>
"""
)


def _label(metric: str) -> str:
    return MetricName(metric).label


def _font_for(text: str, font: str) -> str:
    """Switch to the CJK font when ``text`` holds CJK characters."""
    if PDF_FONT_CJK and any(ord(char) >= _CJK_START for char in text):
        return PDF_FONT_CJK
    return font


def _recordings_html(results: List[Dict[str, Any]]) -> str:
    if not results:
        return '<p class="empty-state">No recordings.</p>'
    rows = "".join(
        "<tr><td>{name}</td><td>{fmt}</td><td>{size}</td><td>{duration}</td></tr>".format(
            name=escape(str(result.get("file_name", ""))),
            fmt=escape(str(result.get("format", ""))),
            size=format_file_size(int(result.get("file_size", 0))),
            duration=format_duration(int(result.get("duration", 0))),
        )
        for result in results
    )
    return (
        "<table><thead><tr><th>File</th><th>Format</th><th>Size</th><th>Duration</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>"
    )


def _comparison_html(comparison: List[Dict[str, Any]]) -> str:
    if not comparison:
        return '<p class="empty-state">No comparison data.</p>'
    rows: List[str] = []
    for report in comparison:
        metric = report["metric"]
        status = report.get("status", "declined")
        rows.append(
            '<tr><td>{label}</td><td>{previous}</td><td>{current}</td>'
            '<td class="{css}">{difference:+.1f}</td><td class="{css}">{percentage:+.1f}%</td>'
            '<td class="{css}">{status}</td></tr>'.format(
                label=escape(_label(metric)),
                previous=format_metric_value(metric, report["previous"]),
                current=format_metric_value(metric, report["current"]),
                difference=report["difference"],
                percentage=report["percentage_change"],
                css=escape(status),
                status=escape(status.capitalize()),
            )
        )
    return (
        "<table><thead><tr><th>Metric</th><th>Previous</th><th>Current</th>"
        "<th>Difference</th><th>Change</th><th>Status</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
    )


def _advice_html(advice: List[Dict[str, Any]]) -> str:
    if not advice:
        return '<p class="empty-state">No metric declined.</p>'
    items = "".join(
        "<li><strong>{title}</strong>: {description}</li>".format(
            title=escape(str(item.get("title", ""))),
            description=escape(str(item.get("description", ""))),
        )
        for item in advice
    )
    return f'<ul class="advice">{items}</ul>'


def generate_html_report(report_id: str, context: Dict[str, Any]) -> str:
    generated_at = datetime.now(timezone.utc).astimezone().strftime("%d %B %Y %H:%M")
    summary_items = "".join(f"<li>{escape(line)}</li>" for line in context.get("summary", []))
    return _HTML_TEMPLATE.substitute(
        title=escape(REPORT_TITLE),
        report_id=escape(report_id),
        generated_at=escape(generated_at),
        recordings=_recordings_html(context.get("results", [])),
        comparison=_comparison_html(context.get("comparison", [])),
        summary=f"<ul>{summary_items}</ul>" if summary_items else '<p class="empty-state">No summary.</p>',
        advice=_advice_html(context.get("advice", [])),
    )


def generate_pdf_report(report_id: str, context: Dict[str, Any]) -> bytes:
    buffer = BytesIO()
    _, page_height = A4
    margin = 2 * cm
    max_chars = 95

    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"{REPORT_TITLE} - {report_id}")
    generated_at = datetime.now(timezone.utc).astimezone().strftime("%d %B %Y %H:%M")

    y_position = page_height - margin

    def ensure_space(lines: int = 1, leading: float = 14.0) -> None:
        nonlocal y_position
        if y_position - lines * leading < margin:
            pdf.showPage()
            y_position = page_height - margin

    def write_line(text: str = "", font: str = PDF_FONT_REGULAR, size: int = 11, leading: float = 14.0) -> None:
        nonlocal y_position
        ensure_space(1, leading)
        pdf.setFont(_font_for(text, font), size)
        pdf.drawString(margin, y_position, text)
        y_position -= leading

    def write_paragraph(text: str) -> None:
        nonlocal y_position
        lines = wrap(text, max_chars)
        ensure_space(len(lines))
        for line in lines:
            write_line(line)
        y_position -= 4

    write_line(REPORT_TITLE, font=PDF_FONT_BOLD, size=18, leading=22)
    write_paragraph(f"Report ID: {report_id}")
    write_paragraph(f"Generated: {generated_at}")

    results = context.get("results", [])
    if results:
        write_line("Recordings", font=PDF_FONT_BOLD, size=14, leading=18)
        for index, result in enumerate(results, start=1):
            write_paragraph(
                "{index}. {name} ({fmt}, {size}, {duration})".format(
                    index=index,
                    name=result.get("file_name", ""),
                    fmt=result.get("format", ""),
                    size=format_file_size(int(result.get("file_size", 0))),
                    duration=format_duration(int(result.get("duration", 0))),
                )
            )

    comparison = context.get("comparison", [])
    if comparison:
        write_line("Comparison", font=PDF_FONT_BOLD, size=14, leading=18)
        for report in comparison:
            metric = report["metric"]
            write_paragraph(
                "{label}: {previous} -> {current} ({difference:+.1f}, {percentage:+.1f}%) [{status}]".format(
                    label=_label(metric),
                    previous=format_metric_value(metric, report["previous"]),
                    current=format_metric_value(metric, report["current"]),
                    difference=report["difference"],
                    percentage=report["percentage_change"],
                    status=report.get("status", ""),
                )
            )

    summary = context.get("summary", [])
    if summary:
        write_line("Summary", font=PDF_FONT_BOLD, size=14, leading=18)
        for line in summary:
            write_paragraph(f"- {line}")

    advice = context.get("advice", [])
    if advice:
        write_line("Areas to work on", font=PDF_FONT_BOLD, size=14, leading=18)
        for item in advice:
            write_paragraph(f"- {item.get('title', '')}: {item.get('description', '')}")

    pdf.showPage()
    pdf.save()
    logger.debug("Rendered PDF report %s (%d bytes)", report_id, buffer.tell())
    return buffer.getvalue()
