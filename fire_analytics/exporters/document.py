from __future__ import annotations

from typing import Collection, Sequence

from weasyprint import HTML

from fire_analytics.core.schema import STATIONS, Record
from fire_analytics.exporters.document_layout import build_document_layout, layout_to_html


def render_document(
    family: str,
    records: Sequence[Record],
    stations: Collection[str] = STATIONS,
) -> bytes:
    """Render the one-page analysis document for ``family`` as PDF bytes."""

    layout = build_document_layout(family, records, stations)
    return HTML(string=layout_to_html(layout)).write_pdf()
