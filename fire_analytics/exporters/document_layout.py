"""Page layout for the one-page analysis document.

Coordinates are in points on a 595x842 page with the origin at the top-left
corner.  The layout is computed separately from PDF rendering so that the
positions and texts can be inspected without a rendering engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import Collection, Sequence

from fire_analytics.core.errors import UnknownFamilyError
from fire_analytics.core.metrics import chain_casting_total_loss, lock_assembly_total_loss
from fire_analytics.core.report_config import REPORT_CONFIG, format_mass, section_texts
from fire_analytics.core.schema import RECORD_FAMILIES, STATIONS, Record
from fire_analytics.core.traversal import daily_station_loss

PAGE_WIDTH = 595
PAGE_HEIGHT = 842
MARGIN_X = 50
TEXT_WIDTH = 500
TITLE_Y = 50
SECTION_Y = 120
HEADING_GAP = 30
LINE_GAP = 25


@dataclass(slots=True)
class TextBlock:
    text: str
    x: float
    y: float
    size: float
    bold: bool = False
    color: str = "#000000"


@dataclass(slots=True)
class DocumentLayout:
    width: float = PAGE_WIDTH
    height: float = PAGE_HEIGHT
    blocks: list[TextBlock] = field(default_factory=list)


def _section_loss(family: str, records: Sequence[Record], stations: Collection[str]) -> float:
    if family == "lock_assembly":
        return lock_assembly_total_loss(records)  # type: ignore[arg-type]
    if family == "chain_casting":
        return chain_casting_total_loss(records)  # type: ignore[arg-type]
    return daily_station_loss(records, stations)  # type: ignore[arg-type]


def build_document_layout(
    family: str,
    records: Sequence[Record],
    stations: Collection[str] = STATIONS,
) -> DocumentLayout:
    if family not in RECORD_FAMILIES:
        raise UnknownFamilyError(family)

    texts = section_texts(family)
    layout = DocumentLayout()
    layout.blocks.append(TextBlock(REPORT_CONFIG["title"], MARGIN_X, TITLE_Y, 24, bold=True))

    y = SECTION_Y
    layout.blocks.append(TextBlock(texts["heading"], MARGIN_X, y, 18, bold=True))
    y += HEADING_GAP
    layout.blocks.append(TextBlock(f"{texts['count_label']}: {len(records)}", MARGIN_X, y, 14))
    y += LINE_GAP
    loss = format_mass(_section_loss(family, records, stations))
    layout.blocks.append(
        TextBlock(f"{REPORT_CONFIG['loss_label']}: {loss} {REPORT_CONFIG['mass_unit']}", MARGIN_X, y, 14, color="#cc0000")
    )
    return layout


def layout_to_html(layout: DocumentLayout) -> str:
    blocks = "\n".join(
        '<div style="position:absolute;left:{x}pt;top:{y}pt;width:{w}pt;font-size:{size}pt;'
        'font-weight:{weight};color:{color};">{text}</div>'.format(
            x=block.x,
            y=block.y,
            w=TEXT_WIDTH,
            size=block.size,
            weight="bold" if block.bold else "normal",
            color=block.color,
            text=escape(block.text),
        )
        for block in layout.blocks
    )
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><style>"
        f"@page {{ size: {layout.width}pt {layout.height}pt; margin: 0; }}"
        "body { margin: 0; font-family: sans-serif; }"
        f"</style></head><body>\n{blocks}\n</body></html>"
    )
