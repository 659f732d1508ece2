import csv
import io
import sys
from datetime import date, datetime
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fire_analytics.core.errors import UnknownFamilyError
from fire_analytics.core.schema import ChainCastingRecord, DailyOperationRecord, LockAssemblyRecord
from fire_analytics.exporters import delimited
from fire_analytics.exporters.document_layout import (
    PAGE_HEIGHT,
    PAGE_WIDTH,
    build_document_layout,
    layout_to_html,
)


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def _lock_records() -> list[LockAssemblyRecord]:
    return [
        LockAssemblyRecord(
            purity=18,
            model="Classic, wide",
            company="Atelier A",
            total_input_mass=10,
            total_output_mass=9,
            created_at=datetime(2026, 1, 9, 8, 0),
            started_at=datetime(2026, 1, 10, 9, 15),
            ended_at=datetime(2026, 1, 10, 11, 45),
        ),
        LockAssemblyRecord(purity=18, total_input_mass=5, total_output_mass=5, created_at=datetime(2026, 1, 11, 7, 5)),
        LockAssemblyRecord(purity=18, total_input_mass=8, total_output_mass=6, created_at=datetime(2026, 1, 12, 7, 5)),
    ]


def _daily_record() -> DailyOperationRecord:
    return DailyOperationRecord(
        started_at=datetime(2026, 1, 5),
        created_at=datetime(2026, 1, 5, 6, 30),
        state="completed",
        days=[
            {
                "day": date(2026, 1, 5),
                "stations": {"Furnace": {"lines": [{"purity": 18, "fire": 2.0}, {"purity": 21, "fire": 1.5}]}},
            }
        ],
    )


def test_empty_csv_has_header_only():
    text = delimited.render_delimited("lock_assembly", [])

    assert text == ",".join(delimited.LOCK_ASSEMBLY_COLUMNS) + "\n"


def test_lock_assembly_csv_rows():
    rows = _rows(delimited.render_delimited("lock_assembly", _lock_records()))

    assert rows[0] == delimited.LOCK_ASSEMBLY_COLUMNS
    assert len(rows) == 4
    assert rows[1] == [
        "Classic, wide",
        "Atelier A",
        "18",
        "10.01.2026 09:15",
        "10.01.2026 11:45",
        "10.0",
        "9.0",
        "1.0",
        "Completed",
    ]
    assert rows[2][:2] == ["", ""]
    assert rows[2][3] == "11.01.2026 07:05"
    assert rows[2][4] == ""
    assert rows[2][-1] == "InProgress"


def test_chain_casting_csv_rows():
    records = [
        ChainCastingRecord(
            purity=21,
            input_gold=10,
            output_gold=6.5,
            extractions=[{"mass": 3}, {"mass": 4}],
            purity_ratio=87.5,
            created_at=datetime(2026, 2, 1, 14, 0),
            state="completed",
        ),
        ChainCastingRecord(purity=22, extractions=[{"mass": 7}], created_at=datetime(2026, 2, 2, 8, 0)),
    ]

    rows = _rows(delimited.render_delimited("chain_casting", records))

    assert rows[0] == delimited.CHAIN_CASTING_COLUMNS
    assert rows[1] == ["01.02.2026 14:00", "21", "10.0", "6.5", "87.5", "7.0", "3.0", "Completed"]
    assert rows[2] == ["02.02.2026 08:00", "22", "", "", "", "7.0", "-7.0", "Draft"]


def test_daily_operations_csv_rows():
    rows = _rows(delimited.render_delimited("daily_operations", [_daily_record()]))

    assert rows == [["Created", "Status"], ["05.01.2026 06:30", "Completed"]]


def test_render_delimited_rejects_unknown_family():
    with pytest.raises(UnknownFamilyError):
        delimited.render_delimited("notes", [])


def test_document_layout_positions():
    layout = build_document_layout("lock_assembly", _lock_records())

    assert (layout.width, layout.height) == (PAGE_WIDTH, PAGE_HEIGHT) == (595, 842)
    assert [block.y for block in layout.blocks] == [50, 120, 150, 175]
    assert all(block.x == 50 for block in layout.blocks)
    assert layout.blocks[0].text == "Fire Analysis Report"
    assert layout.blocks[0].size == 24 and layout.blocks[0].bold
    assert layout.blocks[1].text == "Lock Assembly Analysis"
    assert layout.blocks[2].text == "Total operations: 3"
    assert layout.blocks[3].text == "Total loss: 3.00 g"
    assert layout.blocks[3].color == "#cc0000"


def test_daily_document_layout_uses_station_selection():
    everything = build_document_layout("daily_operations", [_daily_record()])
    without_furnace = build_document_layout("daily_operations", [_daily_record()], {"Polish"})

    assert everything.blocks[2].text == "Total weeks: 1"
    assert everything.blocks[3].text == "Total loss: 3.50 g"
    assert without_furnace.blocks[3].text == "Total loss: 0.00 g"


def test_document_layout_rejects_unknown_family():
    with pytest.raises(UnknownFamilyError):
        build_document_layout("notes", [])


def test_layout_html_sets_page_size_and_escapes_text():
    layout = build_document_layout("chain_casting", [])
    layout.blocks[1].text = "Casting <draft> & more"

    html = layout_to_html(layout)

    assert "@page { size: 595pt 842pt; margin: 0; }" in html
    assert "Casting &lt;draft&gt; &amp; more" in html
    assert "Total operations: 0" in html


def test_render_document_produces_pdf():
    try:
        from fire_analytics.exporters.document import render_document
    except (ImportError, OSError) as exc:
        pytest.skip(f"PDF rendering unavailable: {exc}")

    payload = render_document("lock_assembly", _lock_records())

    assert payload.startswith(b"%PDF")
