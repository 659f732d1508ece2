#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
from datetime import datetime, timedelta
from pathlib import Path


def _lock_assembly(now: datetime) -> list[dict]:
    return [
        {
            "model": "Classic",
            "company": "Atelier A",
            "purity": 18,
            "total_input_mass": 10.0,
            "total_output_mass": 9.0,
            "created_at": (now - timedelta(days=3)).isoformat(),
            "started_at": (now - timedelta(days=3)).isoformat(),
            "ended_at": (now - timedelta(days=3, hours=-2)).isoformat(),
        },
        {
            "model": "Slim",
            "company": "Atelier B",
            "purity": 22,
            "total_input_mass": 8.0,
            "total_output_mass": 7.5,
            "created_at": (now - timedelta(days=1)).isoformat(),
        },
    ]


def _chain_casting(now: datetime) -> list[dict]:
    return [
        {
            "purity": 18,
            "input_gold": 120.0,
            "output_gold": 20.0,
            "extractions": [{"mass": 60.0}, {"mass": 38.5}],
            "purity_ratio": 74.2,
            "created_at": (now - timedelta(days=2)).isoformat(),
            "state": "completed",
        }
    ]


def _daily_operations(now: datetime) -> list[dict]:
    monday = (now - timedelta(days=now.weekday())).date()
    return [
        {
            "started_at": datetime.combine(monday, datetime.min.time()).isoformat(),
            "created_at": datetime.combine(monday, datetime.min.time()).isoformat(),
            "days": [
                {
                    "day": monday.isoformat(),
                    "workbench": [
                        {"purity": 18, "lines": [{"input_mass": 12.0, "output_mass": 11.6}]},
                    ],
                    "stations": {
                        "Furnace": {"lines": [{"purity": 18, "fire": 2.0}, {"purity": 21, "fire": 1.5}]},
                        "Polish": {"lines": [{"purity": 14, "fire": 0.3}]},
                    },
                }
            ],
        }
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Write a demo record snapshot for the analytics API")
    parser.add_argument("--output", required=True, help="output file path (.json)")
    args = parser.parse_args()

    now = datetime.now().replace(microsecond=0)
    snapshot = {
        "lock_assembly": _lock_assembly(now),
        "chain_casting": _chain_casting(now),
        "daily_operations": _daily_operations(now),
    }

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")

    print(f"record snapshot written: {output}")


if __name__ == "__main__":
    main()
