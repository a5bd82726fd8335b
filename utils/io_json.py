"""JSON persistence for extraction reports."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel

REPORT_TIMESTAMP = "%Y%m%dT%H%M%SZ"


def report_path(output_dir: Path, strategy: str, run_id: str, now: datetime | None = None) -> Path:
	"""Path of the report for one run, stamped in UTC."""
	stamp = (now or datetime.now(timezone.utc)).strftime(REPORT_TIMESTAMP)
	return output_dir / f"{strategy}_{run_id}_{stamp}.json"


def write_report(report: BaseModel, output_dir: Path, strategy: str, run_id: str) -> tuple[Path, dict[str, Any]]:
	"""Serialise a report model to disk and return its path and JSON body."""
	body = report.model_dump(mode="json")
	output_dir.mkdir(parents=True, exist_ok=True)
	path = report_path(output_dir, strategy, run_id)
	path.write_text(json.dumps(body, ensure_ascii=False, indent=2), encoding="utf-8")
	return path, body
