"""Command-line interface for reading race times from screenshots."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import uuid
from pathlib import Path
from typing import Any

from config import AppConfig, configure_logging, load_config
from errors import ExtractionError
from extractor import extract_time
from schemas import ExtractionReport
from utils.image_io import ensure_image_path, read_image_bytes
from utils.io_json import write_report


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
	"""Parse command-line arguments."""
	parser = argparse.ArgumentParser(description="Race timer screenshot reader")
	parser.add_argument("--image", required=True, help="Path to the screenshot")
	parser.add_argument("--strategy", choices=["local", "remote"], default=None, help="Override OCR_STRATEGY")
	parser.add_argument("--debug", action="store_true", help="Save every local pipeline step under DEBUG_FOLDER")
	parser.add_argument("--debug_dir", default=None, help="Override DEBUG_FOLDER")
	parser.add_argument("--run_id", default=None, help="Identifier for debug artifacts (random by default)")
	parser.add_argument("--outdir", default=None, help="Directory to store JSON reports")
	return parser.parse_args(argv)


def apply_overrides(args: argparse.Namespace, config: AppConfig) -> AppConfig:
	"""Fold command-line switches into the loaded configuration."""
	changes: dict[str, Any] = {}
	if args.strategy:
		changes["strategy"] = args.strategy
	if args.debug:
		changes["debug"] = True
	if args.debug_dir:
		changes["debug_dir"] = Path(args.debug_dir).expanduser().resolve()
	if args.outdir:
		changes["output_dir"] = Path(args.outdir).expanduser().resolve()
	return dataclasses.replace(config, **changes) if changes else config


def run(args: argparse.Namespace, config: AppConfig) -> ExtractionReport:
	"""Extract the race time for the provided arguments and persist a report."""
	config = apply_overrides(args, config)
	image_path = ensure_image_path(args.image)
	run_id = args.run_id or uuid.uuid4().hex
	data = read_image_bytes(image_path)

	try:
		result = asyncio.run(extract_time(data, config, run_id=run_id))
	except ExtractionError as exc:
		logging.error("Extraction failed: %s", exc)
		report = ExtractionReport(
			image_path=str(image_path),
			strategy=config.strategy,
			run_id=run_id,
			ok=False,
			error=exc.to_dict(),
		)
	else:
		report = ExtractionReport(
			image_path=str(image_path),
			strategy=result.strategy,
			run_id=run_id,
			ok=True,
			time=result.time.format(),
			total_milliseconds=result.time.total_milliseconds,
			raw_text=result.raw_text,
			provider=result.provider,
		)

	output_path, json_payload = write_report(report, config.output_dir, report.strategy, run_id)
	logging.info("Saved extraction report to %s", output_path)
	print(json.dumps(json_payload, ensure_ascii=False, indent=2))
	return report


def main(argv: list[str] | None = None) -> int:
	"""Entry point for the CLI application."""
	config = load_config()
	configure_logging(config.log_level)
	try:
		args = parse_arguments(argv)
		report = run(args, config)
	except Exception as exc:  # noqa: BLE001
		logging.exception("Race time extraction failed: %s", exc)
		return 1
	return 0 if report.ok else 1


if __name__ == "__main__":
	raise SystemExit(main())
