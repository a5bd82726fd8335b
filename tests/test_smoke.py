"""Smoke tests for configuration, schemas and the CLI scaffolding."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from config import AppConfig, load_config
from errors import NoCandidateFoundError, ProviderStatusError
from main import apply_overrides, parse_arguments
from schemas import ExtractionReport, RaceTime

ENV_VARS = [
	"OCR_STRATEGY", "OCR_DEBUG", "DEBUG_FOLDER", "OCR_OUTPUT_DIR", "OCR_LOG_LEVEL", "TESSERACT_LANG",
	"CARD_HUE_MIN", "CARD_HUE_MAX", "CARD_MIN_SATURATION", "CARD_MIN_VALUE", "CARD_ASPECT_MIN", "CARD_ASPECT_MAX",
	"VISION_PROVIDERS", "VISION_PROMPT_FILE", "VISION_TRANSPORT_LIMIT_BYTES",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
	monkeypatch.chdir(tmp_path)
	for name in ENV_VARS:
		monkeypatch.delenv(name, raising=False)
	return monkeypatch


def test_schema_construction() -> None:
	"""Ensure schemas can be instantiated with expected fields."""
	race_time = RaceTime(minutes=1, seconds=5, milliseconds=250)
	report = ExtractionReport(
		image_path="/tmp/shot.png",
		strategy="local",
		run_id="abc",
		ok=True,
		time=race_time.format(),
		total_milliseconds=race_time.total_milliseconds,
		raw_text="1:05.250",
	)
	assert report.time == "1:05.250"
	assert report.total_milliseconds == 65_250
	with pytest.raises(ValueError):
		RaceTime(minutes=0, seconds=60, milliseconds=0)


def test_error_to_dict() -> None:
	"""Failures serialise with their code and stage."""
	error = NoCandidateFoundError("nothing", stage="find_card")
	assert error.to_dict()["code"] == "no_candidate_found"
	assert str(error) == "[find_card] nothing"
	assert json.dumps(error.to_dict())


def test_cli_parser_defaults() -> None:
	"""Validate argument parser accepts expected switches."""
	args = parse_arguments(["--image", "samples/shot.png", "--strategy", "remote", "--debug", "--run_id", "msg-1"])
	assert args.image == "samples/shot.png"
	assert args.strategy == "remote"
	assert args.debug is True
	assert args.run_id == "msg-1"
	assert parse_arguments(["--image", "x.png"]).strategy is None


def test_cli_overrides_config(tmp_path: Path) -> None:
	"""Command-line switches replace loaded settings."""
	args = parse_arguments(["--image", "x.png", "--strategy", "remote", "--debug", "--debug_dir", str(tmp_path)])
	config = apply_overrides(args, AppConfig())
	assert config.strategy == "remote"
	assert config.debug is True
	assert config.debug_dir == tmp_path.resolve()


def test_load_config_defaults(clean_env: pytest.MonkeyPatch) -> None:
	"""Without environment the local strategy and calibrated constants apply."""
	config = load_config()
	assert config.strategy == "local"
	assert config.providers == ()
	assert config.card.hue_min == 40.0 and config.card.aspect_max == 5.0
	assert config.payload.budget_bytes == 5 * 1024 * 1024 * 3 // 4
	assert config.debug is False


def test_load_config_providers(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
	"""Providers keep their configured order; incomplete entries are skipped."""
	prompt_file = tmp_path / "prompt.txt"
	prompt_file.write_text("Read the time.\n", encoding="utf-8")
	clean_env.setenv("OCR_STRATEGY", "remote")
	clean_env.setenv("VISION_PROVIDERS", "backup, primary, broken")
	clean_env.setenv("VISION_BACKUP_URL", "https://api.example.com/v1/chat/completions")
	clean_env.setenv("VISION_BACKUP_MODEL", "gpt-4o-mini")
	clean_env.setenv("VISION_BACKUP_KIND", "openai")
	clean_env.setenv("VISION_BACKUP_API_KEY", "secret")
	clean_env.setenv("VISION_PRIMARY_URL", "http://localhost:11434/api/generate")
	clean_env.setenv("VISION_PRIMARY_MODEL", "gemma3:4b")
	clean_env.setenv("VISION_BROKEN_URL", "http://nowhere")
	clean_env.setenv("VISION_PROMPT_FILE", str(prompt_file))
	clean_env.setenv("CARD_ASPECT_MIN", "2.5")

	config = load_config()
	assert config.strategy == "remote"
	assert [provider.name for provider in config.providers] == ["backup", "primary"]
	assert config.providers[0].kind == "openai" and config.providers[0].api_key == "secret"
	assert config.providers[1].kind == "ollama" and config.providers[1].api_key is None
	assert config.prompt == "Read the time."
	assert config.card.aspect_min == 2.5


def test_load_config_rejects_unknown_strategy(clean_env: pytest.MonkeyPatch) -> None:
	"""A typo in the strategy is reported at startup."""
	clean_env.setenv("OCR_STRATEGY", "magic")
	with pytest.raises(ValueError):
		load_config()


def test_load_config_log_level(clean_env: pytest.MonkeyPatch) -> None:
	"""Known level names are honoured; unknown ones fall back to INFO."""
	clean_env.setenv("OCR_LOG_LEVEL", "debug")
	assert load_config().log_level == logging.DEBUG
	clean_env.setenv("OCR_LOG_LEVEL", "BOGUS")
	assert load_config().log_level == logging.INFO


def test_status_error_retryable_follows_status() -> None:
	"""Only rate limits and gateway errors are retryable statuses."""
	assert ProviderStatusError("busy", status_code=503).retryable is True
	denied = ProviderStatusError("denied", status_code=401)
	assert denied.retryable is False
	assert denied.to_dict()["details"]["status_code"] == 401
	assert "retryable" not in vars(denied)
