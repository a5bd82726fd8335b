"""Application configuration management for race timer extraction."""


import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Literal

from dotenv import load_dotenv

ENV_FILE: Final[str] = ".env"
DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_STRATEGY: Final[str] = "local"
DEFAULT_PROVIDER_TIMEOUT: Final[float] = 30.0
DEFAULT_TRANSPORT_LIMIT: Final[int] = 5 * 1024 * 1024
DEFAULT_SYSTEM_PROMPT: Final[str] = "You read lap timers from racing game screenshots and answer with the time only."
DEFAULT_PROMPT: Final[str] = (
	"The attached image is the result of a Time Trial. "
	"The driver's time is the one in the yellow box. "
	"Please tell me what this time is. "
	"It is formatted as '0:00.000' (m:ss.ms). "
	"Your response should match this exact format, and may not include any other text. "
	"If no time is visible, answer with null."
)

Strategy = Literal["local", "remote"]
ProviderKind = Literal["ollama", "openai"]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardDetectionConfig:
	"""Tuning for the highlight colour and the shape of the timer card.

	The defaults were calibrated against the game's yellow result card.
	"""
	hue_min: float = 40.0
	hue_max: float = 65.0
	min_saturation: float = 0.35
	min_value: float = 0.70
	aspect_min: float = 3.0
	aspect_max: float = 5.0
	mask_passes: tuple[tuple[str, int], ...] = (("open", 3), ("close", 3), ("open", 3), ("close", 7))
	cleanup_passes: tuple[tuple[str, int], ...] = (("open", 3), ("close", 3))
	tesseract_lang: str = "eng"


@dataclass(frozen=True)
class PayloadSettings:
	"""Limits used when shrinking an image for provider transport."""
	transport_limit_bytes: int = DEFAULT_TRANSPORT_LIMIT
	initial_max_side: int = 2048
	min_side: int = 256
	initial_quality: int = 90
	quality_floor: int = 50
	quality_step: int = 10
	shrink_ratio: float = 0.15
	max_rounds: int = 16

	@property
	def budget_bytes(self) -> int:
		# base64 inflates by 4/3
		return self.transport_limit_bytes * 3 // 4


@dataclass(frozen=True)
class ProviderDescriptor:
	"""Container for one remote vision provider."""
	name: str
	endpoint: str
	model: str
	api_key: str | None = None
	kind: ProviderKind = "ollama"
	timeout_s: float = DEFAULT_PROVIDER_TIMEOUT


@dataclass(frozen=True)
class AppConfig:
	"""Aggregate configuration for the extraction core."""
	strategy: Strategy = "local"
	providers: tuple[ProviderDescriptor, ...] = ()
	prompt: str = DEFAULT_PROMPT
	system_prompt: str = DEFAULT_SYSTEM_PROMPT
	card: CardDetectionConfig = field(default_factory=CardDetectionConfig)
	payload: PayloadSettings = field(default_factory=PayloadSettings)
	debug: bool = False
	debug_dir: Path | None = None
	output_dir: Path = Path("outputs")
	log_level: int = DEFAULT_LOG_LEVEL


def load_config() -> AppConfig:
	"""Load environment-based configuration values.

	Returns:
		AppConfig: Parsed configuration with providers when available.
	"""
	load_dotenv(ENV_FILE)
	strategy = os.getenv("OCR_STRATEGY", DEFAULT_STRATEGY).strip().lower()
	if strategy not in ("local", "remote"):
		raise ValueError(f"Unsupported OCR_STRATEGY: {strategy}")

	debug_dir = os.getenv("DEBUG_FOLDER")
	return AppConfig(
		strategy=strategy,  # type: ignore[arg-type]
		providers=_load_providers(),
		prompt=_load_prompt(),
		card=_load_card_config(),
		payload=PayloadSettings(
			transport_limit_bytes=int(os.getenv("VISION_TRANSPORT_LIMIT_BYTES", DEFAULT_TRANSPORT_LIMIT)),
		),
		debug=_env_flag("OCR_DEBUG"),
		debug_dir=Path(debug_dir).expanduser().resolve() if debug_dir else None,
		output_dir=Path(os.getenv("OCR_OUTPUT_DIR", "outputs")).resolve(),
		log_level=_load_log_level(),
	)


def configure_logging(level: int = DEFAULT_LOG_LEVEL) -> None:
	"""Configure the root logger for the application."""
	logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _env_flag(name: str) -> bool:
	return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _load_log_level() -> int:
	name = os.getenv("OCR_LOG_LEVEL", "INFO").strip().upper()
	level = logging.getLevelName(name)
	if not isinstance(level, int):
		_LOGGER.warning("Unknown OCR_LOG_LEVEL %r, using INFO", name)
		return DEFAULT_LOG_LEVEL
	return level


def _env_float(name: str, default: float) -> float:
	value = os.getenv(name)
	return float(value) if value else default


def _load_card_config() -> CardDetectionConfig:
	"""Load card detection overrides, keeping calibrated defaults otherwise."""
	defaults = CardDetectionConfig()
	return CardDetectionConfig(
		hue_min=_env_float("CARD_HUE_MIN", defaults.hue_min),
		hue_max=_env_float("CARD_HUE_MAX", defaults.hue_max),
		min_saturation=_env_float("CARD_MIN_SATURATION", defaults.min_saturation),
		min_value=_env_float("CARD_MIN_VALUE", defaults.min_value),
		aspect_min=_env_float("CARD_ASPECT_MIN", defaults.aspect_min),
		aspect_max=_env_float("CARD_ASPECT_MAX", defaults.aspect_max),
		tesseract_lang=os.getenv("TESSERACT_LANG", defaults.tesseract_lang),
	)


def _load_prompt() -> str:
	"""Load the provider prompt from a file if one is configured."""
	prompt_file = os.getenv("VISION_PROMPT_FILE")
	if prompt_file:
		return Path(prompt_file).expanduser().read_text(encoding="utf-8").strip()
	return DEFAULT_PROMPT


def _load_providers() -> tuple[ProviderDescriptor, ...]:
	"""Load the ordered provider list from the environment."""
	names = [name.strip() for name in os.getenv("VISION_PROVIDERS", "").split(",") if name.strip()]
	providers: list[ProviderDescriptor] = []
	for name in names:
		prefix = f"VISION_{name.upper()}_"
		endpoint = os.getenv(prefix + "URL")
		model = os.getenv(prefix + "MODEL")
		if not endpoint or not model:
			_LOGGER.warning("Skipping provider %s: %sURL and %sMODEL are required", name, prefix, prefix)
			continue
		kind = os.getenv(prefix + "KIND", "ollama").strip().lower()
		if kind not in ("ollama", "openai"):
			raise ValueError(f"Unsupported provider kind for {name}: {kind}")
		providers.append(
			ProviderDescriptor(
				name=name,
				endpoint=endpoint,
				model=model,
				api_key=os.getenv(prefix + "API_KEY") or None,
				kind=kind,  # type: ignore[arg-type]
				timeout_s=_env_float(prefix + "TIMEOUT", DEFAULT_PROVIDER_TIMEOUT),
			)
		)
	return tuple(providers)
