"""Local computer-vision strategy: screenshot bytes to race time."""


import logging
import uuid
from functools import partial
from typing import Callable

from config import AppConfig, CardDetectionConfig
from errors import ExtractionError
from pipeline import stages
from pipeline.debug import DebugSink
from pipeline.engine import Step, run_pipeline
from pipeline.ir import IR, ColorImage, Text, expect
from schemas import RaceTime
from utils.race_time import parse_reply

Recognizer = Callable[[IR], IR]

logger = logging.getLogger(__name__)


def _morph_steps(passes: tuple[tuple[str, int], ...]) -> list[Step]:
	return [Step(kind, partial(stages.morph, kind=kind, radius=radius)) for kind, radius in passes]


def build_card_pipeline(
	original: ColorImage,
	card: CardDetectionConfig,
	recognizer: Recognizer | None = None,
) -> list[Step]:
	"""Return the fixed step sequence that reads the timer off the card."""
	if recognizer is None:
		recognizer = partial(stages.recognize_text, language=card.tesseract_lang)
	return [
		Step("mask_yellow", partial(stages.mask_highlight, card=card)),
		*_morph_steps(card.mask_passes),
		Step("find_card", partial(stages.find_card, original=original, card=card)),
		Step("gray_thresh", stages.binarize),
		*_morph_steps(card.cleanup_passes),
		Step("crop_region", stages.crop_digits),
		Step("encode_png", stages.encode_png),
		Step("ocr", recognizer),
	]


def recognize_locally(
	data: bytes,
	config: AppConfig,
	*,
	debug: bool = False,
	run_id: str | None = None,
	recognizer: Recognizer | None = None,
) -> str:
	"""Run the card pipeline and return the recognised text."""
	try:
		original = stages.decode_image(data)
	except ExtractionError as exc:
		exc.stage = "decode"
		raise
	sink = DebugSink(config.debug_dir) if debug and config.debug_dir else None
	if debug and sink is None:
		logger.warning("Debug capture requested but DEBUG_FOLDER is not configured")
	steps = build_card_pipeline(original, config.card, recognizer)
	result = run_pipeline(original, steps, debug=debug, run_id=run_id or uuid.uuid4().hex, sink=sink)
	return expect(result, Text).value


def read_time_locally(
	data: bytes,
	config: AppConfig,
	*,
	debug: bool = False,
	run_id: str | None = None,
	recognizer: Recognizer | None = None,
) -> tuple[RaceTime, str]:
	text = recognize_locally(data, config, debug=debug, run_id=run_id, recognizer=recognizer)
	logger.info("Local pipeline recognised %r", text)
	try:
		return parse_reply(text), text
	except ExtractionError as exc:
		exc.stage = "parse"
		raise
