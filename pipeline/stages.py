"""Image stages used by the local timer pipeline.

Every stage is a pure function from one IR variant to another so it can be
exercised on its own. Pixel work is done with numpy and OpenCV; decoding and
encoding go through Pillow, recognition through Tesseract.
"""


import io
import logging
from dataclasses import dataclass
from typing import Final, Iterable, Literal

import cv2
import numpy as np
import pytesseract
from PIL import Image

from config import CardDetectionConfig
from errors import NoCandidateFoundError, RecognitionError, StageError
from pipeline.ir import IR, ColorImage, EncodedBytes, ImageFormat, MaskImage, Text, expect
from utils.image_io import open_image

MorphKind = Literal["open", "close"]

CHAR_WHITELIST: Final[str] = "0123456789:."
# psm 7: treat the image as a single text line
TESSERACT_CONFIG: Final[str] = f"--psm 7 -c tessedit_char_whitelist={CHAR_WHITELIST}"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
	"""Axis-aligned rectangle in pixel coordinates."""

	left: int
	top: int
	width: int
	height: int

	@property
	def aspect_ratio(self) -> float:
		return self.width / self.height

	@property
	def area(self) -> int:
		return self.width * self.height


def decode_image(data: bytes) -> ColorImage:
	with open_image(data) as image:
		return ColorImage(np.array(image.convert("RGB"), dtype=np.uint8))


def mask_highlight(ir: IR, card: CardDetectionConfig) -> MaskImage:
	"""Mark pixels whose HSV value falls in the highlight colour window."""
	rgb = expect(ir, ColorImage).pixels
	# float input in [0, 1] makes OpenCV report hue in degrees, S and V in [0, 1]
	hsv = cv2.cvtColor(rgb.astype(np.float32) / 255.0, cv2.COLOR_RGB2HSV)
	hue, sat, val = hsv[..., 0], hsv[..., 1], hsv[..., 2]
	selected = (
		(hue >= card.hue_min)
		& (hue <= card.hue_max)
		& (sat >= card.min_saturation)
		& (val >= card.min_value)
	)
	return MaskImage(np.where(selected, 255, 0).astype(np.uint8))


def morph(ir: IR, kind: MorphKind, radius: int) -> MaskImage:
	"""Opening (erode, dilate) or closing (dilate, erode) with a square kernel."""
	mask = expect(ir, MaskImage).pixels
	kernel = np.ones((2 * radius + 1, 2 * radius + 1), dtype=np.uint8)
	operation = cv2.MORPH_OPEN if kind == "open" else cv2.MORPH_CLOSE
	return MaskImage(cv2.morphologyEx(mask, operation, kernel))


def find_regions(mask: MaskImage) -> list[Region]:
	"""Bounding boxes of 8-connected foreground components, in scan order."""
	binary = np.where(mask.pixels > 0, 255, 0).astype(np.uint8)
	count, labels, stats, _ = cv2.connectedComponentsWithStats(binary, connectivity=8)
	if count <= 1:
		return []
	found, first_index = np.unique(labels, return_index=True)
	order = sorted((int(pos), int(label)) for label, pos in zip(found, first_index) if label != 0)
	return [
		Region(
			left=int(stats[label, cv2.CC_STAT_LEFT]),
			top=int(stats[label, cv2.CC_STAT_TOP]),
			width=int(stats[label, cv2.CC_STAT_WIDTH]),
			height=int(stats[label, cv2.CC_STAT_HEIGHT]),
		)
		for _, label in order
	]


def select_card_region(regions: Iterable[Region], card: CardDetectionConfig) -> Region:
	"""Pick the largest region whose aspect ratio looks like the timer card.

	Ties keep the region seen first.
	"""
	best: Region | None = None
	for region in regions:
		if not card.aspect_min <= region.aspect_ratio < card.aspect_max:
			continue
		if best is None or region.area > best.area:
			best = region
	if best is None:
		raise NoCandidateFoundError(
			"No region matches the timer card shape",
			details={"aspect_min": card.aspect_min, "aspect_max": card.aspect_max},
		)
	return best


def detect_card_region(ir: IR, card: CardDetectionConfig) -> Region:
	return select_card_region(find_regions(expect(ir, MaskImage)), card)


def crop(image: ColorImage, region: Region) -> ColorImage:
	pixels = image.pixels[region.top:region.top + region.height, region.left:region.left + region.width]
	return ColorImage(np.ascontiguousarray(pixels))


def find_card(ir: IR, original: ColorImage, card: CardDetectionConfig) -> ColorImage:
	"""Locate the card on the cleaned mask and cut it from the original pixels."""
	region = detect_card_region(ir, card)
	logger.debug("Card region %s (aspect %.2f)", region, region.aspect_ratio)
	return crop(original, region)


def binarize(ir: IR) -> MaskImage:
	"""Grayscale conversion followed by an Otsu threshold."""
	gray = cv2.cvtColor(expect(ir, ColorImage).pixels, cv2.COLOR_RGB2GRAY)
	_, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
	return MaskImage(binary)


def crop_digits(ir: IR) -> MaskImage:
	"""Cut the band under the card midline where the time digits sit."""
	mask = expect(ir, MaskImage)
	left, top = mask.width // 4, mask.height // 2
	width, height = mask.width // 2, mask.height // 12 * 5
	if width == 0 or height == 0:
		raise StageError(f"Card of {mask.width}x{mask.height} is too small to hold the timer digits")
	return MaskImage(np.ascontiguousarray(mask.pixels[top:top + height, left:left + width]))


def encode_png(ir: IR) -> EncodedBytes:
	mask = expect(ir, MaskImage)
	buffer = io.BytesIO()
	Image.fromarray(mask.pixels).save(buffer, format="PNG")
	return EncodedBytes(buffer.getvalue(), ImageFormat.PNG)


def recognize_text(ir: IR, language: str = "eng") -> Text:
	"""Run single-line Tesseract restricted to timer characters."""
	encoded = expect(ir, EncodedBytes)
	try:
		with Image.open(io.BytesIO(encoded.data)) as image:
			text = pytesseract.image_to_string(image, lang=language, config=TESSERACT_CONFIG)
	except pytesseract.TesseractNotFoundError as exc:
		raise RecognitionError("tesseract binary not found on PATH") from exc
	except pytesseract.TesseractError as exc:
		raise RecognitionError(f"Tesseract failed: {exc}", details={"status": exc.status}) from exc
	return Text(text.strip())
