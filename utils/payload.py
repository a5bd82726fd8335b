"""Shrinks screenshots until they fit a provider's transport budget."""


import base64
import io
import logging
from dataclasses import dataclass

from PIL import Image

from config import PayloadSettings
from errors import ImageTooLargeError
from pipeline.ir import ImageFormat
from utils.image_io import has_transparency, open_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedPayload:
	"""Image bytes ready to embed in a provider request."""

	data: bytes
	format: ImageFormat
	width: int
	height: int
	quality: int | None = None
	rounds: int = 1

	@property
	def mime_type(self) -> str:
		return self.format.mime_type

	def to_base64(self) -> str:
		return base64.b64encode(self.data).decode("utf-8")

	def to_data_url(self) -> str:
		return f"data:{self.mime_type};base64,{self.to_base64()}"


def _alternate(fmt: ImageFormat) -> ImageFormat:
	return ImageFormat.PNG if fmt is ImageFormat.JPEG else ImageFormat.JPEG


def _normalize_mode(image: Image.Image, keep_alpha: bool) -> Image.Image:
	if keep_alpha:
		return image.convert("RGBA")
	if image.mode in ("RGB", "L"):
		# detach from the source so it can be closed
		return image.copy()
	return image.convert("RGB")


def _encode(image: Image.Image, fmt: ImageFormat, quality: int) -> bytes:
	buffer = io.BytesIO()
	if fmt is ImageFormat.JPEG:
		opaque = image if image.mode in ("RGB", "L") else image.convert("RGB")
		opaque.save(buffer, format="JPEG", quality=quality, optimize=True)
	else:
		image.save(buffer, format="PNG", optimize=True)
	return buffer.getvalue()


def _resize_long_side(image: Image.Image, long_side: int) -> Image.Image:
	scale = long_side / max(image.size)
	size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
	return image.resize(size, Image.Resampling.LANCZOS)


def prepare_payload(data: bytes, settings: PayloadSettings) -> EncodedPayload:
	"""Encode ``data`` as the smallest acceptable image under the byte budget.

	Quality is lowered before resolution so the timer digits keep their
	pixels as long as possible. The first round always encodes the source
	size; screenshots wider than ``initial_max_side`` are only scaled down to
	it once that round misses the budget. After each resize the preferred
	format becomes whichever encoding was smaller in the previous round.

	Raises:
		ImageDecodeError: If the bytes are not an image.
		ImageTooLargeError: If the budget cannot be met within the limits.
	"""
	budget = settings.budget_bytes
	with open_image(data) as source:
		transparent = has_transparency(source)
		image = _normalize_mode(source, transparent)
	preferred = ImageFormat.PNG if transparent else ImageFormat.JPEG
	quality = settings.initial_quality

	for round_no in range(1, settings.max_rounds + 1):
		encoded = _encode(image, preferred, quality)
		if len(encoded) <= budget:
			return EncodedPayload(encoded, preferred, image.width, image.height, quality if preferred is ImageFormat.JPEG else None, round_no)

		alternate = _alternate(preferred)
		alt_encoded = _encode(image, alternate, quality)
		smaller_format, smaller = (alternate, alt_encoded) if len(alt_encoded) < len(encoded) else (preferred, encoded)
		if len(smaller) <= budget:
			return EncodedPayload(smaller, smaller_format, image.width, image.height, quality if smaller_format is ImageFormat.JPEG else None, round_no)

		logger.debug(
			"Round %s: %sx%s best %s is %s bytes (budget %s, quality %s)",
			round_no, image.width, image.height, smaller_format.value, len(smaller), budget, quality,
		)
		if max(image.size) > settings.initial_max_side:
			image = _resize_long_side(image, settings.initial_max_side)
			preferred = smaller_format
			continue
		if smaller_format is ImageFormat.JPEG and quality > settings.quality_floor:
			quality = max(settings.quality_floor, quality - settings.quality_step)
			continue

		long_side = int(max(image.size) * (1 - settings.shrink_ratio))
		if long_side < settings.min_side:
			raise ImageTooLargeError(
				f"Image still exceeds {budget} bytes at minimum side {settings.min_side}",
				details={"budget_bytes": budget, "smallest_bytes": len(smaller), "rounds": round_no},
			)
		image = _resize_long_side(image, long_side)
		preferred = smaller_format

	raise ImageTooLargeError(
		f"Image did not fit {budget} bytes within {settings.max_rounds} rounds",
		details={"budget_bytes": budget, "rounds": settings.max_rounds},
	)
