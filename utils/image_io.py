"""Utility helpers for working with input images."""

import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from errors import ImageDecodeError


def ensure_image_path(image: str | Path) -> Path:
	"""Validate that the provided path exists and points to a file."""
	path = Path(image).expanduser().resolve()
	if not path.exists():
		raise FileNotFoundError(f"Image path not found: {path}")
	if not path.is_file():
		raise ValueError(f"Image path is not a file: {path}")
	return path


def read_image_bytes(path: Path) -> bytes:
	"""Read the raw bytes of an image."""
	return path.read_bytes()


def open_image(data: bytes) -> Image.Image:
	"""Decode image bytes, detecting the format from content.

	Raises:
		ImageDecodeError: If the bytes are empty, truncated or not an image.
	"""
	if not data:
		raise ImageDecodeError("Image buffer is empty")
	try:
		image = Image.open(io.BytesIO(data))
		image.load()
	except (UnidentifiedImageError, OSError, EOFError, ValueError) as exc:
		raise ImageDecodeError(f"Failed to decode image: {exc}") from exc
	if image.width == 0 or image.height == 0:
		raise ImageDecodeError("Decoded image has zero dimensions")
	return image


def has_transparency(image: Image.Image) -> bool:
	"""Report whether the image carries an alpha channel or a transparent palette entry."""
	if image.mode in ("RGBA", "LA", "PA"):
		return True
	return image.mode == "P" and "transparency" in image.info
