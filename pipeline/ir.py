"""Values passed between local pipeline steps."""


from dataclasses import dataclass
from enum import Enum
from typing import TypeVar, Union

import numpy as np

from errors import StageInputError


class ImageFormat(str, Enum):
	PNG = "png"
	JPEG = "jpeg"

	@property
	def extension(self) -> str:
		return "jpg" if self is ImageFormat.JPEG else "png"

	@property
	def mime_type(self) -> str:
		return f"image/{self.value}"


@dataclass(frozen=True, eq=False)
class ColorImage:
	"""RGB image, ``uint8`` array of shape ``(height, width, 3)``."""

	pixels: np.ndarray

	def __post_init__(self) -> None:
		if self.pixels.dtype != np.uint8 or self.pixels.ndim != 3 or self.pixels.shape[2] != 3:
			raise StageInputError(f"ColorImage expects uint8 (h, w, 3), got {self.pixels.dtype} {self.pixels.shape}")
		_check_dimensions(self.pixels)

	@property
	def width(self) -> int:
		return int(self.pixels.shape[1])

	@property
	def height(self) -> int:
		return int(self.pixels.shape[0])


@dataclass(frozen=True, eq=False)
class MaskImage:
	"""Single-channel image, binary or grayscale."""

	pixels: np.ndarray

	def __post_init__(self) -> None:
		if self.pixels.dtype != np.uint8 or self.pixels.ndim != 2:
			raise StageInputError(f"MaskImage expects uint8 (h, w), got {self.pixels.dtype} {self.pixels.shape}")
		_check_dimensions(self.pixels)

	@property
	def width(self) -> int:
		return int(self.pixels.shape[1])

	@property
	def height(self) -> int:
		return int(self.pixels.shape[0])


@dataclass(frozen=True)
class EncodedBytes:
	data: bytes
	format: ImageFormat

	def __post_init__(self) -> None:
		if not self.data:
			raise StageInputError("EncodedBytes cannot be empty")


@dataclass(frozen=True)
class Text:
	value: str


IR = Union[ColorImage, MaskImage, EncodedBytes, Text]
IRT = TypeVar("IRT", ColorImage, MaskImage, EncodedBytes, Text)


def expect(ir: IR, kind: type[IRT]) -> IRT:
	"""Narrow ``ir`` to the variant a stage consumes."""
	if not isinstance(ir, kind):
		raise StageInputError(f"Expected {kind.__name__}, got {type(ir).__name__}")
	return ir


def _check_dimensions(pixels: np.ndarray) -> None:
	if pixels.shape[0] == 0 or pixels.shape[1] == 0:
		raise StageInputError(f"Image dimensions must be non-zero, got {pixels.shape[1]}x{pixels.shape[0]}")
