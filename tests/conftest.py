"""Shared synthetic images for the extraction tests."""
from __future__ import annotations

import io
from typing import Callable

import numpy as np
import pytest
from PIL import Image

YELLOW = (255, 220, 0)
BACKGROUND = (30, 30, 40)


def encode(pixels: np.ndarray, fmt: str = "PNG") -> bytes:
	buffer = io.BytesIO()
	Image.fromarray(pixels).save(buffer, format=fmt)
	return buffer.getvalue()


@pytest.fixture
def encode_image() -> Callable[..., bytes]:
	return encode


@pytest.fixture
def card_pixels() -> np.ndarray:
	"""400x300 screenshot with a 200x50 yellow card holding a dark digit bar."""
	pixels = np.full((300, 400, 3), BACKGROUND, dtype=np.uint8)
	pixels[100:150, 100:300] = YELLOW
	pixels[130:140, 170:230] = (0, 0, 0)
	# square yellow badge that must not be taken for the card
	pixels[200:260, 20:80] = YELLOW
	return pixels


@pytest.fixture
def card_screenshot(card_pixels: np.ndarray) -> bytes:
	return encode(card_pixels)
