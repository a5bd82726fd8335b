"""Best-effort capture of intermediate pipeline images."""


import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from pipeline.ir import IR, ColorImage, EncodedBytes, MaskImage, Text


def build_debug_path(folder: Path, run_id: str, index: int, step_name: str, extension: str) -> Path:
	"""Compose ``<folder>/<run_id>/<NN>_<step>.<ext>``."""
	return folder.joinpath(str(run_id), f"{index:02d}_{step_name}.{extension}")


@dataclass
class DebugSink:
	"""Writes each step output under a per-run directory."""

	folder: Path

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	def save(self, run_id: str, index: int, step_name: str, ir: IR) -> Path:
		if isinstance(ir, (ColorImage, MaskImage)):
			path = build_debug_path(self.folder, run_id, index, step_name, "png")
			path.parent.mkdir(parents=True, exist_ok=True)
			Image.fromarray(ir.pixels).save(path)
		elif isinstance(ir, EncodedBytes):
			path = build_debug_path(self.folder, run_id, index, step_name, ir.format.extension)
			path.parent.mkdir(parents=True, exist_ok=True)
			path.write_bytes(ir.data)
		elif isinstance(ir, Text):
			path = build_debug_path(self.folder, run_id, index, step_name, "txt")
			path.parent.mkdir(parents=True, exist_ok=True)
			path.write_text(ir.value, encoding="utf-8")
		else:
			raise TypeError(f"Unsupported IR for debug capture: {type(ir).__name__}")
		self._logger.debug("Saved debug artifact to %s", path)
		return path
