"""Tests for sequential step execution and debug capture."""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from errors import NoCandidateFoundError, StageError
from pipeline.debug import DebugSink, build_debug_path
from pipeline.engine import Step, run_pipeline
from pipeline.ir import IR, MaskImage, Text


def _mask() -> MaskImage:
	return MaskImage(np.zeros((4, 6), dtype=np.uint8))


def test_failing_step_stops_the_run() -> None:
	"""The failing step is named and later steps never run."""
	calls = {"first": 0, "second": 0, "third": 0}

	def first(ir: IR) -> IR:
		calls["first"] += 1
		return ir

	def second(ir: IR) -> IR:
		calls["second"] += 1
		raise NoCandidateFoundError("nothing here")

	def third(ir: IR) -> IR:
		calls["third"] += 1
		return ir

	steps = [Step("first", first), Step("second", second), Step("third", third)]
	with pytest.raises(NoCandidateFoundError) as excinfo:
		run_pipeline(_mask(), steps)

	assert excinfo.value.stage == "second"
	assert excinfo.value.details["step_index"] == 1
	assert calls == {"first": 1, "second": 1, "third": 0}


def test_foreign_exception_is_wrapped() -> None:
	"""Library errors surface as StageError with the original cause chained."""
	def broken(ir: IR) -> IR:
		raise ValueError("bad kernel")

	with pytest.raises(StageError) as excinfo:
		run_pipeline(_mask(), [Step("broken", broken)])

	assert excinfo.value.stage == "broken"
	assert isinstance(excinfo.value.__cause__, ValueError)


def test_steps_run_in_order() -> None:
	"""Each output feeds the next step."""
	steps = [
		Step("a", lambda ir: Text("a")),
		Step("b", lambda ir: Text(ir.value + "b")),
		Step("c", lambda ir: Text(ir.value + "c")),
	]
	assert run_pipeline(_mask(), steps) == Text("abc")


def test_debug_sink_writes_each_step(tmp_path: Path) -> None:
	"""Every successful step output lands under the run directory."""
	steps = [Step("mask", lambda ir: _mask()), Step("ocr", lambda ir: Text("1:00.000"))]
	run_pipeline(_mask(), steps, debug=True, run_id="42", sink=DebugSink(tmp_path))

	assert build_debug_path(tmp_path, "42", 0, "mask", "png").exists()
	assert (tmp_path / "42" / "01_ocr.txt").read_text(encoding="utf-8") == "1:00.000"


def test_debug_disabled_writes_nothing(tmp_path: Path) -> None:
	"""Without the debug flag the sink is never touched."""
	run_pipeline(_mask(), [Step("mask", lambda ir: _mask())], debug=False, run_id="7", sink=DebugSink(tmp_path))
	assert list(tmp_path.iterdir()) == []


def test_debug_sink_failure_is_not_fatal() -> None:
	"""A broken sink does not change the pipeline outcome."""
	class BrokenSink(DebugSink):
		def save(self, run_id: str, index: int, step_name: str, ir: IR) -> Path:
			raise OSError("disk full")

	result = run_pipeline(_mask(), [Step("ocr", lambda ir: Text("0:01.000"))], debug=True, run_id="1", sink=BrokenSink(Path("unused")))
	assert result == Text("0:01.000")
