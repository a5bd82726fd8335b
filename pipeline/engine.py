"""Sequential execution of named pipeline steps."""


import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from errors import ExtractionError, StageError
from pipeline.debug import DebugSink
from pipeline.ir import IR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
	"""A named, stateless transformation of the pipeline value."""

	name: str
	transform: Callable[[IR], IR]

	def __call__(self, ir: IR) -> IR:
		return self.transform(ir)


def run_pipeline(
	initial: IR,
	steps: Sequence[Step],
	*,
	debug: bool = False,
	run_id: str | None = None,
	sink: DebugSink | None = None,
) -> IR:
	"""Run ``steps`` in order, feeding each output to the next step.

	The first failing step stops the run. Its error is re-raised with
	``stage`` set to the step name; foreign exceptions are wrapped in
	:class:`StageError`. Debug capture never changes the outcome.
	"""
	data = initial
	for index, step in enumerate(steps):
		logger.debug("Running step %02d %s", index, step.name)
		try:
			data = step(data)
		except ExtractionError as exc:
			exc.stage = step.name
			exc.details.setdefault("step_index", index)
			raise
		except Exception as exc:  # noqa: BLE001
			raise StageError(f"step {step.name} failed: {exc}", stage=step.name, details={"step_index": index}) from exc

		if debug and sink is not None:
			try:
				sink.save(run_id or "run", index, step.name, data)
			except Exception as exc:  # noqa: BLE001
				logger.warning("Failed to save debug output for step %s: %s", step.name, exc)
	return data
