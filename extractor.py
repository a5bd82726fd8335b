"""Entry points that turn screenshot bytes into a validated race time."""


import logging

import httpx

from config import AppConfig
from errors import ExtractionError
from pipeline.local import read_time_locally
from providers.failover import FailoverClient
from schemas import ExtractionResult
from utils.payload import prepare_payload
from utils.race_time import parse_reply

logger = logging.getLogger(__name__)


async def read_time_remotely(
	data: bytes,
	config: AppConfig,
	*,
	client: httpx.AsyncClient | None = None,
	transport: httpx.AsyncBaseTransport | None = None,
) -> ExtractionResult:
	"""Negotiate a payload, ask the providers in order, parse the reply."""
	try:
		payload = prepare_payload(data, config.payload)
	except ExtractionError as exc:
		exc.stage = exc.stage or "prepare_payload"
		raise
	logger.debug("Prepared %s payload %sx%s, %s bytes", payload.format.value, payload.width, payload.height, len(payload.data))

	failover = FailoverClient.from_config(config, client=client, transport=transport)
	reply = await failover.extract(payload, config.prompt)
	try:
		race_time = parse_reply(reply.text)
	except ExtractionError as exc:
		exc.stage = "parse"
		exc.details.setdefault("provider", reply.provider)
		raise
	return ExtractionResult(strategy="remote", time=race_time, raw_text=reply.text, provider=reply.provider)


def read_time_from_card(data: bytes, config: AppConfig, *, run_id: str | None = None) -> ExtractionResult:
	race_time, text = read_time_locally(data, config, debug=config.debug, run_id=run_id)
	return ExtractionResult(strategy="local", time=race_time, raw_text=text)


async def extract_time(
	data: bytes,
	config: AppConfig,
	*,
	run_id: str | None = None,
	client: httpx.AsyncClient | None = None,
) -> ExtractionResult:
	"""Run the strategy selected by the deployment configuration.

	The local strategy is CPU-bound and runs on the calling task.
	"""
	if config.strategy == "remote":
		return await read_time_remotely(data, config, client=client)
	return read_time_from_card(data, config, run_id=run_id)
