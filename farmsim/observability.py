"""Structured logging for simulation runs.

Every line logged during a tick carries the simulated clock (``year``,
``day``, ``season``, ``absolute_day`` and a compact ``farm_date``). Inside a
batch run it also carries the ``strategy`` and ``seed`` of that run, so the
interleaved output of several runs can be told apart.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any, TextIO

import structlog

from farmsim.config import LogFormat, Settings, get_settings

TICK_KEYS = ("year", "day", "season", "absolute_day")

_configured = False


def add_farm_date(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
	"""Fold the bound year and day into one sortable ``farm_date`` field."""
	year = event_dict.get("year")
	day = event_dict.get("day")
	if isinstance(year, int) and isinstance(day, int):
		event_dict.setdefault("farm_date", f"Y{year:02d}-D{day:03d}")
	return event_dict


def build_processors(settings: Settings) -> list[Any]:
	if settings.log_format == LogFormat.json:
		renderer: Any = structlog.processors.JSONRenderer()
	else:
		renderer = structlog.dev.ConsoleRenderer()

	return [
		structlog.contextvars.merge_contextvars,
		structlog.processors.add_log_level,
		add_farm_date,
		structlog.processors.TimeStamper(fmt="iso", utc=True),
		structlog.processors.format_exc_info,
		renderer,
	]


def configure_structured_logging(settings: Settings | None = None, *, stream: TextIO | None = None) -> None:
	"""Configure structlog once per process; output goes to ``stream`` (stderr by default)."""
	global _configured
	if _configured:
		return

	settings = settings or get_settings()
	log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

	structlog.configure(
		processors=build_processors(settings),
		wrapper_class=structlog.make_filtering_bound_logger(log_level),
		logger_factory=structlog.PrintLoggerFactory(stream or sys.stderr),
		cache_logger_on_first_use=True,
	)
	_configured = True


def bind_tick_context(year: int, day: int, season: str, absolute_day: int) -> None:
	"""Rebind the simulated clock; other bound context is left alone."""
	structlog.contextvars.bind_contextvars(
		year=year,
		day=day,
		season=season,
		absolute_day=absolute_day,
	)


def clear_tick_context() -> None:
	structlog.contextvars.unbind_contextvars(*TICK_KEYS)


@contextmanager
def run_context(strategy: str, seed: int | None) -> Iterator[None]:
	"""Tag log lines with one run's strategy and seed; its tick keys go when it ends."""
	with structlog.contextvars.bound_contextvars(strategy=strategy, seed=seed):
		try:
			yield
		finally:
			clear_tick_context()
