"""Command-line entrypoint for headless strategy runs."""

from __future__ import annotations

import argparse
import json
from collections.abc import Iterable

from farmsim.config import LogFormat, get_settings
from farmsim.observability import configure_structured_logging
from farmsim.services.batch_runner import DEFAULT_END_YEAR, run_batch
from farmsim.services.strategies import STRATEGIES


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="farmsim", description="Grid farm economy simulation")
	sub = parser.add_subparsers(dest="action", required=True)

	p_run = sub.add_parser("run", help="Run strategies headless and print their final results")
	p_run.add_argument(
		"strategies",
		nargs="*",
		help=f"Strategy ids, any of {', '.join(STRATEGIES)} (default: all)",
	)
	p_run.add_argument("--end-year", type=int, default=DEFAULT_END_YEAR)
	p_run.add_argument("--seed", type=int, default=None)
	p_run.add_argument("--log-format", choices=[fmt.value for fmt in LogFormat], default=None)

	sub.add_parser("strategies", help="List built-in strategies")
	return parser


def main(argv: Iterable[str] | None = None) -> int:
	parser = build_parser()
	args = parser.parse_args(list(argv) if argv is not None else None)

	if args.action == "strategies":
		for strategy_id in STRATEGIES:
			print(strategy_id)
		return 0

	unknown = [strategy_id for strategy_id in args.strategies if strategy_id not in STRATEGIES]
	if unknown:
		parser.error(f"unknown strategies: {', '.join(unknown)}")

	settings = get_settings()
	if args.log_format is not None:
		settings = settings.model_copy(update={"log_format": LogFormat(args.log_format)})
	configure_structured_logging(settings)

	results = run_batch(args.strategies or None, end_year=args.end_year, settings=settings, seed=args.seed)
	print(json.dumps([result.model_dump(mode="json") for result in results], indent=2))
	return 0


if __name__ == "__main__":
	raise SystemExit(main())
