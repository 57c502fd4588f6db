from __future__ import annotations

import pytest

from farmsim import main as cli
from farmsim.config import Settings
from farmsim.services.batch_runner import STOP_INSOLVENT, STOP_TARGET_YEAR, run_batch, run_strategy


def test_run_stops_at_target_year(settings: Settings) -> None:
    result = run_strategy("no-action", end_year=2, settings=settings, seed=3)

    assert result.strategy == "no-action"
    assert result.stop_reason == STOP_TARGET_YEAR
    assert (result.year, result.day) == (2, 1)
    assert result.balance > 0
    assert result.researched_technologies == []
    assert 0 <= result.sustainability.total <= 100


def test_run_stops_when_insolvent_at_year_end() -> None:
    settings = Settings(_env_file=None, daily_overhead=1000)

    result = run_strategy("no-action", end_year=5, settings=settings, seed=3)

    assert result.stop_reason == STOP_INSOLVENT
    assert result.year == 2
    assert result.balance <= 0


def test_batch_runs_are_reproducible_per_seed(settings: Settings) -> None:
    first, second = run_batch(["no-action", "no-action"], end_year=2, settings=settings, seed=11)

    assert first == second


def test_cli_lists_strategies(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["strategies"]) == 0

    assert capsys.readouterr().out.split() == ["monoculture", "diverse", "tech-focus", "water-saving", "no-action"]


def test_cli_run_prints_results(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "configure_structured_logging", lambda _settings=None: None)

    assert cli.main(["run", "no-action", "--end-year", "2", "--seed", "3"]) == 0

    out = capsys.readouterr().out
    assert '"strategy": "no-action"' in out
    assert '"stop_reason": "target_year"' in out


def test_cli_rejects_unknown_strategy(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", "hoarder"])

    assert excinfo.value.code == 2
    assert "unknown strategies: hoarder" in capsys.readouterr().err
