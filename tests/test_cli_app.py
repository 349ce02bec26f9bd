from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import pytest

from pingback.cli import app
from pingback.config import AppConfig
from pingback.contracts.error import Exit, ProbeError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("PINGBACK_CONFIG", "PINGBACK_TARGET", "PINGBACK_INTERVAL_MS"):
        monkeypatch.delenv(key, raising=False)


def _capture_run_tui(monkeypatch: pytest.MonkeyPatch) -> list[AppConfig]:
    seen: list[AppConfig] = []

    def fake_run_tui(config: AppConfig) -> None:
        seen.append(config)

    monkeypatch.setattr(app, "run_tui", fake_run_tui)
    return seen


def test_main_applies_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = _capture_run_tui(monkeypatch)
    code = app.main(["--address", "8.8.8.8", "--delay", "500", "--group", "16", "--aggregates", "3"])
    assert code == 0
    cfg = seen[0]
    assert cfg.probe.target == "8.8.8.8"
    assert cfg.probe.interval_ms == 500
    assert cfg.aggregation.group_size == 16
    assert cfg.aggregation.levels == 3
    assert cfg.display.legend_steps == 90


def test_flags_override_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_path = tmp_path / "pingback.toml"
    cfg_path.write_text('[probe]\ntarget = "a.example"\ninterval_ms = 200\n', encoding="utf-8")
    monkeypatch.setenv("PINGBACK_CONFIG", str(cfg_path))
    seen = _capture_run_tui(monkeypatch)
    assert app.main(["--address", "b.example"]) == 0
    assert seen[0].probe.target == "b.example"
    assert seen[0].probe.interval_ms == 200


def test_missing_address_exits_with_bad_input(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _capture_run_tui(monkeypatch)
    with pytest.raises(SystemExit) as excinfo:
        app.main([])
    assert excinfo.value.code == Exit.BAD_INPUT
    payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert payload["error"] == "BadInput"
    assert "target" in payload["detail"]


def test_probe_error_exits_with_probe_code(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def failing_run_tui(config: AppConfig) -> None:
        raise ProbeError("ping nowhere.invalid failed (exit 2)", hint="check the address")

    monkeypatch.setattr(app, "run_tui", failing_run_tui)
    with pytest.raises(SystemExit) as excinfo:
        app.main(["--address", "nowhere.invalid"])
    assert excinfo.value.code == Exit.PROBE
    payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert payload == {
        "error": "Probe",
        "detail": "ping nowhere.invalid failed (exit 2)",
        "hint": "check the address",
    }


def test_console_main_uses_argv(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = _capture_run_tui(monkeypatch)
    monkeypatch.setattr(sys, "argv", ["pingback", "--address", "example.com"])
    with pytest.raises(SystemExit) as excinfo:
        app.console_main()
    assert excinfo.value.code == 0
    assert seen[0].probe.target == "example.com"


def test_json_formatter_with_exc_and_stack() -> None:
    formatter = app.JsonFormatter()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.getLogger("test").makeRecord(
            "test", logging.ERROR, __file__, 0, "failure", (), sys.exc_info(), func="func"
        )
    record.stack_info = "trace info"
    payload = json.loads(formatter.format(record))
    assert payload["level"] == "ERROR"
    assert payload["msg"] == "failure"
    assert "exc_info" in payload
    assert payload["stack"]


def test_configure_logging_json_and_file(tmp_path: Path) -> None:
    log_file = tmp_path / "pingback.log"
    app.configure_logging(use_json=True, log_file=str(log_file), verbose=True)
    logger = logging.getLogger("pingback")
    logging.getLogger("pingback.probe").debug("probe detail")
    assert logger.level == logging.DEBUG
    assert any(isinstance(handler, RotatingFileHandler) for handler in logger.handlers)
    for handler in logger.handlers:
        handler.flush()
    lines = log_file.read_text(encoding="utf-8").strip().splitlines()
    assert json.loads(lines[-1])["logger"] == "pingback.probe"
    app.configure_logging()
    assert not any(isinstance(handler, RotatingFileHandler) for handler in logger.handlers)


def test_parser_defaults_leave_config_untouched() -> None:
    args: Any = app.build_parser().parse_args([])
    assert args.address is None
    assert args.delay is None
    assert args.log_max_bytes == app.DEFAULT_LOG_MAX_BYTES
