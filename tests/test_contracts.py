from __future__ import annotations

import json

import pytest

from pingback.contracts.error import (
    BadInputError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    InvariantError,
    IOErrorEnvelope,
    ProbeError,
    guard_cli,
)


def test_envelope_json_omits_empty_hint() -> None:
    assert json.loads(ErrorEnvelope("Probe", "boom").to_json()) == {
        "error": "Probe",
        "detail": "boom",
    }
    assert json.loads(ErrorEnvelope("Probe", "boom", hint="retry").to_json())["hint"] == "retry"


@pytest.mark.parametrize(
    ("exc", "code", "label"),
    [
        (BadInputError("bad flag"), Exit.BAD_INPUT, "BadInput"),
        (InvariantError("rows out of step"), Exit.INVARIANT, "Invariant"),
        (IOErrorEnvelope("disk"), Exit.IO, "IO"),
        (ProbeError("unknown host"), Exit.PROBE, "Probe"),
        (EnvelopeError("generic"), Exit.INVARIANT, "UnhandledEnvelope"),
    ],
)
def test_guard_cli_maps_exceptions(
    exc: Exception, code: Exit, label: str, capsys: pytest.CaptureFixture[str]
) -> None:
    @guard_cli
    def handler() -> int:
        raise exc

    with pytest.raises(SystemExit) as excinfo:
        handler()
    assert excinfo.value.code == int(code)
    payload = json.loads(capsys.readouterr().err.strip())
    assert payload["error"] == label


def test_guard_cli_maps_missing_files(capsys: pytest.CaptureFixture[str]) -> None:
    @guard_cli
    def handler() -> int:
        raise FileNotFoundError("nope.toml")

    with pytest.raises(SystemExit) as excinfo:
        handler()
    assert excinfo.value.code == int(Exit.IO)
    assert json.loads(capsys.readouterr().err.strip())["error"] == "FileNotFound"


def test_guard_cli_passes_through_results() -> None:
    @guard_cli
    def handler(value: int) -> int:
        return value * 2

    assert handler(21) == 42
