"""Safe wrapper around :func:`subprocess.run` for the ping prober."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess  # noqa: S404  # nosec B404 - subprocess usage governed via validation helpers
from collections.abc import Mapping, MutableMapping, Sequence

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = float(os.getenv("PINGBACK_SUBPROC_TIMEOUT", "30"))


class SubprocessError(RuntimeError):
    """Raised when a subprocess call times out or exits with a failure status."""


def _merge_env(env: Mapping[str, str] | None) -> MutableMapping[str, str] | None:
    if env is None:
        return None
    merged: dict[str, str] = dict(os.environ)
    merged.update(env)
    return merged


def _validate_args(args: Sequence[str]) -> list[str]:
    if not isinstance(args, list | tuple) or not args:
        raise ValueError("args must be a non-empty sequence of strings")
    if not all(isinstance(arg, str) for arg in args):
        raise ValueError("all subprocess arguments must be strings")
    return list(args)


def format_command(args: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in args)


def safe_run(
    args: Sequence[str],
    *,
    timeout: float | None = None,
    check: bool = True,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command capturing text output; raise :class:`SubprocessError` on timeout.

    With ``check=True`` a non-zero exit status raises as well. A missing
    executable surfaces as the underlying :class:`OSError`.
    """

    command = _validate_args(args)
    effective_timeout = _DEFAULT_TIMEOUT if timeout is None else float(timeout)
    cmd_repr = format_command(command)
    logger.debug("Executing command: %s (timeout=%s)", cmd_repr, effective_timeout)
    try:
        completed = subprocess.run(  # noqa: S603  # nosec B603 - command validated via _validate_args
            command,
            env=_merge_env(env),
            capture_output=True,
            text=True,
            timeout=effective_timeout,
            check=check,
        )
    except subprocess.TimeoutExpired as exc:
        logger.warning("Command timed out after %.1fs: %s", effective_timeout, cmd_repr)
        raise SubprocessError(
            f"Command timed out after {effective_timeout:.1f}s: {cmd_repr}"
        ) from exc
    except subprocess.CalledProcessError as exc:
        logger.warning(
            "Command failed (exit %s): %s\nstderr:\n%s", exc.returncode, cmd_repr, exc.stderr or ""
        )
        raise SubprocessError(
            f"Command failed (exit {exc.returncode}): {cmd_repr}\nstderr:\n{exc.stderr or ''}"
        ) from exc
    logger.debug("Command exited with code %s: %s", completed.returncode, cmd_repr)
    return completed


__all__ = [
    "SubprocessError",
    "format_command",
    "safe_run",
]
